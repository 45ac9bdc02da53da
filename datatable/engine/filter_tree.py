# File: /datatable/engine/filter_tree.py | Version: 1.0 | Title: Advanced Filter Tree (nested AND/OR rules + groups)
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Union

from datatable.core.config import settings
from datatable.core.errors import FilterDepthError
from datatable.engine.filtering import (
    Columns,
    RelationIds,
    Row,
    default_relation_ids,
    evaluate_condition,
    validate_operator,
)
from datatable.schemas.columns import ColumnDescriptor
from datatable.schemas.filters import (
    FilterLogic,
    FilterOperator,
    GroupNode,
    RuleNode,
)

Node = Union[RuleNode, GroupNode]

ROOT_ID = "root"


# ----------------------------
# Evaluation
# ----------------------------
def evaluate_tree(
    row: Row,
    node: Node,
    columns: Columns,
    relation_ids: RelationIds = default_relation_ids,
) -> bool:
    """
    Recursive fold over the tree.

    AND over no children matches every row; OR over no children matches
    none. Children are evaluated in order and short-circuit.
    """
    if node.type == "rule":
        return evaluate_condition(
            row, node.field, node.operator, node.value, columns, relation_ids
        )
    results = (evaluate_tree(row, child, columns, relation_ids) for child in node.children)
    if node.logic == FilterLogic.and_:
        return all(results)
    return any(results)


def tree_predicate(
    root: Node,
    columns: Iterable[ColumnDescriptor],
    relation_ids: RelationIds = default_relation_ids,
) -> Callable[[Row], bool]:
    column_map = {c.id: c for c in columns}
    validate_tree(root, column_map)
    return lambda row: evaluate_tree(row, root, column_map, relation_ids)


# ----------------------------
# Structure checks
# ----------------------------
def nesting_depth(node: Node) -> int:
    """0 for a group without sub-groups (or a rule); +1 per nested group level."""
    if node.type == "rule":
        return 0
    sub = [nesting_depth(c) + 1 for c in node.children if c.type == "group"]
    return max(sub, default=0)


def validate_tree(root: Node, columns: Columns, max_depth: Optional[int] = None) -> None:
    limit = settings.MAX_FILTER_DEPTH if max_depth is None else max_depth
    depth = nesting_depth(root)
    if depth > limit:
        raise FilterDepthError(depth, limit)
    for rule in iter_rules(root):
        column = columns.get(rule.field)
        if column is not None:
            validate_operator(rule.operator, column.data_kind, rule.field)


def iter_rules(node: Node):
    if node.type == "rule":
        yield node
        return
    for child in node.children:
        yield from iter_rules(child)


def find_node(root: Node, node_id: str) -> Optional[Node]:
    if root.id == node_id:
        return root
    if root.type == "group":
        for child in root.children:
            found = find_node(child, node_id)
            if found is not None:
                return found
    return None


def _depth_of(root: Node, node_id: str, depth: int = 0) -> Optional[int]:
    if root.id == node_id:
        return depth
    if root.type == "group":
        for child in root.children:
            d = _depth_of(child, node_id, depth + 1 if child.type == "group" else depth)
            if d is not None:
                return d
    return None


# ----------------------------
# Builders (pure: every helper returns a new tree)
# ----------------------------
def create_root_group() -> GroupNode:
    return GroupNode(id=ROOT_ID, logic=FilterLogic.and_, children=[])


def create_empty_rule(columns: Iterable[ColumnDescriptor]) -> RuleNode:
    first = next((c for c in columns if c.filterable), None)
    return RuleNode(
        field=first.id if first else "",
        operator=FilterOperator.contains,
        value="",
    )


def create_empty_group(columns: Iterable[ColumnDescriptor]) -> GroupNode:
    cols = list(columns)
    return GroupNode(logic=FilterLogic.and_, children=[create_empty_rule(cols)])


def _replace(root: Node, node_id: str, fn: Callable[[Node], Optional[Node]]) -> Optional[Node]:
    if root.id == node_id:
        return fn(root)
    if root.type == "rule":
        return root
    children: List[Node] = []
    for child in root.children:
        new_child = _replace(child, node_id, fn)
        if new_child is not None:
            children.append(new_child)
    return root.model_copy(update={"children": children})


def _require_group(root: GroupNode, group_id: str) -> GroupNode:
    node = find_node(root, group_id)
    if node is None or node.type != "group":
        raise KeyError(f"Filter group '{group_id}' not found")
    return node


def add_rule(
    root: GroupNode,
    group_id: str,
    columns: Iterable[ColumnDescriptor],
    rule: Optional[RuleNode] = None,
) -> GroupNode:
    _require_group(root, group_id)
    new_rule = rule or create_empty_rule(columns)
    return _replace(
        root, group_id, lambda g: g.model_copy(update={"children": [*g.children, new_rule]})
    )


def add_group(
    root: GroupNode,
    parent_id: str,
    columns: Iterable[ColumnDescriptor],
    max_depth: Optional[int] = None,
) -> GroupNode:
    limit = settings.MAX_FILTER_DEPTH if max_depth is None else max_depth
    _require_group(root, parent_id)
    depth = _depth_of(root, parent_id) or 0
    if depth >= limit:
        raise FilterDepthError(depth + 1, limit)
    new_group = create_empty_group(columns)
    return _replace(
        root, parent_id, lambda g: g.model_copy(update={"children": [*g.children, new_group]})
    )


def remove_node(root: GroupNode, node_id: str) -> GroupNode:
    if node_id == root.id:
        # The root is never removed, only emptied
        return root.model_copy(update={"children": []})
    return _replace(root, node_id, lambda _n: None)


def update_node(root: GroupNode, node: Node) -> GroupNode:
    if find_node(root, node.id) is None:
        raise KeyError(f"Filter node '{node.id}' not found")
    return _replace(root, node.id, lambda _n: node)


def set_group_logic(root: GroupNode, group_id: str, logic: FilterLogic) -> GroupNode:
    _require_group(root, group_id)
    return _replace(root, group_id, lambda g: g.model_copy(update={"logic": logic}))

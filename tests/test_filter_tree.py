# File: /tests/test_filter_tree.py | Version: 1.0 | Title: Advanced filter tree (evaluation + builders)
import pytest

from datatable.core.errors import FilterDepthError, InvalidOperatorError
from datatable.engine.filter_tree import (
    ROOT_ID,
    add_group,
    add_rule,
    create_empty_rule,
    create_root_group,
    evaluate_tree,
    find_node,
    nesting_depth,
    remove_node,
    set_group_logic,
    tree_predicate,
    update_node,
    validate_tree,
)
from datatable.schemas.columns import ColumnDescriptor, DataKind
from datatable.schemas.filters import FilterLogic, GroupNode, RuleNode


@pytest.fixture()
def a_columns():
    return {"a": ColumnDescriptor(id="a", data_kind=DataKind.number)}


def test_empty_or_group_matches_nothing_and_empty_and_matches_all(a_columns):
    rows = [{"a": 1}, {"a": 2}]
    empty_or = GroupNode(logic=FilterLogic.or_, children=[])
    empty_and = GroupNode(logic=FilterLogic.and_, children=[])

    assert [r for r in rows if evaluate_tree(r, empty_or, a_columns)] == []
    assert [r for r in rows if evaluate_tree(r, empty_and, a_columns)] == rows


def test_nested_groups(a_columns):
    # a == 1 OR (a > 5 AND a < 10)
    tree = GroupNode(
        logic=FilterLogic.or_,
        children=[
            RuleNode(field="a", operator="equals", value="1"),
            GroupNode(
                logic=FilterLogic.and_,
                children=[
                    RuleNode(field="a", operator="greaterThan", value=5),
                    RuleNode(field="a", operator="lessThan", value=10),
                ],
            ),
        ],
    )
    values = [a for a in (1, 2, 6, 9, 10) if evaluate_tree({"a": a}, tree, a_columns)]
    assert values == [1, 6, 9]


def test_tree_roundtrips_through_json(a_columns):
    tree = add_group(create_root_group(), ROOT_ID, a_columns.values())
    payload = tree.model_dump(mode="json")
    assert payload["children"][0]["type"] == "group"
    assert GroupNode.model_validate(payload) == tree


def test_tree_predicate_validates_operators():
    columns = [ColumnDescriptor(id="a", data_kind=DataKind.number)]
    bad = GroupNode(children=[RuleNode(field="a", operator="startsWith", value="1")])
    with pytest.raises(InvalidOperatorError):
        tree_predicate(bad, columns)

    good = GroupNode(children=[RuleNode(field="a", operator="isNotEmpty")])
    keep = tree_predicate(good, columns)
    assert keep({"a": 0}) and not keep({"a": None})


def test_builders_do_not_mutate(a_columns):
    root = create_root_group()
    with_rule = add_rule(root, ROOT_ID, a_columns.values())
    assert root.children == []
    assert len(with_rule.children) == 1
    rule = with_rule.children[0]
    assert rule.field == "a"
    assert rule.operator.value == "contains"
    assert rule.value == ""


def test_empty_rule_uses_first_filterable_column():
    columns = [ColumnDescriptor(id="x", filterable=False), ColumnDescriptor(id="y")]
    assert create_empty_rule(columns).field == "y"
    assert create_empty_rule([]).field == ""


def test_add_group_respects_depth_limit(a_columns):
    cols = list(a_columns.values())
    tree = create_root_group()
    parent = ROOT_ID
    for _ in range(3):
        tree = add_group(tree, parent, cols, max_depth=3)
        parent = [c for c in find_node(tree, parent).children if c.type == "group"][-1].id
    assert nesting_depth(tree) == 3
    with pytest.raises(FilterDepthError):
        add_group(tree, parent, cols, max_depth=3)


def test_validate_tree_depth(a_columns):
    deep = GroupNode(children=[GroupNode(children=[GroupNode()])])
    assert nesting_depth(deep) == 2
    validate_tree(deep, a_columns, max_depth=2)
    with pytest.raises(FilterDepthError):
        validate_tree(deep, a_columns, max_depth=1)


def test_remove_update_and_logic(a_columns):
    cols = list(a_columns.values())
    tree = add_rule(create_root_group(), ROOT_ID, cols)
    tree = add_group(tree, ROOT_ID, cols)
    rule_id = tree.children[0].id
    group_id = tree.children[1].id

    edited = RuleNode(id=rule_id, field="a", operator="isEmpty")
    tree = update_node(tree, edited)
    assert find_node(tree, rule_id).operator == "isEmpty"

    tree = set_group_logic(tree, group_id, FilterLogic.or_)
    assert find_node(tree, group_id).logic == FilterLogic.or_

    tree = remove_node(tree, rule_id)
    assert find_node(tree, rule_id) is None
    assert [c.id for c in tree.children] == [group_id]

    emptied = remove_node(tree, ROOT_ID)
    assert emptied.id == ROOT_ID and emptied.children == []


def test_unknown_ids_raise_key_error(a_columns):
    root = create_root_group()
    with pytest.raises(KeyError):
        add_rule(root, "missing", a_columns.values())
    with pytest.raises(KeyError):
        update_node(root, RuleNode(field="a", operator="isEmpty"))

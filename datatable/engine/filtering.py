# File: /datatable/engine/filtering.py | Version: 1.0 | Title: Filter Evaluator (flat filters, filter groups, global search)
from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from datatable.constants import RELATION_OPERATORS, is_operator_valid
from datatable.core.errors import InvalidOperatorError
from datatable.schemas.columns import ColumnDescriptor, DataKind
from datatable.schemas.filters import Filter, FilterGroup, FilterLogic, FilterOperator

Row = Mapping[str, Any]
RelationIds = Callable[[Any], List[str]]
Columns = Mapping[str, ColumnDescriptor]

_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}

# Marks a value that could not be read in the column kind
UNREADABLE = object()


# ----------------------------
# Value helpers
# ----------------------------
def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            n = float(s)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(n) else n


def parse_date(value: Any) -> Optional[datetime]:
    """ISO-8601 text, date/datetime or epoch milliseconds; naive values are UTC."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    return None


def coerce(value: Any, kind: DataKind) -> Any:
    """Read `value` in the column kind; returns UNREADABLE when it can't be read."""
    if kind == DataKind.number:
        parsed = parse_number(value)
    elif kind == DataKind.date:
        parsed = parse_date(value)
    elif kind == DataKind.boolean:
        parsed = parse_bool(value)
    else:
        parsed = None if value is None else str(value)
    return UNREADABLE if parsed is None else parsed


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(stringify(v) for v in value)
    return str(value)


def _ref_id(item: Any) -> Optional[str]:
    if isinstance(item, Mapping):
        ref = item.get("_id", item.get("id"))
        return None if ref is None else str(ref)
    return None if item is None else str(item)


def default_relation_ids(value: Any) -> List[str]:
    """Relation ids held by a cell: a single id, a list of ids, or record dicts."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple, set, frozenset)) else [value]
    return [ref for ref in (_ref_id(i) for i in items) if ref]


def cell_value(row: Row, column_id: str, columns: Optional[Columns] = None) -> Any:
    """Raw cell value; a column unknown to `columns` has no value."""
    if columns is None:
        return row.get(column_id)
    column = columns.get(column_id)
    if column is None:
        return None
    return row.get(column.value_key)


# ----------------------------
# Operator validation
# ----------------------------
def validate_operator(
    operator: FilterOperator, kind: DataKind, column_id: Optional[str] = None
) -> None:
    if not is_operator_valid(operator, kind):
        raise InvalidOperatorError(operator, kind, column_id)


def validate_filter(flt: Filter, columns: Columns) -> None:
    """Reject an operator/column-kind mismatch; unknown columns are a data issue, not checked."""
    column = columns.get(flt.column_id)
    if column is not None:
        validate_operator(flt.operator, column.data_kind, flt.column_id)


def validate_filter_groups(groups: Iterable[FilterGroup], columns: Columns) -> None:
    for group in groups:
        for flt in group.filters:
            validate_filter(flt, columns)


# ----------------------------
# Evaluation
# ----------------------------
def _compare_relation(
    cell: Any, op: FilterOperator, target: Any, relation_ids: RelationIds
) -> bool:
    ids = set(relation_ids(cell))
    if op == FilterOperator.has_any_relation:
        return len(ids) > 0
    if op == FilterOperator.has_no_relation:
        return len(ids) == 0
    if op in (FilterOperator.related_to, FilterOperator.not_related_to):
        if is_empty_value(target):
            return False
        hit = str(target) in ids
        return hit if op == FilterOperator.related_to else not hit
    wanted = [str(t) for t in (target or []) if not is_empty_value(t)]
    if op == FilterOperator.related_to_any:
        return any(t in ids for t in wanted)
    return all(t in ids for t in wanted)


def _compare_text(cell: Any, op: FilterOperator, target: Any) -> bool:
    needle = "" if target is None else str(target).casefold()
    if not needle:
        # An empty needle is an unfinished rule: inert
        return True
    if is_empty_value(cell):
        return op == FilterOperator.not_contains
    haystack = stringify(cell).casefold()
    if op == FilterOperator.contains:
        return needle in haystack
    if op == FilterOperator.not_contains:
        return needle not in haystack
    if op == FilterOperator.starts_with:
        return haystack.startswith(needle)
    return haystack.endswith(needle)


def compare(
    cell: Any,
    operator: FilterOperator,
    target: Any,
    kind: DataKind,
    relation_ids: RelationIds = default_relation_ids,
) -> bool:
    """
    Evaluate one condition against a raw cell value. Never raises on data:
    unreadable filter targets are a non-match, unreadable cells have no value.
    """
    op = operator

    if op == FilterOperator.is_empty:
        return is_empty_value(cell)
    if op == FilterOperator.is_not_empty:
        return not is_empty_value(cell)

    if op in RELATION_OPERATORS:
        return _compare_relation(cell, op, target, relation_ids)

    if op in (
        FilterOperator.contains,
        FilterOperator.not_contains,
        FilterOperator.starts_with,
        FilterOperator.ends_with,
    ):
        return _compare_text(cell, op, target)

    if op in (FilterOperator.is_any_of, FilterOperator.is_none_of):
        options = [coerce(v, kind) for v in (target or [])]
        options = [o for o in options if o is not UNREADABLE]
        actual = UNREADABLE if is_empty_value(cell) else coerce(cell, kind)
        hit = actual is not UNREADABLE and actual in options
        return hit if op == FilterOperator.is_any_of else not hit

    expected = coerce(target, kind)
    if expected is UNREADABLE:
        return False
    actual = UNREADABLE if is_empty_value(cell) else coerce(cell, kind)

    if op == FilterOperator.equals:
        return actual is not UNREADABLE and actual == expected
    if op == FilterOperator.not_equals:
        return actual is UNREADABLE or actual != expected

    if actual is UNREADABLE:
        return False
    if op == FilterOperator.greater_than:
        return actual > expected
    if op == FilterOperator.greater_than_or_equal:
        return actual >= expected
    if op == FilterOperator.less_than:
        return actual < expected
    if op == FilterOperator.less_than_or_equal:
        return actual <= expected
    return False


def matches(
    row: Row,
    flt: Filter,
    kind: Optional[DataKind],
    *,
    relation_ids: RelationIds = default_relation_ids,
    value_key: Optional[str] = None,
) -> bool:
    """
    True if `row` satisfies `flt` for a column of `kind`.

    `kind=None` means the filter references an unknown column: the cell is
    treated as having no value and the operator is not checked.
    Raises InvalidOperatorError when the operator is not declared for `kind`.
    """
    if kind is None:
        return compare(None, flt.operator, flt.value, DataKind.string, relation_ids)
    validate_operator(flt.operator, kind, flt.column_id)
    cell = row.get(value_key or flt.column_id)
    return compare(cell, flt.operator, flt.value, kind, relation_ids)


def evaluate_condition(
    row: Row,
    column_id: str,
    operator: FilterOperator,
    value: Any,
    columns: Columns,
    relation_ids: RelationIds = default_relation_ids,
) -> bool:
    column = columns.get(column_id)
    if column is None:
        return compare(None, operator, value, DataKind.string, relation_ids)
    validate_operator(operator, column.data_kind, column_id)
    return compare(row.get(column.value_key), operator, value, column.data_kind, relation_ids)


def evaluate_filter_group(
    row: Row,
    group: FilterGroup,
    columns: Columns,
    relation_ids: RelationIds = default_relation_ids,
) -> bool:
    results = (
        evaluate_condition(row, f.column_id, f.operator, f.value, columns, relation_ids)
        for f in group.filters
    )
    if group.logic == FilterLogic.and_:
        return all(results)
    # OR over nothing excludes everything
    return any(results)


def evaluate_filter_groups(
    row: Row,
    groups: Sequence[FilterGroup],
    columns: Columns,
    relation_ids: RelationIds = default_relation_ids,
) -> bool:
    """Simple mode: groups are ANDed together, each by its own logic."""
    return all(evaluate_filter_group(row, g, columns, relation_ids) for g in groups)


def matches_global_search(row: Row, text: str, columns: Iterable[ColumnDescriptor]) -> bool:
    needle = (text or "").strip().casefold()
    if not needle:
        return True
    for column in columns:
        if not column.filterable:
            continue
        value = row.get(column.value_key)
        if value is None:
            continue
        if needle in stringify(value).casefold():
            return True
    return False

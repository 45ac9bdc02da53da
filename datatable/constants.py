# File: /datatable/constants.py | Version: 1.0 | Title: Operator registry + default view configurations
from __future__ import annotations

from typing import Dict, List

from datatable.schemas.columns import ColumnDescriptor, DataKind
from datatable.schemas.filters import FilterOperator, FilterOperatorConfig, InputKind
from datatable.schemas.view import (
    BoardViewSettings,
    CalendarViewSettings,
    FeedViewSettings,
    GalleryViewSettings,
    ListViewSettings,
    TableViewSettings,
    ViewConfig,
    ViewType,
)

_ALL_KINDS = [DataKind.string, DataKind.number, DataKind.date, DataKind.boolean]
_ORDERED_KINDS = [DataKind.number, DataKind.date]
_STRING_ONLY = [DataKind.string]
_VALUE_KINDS = [DataKind.string, DataKind.number, DataKind.date]
_ID_KINDS = [DataKind.string, DataKind.number]


def _op(
    value: FilterOperator,
    label: str,
    description: str,
    input_kind: InputKind,
    available_for: List[DataKind],
) -> FilterOperatorConfig:
    return FilterOperatorConfig(
        value=value,
        label=label,
        description=description,
        input_kind=input_kind,
        available_for=available_for,
    )


FILTER_OPERATORS: List[FilterOperatorConfig] = [
    _op(FilterOperator.equals, "Equals", "Exact match", InputKind.text, _ALL_KINDS),
    _op(FilterOperator.not_equals, "Not equals", "Does not match", InputKind.text, _ALL_KINDS),
    _op(FilterOperator.contains, "Contains", "Contains text", InputKind.text, _STRING_ONLY),
    _op(
        FilterOperator.not_contains,
        "Does not contain",
        "Does not contain text",
        InputKind.text,
        _STRING_ONLY,
    ),
    _op(FilterOperator.starts_with, "Starts with", "Starts with text", InputKind.text, _STRING_ONLY),
    _op(FilterOperator.ends_with, "Ends with", "Ends with text", InputKind.text, _STRING_ONLY),
    _op(
        FilterOperator.greater_than,
        "Greater than",
        "Greater than value",
        InputKind.number,
        _ORDERED_KINDS,
    ),
    _op(FilterOperator.less_than, "Less than", "Less than value", InputKind.number, _ORDERED_KINDS),
    _op(
        FilterOperator.greater_than_or_equal,
        "Greater than or equal",
        "Greater than or equal to value",
        InputKind.number,
        _ORDERED_KINDS,
    ),
    _op(
        FilterOperator.less_than_or_equal,
        "Less than or equal",
        "Less than or equal to value",
        InputKind.number,
        _ORDERED_KINDS,
    ),
    _op(FilterOperator.is_empty, "Is empty", "Field is empty", InputKind.none, _VALUE_KINDS),
    _op(FilterOperator.is_not_empty, "Is not empty", "Field has a value", InputKind.none, _VALUE_KINDS),
    _op(
        FilterOperator.is_any_of,
        "Is any of",
        "Matches any of the values",
        InputKind.multiselect,
        _ID_KINDS,
    ),
    _op(
        FilterOperator.is_none_of,
        "Is none of",
        "Does not match any of the values",
        InputKind.multiselect,
        _ID_KINDS,
    ),
    # Relation-specific operators
    _op(
        FilterOperator.related_to,
        "Related to",
        "Is related to specific record",
        InputKind.select,
        _ID_KINDS,
    ),
    _op(
        FilterOperator.not_related_to,
        "Not related to",
        "Is not related to specific record",
        InputKind.select,
        _ID_KINDS,
    ),
    _op(
        FilterOperator.has_any_relation,
        "Has any relation",
        "Has at least one related record",
        InputKind.none,
        _ID_KINDS,
    ),
    _op(
        FilterOperator.has_no_relation,
        "Has no relation",
        "Has no related records",
        InputKind.none,
        _ID_KINDS,
    ),
    _op(
        FilterOperator.related_to_any,
        "Related to any of",
        "Is related to any of the specified records",
        InputKind.multiselect,
        _ID_KINDS,
    ),
    _op(
        FilterOperator.related_to_all,
        "Related to all of",
        "Is related to all of the specified records",
        InputKind.multiselect,
        _ID_KINDS,
    ),
]

OPERATOR_CONFIGS: Dict[FilterOperator, FilterOperatorConfig] = {
    c.value: c for c in FILTER_OPERATORS
}

RELATION_OPERATORS = frozenset(
    {
        FilterOperator.related_to,
        FilterOperator.not_related_to,
        FilterOperator.has_any_relation,
        FilterOperator.has_no_relation,
        FilterOperator.related_to_any,
        FilterOperator.related_to_all,
    }
)


def get_operator_config(operator: FilterOperator | str) -> FilterOperatorConfig:
    return OPERATOR_CONFIGS[FilterOperator(operator)]


def input_kind_for(operator: FilterOperator | str) -> InputKind:
    return get_operator_config(operator).input_kind


def is_operator_valid(operator: FilterOperator | str, kind: DataKind | str) -> bool:
    return DataKind(kind) in get_operator_config(operator).available_for


def operators_for_kind(kind: DataKind | str) -> List[FilterOperatorConfig]:
    k = DataKind(kind)
    return [c for c in FILTER_OPERATORS if k in c.available_for]


def operators_for_column(column: ColumnDescriptor) -> List[FilterOperatorConfig]:
    """Operators a filter editor may offer for `column` (none if not filterable)."""
    if not column.filterable:
        return []
    ops = operators_for_kind(column.data_kind)
    if column.relation is None:
        return [c for c in ops if c.value not in RELATION_OPERATORS]
    return ops


# ----------------------------
# Views
# ----------------------------
DEFAULT_TABLE_SETTINGS = TableViewSettings()
DEFAULT_BOARD_SETTINGS = BoardViewSettings()
DEFAULT_GALLERY_SETTINGS = GalleryViewSettings()
DEFAULT_LIST_SETTINGS = ListViewSettings()
DEFAULT_FEED_SETTINGS = FeedViewSettings()
DEFAULT_CALENDAR_SETTINGS = CalendarViewSettings()

DEFAULT_VIEW_CONFIGS: List[ViewConfig] = [
    ViewConfig(
        id="table",
        type=ViewType.table,
        name="Table",
        settings=DEFAULT_TABLE_SETTINGS.model_dump(),
    ),
    ViewConfig(
        id="board",
        type=ViewType.board,
        name="Board",
        settings=DEFAULT_BOARD_SETTINGS.model_dump(),
    ),
    ViewConfig(
        id="gallery",
        type=ViewType.gallery,
        name="Gallery",
        settings=DEFAULT_GALLERY_SETTINGS.model_dump(),
    ),
    ViewConfig(
        id="list",
        type=ViewType.list,
        name="List",
        settings=DEFAULT_LIST_SETTINGS.model_dump(),
    ),
    ViewConfig(
        id="feed",
        type=ViewType.feed,
        name="Feed",
        settings=DEFAULT_FEED_SETTINGS.model_dump(),
    ),
    ViewConfig(
        id="calendar",
        type=ViewType.calendar,
        name="Calendar",
        settings=DEFAULT_CALENDAR_SETTINGS.model_dump(),
    ),
]

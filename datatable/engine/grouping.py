# File: /datatable/engine/grouping.py | Version: 1.0 | Title: Group Engine (partition, hide, sort, collapse)
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from datatable.core.config import settings
from datatable.engine.filtering import Columns, Row, cell_value, stringify
from datatable.schemas.grouping import GroupConfig, GroupedRow, GroupSortOrder


def group_key(value, uncategorized_label: str) -> str:
    return uncategorized_label if value is None else stringify(value)


def _label(uncategorized_label: Optional[str]) -> str:
    return settings.UNCATEGORIZED_LABEL if uncategorized_label is None else uncategorized_label


def sort_groups(groups: List[GroupedRow], sort_order: GroupSortOrder) -> List[GroupedRow]:
    if sort_order == GroupSortOrder.asc:
        return sorted(groups, key=lambda g: g.value)
    if sort_order == GroupSortOrder.desc:
        return sorted(groups, key=lambda g: g.value, reverse=True)
    if sort_order == GroupSortOrder.count_asc:
        return sorted(groups, key=lambda g: (g.count, g.value))
    if sort_order == GroupSortOrder.count_desc:
        return sorted(groups, key=lambda g: (-g.count, g.value))
    raise ValueError(f"Unknown group sort order: {sort_order!r}")


def group_rows(
    rows: Sequence[Row],
    config: GroupConfig,
    columns: Optional[Columns] = None,
    *,
    uncategorized_label: Optional[str] = None,
    known_values: Iterable[str] = (),
) -> List[GroupedRow]:
    """
    Partition `rows` by the value of `config.column_id` in one pass, then
    drop hidden groups, drop empty groups (if `hide_empty`) and sort.

    Rows keep their incoming order inside a group. `known_values` seeds
    groups that may end up empty (e.g. fixed board columns); without them
    every group has at least one row.
    """
    label = _label(uncategorized_label)
    buckets: Dict[str, List[Row]] = {v: [] for v in known_values}
    for row in rows:
        key = group_key(cell_value(row, config.column_id, columns), label)
        buckets.setdefault(key, []).append(row)

    groups = [GroupedRow(value=k, rows=v, count=len(v)) for k, v in buckets.items()]

    if config.hidden_groups:
        hidden = set(config.hidden_groups)
        groups = [g for g in groups if g.value not in hidden]

    if config.hide_empty:
        groups = [g for g in groups if g.count > 0]

    return sort_groups(groups, config.sort_order)


def get_unique_group_values(
    rows: Iterable[Row],
    column_id: str,
    columns: Optional[Columns] = None,
    uncategorized_label: Optional[str] = None,
) -> List[str]:
    label = _label(uncategorized_label)
    values = {group_key(cell_value(row, column_id, columns), label) for row in rows}
    return sorted(values)


def create_default_group_config(column_id: str) -> GroupConfig:
    return GroupConfig(column_id=column_id)


def _toggled(values: List[str], value: str) -> List[str]:
    if value in values:
        return [v for v in values if v != value]
    return sorted([*values, value])


def toggle_group_hidden(config: GroupConfig, value: str) -> GroupConfig:
    return config.model_copy(update={"hidden_groups": _toggled(config.hidden_groups, value)})


def toggle_group_collapsed(config: GroupConfig, value: str) -> GroupConfig:
    return config.model_copy(
        update={"collapsed_groups": _toggled(config.collapsed_groups, value)}
    )


def is_group_collapsed(config: GroupConfig, value: str) -> bool:
    return value in config.collapsed_groups

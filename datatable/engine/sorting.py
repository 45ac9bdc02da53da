# File: /datatable/engine/sorting.py | Version: 1.0 | Title: Stable multi-key row sorting
from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Any, List, Sequence

from datatable.engine.filtering import UNREADABLE, Columns, Row, coerce, is_empty_value
from datatable.schemas.columns import ColumnDescriptor, DataKind
from datatable.schemas.sorting import SortKey

log = logging.getLogger(__name__)


def sort_value(row: Row, column: ColumnDescriptor) -> Any:
    """Comparable value of a cell, or None when it is empty or unreadable."""
    raw = row.get(column.value_key)
    if is_empty_value(raw):
        return None
    value = coerce(raw, column.data_kind)
    if value is UNREADABLE:
        return None
    if column.data_kind == DataKind.string:
        return value.casefold()
    return value


def active_sort_keys(sorting: Sequence[SortKey], columns: Columns) -> List[SortKey]:
    keys: List[SortKey] = []
    for key in sorting:
        column = columns.get(key.column_id)
        if column is None:
            continue
        if not column.sortable:
            log.debug("Ignoring sort on non-sortable column %s", key.column_id)
            continue
        keys.append(key)
    return keys


def sort_rows(rows: Sequence[Row], sorting: Sequence[SortKey], columns: Columns) -> List[Row]:
    """
    Stable sort by `sorting` (first key = primary). Empty values sort last
    regardless of direction; unknown/non-sortable columns are ignored.
    """
    keys = active_sort_keys(sorting, columns)
    if not keys:
        return list(rows)

    def _cmp(a: Row, b: Row) -> int:
        for key in keys:
            column = columns[key.column_id]
            va, vb = sort_value(a, column), sort_value(b, column)
            if va is None and vb is None:
                continue
            if va is None:
                return 1
            if vb is None:
                return -1
            if va == vb:
                continue
            result = -1 if va < vb else 1
            return -result if key.descending else result
        return 0

    return sorted(rows, key=cmp_to_key(_cmp))

# File: /datatable/schemas/sorting.py | Version: 1.0 | Title: Sort Key Schema
from __future__ import annotations

from datatable.schemas._base import BaseSchema


class SortKey(BaseSchema):
    """One sort key; list position is priority (first = primary key)."""

    column_id: str
    descending: bool = False

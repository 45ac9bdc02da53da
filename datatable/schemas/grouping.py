# File: /datatable/schemas/grouping.py | Version: 1.0 | Title: Grouping Schemas (Notion-style grouped rows)
from __future__ import annotations

from enum import Enum
from typing import Any, List

from pydantic import Field, field_validator

from datatable.schemas._base import BaseSchema


class GroupSortOrder(str, Enum):
    asc = "asc"
    desc = "desc"
    count_asc = "count-asc"
    count_desc = "count-desc"


class GroupConfig(BaseSchema):
    column_id: str
    sort_order: GroupSortOrder = GroupSortOrder.asc
    hide_empty: bool = False
    # Group *values* (not indices), so they survive data refreshes
    hidden_groups: List[str] = Field(default_factory=list)
    collapsed_groups: List[str] = Field(default_factory=list)

    @field_validator("hidden_groups", "collapsed_groups")
    @classmethod
    def _as_sorted_set(cls, v: List[str]) -> List[str]:
        return sorted(set(v))


class GroupedRow(BaseSchema):
    value: str
    rows: List[Any] = Field(default_factory=list)
    count: int = 0

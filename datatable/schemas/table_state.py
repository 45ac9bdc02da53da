# File: /datatable/schemas/table_state.py | Version: 1.0 | Title: Query/Table State Schemas
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from datatable.schemas._base import BaseSchema, FrozenSchema
from datatable.schemas.filters import FilterGroup, GroupNode
from datatable.schemas.grouping import GroupConfig
from datatable.schemas.sorting import SortKey
from datatable.schemas.view import ViewConfig


class Pagination(BaseSchema):
    page_index: int = Field(default=0, ge=0)
    page_size: int = Field(default=10, ge=1)


class PinSide(str, Enum):
    left = "left"
    right = "right"


class SelectionPolicy(str, Enum):
    # Selection survives filter/search changes (rows may be selected but hidden)
    keep = "keep"
    # Selection is cleared whenever filters or search text change
    clear = "clear"


class TableState(FrozenSchema):
    """Read-only snapshot handed to view renderers."""

    active_view: ViewConfig
    available_views: List[ViewConfig]
    filter_groups: List[FilterGroup]
    advanced_filter: GroupNode
    sorting: List[SortKey]
    column_visibility: Dict[str, bool]
    column_order: List[str]
    column_pinning: Dict[str, PinSide]
    global_filter: str
    group_config: Optional[GroupConfig] = None
    pagination: Pagination
    selected_keys: List[str]
    active_saved_view_id: Optional[str] = None

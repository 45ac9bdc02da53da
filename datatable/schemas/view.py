# File: /datatable/schemas/view.py | Version: 2.0 | Title: View + Saved View Schemas (Pydantic v2)
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from datatable.schemas._base import BaseSchema, FrozenSchema
from datatable.schemas.filters import FilterGroup
from datatable.schemas.sorting import SortKey


class ViewType(str, Enum):
    table = "table"
    board = "board"
    gallery = "gallery"
    list = "list"
    feed = "feed"
    calendar = "calendar"


class ViewConfig(FrozenSchema):
    id: str
    type: ViewType
    name: str
    settings: Dict[str, Any] = Field(default_factory=dict)


# ----------------------------
# Per-view default settings
# ----------------------------
class TableViewSettings(BaseModel):
    enable_sorting: bool = True
    enable_selection: bool = True
    enable_pagination: bool = True
    enable_row_hover: bool = True
    dense_mode: bool = False


class BoardViewSettings(BaseModel):
    group_by_column: str = "status"
    enable_drag_drop: bool = True
    show_card_count: bool = True
    column_width: int = 300


class GalleryViewSettings(BaseModel):
    card_size: str = "medium"
    show_page_icon: bool = True
    fit_image: bool = False
    wrap_properties: bool = False
    card_preview: str = "page-content"
    open_pages_in: str = "center-peek"
    columns: int = 3


class ListViewSettings(BaseModel):
    show_page_icon: bool = True
    compact_mode: bool = False
    open_pages_in: str = "side-peek"
    show_properties: bool = False


class FeedViewSettings(BaseModel):
    show_author_byline: bool = True
    enable_reactions: bool = True
    enable_comments: bool = True
    load_limit: int = 10
    open_pages_in: str = "center-peek"
    show_timestamps: bool = True


class CalendarViewSettings(BaseModel):
    date_column: str = "createdAt"
    title_column: Optional[str] = "name"
    show_event_count: bool = True
    max_events_per_date: int = 5
    default_view: str = "month"


# ----------------------------
# Saved views
# ----------------------------
class ViewSnapshot(BaseSchema):
    """The comparable part of a table state that a saved view captures."""

    filters: List[FilterGroup] = Field(default_factory=list)
    sorting: List[SortKey] = Field(default_factory=list)
    column_visibility: Dict[str, bool] = Field(default_factory=dict)
    view_type: ViewType = ViewType.table

    def comparable(self) -> Dict[str, Any]:
        return self.model_dump(
            mode="json", include={"filters", "sorting", "column_visibility", "view_type"}
        )

    def match_key(self) -> Dict[str, Any]:
        """Comparable fields without filter ids: two views match by content, not identity."""
        data = self.comparable()
        for group in data["filters"]:
            for flt in group["filters"]:
                flt.pop("id", None)
        return data

    def snapshot(self) -> "ViewSnapshot":
        return ViewSnapshot.model_validate(self.comparable())


class SavedView(ViewSnapshot):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    is_default: bool = False
    created_at: datetime
    updated_at: datetime


class SavedViewCreate(ViewSnapshot):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    set_as_default: bool = False


class SavedViewUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    filters: Optional[List[FilterGroup]] = None
    sorting: Optional[List[SortKey]] = None
    column_visibility: Optional[Dict[str, bool]] = None
    view_type: Optional[ViewType] = None
    is_default: Optional[bool] = None


class DuplicateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)


class DefaultViewRequest(BaseModel):
    view_id: Optional[str] = None

# File: /datatable/models/saved_view.py | Version: 1.0 | Title: SQLAlchemy model for Saved Views
from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text

from datatable.db.base_class import Base


class SavedViewRecord(Base):
    __tablename__ = "saved_views"

    # Views are namespaced by storage key (one collection per table instance)
    storage_key = Column(String, primary_key=True)
    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, default=0)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_default = Column(Boolean, nullable=False, server_default="0")

    filters_json = Column(JSON, nullable=False, default=list)
    sorting_json = Column(JSON, nullable=False, default=list)
    column_visibility_json = Column(JSON, nullable=False, default=dict)
    view_type = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (Index("ix_saved_views_storage_key", "storage_key", "position"),)

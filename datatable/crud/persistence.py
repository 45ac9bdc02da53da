# File: /datatable/crud/persistence.py | Version: 1.0 | Title: Saved View persistence adapters (memory JSON + SQLAlchemy)
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from datatable.core.config import settings
from datatable.models.saved_view import SavedViewRecord
from datatable.schemas.view import SavedView


class ViewStorageAdapter(Protocol):
    """Durability boundary of the saved-view store: load-all / save-all."""

    def load(self) -> List[SavedView]: ...

    def save(self, views: List[SavedView]) -> None: ...


class MemoryViewAdapter:
    """
    Key-value text store: each storage key holds the JSON-encoded view list.
    Mirrors a browser local-storage slot; several adapters may share `data`.
    """

    def __init__(
        self,
        storage_key: Optional[str] = None,
        data: Optional[Dict[str, str]] = None,
    ):
        self.storage_key = storage_key or settings.SAVED_VIEWS_STORAGE_KEY
        self.data: Dict[str, str] = {} if data is None else data

    def load(self) -> List[SavedView]:
        raw = self.data.get(self.storage_key)
        if not raw:
            return []
        return [SavedView.model_validate(item) for item in json.loads(raw)]

    def save(self, views: List[SavedView]) -> None:
        self.data[self.storage_key] = json.dumps(
            [v.model_dump(mode="json") for v in views], ensure_ascii=False
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SqlViewAdapter:
    """Stores one row per view in `saved_views`, namespaced by storage key."""

    def __init__(self, db: Session, storage_key: Optional[str] = None):
        self.db = db
        self.storage_key = storage_key or settings.SAVED_VIEWS_STORAGE_KEY

    def load(self) -> List[SavedView]:
        rows = (
            self.db.query(SavedViewRecord)
            .filter(SavedViewRecord.storage_key == self.storage_key)
            .order_by(SavedViewRecord.position.asc())
            .all()
        )
        return [self._to_view(r) for r in rows]

    def save(self, views: List[SavedView]) -> None:
        """Replace the stored collection with `views`, preserving their order."""
        existing = {
            r.id: r
            for r in self.db.query(SavedViewRecord).filter(
                SavedViewRecord.storage_key == self.storage_key
            )
        }
        try:
            for position, view in enumerate(views):
                record = existing.pop(view.id, None)
                if record is None:
                    record = SavedViewRecord(storage_key=self.storage_key, id=view.id)
                    self.db.add(record)
                self._fill(record, view, position)
            for stale in existing.values():
                self.db.delete(stale)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @staticmethod
    def _fill(record: SavedViewRecord, view: SavedView, position: int) -> None:
        data = view.model_dump(mode="json")
        record.position = position
        record.name = view.name
        record.description = view.description
        record.is_default = view.is_default
        record.filters_json = data["filters"]
        record.sorting_json = data["sorting"]
        record.column_visibility_json = data["column_visibility"]
        record.view_type = data["view_type"]
        record.created_at = _naive_utc(view.created_at)
        record.updated_at = _naive_utc(view.updated_at)

    @staticmethod
    def _to_view(r: SavedViewRecord) -> SavedView:
        return SavedView(
            id=r.id,
            name=r.name,
            description=r.description,
            is_default=bool(r.is_default),
            created_at=_as_utc(r.created_at),
            updated_at=_as_utc(r.updated_at),
            filters=r.filters_json or [],
            sorting=r.sorting_json or [],
            column_visibility=r.column_visibility_json or {},
            view_type=r.view_type,
        )

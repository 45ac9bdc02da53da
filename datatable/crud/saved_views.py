# File: /datatable/crud/saved_views.py | Version: 1.0 | Title: Saved View Store (create/apply/duplicate/default/delete)
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional

from datatable.crud.persistence import ViewStorageAdapter
from datatable.schemas.view import SavedView, SavedViewUpdate, ViewSnapshot

log = logging.getLogger(__name__)

_UPDATABLE = {
    "name",
    "description",
    "filters",
    "sorting",
    "column_visibility",
    "view_type",
    "is_default",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SavedViewStore:
    """
    In-memory collection of saved views with an optional durability adapter.

    Every mutation writes the whole collection back through the adapter.
    Adapter failures are logged and never propagate: a failed load means
    "no persisted views", a failed save means the change lives in memory only.
    At most one view carries `is_default=True`.
    """

    def __init__(
        self,
        adapter: Optional[ViewStorageAdapter] = None,
        *,
        initial_views: Iterable[SavedView] = (),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._adapter = adapter
        self._clock = clock
        self.last_error: Optional[Exception] = None
        self._views: List[SavedView] = list(initial_views)
        loaded = self._load()
        if loaded:
            self._views = loaded
        self._views = self._single_default(self._views)

    # ----------------------------
    # Persistence boundary
    # ----------------------------
    def _load(self) -> List[SavedView]:
        if self._adapter is None:
            return []
        try:
            return list(self._adapter.load())
        except Exception as e:
            log.warning("Failed to load saved views: %s", e)
            return []

    def _persist(self) -> bool:
        if self._adapter is None:
            return True
        try:
            self._adapter.save(list(self._views))
            self.last_error = None
            return True
        except Exception as e:
            log.warning("Failed to save views: %s", e)
            self.last_error = e
            return False

    @staticmethod
    def _single_default(views: List[SavedView]) -> List[SavedView]:
        defaults = [v for v in views if v.is_default]
        if len(defaults) <= 1:
            return views
        log.warning(
            "Found %d default saved views; keeping '%s'", len(defaults), defaults[0].id
        )
        keep = defaults[0].id
        return [
            v.model_copy(update={"is_default": False}) if v.is_default and v.id != keep else v
            for v in views
        ]

    # ----------------------------
    # Queries
    # ----------------------------
    @property
    def views(self) -> List[SavedView]:
        return list(self._views)

    def __len__(self) -> int:
        return len(self._views)

    def get(self, view_id: str) -> Optional[SavedView]:
        return next((v for v in self._views if v.id == view_id), None)

    def default_view(self) -> Optional[SavedView]:
        return next((v for v in self._views if v.is_default), None)

    def apply(self, view_id: str) -> Optional[ViewSnapshot]:
        """Stored snapshot for `view_id`, or None if unknown. Never mutates the store."""
        view = self.get(view_id)
        return view.snapshot() if view else None

    def find_matching(self, snapshot: ViewSnapshot) -> Optional[SavedView]:
        """First view whose filters, sorting, column visibility and view type equal `snapshot`."""
        wanted = snapshot.match_key()
        return next((v for v in self._views if v.match_key() == wanted), None)

    # ----------------------------
    # Mutations
    # ----------------------------
    def create(
        self,
        name: str,
        snapshot: ViewSnapshot,
        *,
        description: Optional[str] = None,
        set_as_default: bool = False,
    ) -> SavedView:
        now = self._clock()
        view = SavedView(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            is_default=set_as_default,
            created_at=now,
            updated_at=now,
            **snapshot.comparable(),
        )
        views = self._cleared_defaults() if set_as_default else list(self._views)
        self._views = [*views, view]
        self._persist()
        log.info("Created saved view %s (%s)", view.id, name)
        return view

    def update(self, view_id: str, changes: SavedViewUpdate | dict[str, Any]) -> Optional[SavedView]:
        if isinstance(changes, SavedViewUpdate):
            data = changes.model_dump(exclude_unset=True)
        else:
            data = dict(changes)
        # Only description may be cleared explicitly
        data = {k: v for k, v in data.items() if v is not None or k == "description"}
        unknown = set(data) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update saved view fields: {sorted(unknown)}")

        current = self.get(view_id)
        if current is None:
            return None

        merged = {**current.model_dump(), **data, "updated_at": self._clock()}
        updated = SavedView.model_validate(merged)
        views = self._cleared_defaults() if data.get("is_default") else list(self._views)
        self._views = [updated if v.id == view_id else v for v in views]
        self._persist()
        return updated

    def delete(self, view_id: str) -> bool:
        if self.get(view_id) is None:
            return False
        self._views = [v for v in self._views if v.id != view_id]
        self._persist()
        log.info("Deleted saved view %s", view_id)
        return True

    def set_default(self, view_id: Optional[str]) -> Optional[SavedView]:
        """Make `view_id` the only default (None clears every default)."""
        if view_id is not None and self.get(view_id) is None:
            return None
        self._views = [
            v
            if v.is_default == (v.id == view_id)
            else v.model_copy(update={"is_default": v.id == view_id})
            for v in self._views
        ]
        self._persist()
        log.info("Default saved view set to %s", view_id)
        return self.get(view_id) if view_id is not None else None

    def duplicate(self, view_id: str, new_name: Optional[str] = None) -> Optional[SavedView]:
        source = self.get(view_id)
        if source is None:
            return None
        now = self._clock()
        copy = source.model_copy(
            update={
                "id": str(uuid.uuid4()),
                "name": new_name or f"{source.name} (copy)",
                "is_default": False,
                "created_at": now,
                "updated_at": now,
            },
            deep=True,
        )
        self._views = [*self._views, copy]
        self._persist()
        return copy

    def _cleared_defaults(self) -> List[SavedView]:
        return [
            v.model_copy(update={"is_default": False}) if v.is_default else v
            for v in self._views
        ]

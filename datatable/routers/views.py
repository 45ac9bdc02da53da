# File: /datatable/routers/views.py | Version: 1.0 | Title: Saved Views CRUD + apply/duplicate/default/match
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from datatable.core.config import settings
from datatable.crud.persistence import SqlViewAdapter
from datatable.crud.saved_views import SavedViewStore
from datatable.db.session import get_db
from datatable.schemas.view import (
    DefaultViewRequest,
    DuplicateRequest,
    SavedView,
    SavedViewCreate,
    SavedViewUpdate,
    ViewSnapshot,
)

router = APIRouter(prefix="/views", tags=["Views"])


# ----------------------------
# Helpers
# ----------------------------
def get_view_store(
    storage_key: str = Query(default=settings.SAVED_VIEWS_STORAGE_KEY, min_length=1),
    db: Session = Depends(get_db),
) -> SavedViewStore:
    return SavedViewStore(SqlViewAdapter(db, storage_key=storage_key))


def _require(view: Optional[SavedView]) -> SavedView:
    if view is None:
        raise HTTPException(status_code=404, detail="View not found")
    return view


def _check_saved(store: SavedViewStore) -> None:
    # The store keeps the change in memory; over HTTP that means it is lost
    if store.last_error is not None:
        raise HTTPException(status_code=503, detail="Saved view storage unavailable")


# ----------------------------
# Collection
# ----------------------------
@router.get("", response_model=List[SavedView], summary="List saved views")
def list_views(store: SavedViewStore = Depends(get_view_store)):
    return store.views


@router.post("", response_model=SavedView, status_code=201, summary="Save a view")
def create_view(data: SavedViewCreate, store: SavedViewStore = Depends(get_view_store)):
    view = store.create(
        data.name,
        data.snapshot(),
        description=data.description,
        set_as_default=data.set_as_default,
    )
    _check_saved(store)
    return view


@router.get("/default", response_model=Optional[SavedView], summary="Get the default view")
def get_default_view(store: SavedViewStore = Depends(get_view_store)):
    return store.default_view()


@router.put("/default", response_model=Optional[SavedView], summary="Set or clear the default view")
def set_default_view(data: DefaultViewRequest, store: SavedViewStore = Depends(get_view_store)):
    if data.view_id is not None:
        _require(store.get(data.view_id))
    view = store.set_default(data.view_id)
    _check_saved(store)
    return view


@router.post(
    "/match",
    response_model=Optional[SavedView],
    summary="Find the saved view equal to a table snapshot",
)
def match_view(snapshot: ViewSnapshot, store: SavedViewStore = Depends(get_view_store)):
    return store.find_matching(snapshot)


# ----------------------------
# Item
# ----------------------------
@router.get("/{view_id}", response_model=SavedView, summary="Get a saved view")
def get_view(view_id: str, store: SavedViewStore = Depends(get_view_store)):
    return _require(store.get(view_id))


@router.patch("/{view_id}", response_model=SavedView, summary="Update a saved view")
def update_view(
    view_id: str,
    data: SavedViewUpdate,
    store: SavedViewStore = Depends(get_view_store),
):
    view = _require(store.update(view_id, data))
    _check_saved(store)
    return view


@router.delete("/{view_id}", summary="Delete a saved view")
def delete_view(view_id: str, store: SavedViewStore = Depends(get_view_store)):
    if not store.delete(view_id):
        raise HTTPException(status_code=404, detail="View not found")
    _check_saved(store)
    return {"detail": "View deleted"}


@router.post(
    "/{view_id}/duplicate",
    response_model=SavedView,
    status_code=201,
    summary="Duplicate a saved view",
)
def duplicate_view(
    view_id: str,
    data: Optional[DuplicateRequest] = None,
    store: SavedViewStore = Depends(get_view_store),
):
    view = _require(store.duplicate(view_id, data.name if data else None))
    _check_saved(store)
    return view


@router.get(
    "/{view_id}/apply",
    response_model=ViewSnapshot,
    summary="Snapshot to feed back into a table engine",
)
def apply_view(view_id: str, store: SavedViewStore = Depends(get_view_store)):
    snapshot = store.apply(view_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="View not found")
    return snapshot

# File: /datatable/engine/table_state.py | Version: 1.0 | Title: Query/Table State Engine (search -> filters -> sort -> page)
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from datatable.constants import DEFAULT_VIEW_CONFIGS
from datatable.core.config import settings
from datatable.core.errors import NoViewsAvailableError, ViewNotAvailableError
from datatable.crud.saved_views import SavedViewStore
from datatable.engine.filter_tree import create_root_group, evaluate_tree, validate_tree
from datatable.engine.filtering import (
    RelationIds,
    Row,
    default_relation_ids,
    evaluate_filter_groups,
    matches_global_search,
    validate_filter_groups,
)
from datatable.engine.grouping import group_rows
from datatable.engine.selection import RowSelection
from datatable.engine.sorting import sort_rows
from datatable.schemas.columns import ColumnDescriptor
from datatable.schemas.filters import Filter, FilterGroup, FilterLogic, GroupNode
from datatable.schemas.grouping import GroupConfig, GroupedRow
from datatable.schemas.sorting import SortKey
from datatable.schemas.table_state import (
    Pagination,
    PinSide,
    SelectionPolicy,
    TableState,
)
from datatable.schemas.view import SavedView, ViewConfig, ViewSnapshot, ViewType

log = logging.getLogger(__name__)

RowKey = Callable[[Row], str]


def default_row_key(row: Row) -> str:
    key = row.get("_id")
    if key is None:
        key = row.get("id")
    return "" if key is None else str(key)


def _empty_filter_groups() -> List[FilterGroup]:
    return [FilterGroup(logic=FilterLogic.and_, filters=[])]


def _view_type_or_none(value: Union[ViewType, str]) -> Optional[ViewType]:
    """Unknown view names are skipped like disabled ones."""
    try:
        return ViewType(value)
    except ValueError:
        log.warning("Ignoring unknown view type %r", value)
        return None


class TableStateEngine:
    """
    Single owner of a table's query state.

    Rows are derived on demand (`derive_rows`) from the current state:
    global search, then flat filter groups and the advanced filter tree,
    then sort, then the current page. Groups are derived separately from
    the filtered and sorted (unpaginated) rows.

    Filter, search and sort changes reset the page index to 0; grouping,
    view and column changes do not.
    """

    def __init__(
        self,
        columns: Sequence[ColumnDescriptor],
        *,
        view_configs: Optional[Sequence[ViewConfig]] = None,
        enabled_views: Optional[Iterable[Union[ViewType, str]]] = None,
        default_view: Optional[Union[ViewType, str]] = None,
        page_size: Optional[int] = None,
        paginate: bool = True,
        row_key: RowKey = default_row_key,
        relation_ids: RelationIds = default_relation_ids,
        max_filter_depth: Optional[int] = None,
        uncategorized_label: Optional[str] = None,
        selection_policy: SelectionPolicy = SelectionPolicy.keep,
        group_config: Optional[GroupConfig] = None,
    ):
        self.columns: List[ColumnDescriptor] = list(columns)
        self._column_map: Dict[str, ColumnDescriptor] = {c.id: c for c in self.columns}
        self.row_key = row_key
        self.relation_ids = relation_ids
        self.paginate = paginate
        self.selection_policy = SelectionPolicy(selection_policy)
        self.max_filter_depth = (
            settings.MAX_FILTER_DEPTH if max_filter_depth is None else max_filter_depth
        )
        self.uncategorized_label = (
            settings.UNCATEGORIZED_LABEL if uncategorized_label is None else uncategorized_label
        )
        self._page_size = page_size or settings.DEFAULT_PAGE_SIZE

        configs = list(DEFAULT_VIEW_CONFIGS if view_configs is None else view_configs)
        requested = settings.ENABLED_VIEWS if enabled_views is None else enabled_views
        enabled = {t for t in (_view_type_or_none(v) for v in requested) if t is not None}
        self.available_views: List[ViewConfig] = [v for v in configs if v.type in enabled]
        if not self.available_views:
            raise NoViewsAvailableError()

        wanted = default_view or settings.DEFAULT_VIEW
        wanted_type = _view_type_or_none(wanted)
        initial = None if wanted_type is None else self._find_view(wanted_type)
        if initial is None:
            initial = self.available_views[0]
            log.info(
                "Default view '%s' is not enabled; falling back to '%s'",
                getattr(wanted, "value", wanted),
                initial.type.value,
            )
        self._initial_view = initial
        self._initial_group_config = group_config

        self.selection = RowSelection()
        self._reset_fields()

    # ----------------------------
    # Internals
    # ----------------------------
    def _reset_fields(self) -> None:
        self.active_view: ViewConfig = self._initial_view
        self.filter_groups: List[FilterGroup] = _empty_filter_groups()
        self.advanced_filter: GroupNode = create_root_group()
        self.sorting: List[SortKey] = []
        self.column_visibility: Dict[str, bool] = {
            c.id: c.visible for c in self.columns if c.visible is not None
        }
        self.column_order: List[str] = [c.id for c in self.columns]
        self.column_pinning: Dict[str, PinSide] = {}
        self.global_filter: str = ""
        self.group_config: Optional[GroupConfig] = self._initial_group_config
        self.pagination = Pagination(page_index=0, page_size=self._page_size)
        self.active_saved_view_id: Optional[str] = None
        self.selection.select_none()

    def _find_view(self, view: Union[ViewConfig, ViewType, str]) -> Optional[ViewConfig]:
        if isinstance(view, ViewConfig):
            return next((v for v in self.available_views if v.id == view.id), None)
        for v in self.available_views:
            if v.id == view or v.type == view:
                return v
        return None

    def _reset_page(self) -> None:
        self.pagination = self.pagination.model_copy(update={"page_index": 0})

    def _query_changed(self) -> None:
        """Row membership changed: back to page 0, and drop the selection under the clear policy."""
        self._reset_page()
        if self.selection_policy == SelectionPolicy.clear:
            self.selection.select_none()

    # ----------------------------
    # Setters
    # ----------------------------
    def set_global_filter(self, text: str) -> None:
        self.global_filter = text or ""
        self._query_changed()

    def set_sort(self, sorting: Sequence[Union[SortKey, Mapping[str, Any]]]) -> None:
        self.sorting = [SortKey.model_validate(k) for k in sorting]
        self._reset_page()

    def set_filter_groups(self, groups: Sequence[Union[FilterGroup, Mapping[str, Any]]]) -> None:
        parsed = [FilterGroup.model_validate(g) for g in groups]
        validate_filter_groups(parsed, self._column_map)
        self.filter_groups = parsed
        self._query_changed()

    def set_advanced_filter(self, tree: Union[GroupNode, Mapping[str, Any]]) -> None:
        root = GroupNode.model_validate(tree)
        validate_tree(root, self._column_map, self.max_filter_depth)
        self.advanced_filter = root
        self._query_changed()

    def set_group_config(self, config: Optional[Union[GroupConfig, Mapping[str, Any]]]) -> None:
        self.group_config = None if config is None else GroupConfig.model_validate(config)

    def set_active_view(self, view: Union[ViewConfig, ViewType, str]) -> ViewConfig:
        found = self._find_view(view)
        if found is None:
            raise ViewNotAvailableError(getattr(view, "id", getattr(view, "value", view)))
        self.active_view = found
        return found

    def set_column_visibility(self, visibility: Mapping[str, bool]) -> None:
        self.column_visibility = dict(visibility)

    def set_pagination(
        self, page_index: Optional[int] = None, page_size: Optional[int] = None
    ) -> Pagination:
        data = self.pagination.model_dump()
        if page_size is not None and page_size != self.pagination.page_size:
            data.update(page_size=page_size, page_index=0)
        if page_index is not None:
            data["page_index"] = page_index
        self.pagination = Pagination.model_validate(data)
        return self.pagination

    # ----------------------------
    # Filter actions
    # ----------------------------
    def add_filter(self, flt: Union[Filter, Mapping[str, Any]], group_index: int = 0) -> None:
        new = Filter.model_validate(flt)
        groups = [g.model_copy(deep=True) for g in self.filter_groups]
        if 0 <= group_index < len(groups):
            groups[group_index].filters.append(new)
        self.set_filter_groups(groups)

    def remove_filter(self, filter_id: str) -> None:
        self.set_filter_groups(
            [
                g.model_copy(update={"filters": [f for f in g.filters if f.id != filter_id]})
                for g in self.filter_groups
            ]
        )

    def add_filter_group(self, logic: FilterLogic = FilterLogic.and_) -> None:
        self.set_filter_groups([*self.filter_groups, FilterGroup(logic=logic)])

    def remove_filter_group(self, group_index: int) -> None:
        self.set_filter_groups(
            [g for i, g in enumerate(self.filter_groups) if i != group_index]
        )

    def clear_filters(self) -> None:
        self.filter_groups = _empty_filter_groups()
        self.advanced_filter = create_root_group()
        self.global_filter = ""
        self._query_changed()

    # ----------------------------
    # Column actions
    # ----------------------------
    def is_column_visible(self, column_id: str) -> bool:
        return self.column_visibility.get(column_id, True)

    def toggle_column_visibility(self, column_id: str) -> None:
        self.column_visibility = {
            **self.column_visibility,
            column_id: not self.is_column_visible(column_id),
        }

    def update_column_visibility(self, column_id: str, visible: bool) -> None:
        self.column_visibility = {**self.column_visibility, column_id: visible}

    def reorder_columns(self, column_ids: Sequence[str]) -> None:
        """Reorder by `column_ids`; unknown ids are dropped, omitted columns keep their relative order at the end."""
        ordered = [cid for cid in dict.fromkeys(column_ids) if cid in self._column_map]
        rest = [cid for cid in self.column_order if cid not in ordered]
        self.column_order = ordered + rest

    def move_column(self, column_id: str, index: int) -> None:
        """Move one column to `index` (clamped); unknown ids are ignored."""
        if column_id not in self.column_order:
            return
        order = [cid for cid in self.column_order if cid != column_id]
        order.insert(max(0, min(index, len(order))), column_id)
        self.column_order = order

    def set_column_pinned(self, column_id: str, side: Optional[Union[PinSide, str]]) -> None:
        pinning = dict(self.column_pinning)
        if side is None:
            pinning.pop(column_id, None)
        else:
            pinning[column_id] = PinSide(side)
        self.column_pinning = pinning

    def visible_columns(self) -> List[ColumnDescriptor]:
        return [
            self._column_map[cid] for cid in self.column_order if self.is_column_visible(cid)
        ]

    def reset_state(self) -> None:
        self._reset_fields()

    # ----------------------------
    # Derivation
    # ----------------------------
    def filter_rows(self, raw_rows: Iterable[Row]) -> List[Row]:
        rows = [r for r in raw_rows if matches_global_search(r, self.global_filter, self.columns)]
        return [
            r
            for r in rows
            if evaluate_filter_groups(r, self.filter_groups, self._column_map, self.relation_ids)
            and evaluate_tree(r, self.advanced_filter, self._column_map, self.relation_ids)
        ]

    def sort_rows(self, rows: Sequence[Row]) -> List[Row]:
        return sort_rows(rows, self.sorting, self._column_map)

    def sorted_rows(self, raw_rows: Iterable[Row]) -> List[Row]:
        """Filtered and sorted rows, before pagination."""
        return self.sort_rows(self.filter_rows(raw_rows))

    def derive_rows(self, raw_rows: Iterable[Row]) -> List[Row]:
        rows = self.sorted_rows(raw_rows)
        if self.paginate:
            start = self.pagination.page_index * self.pagination.page_size
            rows = rows[start : start + self.pagination.page_size]
        log.debug("Derived %d rows (page %d)", len(rows), self.pagination.page_index)
        return rows

    def page_count(self, raw_rows: Iterable[Row]) -> int:
        total = len(self.filter_rows(raw_rows))
        if not self.paginate:
            return 1 if total else 0
        return math.ceil(total / self.pagination.page_size)

    def derive_groups(
        self, raw_rows: Iterable[Row], known_values: Iterable[str] = ()
    ) -> List[GroupedRow]:
        if self.group_config is None:
            return []
        return group_rows(
            self.sorted_rows(raw_rows),
            self.group_config,
            self._column_map,
            uncategorized_label=self.uncategorized_label,
            known_values=known_values,
        )

    # ----------------------------
    # Selection
    # ----------------------------
    def _keys(self, rows: Iterable[Row]) -> List[str]:
        return [self.row_key(r) for r in rows]

    def toggle_row(self, row: Row, rows_in_order: Optional[Sequence[Row]] = None) -> bool:
        order = self._keys(rows_in_order) if rows_in_order is not None else None
        return self.selection.toggle(self.row_key(row), order)

    def extend_selection(self, row: Row, rows_in_order: Sequence[Row]) -> None:
        self.selection.extend_range(self.row_key(row), self._keys(rows_in_order))

    def select_all(self, rows: Iterable[Row]) -> None:
        self.selection.select_all(self._keys(rows))

    def select_none(self) -> None:
        self.selection.select_none()

    def selected_rows(self, rows: Iterable[Row]) -> List[Row]:
        return [r for r in rows if self.row_key(r) in self.selection]

    def selected_count(self) -> int:
        return self.selection.count()

    def is_all_selected(self, rows: Iterable[Row]) -> bool:
        return self.selection.is_all_selected(self._keys(rows))

    def is_indeterminate(self, rows: Iterable[Row]) -> bool:
        return self.selection.is_indeterminate(self._keys(rows))

    # ----------------------------
    # Snapshots + saved views
    # ----------------------------
    def state(self) -> TableState:
        return TableState(
            active_view=self.active_view,
            available_views=list(self.available_views),
            filter_groups=[g.model_copy(deep=True) for g in self.filter_groups],
            advanced_filter=self.advanced_filter.model_copy(deep=True),
            sorting=[k.model_copy() for k in self.sorting],
            column_visibility=dict(self.column_visibility),
            column_order=list(self.column_order),
            column_pinning=dict(self.column_pinning),
            global_filter=self.global_filter,
            group_config=self.group_config.model_copy(deep=True) if self.group_config else None,
            pagination=self.pagination.model_copy(),
            selected_keys=sorted(self.selection.keys),
            active_saved_view_id=self.active_saved_view_id,
        )

    def view_snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(
            filters=[g.model_copy(deep=True) for g in self.filter_groups],
            sorting=[k.model_copy() for k in self.sorting],
            column_visibility=dict(self.column_visibility),
            view_type=self.active_view.type,
        )

    def apply_snapshot(self, snapshot: Union[ViewSnapshot, Mapping[str, Any]]) -> None:
        """
        Feed a saved snapshot back into the engine. A view type that is not
        enabled here falls back to the first available view.
        """
        snap = ViewSnapshot.model_validate(snapshot)
        self.set_filter_groups(snap.filters)
        self.set_sort(snap.sorting)
        self.set_column_visibility(snap.column_visibility)
        view = self._find_view(snap.view_type)
        if view is None:
            view = self.available_views[0]
            log.info(
                "Saved view type '%s' is not enabled; using '%s'",
                snap.view_type.value,
                view.type.value,
            )
        self.active_view = view

    def apply_saved_view(self, store: SavedViewStore, view_id: str) -> bool:
        snapshot = store.apply(view_id)
        if snapshot is None:
            return False
        self.apply_snapshot(snapshot)
        self.active_saved_view_id = view_id
        return True

    def apply_default_view(self, store: SavedViewStore) -> Optional[SavedView]:
        view = store.default_view()
        if view is not None:
            self.apply_saved_view(store, view.id)
        return view

    def save_current_view(
        self,
        store: SavedViewStore,
        name: str,
        *,
        description: Optional[str] = None,
        set_as_default: bool = False,
    ) -> SavedView:
        view = store.create(
            name, self.view_snapshot(), description=description, set_as_default=set_as_default
        )
        self.active_saved_view_id = view.id
        return view

    def delete_saved_view(self, store: SavedViewStore, view_id: str) -> bool:
        deleted = store.delete(view_id)
        if self.active_saved_view_id == view_id:
            self.active_saved_view_id = None
        return deleted

    def matching_saved_view(self, store: SavedViewStore) -> Optional[SavedView]:
        return store.find_matching(self.view_snapshot())

    def has_unsaved_changes(self, store: SavedViewStore) -> bool:
        """True when an active saved view exists and the current state no longer equals it."""
        if self.active_saved_view_id is None:
            return False
        active = store.get(self.active_saved_view_id)
        if active is None:
            return False
        return active.match_key() != self.view_snapshot().match_key()

# File: /tests/test_table_state.py | Version: 1.0 | Title: Query/Table State Engine pipeline + state rules
import pytest

from datatable.core.errors import (
    FilterDepthError,
    InvalidOperatorError,
    NoViewsAvailableError,
    ViewNotAvailableError,
)
from datatable.crud.persistence import MemoryViewAdapter
from datatable.crud.saved_views import SavedViewStore
from datatable.engine.table_state import TableStateEngine
from datatable.schemas.filters import Filter, FilterGroup, FilterLogic, GroupNode, RuleNode
from datatable.schemas.grouping import GroupConfig
from datatable.schemas.sorting import SortKey
from datatable.schemas.table_state import SelectionPolicy
from datatable.schemas.view import ViewSnapshot, ViewType


def _ids(rows):
    return [r["id"] for r in rows]


@pytest.fixture()
def table(columns):
    return TableStateEngine(columns, page_size=2)


def test_initial_state(table):
    state = table.state()
    assert state.active_view.type == ViewType.table
    assert [v.type for v in state.available_views] == [
        ViewType.table,
        ViewType.board,
        ViewType.gallery,
        ViewType.list,
        ViewType.feed,
    ]
    assert state.pagination.page_index == 0 and state.pagination.page_size == 2
    assert state.global_filter == ""
    assert state.advanced_filter.children == []


def test_default_view_falls_back_to_first_enabled(columns):
    engine = TableStateEngine(columns, enabled_views=["board", "list"], default_view="table")
    assert engine.active_view.type == ViewType.board
    assert engine.set_active_view("list").type == ViewType.list
    with pytest.raises(ViewNotAvailableError):
        engine.set_active_view(ViewType.table)


def test_no_enabled_views_is_fatal(columns):
    with pytest.raises(NoViewsAvailableError):
        TableStateEngine(columns, enabled_views=[])


def test_unknown_view_types_are_skipped(columns):
    engine = TableStateEngine(columns, enabled_views=["kanban", "table"])
    assert [v.type for v in engine.available_views] == [ViewType.table]
    with pytest.raises(NoViewsAvailableError):
        TableStateEngine(columns, enabled_views=["kanban"])
    engine = TableStateEngine(columns, enabled_views=["list", "board"], default_view="kanban")
    assert engine.active_view.type == ViewType.board


def test_pipeline_search_filter_sort_page(table, rows):
    table.set_global_filter("e")  # every row has an "e" somewhere
    table.set_filter_groups(
        [FilterGroup(filters=[Filter(column_id="age", operator="greaterThanOrEqual", value="27")])]
    )
    table.set_sort([SortKey(column_id="age", descending=True)])

    assert _ids(table.sorted_rows(rows)) == ["r4", "r1", "r2", "r5"]
    assert _ids(table.derive_rows(rows)) == ["r4", "r1"]
    table.set_pagination(page_index=1)
    assert _ids(table.derive_rows(rows)) == ["r2", "r5"]
    assert table.page_count(rows) == 2


def test_advanced_tree_is_anded_with_flat_groups(table, rows):
    table.set_advanced_filter(
        GroupNode(
            logic=FilterLogic.or_,
            children=[
                RuleNode(field="status", operator="equals", value="open"),
                RuleNode(field="status", operator="isEmpty"),
            ],
        )
    )
    table.paginate = False
    assert _ids(table.derive_rows(rows)) == ["r1", "r3", "r4"]

    table.set_advanced_filter(GroupNode(logic=FilterLogic.or_))
    assert table.derive_rows(rows) == []


def test_advanced_filter_is_validated(table):
    with pytest.raises(InvalidOperatorError):
        table.set_advanced_filter(
            {"children": [{"type": "rule", "field": "age", "operator": "contains", "value": "1"}]}
        )
    too_deep = GroupNode()
    for _ in range(4):
        too_deep = GroupNode(children=[too_deep])
    with pytest.raises(FilterDepthError):
        table.set_advanced_filter(too_deep)


def test_filter_groups_are_validated(table):
    with pytest.raises(InvalidOperatorError):
        table.set_filter_groups(
            [{"filters": [{"column_id": "joined", "operator": "startsWith", "value": "2"}]}]
        )


def test_derive_rows_is_idempotent(table, rows):
    table.paginate = False
    table.set_global_filter("o")
    table.set_filter_groups(
        [FilterGroup(filters=[Filter(column_id="status", operator="isAnyOf", value=["open", "closed"])])]
    )
    once = table.derive_rows(rows)
    assert table.derive_rows(once) == once


def test_sort_is_stable_and_empty_values_last(table, rows):
    table.paginate = False
    table.set_sort([{"column_id": "age"}])
    # r2 ("27") and r5 (27) tie and keep their input order; r3 (None) last
    assert _ids(table.derive_rows(rows)) == ["r2", "r5", "r1", "r4", "r3"]
    table.set_sort([{"column_id": "age", "descending": True}])
    assert _ids(table.derive_rows(rows)) == ["r4", "r1", "r2", "r5", "r3"]


def test_sort_strings_case_insensitive_and_multi_key(table, rows):
    table.paginate = False
    table.set_sort([SortKey(column_id="name")])
    assert _ids(table.derive_rows(rows)) == ["r1", "r2", "r3", "r4", "r5"]
    table.set_sort([SortKey(column_id="status"), SortKey(column_id="name", descending=True)])
    assert _ids(table.derive_rows(rows)) == ["r5", "r2", "r3", "r1", "r4"]


def test_unparsable_dates_sort_last(table, rows):
    table.paginate = False
    table.set_sort([SortKey(column_id="joined")])
    assert _ids(table.derive_rows(rows)) == ["r2", "r1", "r4", "r3", "r5"]


def test_non_sortable_and_unknown_sort_keys_are_ignored(table, rows):
    table.paginate = False
    table.set_sort([SortKey(column_id="notes"), SortKey(column_id="ghost")])
    assert _ids(table.derive_rows(rows)) == _ids(rows)


def test_page_index_resets_on_query_changes(table):
    for change in (
        lambda: table.set_global_filter("x"),
        lambda: table.set_sort([SortKey(column_id="age")]),
        lambda: table.set_filter_groups([FilterGroup()]),
        lambda: table.set_advanced_filter(GroupNode()),
        lambda: table.clear_filters(),
    ):
        table.set_pagination(page_index=3)
        change()
        assert table.pagination.page_index == 0


def test_page_index_survives_grouping_view_and_column_changes(table):
    table.set_pagination(page_index=2)
    table.set_group_config(GroupConfig(column_id="status"))
    table.set_active_view("board")
    table.set_column_visibility({"notes": False})
    table.toggle_column_visibility("age")
    assert table.pagination.page_index == 2


def test_page_size_change_resets_index(table):
    table.set_pagination(page_index=2)
    table.set_pagination(page_size=2)
    assert table.pagination.page_index == 2
    table.set_pagination(page_size=5)
    assert table.pagination.page_index == 0


def test_derive_groups_uses_unpaginated_rows(table, rows):
    table.set_group_config({"column_id": "status", "sort_order": "count-desc"})
    groups = table.derive_groups(rows)
    assert [(g.value, g.count) for g in groups][0] == ("open", 2)
    assert sum(g.count for g in groups) == len(rows)

    table.set_group_config(None)
    assert table.derive_groups(rows) == []


def test_filter_actions(table, rows):
    table.paginate = False
    table.add_filter(Filter(id="f1", column_id="status", operator="equals", value="open"))
    assert _ids(table.derive_rows(rows)) == ["r1", "r3"]

    table.add_filter_group(FilterLogic.or_)
    assert table.derive_rows(rows) == []  # empty OR group
    table.remove_filter_group(1)

    table.remove_filter("f1")
    assert len(table.derive_rows(rows)) == len(rows)

    table.set_global_filter("eve")
    table.clear_filters()
    assert table.global_filter == ""
    assert [g.filters for g in table.filter_groups] == [[]]


def test_column_actions(table, columns):
    table.update_column_visibility("notes", False)
    table.toggle_column_visibility("age")
    visible = [c.id for c in table.visible_columns()]
    assert "notes" not in visible and "age" not in visible

    table.reorder_columns(["team", "name", "ghost"])
    assert table.column_order[:2] == ["team", "name"]
    assert sorted(table.column_order) == sorted(c.id for c in columns)

    table.set_column_pinned("name", "left")
    assert table.state().column_pinning == {"name": "left"}
    table.set_column_pinned("name", None)
    assert table.column_pinning == {}


def test_move_column(table, columns):
    ids = [c.id for c in columns]
    table.move_column(ids[-1], 0)
    assert table.column_order == [ids[-1], *ids[:-1]]
    table.move_column(ids[-1], 99)
    assert table.column_order == ids
    table.move_column(ids[0], -3)
    assert table.column_order == ids
    table.move_column("ghost", 0)
    assert table.column_order == ids


def test_reset_state(table):
    table.set_global_filter("x")
    table.set_active_view("feed")
    table.reset_state()
    state = table.state()
    assert state.global_filter == ""
    assert state.active_view.type == ViewType.table


def test_selection_kept_by_default_across_filters(table, rows):
    table.paginate = False
    ordered = table.derive_rows(rows)
    table.toggle_row(ordered[1], ordered)
    table.extend_selection(ordered[3], ordered)
    assert table.selected_count() == 3

    table.set_global_filter("alice")
    visible = table.derive_rows(rows)
    assert table.selected_count() == 3
    assert table.selected_rows(visible) == []
    assert not table.is_all_selected(visible)


def test_selection_cleared_when_policy_is_clear(columns, rows):
    engine = TableStateEngine(columns, paginate=False, selection_policy=SelectionPolicy.clear)
    engine.select_all(rows)
    assert engine.is_all_selected(rows)
    engine.set_filter_groups([FilterGroup()])
    assert engine.selected_count() == 0


def test_clear_policy_keeps_selection_across_sort(columns, rows):
    engine = TableStateEngine(columns, page_size=2, selection_policy=SelectionPolicy.clear)
    engine.select_all(rows)
    engine.set_pagination(page_index=1)
    engine.set_sort([SortKey(column_id="name")])
    assert engine.selected_count() == len(rows)
    assert engine.pagination.page_index == 0


def test_selection_helpers(table, rows):
    table.toggle_row(rows[0])
    assert table.is_indeterminate(rows)
    table.select_all(rows)
    assert _ids(table.selected_rows(rows)) == _ids(rows)
    table.select_none()
    assert table.selected_count() == 0


def test_custom_row_key(columns):
    engine = TableStateEngine(columns, row_key=lambda r: r["name"].lower())
    engine.toggle_row({"name": "Alice"})
    assert engine.state().selected_keys == ["alice"]


# ----------------------------
# Saved-view glue
# ----------------------------
@pytest.fixture()
def store():
    return SavedViewStore(MemoryViewAdapter())


def test_save_apply_and_unsaved_changes(table, store, rows):
    table.set_sort([SortKey(column_id="name", descending=True)])
    saved = table.save_current_view(store, "By name")
    assert table.active_saved_view_id == saved.id
    assert not table.has_unsaved_changes(store)
    assert table.matching_saved_view(store).id == saved.id

    table.set_sort([])
    assert table.has_unsaved_changes(store)
    assert table.matching_saved_view(store) is None

    assert table.apply_saved_view(store, saved.id)
    assert table.sorting == [SortKey(column_id="name", descending=True)]
    assert not table.has_unsaved_changes(store)


def test_apply_unknown_saved_view_is_noop(table, store):
    assert table.apply_saved_view(store, "missing") is False
    assert table.active_saved_view_id is None


def test_rebuilt_filters_are_not_unsaved_changes(table, store):
    status_open = {"column_id": "status", "operator": "equals", "value": "open"}
    table.set_filter_groups([{"filters": [status_open]}])
    saved = table.save_current_view(store, "Open")
    # Same content, fresh filter ids
    table.set_filter_groups([{"filters": [status_open]}])
    assert not table.has_unsaved_changes(store)
    assert table.matching_saved_view(store).id == saved.id


def test_delete_active_saved_view_clears_reference(table, store):
    saved = table.save_current_view(store, "Mine")
    assert table.delete_saved_view(store, saved.id)
    assert table.active_saved_view_id is None
    assert not table.has_unsaved_changes(store)


def test_apply_default_view(table, store):
    table.set_active_view("board")
    default = table.save_current_view(store, "Board", set_as_default=True)
    table.reset_state()
    assert table.apply_default_view(store).id == default.id
    assert table.active_view.type == ViewType.board


def test_snapshot_with_disabled_view_type_falls_back(columns):
    engine = TableStateEngine(columns, enabled_views=["list", "table"], default_view="list")
    assert engine.active_view.type == ViewType.list
    engine.apply_snapshot(ViewSnapshot(view_type=ViewType.calendar))
    assert engine.active_view.type == ViewType.table

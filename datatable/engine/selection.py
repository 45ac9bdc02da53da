# File: /datatable/engine/selection.py | Version: 1.0 | Title: Row Selection Manager (toggle + shift-range)
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Set


class RowSelection:
    """
    Selected row keys plus the anchor used for range (shift) selection.

    Keys are stable row identities, never list positions. The anchor is
    transient UI state and is not persisted.
    """

    def __init__(self, selected: Iterable[str] = ()):
        self._selected: Set[str] = set(selected)
        self.anchor_key: Optional[str] = None
        self.last_touched_index: Optional[int] = None

    def __contains__(self, row_key: str) -> bool:
        return row_key in self._selected

    @property
    def keys(self) -> Set[str]:
        return set(self._selected)

    def is_selected(self, row_key: str) -> bool:
        return row_key in self._selected

    def _touch(self, row_key: str, ordered_keys: Optional[Sequence[str]]) -> None:
        self.anchor_key = row_key
        self.last_touched_index = None
        if ordered_keys is not None:
            try:
                self.last_touched_index = list(ordered_keys).index(row_key)
            except ValueError:
                pass

    def toggle(self, row_key: str, ordered_keys: Optional[Sequence[str]] = None) -> bool:
        """Flip membership of `row_key`; it becomes the range anchor. Returns the new state."""
        if row_key in self._selected:
            self._selected.discard(row_key)
            selected = False
        else:
            self._selected.add(row_key)
            selected = True
        self._touch(row_key, ordered_keys)
        return selected

    def _anchor_position(self, keys: List[str]) -> Optional[int]:
        if self.anchor_key is not None and self.anchor_key in keys:
            return keys.index(self.anchor_key)
        if self.last_touched_index is not None and keys:
            return min(self.last_touched_index, len(keys) - 1)
        return None

    def extend_range(self, row_key: str, ordered_keys: Sequence[str]) -> Set[str]:
        """
        Add every row between the anchor and `row_key` (inclusive) in the
        current order. Without an anchor this is a plain toggle. The anchor
        does not move.
        """
        keys = list(ordered_keys)
        start = self._anchor_position(keys)
        if start is None or row_key not in keys:
            self.toggle(row_key, keys)
            return self.keys
        end = keys.index(row_key)
        lo, hi = min(start, end), max(start, end)
        self._selected.update(keys[lo : hi + 1])
        return self.keys

    def select_all(self, row_keys: Iterable[str]) -> None:
        self._selected = set(row_keys)

    def select_none(self) -> None:
        self._selected.clear()
        self.anchor_key = None
        self.last_touched_index = None

    def count(self) -> int:
        return len(self._selected)

    def selected_count(self, row_keys: Iterable[str]) -> int:
        return sum(1 for k in row_keys if k in self._selected)

    def is_all_selected(self, row_keys: Iterable[str]) -> bool:
        keys = list(row_keys)
        if not keys:
            return False
        return all(k in self._selected for k in keys)

    def is_indeterminate(self, row_keys: Iterable[str]) -> bool:
        keys = list(row_keys)
        n = self.selected_count(keys)
        return 0 < n < len(keys)

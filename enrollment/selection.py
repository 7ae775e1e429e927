"""Tracks which visible students are marked for bulk actions."""

from __future__ import annotations

from typing import Iterable


class SelectionTracker:
    def __init__(self) -> None:
        self._selected: set[str] = set()

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    def select_all(self, visible_ids: Iterable[str]) -> None:
        self._selected = set(visible_ids)

    def deselect_all(self) -> None:
        self._selected.clear()

    def toggle(self, student_id: str, included: bool) -> None:
        if included:
            self._selected.add(student_id)
        else:
            self._selected.discard(student_id)

    def purge(self, removed_ids: Iterable[str]) -> None:
        self._selected.difference_update(removed_ids)

    def all_selected(self, visible_ids: Iterable[str]) -> bool:
        visible = set(visible_ids)
        return bool(visible) and visible <= self._selected

    def __contains__(self, student_id: object) -> bool:
        return student_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

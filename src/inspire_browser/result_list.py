"""Scrollable, selectable list of search results."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from inspire_browser.models import ResultEntry


class ResultList:
    """Ordered entries with an optional selection and a scroll offset.

    Invariants: ``selected`` is ``None`` iff there are no entries, otherwise a
    valid index; ``0 <= scroll_offset <= max(0, len(entries) - 1)``.

    Selection and scrolling are independent: ``move_selection`` never touches
    the offset, callers run ``scroll_into_view`` after a change.
    """

    __slots__ = ("_entries", "_selected", "_scroll_offset")

    def __init__(self, entries: Iterable[ResultEntry] = ()) -> None:
        self._entries: tuple[ResultEntry, ...] = ()
        self._selected: int | None = None
        self._scroll_offset = 0
        self.set_entries(entries)

    @property
    def entries(self) -> Sequence[ResultEntry]:
        return self._entries

    @property
    def selected(self) -> int | None:
        return self._selected

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    def __len__(self) -> int:
        return len(self._entries)

    def set_entries(self, new_entries: Iterable[ResultEntry]) -> None:
        self._entries = tuple(new_entries)
        self._selected = 0 if self._entries else None
        self._scroll_offset = 0

    def move_selection(self, delta: int) -> bool:
        """Move the selection by ``delta``, clamped to the entries.

        Returns False when nothing moved (empty list or already at the edge).
        """
        if self._selected is None:
            return False
        target = max(0, min(self._selected + delta, len(self._entries) - 1))
        if target == self._selected:
            return False
        self._selected = target
        return True

    def select(self, index: int) -> bool:
        """Select ``index`` if it is valid; returns whether the selection changed."""
        if not 0 <= index < len(self._entries) or index == self._selected:
            return False
        self._selected = index
        return True

    def scroll_into_view(self, height: int) -> int:
        """Adjust the offset so the selection is inside a ``height``-row window.

        The window is kept full when the list is longer than the viewport, so
        shrinking a list or growing the viewport pulls the offset back.
        """
        height = max(1, height)
        offset = self._scroll_offset
        if self._selected is not None:
            if self._selected < offset:
                offset = self._selected
            elif self._selected >= offset + height:
                offset = self._selected - height + 1
        offset = max(0, min(offset, len(self._entries) - height))
        self._scroll_offset = offset
        return offset

    def visible_window(self, height: int) -> Sequence[ResultEntry]:
        """Entries in ``[scroll_offset, scroll_offset + height)``."""
        return self._entries[self._scroll_offset : self._scroll_offset + max(0, height)]

    def index_at_row(self, row: int) -> int | None:
        """Map a row inside the visible window to an entry index."""
        if row < 0:
            return None
        index = self._scroll_offset + row
        return index if index < len(self._entries) else None

    def current(self) -> ResultEntry | None:
        if self._selected is None:
            return None
        return self._entries[self._selected]


__all__ = ["ResultList"]

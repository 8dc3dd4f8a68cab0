"""Single-line query editor: text plus a cursor, no I/O."""

from __future__ import annotations


class QueryEditor:
    """Editable query text with a cursor offset in ``[0, len(text)]``.

    Every operation is total and updates text and cursor together. Operations
    return whether anything visible changed; ``text_changed`` is raised only
    when the text itself changed and stays set until ``consume_change()``.
    """

    __slots__ = ("_text", "_cursor", "_text_changed")

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._cursor = len(text)
        self._text_changed = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def text_changed(self) -> bool:
        return self._text_changed

    def consume_change(self) -> bool:
        """Return and clear the text-changed flag."""
        changed = self._text_changed
        self._text_changed = False
        return changed

    def insert(self, char: str) -> bool:
        if not char:
            return False
        self._text = self._text[: self._cursor] + char + self._text[self._cursor :]
        self._cursor += len(char)
        self._text_changed = True
        return True

    def delete_backward(self) -> bool:
        if self._cursor == 0:
            return False
        self._text = self._text[: self._cursor - 1] + self._text[self._cursor :]
        self._cursor -= 1
        self._text_changed = True
        return True

    def delete_forward(self) -> bool:
        if self._cursor >= len(self._text):
            return False
        self._text = self._text[: self._cursor] + self._text[self._cursor + 1 :]
        self._text_changed = True
        return True

    def move(self, delta: int) -> bool:
        """Move the cursor by ``delta`` characters, clamped to the text."""
        cursor = max(0, min(self._cursor + delta, len(self._text)))
        if cursor == self._cursor:
            return False
        self._cursor = cursor
        return True

    def move_home(self) -> bool:
        return self.move(-self._cursor)

    def move_end(self) -> bool:
        return self.move(len(self._text) - self._cursor)

    def set_text(self, replace: str) -> bool:
        """Replace the whole text and put the cursor at its end."""
        changed = replace != self._text
        moved = self._cursor != len(replace)
        self._text = replace
        self._cursor = len(replace)
        if changed:
            self._text_changed = True
        return changed or moved

    def __repr__(self) -> str:
        return f"QueryEditor(text={self._text!r}, cursor={self._cursor})"


__all__ = ["QueryEditor"]

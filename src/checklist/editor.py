"""Single-line text editing state with cursor and selection."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class CursorMove(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    START = "start"
    END = "end"


@dataclass(frozen=True, slots=True)
class TextEditState:
    """Immutable buffer + cursor + optional selection anchor.

    Every operation returns a new state. Cursor and anchor are clamped on
    construction so they always index into the current buffer.
    """

    buffer: str = ""
    cursor: int = 0
    anchor: int | None = None

    def __post_init__(self) -> None:
        size = len(self.buffer)
        object.__setattr__(self, "cursor", min(max(self.cursor, 0), size))
        if self.anchor is not None:
            object.__setattr__(self, "anchor", min(max(self.anchor, 0), size))

    @classmethod
    def from_text(cls, text: str) -> TextEditState:
        return cls(buffer=text, cursor=len(text))

    @property
    def selection(self) -> tuple[int, int] | None:
        """Normalized ``(start, end)`` of the selected range, or None."""
        if self.anchor is None or self.anchor == self.cursor:
            return None
        return min(self.anchor, self.cursor), max(self.anchor, self.cursor)

    @property
    def selected_text(self) -> str:
        span = self.selection
        if span is None:
            return ""
        return self.buffer[span[0] : span[1]]

    def _replace_range(self, start: int, end: int, text: str) -> TextEditState:
        buffer = self.buffer[:start] + text + self.buffer[end:]
        return TextEditState(buffer=buffer, cursor=start + len(text))

    def insert(self, text: str) -> TextEditState:
        span = self.selection
        if span is not None:
            return self._replace_range(span[0], span[1], text)
        return self._replace_range(self.cursor, self.cursor, text)

    def delete_backward(self) -> TextEditState:
        span = self.selection
        if span is not None:
            return self._replace_range(span[0], span[1], "")
        if self.cursor == 0:
            return replace(self, anchor=None)
        return self._replace_range(self.cursor - 1, self.cursor, "")

    def delete_forward(self) -> TextEditState:
        span = self.selection
        if span is not None:
            return self._replace_range(span[0], span[1], "")
        if self.cursor >= len(self.buffer):
            return replace(self, anchor=None)
        return self._replace_range(self.cursor, self.cursor + 1, "")

    def move_cursor(self, direction: CursorMove, extend_selection: bool = False) -> TextEditState:
        if direction is CursorMove.LEFT:
            target = self.cursor - 1
        elif direction is CursorMove.RIGHT:
            target = self.cursor + 1
        elif direction is CursorMove.START:
            target = 0
        else:
            target = len(self.buffer)

        if not extend_selection:
            return TextEditState(buffer=self.buffer, cursor=target)
        anchor = self.cursor if self.anchor is None else self.anchor
        return TextEditState(buffer=self.buffer, cursor=target, anchor=anchor)

    def select_all(self) -> TextEditState:
        return TextEditState(buffer=self.buffer, cursor=len(self.buffer), anchor=0)

    def clear(self) -> TextEditState:
        return TextEditState()

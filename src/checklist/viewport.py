"""Scroll offset and selection bookkeeping over a projection."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Viewport:
    """Window of ``capacity`` rows over a projection of ``length`` rows.

    Invariants, re-established on construction:

    * ``selected`` is None iff ``length == 0``; otherwise ``0 <= selected < length``.
    * ``offset <= selected <= offset + capacity - 1``.

    Out-of-range input is clamped, never rejected. The offset is also capped
    at ``length - capacity``, so growing the capacity can pull the window
    up even when the selection was already visible; rows below the last task
    are never left blank.
    """

    length: int = 0
    capacity: int = 1
    offset: int = 0
    selected: int | None = None

    def __post_init__(self) -> None:
        length = max(self.length, 0)
        capacity = max(self.capacity, 1)
        object.__setattr__(self, "length", length)
        object.__setattr__(self, "capacity", capacity)
        if length == 0:
            object.__setattr__(self, "offset", 0)
            object.__setattr__(self, "selected", None)
            return

        selected = 0 if self.selected is None else min(max(self.selected, 0), length - 1)
        offset = min(max(self.offset, 0), max(0, length - capacity))
        if selected < offset:
            offset = selected
        elif selected > offset + capacity - 1:
            offset = selected - capacity + 1
        object.__setattr__(self, "offset", offset)
        object.__setattr__(self, "selected", selected)

    def _with(self, selected: int | None) -> Viewport:
        return Viewport(
            length=self.length,
            capacity=self.capacity,
            offset=self.offset,
            selected=selected,
        )

    def move(self, delta: int) -> Viewport:
        if self.selected is None:
            return self
        return self._with(self.selected + delta)

    def page(self, direction: int) -> Viewport:
        return self.move(direction * self.capacity)

    def first(self) -> Viewport:
        return self._with(0)

    def last(self) -> Viewport:
        return self._with(self.length - 1)

    def select(self, index: int) -> Viewport:
        return self._with(index)

    def resize(self, *, length: int | None = None, capacity: int | None = None) -> Viewport:
        return Viewport(
            length=self.length if length is None else length,
            capacity=self.capacity if capacity is None else capacity,
            offset=self.offset,
            selected=self.selected,
        )

    @property
    def visible(self) -> range:
        return range(self.offset, min(self.offset + self.capacity, self.length))

    @property
    def indicator(self) -> tuple[int, int, int]:
        if self.length == 0:
            return 0, 0, 0
        return self.offset + 1, min(self.offset + self.capacity, self.length), self.length

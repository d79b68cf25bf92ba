"""Layout selection and pane geometry for the terminal view."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LayoutMode(str, Enum):
    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"
    AUTO_HORIZONTAL = "AutoHorizontal"
    AUTO_VERTICAL = "AutoVertical"

    @property
    def is_horizontal(self) -> bool:
        return self in (LayoutMode.HORIZONTAL, LayoutMode.AUTO_HORIZONTAL)


# Width-to-height ratio at or above which the list sits beside the detail pane.
ASPECT_RATIO = 2.5
MIN_WIDTH = 20
MIN_HEIGHT = 8

DEFAULT_LIST_SHARE = 40
MIN_LIST_SHARE = 20
MAX_LIST_SHARE = 90
LIST_SHARE_STEP = 5
MIN_LIST_WIDTH = 12
MIN_LIST_HEIGHT = 3
KEYS_PANE_WIDTH = 26
KEYS_PANE_HEIGHT = 8
STATUS_BAR_HEIGHT = 1


@dataclass(frozen=True, slots=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def inner(self) -> Rect:
        """Area inside a one-cell border."""
        return Rect(
            self.x + 1,
            self.y + 1,
            max(self.width - 2, 0),
            max(self.height - 2, 0),
        )

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True, slots=True)
class PaneRects:
    list: Rect
    detail: Rect
    keys: Rect
    status: Rect

    @property
    def list_capacity(self) -> int:
        return self.list.inner.height

    @property
    def usable(self) -> bool:
        """True when the list pane has room for at least one row."""
        inner = self.list.inner
        return inner.width >= 1 and inner.height >= 1


def next_pinned(pinned: LayoutMode | None) -> LayoutMode | None:
    """Cycle auto -> Horizontal -> Vertical -> auto."""
    if pinned is None:
        return LayoutMode.HORIZONTAL
    if pinned is LayoutMode.HORIZONTAL:
        return LayoutMode.VERTICAL
    return None


def is_too_small(
    width: int,
    height: int,
    *,
    min_width: int = MIN_WIDTH,
    min_height: int = MIN_HEIGHT,
) -> bool:
    return width < min_width or height < min_height


def choose_layout(
    width: int,
    height: int,
    pinned: LayoutMode | None = None,
    *,
    ratio: float = ASPECT_RATIO,
    min_width: int = MIN_WIDTH,
    min_height: int = MIN_HEIGHT,
) -> LayoutMode | None:
    """Pick the pane arrangement for a ``width`` x ``height`` terminal.

    Returns None when the terminal is below the minimum size. A pinned
    Horizontal/Vertical mode wins over the aspect-ratio rule.
    """
    if is_too_small(width, height, min_width=min_width, min_height=min_height):
        return None
    if pinned is not None:
        return LayoutMode.HORIZONTAL if pinned.is_horizontal else LayoutMode.VERTICAL
    if width >= ratio * height:
        return LayoutMode.AUTO_HORIZONTAL
    return LayoutMode.AUTO_VERTICAL


def clamp_list_share(share: int) -> int:
    return min(max(share, MIN_LIST_SHARE), MAX_LIST_SHARE)


def pane_rects(mode: LayoutMode, width: int, height: int, list_share: int = DEFAULT_LIST_SHARE) -> PaneRects:
    share = clamp_list_share(list_share)
    main_height = max(height - STATUS_BAR_HEIGHT, 0)
    status = Rect(0, main_height, width, min(STATUS_BAR_HEIGHT, height))

    if mode.is_horizontal:
        list_width = min(max(width * share // 100, MIN_LIST_WIDTH), width)
        rest = width - list_width
        keys_width = min(KEYS_PANE_WIDTH, rest // 2)
        detail_width = rest - keys_width
        return PaneRects(
            list=Rect(0, 0, list_width, main_height),
            detail=Rect(list_width, 0, detail_width, main_height),
            keys=Rect(list_width + detail_width, 0, keys_width, main_height),
            status=status,
        )

    list_height = min(max(main_height * share // 100, MIN_LIST_HEIGHT), main_height)
    rest = main_height - list_height
    keys_height = min(KEYS_PANE_HEIGHT, rest // 2)
    detail_height = rest - keys_height
    return PaneRects(
        list=Rect(0, 0, width, list_height),
        detail=Rect(0, list_height, width, detail_height),
        keys=Rect(0, list_height + detail_height, width, keys_height),
        status=status,
    )

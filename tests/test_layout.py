from __future__ import annotations

import pytest

from checklist.layout import (
    KEYS_PANE_WIDTH,
    MAX_LIST_SHARE,
    MIN_LIST_HEIGHT,
    MIN_LIST_SHARE,
    MIN_LIST_WIDTH,
    LayoutMode,
    choose_layout,
    clamp_list_share,
    next_pinned,
    pane_rects,
)


@pytest.mark.parametrize(
    ("width", "height", "expected"),
    [
        (120, 40, LayoutMode.AUTO_HORIZONTAL),
        (100, 40, LayoutMode.AUTO_HORIZONTAL),
        (99, 40, LayoutMode.AUTO_VERTICAL),
        (30, 40, LayoutMode.AUTO_VERTICAL),
        (80, 24, LayoutMode.AUTO_HORIZONTAL),
    ],
)
def test_auto_layout_follows_aspect_ratio(width: int, height: int, expected: LayoutMode) -> None:
    assert choose_layout(width, height) is expected


def test_too_small_terminal_has_no_layout() -> None:
    assert choose_layout(19, 40) is None
    assert choose_layout(120, 7) is None
    assert choose_layout(19, 40, LayoutMode.HORIZONTAL) is None
    assert choose_layout(200, 5, min_height=4) is LayoutMode.AUTO_HORIZONTAL


def test_pinned_layout_overrides_shape() -> None:
    assert choose_layout(30, 40, LayoutMode.HORIZONTAL) is LayoutMode.HORIZONTAL
    assert choose_layout(200, 20, LayoutMode.VERTICAL) is LayoutMode.VERTICAL


def test_choose_layout_is_pure() -> None:
    results = {choose_layout(90, 30, None) for _ in range(10)}
    assert results == {LayoutMode.AUTO_HORIZONTAL}


def test_layout_cycle_returns_to_auto() -> None:
    assert next_pinned(None) is LayoutMode.HORIZONTAL
    assert next_pinned(LayoutMode.HORIZONTAL) is LayoutMode.VERTICAL
    assert next_pinned(LayoutMode.VERTICAL) is None


def test_horizontal_panes_tile_the_screen() -> None:
    panes = pane_rects(LayoutMode.AUTO_HORIZONTAL, 120, 40, 40)
    assert panes.status.y == 39
    assert panes.status.height == 1
    assert panes.list.width == 48
    assert panes.keys.width == KEYS_PANE_WIDTH
    assert panes.list.width + panes.detail.width + panes.keys.width == 120
    assert panes.list.height == panes.detail.height == 39
    assert panes.list_capacity == 37


def test_vertical_panes_tile_the_screen() -> None:
    panes = pane_rects(LayoutMode.VERTICAL, 30, 41, 50)
    assert panes.list.width == panes.detail.width == panes.keys.width == 30
    assert panes.list.height == 20
    assert panes.list.height + panes.detail.height + panes.keys.height == 40
    assert panes.detail.y == panes.list.y + panes.list.height
    assert panes.list_capacity == 18


def test_list_share_is_clamped() -> None:
    assert clamp_list_share(5) == MIN_LIST_SHARE
    assert clamp_list_share(150) == MAX_LIST_SHARE
    assert clamp_list_share(55) == 55


def test_smallest_share_keeps_one_list_row() -> None:
    panes = pane_rects(LayoutMode.VERTICAL, 20, 8, 20)
    assert panes.list.height == MIN_LIST_HEIGHT
    assert panes.list_capacity == 1
    assert panes.usable
    assert panes.list.height + panes.detail.height + panes.keys.height == 7


def test_narrow_horizontal_list_keeps_minimum_width() -> None:
    panes = pane_rects(LayoutMode.HORIZONTAL, 40, 10, 20)
    assert panes.list.width == MIN_LIST_WIDTH
    assert panes.list.width + panes.detail.width + panes.keys.width == 40


def test_list_pane_without_rows_is_not_usable() -> None:
    panes = pane_rects(LayoutMode.VERTICAL, 20, 3, 20)
    assert panes.list_capacity == 0
    assert not panes.usable

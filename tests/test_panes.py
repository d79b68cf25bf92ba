from __future__ import annotations

from pathlib import Path

from checklist.coordinator import ViewCoordinator
from checklist.models import Task, Urgency
from checklist.panes import (
    POPUP_MAX_WIDTH,
    detail_body,
    keys_body,
    list_body,
    list_title,
    popup,
    popup_width,
    status_body,
    too_small_body,
)
from checklist.store import TaskStore
from checklist.theme import Theme


def _coordinator(tmp_path: Path, count: int, width: int, height: int, **task_fields) -> ViewCoordinator:
    store = TaskStore(tmp_path / "tasks.yaml")
    store.ensure()
    fields = {"urgency": Urgency.HIGH, "description": "line one\nline two"} | task_fields
    for idx in range(count):
        store.create(Task.new(f"task number {idx}", **fields))
    return ViewCoordinator(store, width=width, height=height)


def _list_lines(coordinator: ViewCoordinator) -> list[str]:
    plan = coordinator.plan()
    inner = plan.panes.list.inner
    return list_body(plan, Theme(), inner.width, inner.height).plain.split("\n")


def _detail_text(coordinator: ViewCoordinator) -> str:
    plan = coordinator.plan()
    inner = plan.panes.detail.inner
    return detail_body(plan, Theme(), inner.width, inner.height).plain


def test_too_small_placeholder(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 3, 19, 10)
    plan = coordinator.plan()
    assert plan.too_small
    assert "Terminal too small" in too_small_body(plan, Theme()).plain
    assert "19x10" in too_small_body(plan, Theme()).plain


def test_list_rows_fit_pane_width(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 3, 120, 30)
    plan = coordinator.plan()
    lines = _list_lines(coordinator)
    assert list_title(plan) == "Tasks 1-3 of 3"
    assert lines[0].startswith("> H   task number 0")
    assert all(len(line) == plan.panes.list.inner.width for line in lines)


def test_scrollbar_marks_last_column_when_rows_overflow(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 60, 120, 20)
    lines = _list_lines(coordinator)
    assert lines[0].endswith("█")
    assert not lines[-1].endswith("█")


def test_smallest_list_share_still_paints_selected_row(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 5, 30, 15, urgency=Urgency.LOW)
    for _ in range(4):
        coordinator.handle("ctrl+left")
    plan = coordinator.plan()
    assert coordinator.list_share == 20
    assert plan.panes.list.inner.height == 1
    assert plan.indicator == (1, 1, 5)
    assert _list_lines(coordinator)[0].startswith("> L")


def test_long_description_tail_is_reachable(tmp_path: Path) -> None:
    description = " ".join(["word"] * 149 + ["TAILEND"])
    coordinator = _coordinator(tmp_path, 1, 30, 20, description=description)
    assert "TAILEND" not in _detail_text(coordinator)
    for _ in range(200):
        coordinator.handle("ctrl+down")
    assert "TAILEND" in _detail_text(coordinator)

    limit = coordinator.detail_scroll
    coordinator.handle("ctrl+up")
    assert coordinator.detail_scroll == limit - 1


def test_detail_and_keys_content(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 3, 120, 30)
    plan = coordinator.plan()
    detail = _detail_text(coordinator)
    assert "Title: task number 0" in detail
    assert "line two" in detail
    assert "a add   n quick" in keys_body(plan, Theme(), plan.panes.keys.inner.width).plain


def test_status_bar_spans_full_width(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 1, 120, 30)
    plan = coordinator.plan()
    status = status_body(plan, Theme()).plain
    assert status.startswith("Filter: All | Sort: urgency desc")
    assert len(status) == 120


def test_no_popup_while_browsing(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 1, 100, 30)
    assert popup(coordinator.plan(), Theme()) is None


def test_popup_shows_buffer_and_error(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 1, 100, 30)
    coordinator.handle("n")
    coordinator.handle("enter")
    shown = popup(coordinator.plan(), Theme())
    assert shown is not None
    assert shown.title == "Quick add: Title"
    assert "Title cannot be empty" in shown.body.plain

    for char in "abc":
        coordinator.handle(char)
    shown = popup(coordinator.plan(), Theme())
    assert shown.body.plain.split("\n")[0].startswith("abc")


def test_selection_and_cursor_are_styled(tmp_path: Path) -> None:
    theme = Theme()
    coordinator = _coordinator(tmp_path, 0, 100, 30)
    coordinator.handle("n")
    for char in "hello":
        coordinator.handle(char)
    coordinator.handle("ctrl+a")
    body = popup(coordinator.plan(), theme).body
    styles = {span.style for span in body.spans if span.start <= 0 < span.end}
    assert theme.text_highlight in styles


def test_message_wins_over_prompt(tmp_path: Path) -> None:
    theme = Theme()
    coordinator = _coordinator(tmp_path, 1, 100, 30)
    coordinator.handle("n")
    coordinator.message = "Unable to write task store"
    shown = popup(coordinator.plan(), theme)
    assert shown.title == "Error"
    assert shown.style == theme.message
    assert "Unable to write task store" in shown.body.plain
    assert "Press any key to continue." in shown.body.plain


def test_help_overlay_scrolls(tmp_path: Path) -> None:
    coordinator = _coordinator(tmp_path, 1, 100, 40)
    coordinator.handle("h")
    shown = popup(coordinator.plan(), Theme())
    assert shown.title == "Help"
    assert shown.body.plain.startswith("Navigation")
    assert "toggle completed" in shown.body.plain
    coordinator.handle("down")
    assert not popup(coordinator.plan(), Theme()).body.plain.startswith("Navigation")


def test_popup_width_follows_terminal(tmp_path: Path) -> None:
    assert popup_width(_coordinator(tmp_path, 0, 200, 30).plan()) == POPUP_MAX_WIDTH
    assert popup_width(_coordinator(tmp_path, 0, 30, 30).plan()) == 28

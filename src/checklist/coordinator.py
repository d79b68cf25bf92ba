"""Owns the view state, routes keys through the modal machine, and builds render plans."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Callable, Iterable

from rich.console import Console
from rich.text import Text

from .editor import TextEditState
from .layout import (
    DEFAULT_LIST_SHARE,
    LIST_SHARE_STEP,
    MIN_HEIGHT,
    MIN_WIDTH,
    LayoutMode,
    PaneRects,
    choose_layout,
    clamp_list_share,
    next_pinned,
    pane_rects,
)
from .modal import (
    ADD_STEPS,
    UPDATE_FIELDS,
    AddWizard,
    Browsing,
    Command,
    CreateTask,
    DeleteConfirm,
    DeleteTask,
    Effect,
    HelpOverlay,
    KeyEvent,
    ModalState,
    QuickAdd,
    QuitConfirm,
    SetTagFilter,
    Step,
    TagFilterEntry,
    ToggleComplete,
    UpdatePicker,
    UpdateTask,
    UpdateWizard,
    handle_key,
)
from .models import Status, StatusFilter, Task, TaskError, TaskNotFoundError, Urgency
from .projection import SortOrder, ViewFilter, known_tags, project
from .store import TaskStore
from .viewport import Viewport

logger = logging.getLogger(__name__)

SavePreferences = Callable[[StatusFilter, bool], None]

_WRAP_CONSOLE = Console(highlight=False)

HELP_LINES = (
    "Navigation",
    "  j / down        next task",
    "  k / up          previous task",
    "  pgdn / pgup     page down / up",
    "  g / home        first task",
    "  G / end         last task",
    "  ctrl+down/up    scroll details",
    "  ctrl+left/right shrink / grow list",
    "",
    "Tasks",
    "  a               add task (wizard)",
    "  n               quick add (title only)",
    "  u               update field of selected task",
    "  d               delete selected task",
    "  c               toggle completed",
    "",
    "View",
    "  f               cycle filter: All, Completed, NotCompleted",
    "  s               toggle urgency sort direction",
    "  /               filter by tag",
    "  v               cycle layout: auto, horizontal, vertical",
    "",
    "Editing",
    "  left / right    move cursor (shift selects)",
    "  home / end      jump to start / end (shift selects)",
    "  ctrl+a          select all",
    "  enter           confirm step",
    "  ctrl+left       previous step",
    "  esc             cancel",
    "",
    "  h / ?           toggle this help",
    "  x / esc         quit",
)

BROWSING_HINTS = (
    "a add   n quick",
    "u update   d delete",
    "c complete",
    "f filter   s sort",
    "/ tag   v layout",
    "h help   x quit",
)
TEXT_HINTS = ("enter confirm", "ctrl+left back", "esc cancel", "shift+arrows select")
PICKER_HINTS = ("1-4 choose", "up/down move", "enter confirm", "ctrl+left back", "esc cancel")
TAG_HINTS = ("enter add / next", "down highlight tags", "d remove highlighted", "esc cancel")
CONFIRM_HINTS = ("enter save", "ctrl+left back", "esc cancel")
YES_NO_HINTS = ("y yes", "n / esc no")
HELP_HINTS = ("up/down scroll", "h / esc close")


@dataclass(frozen=True, slots=True)
class ListRow:
    index: int
    task_id: str
    title: str
    urgency: Urgency
    status: Status
    selected: bool


@dataclass(frozen=True, slots=True)
class PromptPlan:
    """Popup contents for whichever modal state is active.

    ``kind`` is one of "text", "picker", "tags", "menu" or "confirm" and
    decides which of the remaining fields the surface draws.
    """

    title: str
    kind: str
    buffer: str = ""
    cursor: int = 0
    selection: tuple[int, int] | None = None
    options: tuple[str, ...] = ()
    highlight: int = 0
    tags: tuple[str, ...] = ()
    tag_cursor: int | None = None
    lines: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class RenderPlan:
    width: int
    height: int
    layout: LayoutMode | None
    panes: PaneRects | None
    rows: tuple[ListRow, ...]
    indicator: tuple[int, int, int]
    detail_lines: tuple[str, ...]
    detail_scroll: int
    key_lines: tuple[str, ...]
    status_line: str
    prompt: PromptPlan | None = None
    help_lines: tuple[str, ...] | None = None
    help_scroll: int = 0
    message: str | None = None

    @property
    def too_small(self) -> bool:
        return self.layout is None


def wrap_lines(lines: Iterable[str], width: int) -> list[str]:
    """Word-wrap each line to ``width`` cells; blank lines are kept."""
    wrapped: list[str] = []
    for line in lines:
        if not line.strip():
            wrapped.append("")
            continue
        parts = Text(line).wrap(_WRAP_CONSOLE, max(width, 1), overflow="fold")
        wrapped.extend(part.plain.rstrip() for part in parts)
    return wrapped


def detail_lines(task: Task | None) -> tuple[str, ...]:
    if task is None:
        return ("No task selected.",)
    lines = [
        f"Title: {task.title}",
        f"Urgency: {task.urgency.value}",
        f"Status: {task.status.value}",
        f"Tags: {', '.join(task.sorted_tags) if task.tags else '-'}",
        f"Created: {task.created or '-'}",
        f"Updated: {task.updated or '-'}",
    ]
    if task.completed_on:
        lines.append(f"Completed: {task.completed_on}")
    lines.extend(["", "Description:"])
    lines.extend(task.description.splitlines() or ["-"])
    return tuple(lines)


def key_hints(state: ModalState) -> tuple[str, ...]:
    if isinstance(state, (AddWizard, UpdateWizard)):
        step = state.session.step
        if step in (Step.PICKING_URGENCY, Step.PICKING_STATUS):
            return PICKER_HINTS
        if step is Step.EDITING_TAGS:
            return TAG_HINTS
        if step is Step.CONFIRM:
            return CONFIRM_HINTS
        return TEXT_HINTS
    if isinstance(state, (QuickAdd, TagFilterEntry)):
        return ("enter confirm", "esc cancel")
    if isinstance(state, UpdatePicker):
        return ("1-5 choose field", "esc cancel")
    if isinstance(state, (DeleteConfirm, QuitConfirm)):
        return YES_NO_HINTS
    if isinstance(state, HelpOverlay):
        return HELP_HINTS
    return BROWSING_HINTS


def _task_summary(task: Task) -> tuple[str, ...]:
    return (
        f"Title: {task.title or '(empty)'}",
        f"Description: {task.description or '-'}",
        f"Urgency: {task.urgency.value}",
        f"Status: {task.status.value}",
        f"Tags: {', '.join(task.sorted_tags) if task.tags else '-'}",
    )


class ViewCoordinator:
    """Single owner of everything the terminal view shows.

    Persistence goes through ``store``; the task snapshot is refetched after
    every write so the projection is always built from what was persisted.
    """

    def __init__(
        self,
        store: TaskStore,
        *,
        view_filter: ViewFilter | None = None,
        sort_order: SortOrder | None = None,
        pinned: LayoutMode | None = None,
        min_width: int = MIN_WIDTH,
        min_height: int = MIN_HEIGHT,
        save_preferences: SavePreferences | None = None,
        width: int = 80,
        height: int = 24,
    ) -> None:
        self.store = store
        self.view_filter = view_filter or ViewFilter()
        self.sort_order = sort_order or SortOrder()
        self.pinned = pinned
        self.min_width = min_width
        self.min_height = min_height
        self.save_preferences = save_preferences

        self.state: ModalState = Browsing()
        self.tasks: tuple[Task, ...] = ()
        self.projection: tuple[Task, ...] = ()
        self.viewport = Viewport()
        self.width = width
        self.height = height
        self.layout: LayoutMode | None = None
        self.list_share = DEFAULT_LIST_SHARE
        self.detail_scroll = 0
        self.help_scroll = 0
        self.message: str | None = None
        self.prompt_error: str | None = None
        self.should_exit = False

        self._relayout()
        self.refresh()

    @property
    def selected_task(self) -> Task | None:
        if self.viewport.selected is None:
            return None
        return self.projection[self.viewport.selected]

    def refresh(self) -> None:
        focus = self.selected_task
        try:
            self._fetch()
        except TaskError as exc:
            self._fail(exc)
        self._reproject(focus_id=focus.task_id if focus else None)

    def _fetch(self) -> None:
        self.tasks = tuple(self.store.list())

    def _panes(self) -> PaneRects | None:
        if self.layout is None:
            return None
        return pane_rects(self.layout, self.width, self.height, self.list_share)

    def _capacity(self) -> int:
        panes = self._panes()
        return 1 if panes is None else max(panes.list_capacity, 1)

    def _detail_limit(self) -> int:
        lines = detail_lines(self.selected_task)
        panes = self._panes()
        if panes is None:
            return max(len(lines) - 1, 0)
        area = panes.detail.inner
        return max(len(wrap_lines(lines, area.width)) - area.height, 0)

    def _relayout(self) -> None:
        self.layout = choose_layout(
            self.width,
            self.height,
            self.pinned,
            min_width=self.min_width,
            min_height=self.min_height,
        )
        panes = self._panes()
        if panes is not None and not panes.usable:
            self.layout = None
        self.viewport = self.viewport.resize(capacity=self._capacity())
        self.detail_scroll = min(self.detail_scroll, self._detail_limit())

    def _reproject(self, focus_id: str | None = None, fallback_index: int | None = None) -> None:
        self.projection = project(self.tasks, self.view_filter, self.sort_order)
        index = self.viewport.selected if fallback_index is None else fallback_index
        if focus_id is not None:
            for idx, task in enumerate(self.projection):
                if task.task_id == focus_id:
                    index = idx
                    break
        self.viewport = Viewport(
            length=len(self.projection),
            capacity=self._capacity(),
            offset=self.viewport.offset,
            selected=index,
        )

    def _fail(self, exc: TaskError) -> None:
        logger.error("view action failed: %s", exc)
        self.state = Browsing()
        self.prompt_error = None
        self.message = str(exc)

    def resize(self, width: int, height: int) -> None:
        self.width = max(width, 0)
        self.height = max(height, 0)
        self._relayout()

    def tick(self, width: int, height: int) -> bool:
        """Re-poll the terminal size; returns True when it changed."""
        if (width, height) == (self.width, self.height):
            return False
        self.resize(width, height)
        return True

    def handle(self, key: KeyEvent | str) -> None:
        if isinstance(key, str):
            key = KeyEvent.of(key)
        if self.message is not None:
            self.message = None
            return

        before = self.selected_task
        transition = handle_key(self.state, key, before)
        if isinstance(transition.state, HelpOverlay) and not isinstance(self.state, HelpOverlay):
            self.help_scroll = 0
        self.state = transition.state
        self.prompt_error = transition.error
        if transition.effect is not None:
            try:
                self._apply(transition.effect)
            except TaskError as exc:
                self._fail(exc)
                self.refresh()

        after = self.selected_task
        if (before and before.task_id) != (after and after.task_id):
            self.detail_scroll = 0

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, Command):
            self._run_command(effect)
        elif isinstance(effect, CreateTask):
            task_id = self.store.create(effect.task)
            logger.info("created task %s", task_id)
            self._fetch()
            self._reproject(focus_id=task_id)
        elif isinstance(effect, UpdateTask):
            self.store.update(effect.task.task_id, effect.task)
            self._fetch()
            self._reproject(focus_id=effect.task.task_id)
        elif isinstance(effect, DeleteTask):
            previous = max((self.viewport.selected or 0) - 1, 0)
            self.store.delete(effect.task_id)
            self._fetch()
            self._reproject(fallback_index=previous)
        elif isinstance(effect, ToggleComplete):
            task = self.store.get(effect.task_id)
            if task is None:
                raise TaskNotFoundError(f"Task not found: {effect.task_id}")
            status = Status.OPEN if task.is_completed else Status.COMPLETED
            self.store.update(task.task_id, task.with_status(status))
            self._fetch()
            self._reproject(focus_id=task.task_id)
        elif isinstance(effect, SetTagFilter):
            self._set_filter(replace(self.view_filter, tag=effect.tag))

    def _set_filter(self, view_filter: ViewFilter) -> None:
        focus = self.selected_task
        self.view_filter = view_filter
        self._reproject(focus_id=focus.task_id if focus else None)

    def _run_command(self, command: Command) -> None:
        if command is Command.SELECT_NEXT:
            self.viewport = self.viewport.move(1)
        elif command is Command.SELECT_PREVIOUS:
            self.viewport = self.viewport.move(-1)
        elif command is Command.PAGE_DOWN:
            self.viewport = self.viewport.page(1)
        elif command is Command.PAGE_UP:
            self.viewport = self.viewport.page(-1)
        elif command is Command.SELECT_FIRST:
            self.viewport = self.viewport.first()
        elif command is Command.SELECT_LAST:
            self.viewport = self.viewport.last()
        elif command is Command.DETAIL_DOWN:
            self.detail_scroll = min(self.detail_scroll + 1, self._detail_limit())
        elif command is Command.DETAIL_UP:
            self.detail_scroll = max(self.detail_scroll - 1, 0)
        elif command is Command.HELP_DOWN:
            self.help_scroll = min(self.help_scroll + 1, len(HELP_LINES) - 1)
        elif command is Command.HELP_UP:
            self.help_scroll = max(self.help_scroll - 1, 0)
        elif command is Command.SHRINK_LIST:
            self.list_share = clamp_list_share(self.list_share - LIST_SHARE_STEP)
            self._relayout()
        elif command is Command.GROW_LIST:
            self.list_share = clamp_list_share(self.list_share + LIST_SHARE_STEP)
            self._relayout()
        elif command is Command.CYCLE_FILTER:
            self._set_filter(replace(self.view_filter, status=self.view_filter.status.next()))
            self._persist_preferences()
        elif command is Command.TOGGLE_SORT:
            focus = self.selected_task
            self.sort_order = self.sort_order.flipped()
            self._reproject(focus_id=focus.task_id if focus else None)
            self._persist_preferences()
        elif command is Command.CYCLE_LAYOUT:
            self.pinned = next_pinned(self.pinned)
            self._relayout()
        elif command is Command.QUIT:
            self.should_exit = True

    def _persist_preferences(self) -> None:
        if self.save_preferences is None:
            return
        self.save_preferences(self.view_filter.status, self.sort_order.descending)

    def status_line(self) -> str:
        if self.pinned is not None:
            layout = f"{self.pinned.value} (pinned)"
        elif self.layout is not None:
            layout = f"auto ({'horizontal' if self.layout.is_horizontal else 'vertical'})"
        else:
            layout = "auto"
        return (
            f"Filter: {self.view_filter.status.value} | "
            f"Sort: {self.sort_order.label} | "
            f"Tag: {self.view_filter.tag or '-'} | "
            f"Layout: {layout}"
        )

    def prompt(self) -> PromptPlan | None:
        state = self.state
        error = self.prompt_error
        if isinstance(state, (AddWizard, UpdateWizard)):
            session = state.session
            if isinstance(state, AddWizard):
                position = ADD_STEPS.index(session.step) + 1
                title = f"Add task ({position}/{len(ADD_STEPS)}): {session.step.label}"
            else:
                title = f"Update task: {session.step.label}"
            if session.step is Step.CONFIRM:
                return PromptPlan(
                    title=title,
                    kind="confirm",
                    lines=_task_summary(session.task) + ("", "Press enter to save."),
                    error=error,
                )
            if session.step in (Step.PICKING_URGENCY, Step.PICKING_STATUS):
                return PromptPlan(
                    title=title,
                    kind="picker",
                    options=session.options,
                    highlight=session.highlight,
                    error=error,
                )
            editor = session.editor or TextEditState()
            return PromptPlan(
                title=title,
                kind="tags" if session.step is Step.EDITING_TAGS else "text",
                buffer=editor.buffer,
                cursor=editor.cursor,
                selection=editor.selection,
                tags=tuple(session.task.sorted_tags),
                tag_cursor=session.tag_cursor,
                error=error,
            )
        if isinstance(state, (QuickAdd, TagFilterEntry)):
            title = "Quick add: Title" if isinstance(state, QuickAdd) else "Filter by tag"
            lines: tuple[str, ...] = ()
            if isinstance(state, TagFilterEntry):
                lines = (f"Known tags: {', '.join(known_tags(self.tasks)) or '-'}",)
            return PromptPlan(
                title=title,
                kind="text",
                buffer=state.editor.buffer,
                cursor=state.editor.cursor,
                selection=state.editor.selection,
                lines=lines,
                error=error,
            )
        if isinstance(state, UpdatePicker):
            lines = tuple(f"{number}  {step.label}" for number, step in UPDATE_FIELDS.items())
            return PromptPlan(title="Update which field?", kind="menu", lines=lines)
        if isinstance(state, DeleteConfirm):
            task = self.selected_task
            name = task.title if task is not None and task.task_id == state.task_id else state.task_id
            return PromptPlan(
                title="Delete task",
                kind="confirm",
                lines=(f"Delete '{name}'?", "", "y / enter  delete", "n / esc    keep"),
            )
        if isinstance(state, QuitConfirm):
            return PromptPlan(
                title="Quit",
                kind="confirm",
                lines=("Quit checklist?", "", "y  quit", "n / esc  stay"),
            )
        return None

    def plan(self) -> RenderPlan:
        panes = self._panes()
        rows = tuple(
            ListRow(
                index=idx,
                task_id=self.projection[idx].task_id,
                title=self.projection[idx].title,
                urgency=self.projection[idx].urgency,
                status=self.projection[idx].status,
                selected=idx == self.viewport.selected,
            )
            for idx in self.viewport.visible
        )
        return RenderPlan(
            width=self.width,
            height=self.height,
            layout=self.layout,
            panes=panes,
            rows=rows,
            indicator=self.viewport.indicator,
            detail_lines=detail_lines(self.selected_task),
            detail_scroll=self.detail_scroll,
            key_lines=key_hints(self.state),
            status_line=self.status_line(),
            prompt=self.prompt(),
            help_lines=HELP_LINES if isinstance(self.state, HelpOverlay) else None,
            help_scroll=self.help_scroll,
            message=self.message,
        )

"""Modal input state machine for browsing and add/update/delete flows.

``handle_key`` is a pure function of (state, key, highlighted task). It
returns the next state together with at most one effect; the coordinator
executes effects (persistence, navigation) and never mutates states in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from .editor import CursorMove, TextEditState
from .models import Status, Task, Urgency


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """Abstract key press: ``key`` uses textual-style names ("up", "ctrl+left", "a")."""

    key: str
    char: str | None = None

    @classmethod
    def of(cls, key: str) -> KeyEvent:
        if len(key) == 1:
            return cls(key=key, char=key)
        if key == "space":
            return cls(key=key, char=" ")
        return cls(key=key)

    @property
    def printable(self) -> bool:
        return self.char is not None and len(self.char) > 0 and self.char.isprintable()


class Step(str, Enum):
    EDITING_TITLE = "EditingTitle"
    EDITING_DESCRIPTION = "EditingDescription"
    PICKING_URGENCY = "PickingUrgency"
    PICKING_STATUS = "PickingStatus"
    EDITING_TAGS = "EditingTags"
    CONFIRM = "Confirm"

    @property
    def label(self) -> str:
        return STEP_LABELS[self]


ADD_STEPS = (
    Step.EDITING_TITLE,
    Step.EDITING_DESCRIPTION,
    Step.PICKING_URGENCY,
    Step.PICKING_STATUS,
    Step.EDITING_TAGS,
    Step.CONFIRM,
)
STEP_LABELS = {
    Step.EDITING_TITLE: "Title",
    Step.EDITING_DESCRIPTION: "Description",
    Step.PICKING_URGENCY: "Urgency",
    Step.PICKING_STATUS: "Status",
    Step.EDITING_TAGS: "Tags",
    Step.CONFIRM: "Confirm",
}
UPDATE_FIELDS = {
    1: Step.EDITING_TITLE,
    2: Step.EDITING_DESCRIPTION,
    3: Step.PICKING_URGENCY,
    4: Step.PICKING_STATUS,
    5: Step.EDITING_TAGS,
}
URGENCY_OPTIONS = tuple(Urgency)
STATUS_OPTIONS = tuple(Status)
EMPTY_TITLE_ERROR = "Title cannot be empty"


@dataclass(frozen=True, slots=True)
class EditSession:
    step: Step
    task: Task
    editor: TextEditState | None = None
    highlight: int = 0
    tag_cursor: int | None = None

    @classmethod
    def at(cls, step: Step, task: Task) -> EditSession:
        """Open ``step`` with its input seeded from ``task``."""
        if step is Step.EDITING_TITLE:
            return cls(step=step, task=task, editor=TextEditState.from_text(task.title))
        if step is Step.EDITING_DESCRIPTION:
            return cls(step=step, task=task, editor=TextEditState.from_text(task.description))
        if step is Step.EDITING_TAGS:
            return cls(step=step, task=task, editor=TextEditState())
        if step is Step.PICKING_URGENCY:
            return cls(step=step, task=task, highlight=URGENCY_OPTIONS.index(task.urgency))
        if step is Step.PICKING_STATUS:
            return cls(step=step, task=task, highlight=STATUS_OPTIONS.index(task.status))
        return cls(step=step, task=task)

    @property
    def options(self) -> tuple[str, ...]:
        if self.step is Step.PICKING_URGENCY:
            return tuple(item.value for item in URGENCY_OPTIONS)
        if self.step is Step.PICKING_STATUS:
            return tuple(item.value for item in STATUS_OPTIONS)
        return ()


@dataclass(frozen=True, slots=True)
class Browsing:
    pass


@dataclass(frozen=True, slots=True)
class AddWizard:
    session: EditSession


@dataclass(frozen=True, slots=True)
class QuickAdd:
    editor: TextEditState = field(default_factory=TextEditState)


@dataclass(frozen=True, slots=True)
class UpdatePicker:
    task_id: str


@dataclass(frozen=True, slots=True)
class UpdateWizard:
    session: EditSession
    field_index: int


@dataclass(frozen=True, slots=True)
class DeleteConfirm:
    task_id: str


@dataclass(frozen=True, slots=True)
class QuitConfirm:
    pass


@dataclass(frozen=True, slots=True)
class HelpOverlay:
    pass


@dataclass(frozen=True, slots=True)
class TagFilterEntry:
    editor: TextEditState = field(default_factory=TextEditState)


ModalState = Union[
    Browsing,
    AddWizard,
    QuickAdd,
    UpdatePicker,
    UpdateWizard,
    DeleteConfirm,
    QuitConfirm,
    HelpOverlay,
    TagFilterEntry,
]


class Command(str, Enum):
    SELECT_NEXT = "select_next"
    SELECT_PREVIOUS = "select_previous"
    PAGE_DOWN = "page_down"
    PAGE_UP = "page_up"
    SELECT_FIRST = "select_first"
    SELECT_LAST = "select_last"
    DETAIL_DOWN = "detail_down"
    DETAIL_UP = "detail_up"
    HELP_DOWN = "help_down"
    HELP_UP = "help_up"
    SHRINK_LIST = "shrink_list"
    GROW_LIST = "grow_list"
    CYCLE_FILTER = "cycle_filter"
    TOGGLE_SORT = "toggle_sort"
    CYCLE_LAYOUT = "cycle_layout"
    QUIT = "quit"


@dataclass(frozen=True, slots=True)
class CreateTask:
    task: Task


@dataclass(frozen=True, slots=True)
class UpdateTask:
    task: Task


@dataclass(frozen=True, slots=True)
class DeleteTask:
    task_id: str


@dataclass(frozen=True, slots=True)
class ToggleComplete:
    task_id: str


@dataclass(frozen=True, slots=True)
class SetTagFilter:
    tag: str | None


Effect = Union[Command, CreateTask, UpdateTask, DeleteTask, ToggleComplete, SetTagFilter]


@dataclass(frozen=True, slots=True)
class Transition:
    state: ModalState
    effect: Effect | None = None
    error: str | None = None


BROWSING_NAMED_KEYS = {
    "down": Command.SELECT_NEXT,
    "up": Command.SELECT_PREVIOUS,
    "pagedown": Command.PAGE_DOWN,
    "pageup": Command.PAGE_UP,
    "home": Command.SELECT_FIRST,
    "end": Command.SELECT_LAST,
    "ctrl+down": Command.DETAIL_DOWN,
    "ctrl+up": Command.DETAIL_UP,
    "ctrl+left": Command.SHRINK_LIST,
    "ctrl+right": Command.GROW_LIST,
}
BROWSING_CHAR_KEYS = {
    "j": Command.SELECT_NEXT,
    "k": Command.SELECT_PREVIOUS,
    "g": Command.SELECT_FIRST,
    "G": Command.SELECT_LAST,
    "f": Command.CYCLE_FILTER,
    "s": Command.TOGGLE_SORT,
    "v": Command.CYCLE_LAYOUT,
}


def edit_text(editor: TextEditState, key: KeyEvent) -> TextEditState | None:
    """Apply an editing key to ``editor``; None when the key is not an editing key."""
    name = key.key
    if name == "backspace":
        return editor.delete_backward()
    if name == "delete":
        return editor.delete_forward()
    if name in ("left", "right", "home", "end", "shift+left", "shift+right", "shift+home", "shift+end"):
        extend = name.startswith("shift+")
        direction = {
            "left": CursorMove.LEFT,
            "right": CursorMove.RIGHT,
            "home": CursorMove.START,
            "end": CursorMove.END,
        }[name.removeprefix("shift+")]
        return editor.move_cursor(direction, extend_selection=extend)
    if name == "ctrl+a":
        return editor.select_all()
    if key.printable:
        return editor.insert(key.char or "")
    return None


def handle_key(state: ModalState, key: KeyEvent, selected: Task | None = None) -> Transition:
    if isinstance(state, Browsing):
        return _browsing(key, selected)
    if isinstance(state, (AddWizard, UpdateWizard)):
        return _wizard(state, key)
    if isinstance(state, QuickAdd):
        return _quick_add(state, key)
    if isinstance(state, UpdatePicker):
        return _update_picker(state, key, selected)
    if isinstance(state, DeleteConfirm):
        return _delete_confirm(state, key)
    if isinstance(state, QuitConfirm):
        return _quit_confirm(state, key)
    if isinstance(state, HelpOverlay):
        return _help_overlay(state, key)
    if isinstance(state, TagFilterEntry):
        return _tag_filter(state, key)
    raise TypeError(f"Unknown modal state: {state!r}")


def _browsing(key: KeyEvent, selected: Task | None) -> Transition:
    if key.key in BROWSING_NAMED_KEYS:
        return Transition(Browsing(), BROWSING_NAMED_KEYS[key.key])
    if key.key == "escape":
        return Transition(QuitConfirm())
    char = key.char if key.printable else None
    if char is None:
        return Transition(Browsing())
    if char in BROWSING_CHAR_KEYS:
        return Transition(Browsing(), BROWSING_CHAR_KEYS[char])
    if char == "a":
        return Transition(AddWizard(EditSession.at(Step.EDITING_TITLE, Task.blank())))
    if char == "n":
        return Transition(QuickAdd())
    if char in ("h", "?"):
        return Transition(HelpOverlay())
    if char == "x":
        return Transition(QuitConfirm())
    if char == "/":
        return Transition(TagFilterEntry(), SetTagFilter(None))
    if selected is None:
        return Transition(Browsing())
    if char == "u":
        return Transition(UpdatePicker(selected.task_id))
    if char == "d":
        return Transition(DeleteConfirm(selected.task_id))
    if char == "c":
        # Direct toggle bypasses the modal flow and persists immediately.
        return Transition(Browsing(), ToggleComplete(selected.task_id))
    return Transition(Browsing())


def _with_session(state: AddWizard | UpdateWizard, session: EditSession) -> AddWizard | UpdateWizard:
    return replace(state, session=session)


def _advance(state: AddWizard | UpdateWizard, task: Task) -> AddWizard | UpdateWizard:
    if isinstance(state, UpdateWizard):
        return _with_session(state, EditSession.at(Step.CONFIRM, task))
    index = ADD_STEPS.index(state.session.step)
    following = ADD_STEPS[min(index + 1, len(ADD_STEPS) - 1)]
    return _with_session(state, EditSession.at(following, task))


def _back(state: AddWizard | UpdateWizard, task: Task) -> ModalState:
    if isinstance(state, UpdateWizard):
        return UpdatePicker(task.task_id)
    index = ADD_STEPS.index(state.session.step)
    previous = ADD_STEPS[max(index - 1, 0)]
    return _with_session(state, EditSession.at(previous, task))


def _commit_text(session: EditSession) -> Task:
    if session.editor is None:
        return session.task
    if session.step is Step.EDITING_TITLE:
        return replace(session.task, title=session.editor.buffer.strip())
    if session.step is Step.EDITING_DESCRIPTION:
        return replace(session.task, description=session.editor.buffer)
    return session.task


def _wizard(state: AddWizard | UpdateWizard, key: KeyEvent) -> Transition:
    session = state.session
    if key.key == "escape":
        return Transition(Browsing())
    if key.key == "ctrl+left":
        return Transition(_back(state, _commit_text(session)))

    step = session.step
    if step in (Step.EDITING_TITLE, Step.EDITING_DESCRIPTION):
        return _wizard_text(state, key)
    if step in (Step.PICKING_URGENCY, Step.PICKING_STATUS):
        return _wizard_picker(state, key)
    if step is Step.EDITING_TAGS:
        return _wizard_tags(state, key)
    return _wizard_confirm(state, key)


def _wizard_text(state: AddWizard | UpdateWizard, key: KeyEvent) -> Transition:
    session = state.session
    editor = session.editor or TextEditState()
    if key.key == "enter":
        task = _commit_text(session)
        if session.step is Step.EDITING_TITLE and not task.title:
            return Transition(state, error=EMPTY_TITLE_ERROR)
        return Transition(_advance(state, task))
    edited = edit_text(editor, key)
    if edited is None:
        return Transition(state)
    return Transition(_with_session(state, replace(session, editor=edited)))


def _pick(session: EditSession, index: int) -> Task:
    if session.step is Step.PICKING_URGENCY:
        return replace(session.task, urgency=URGENCY_OPTIONS[index])
    return session.task.with_status(STATUS_OPTIONS[index])


def _wizard_picker(state: AddWizard | UpdateWizard, key: KeyEvent) -> Transition:
    session = state.session
    count = len(session.options)
    if key.printable and key.char in {str(n) for n in range(1, count + 1)}:
        return Transition(_advance(state, _pick(session, int(key.char or "1") - 1)))
    if key.key == "enter":
        return Transition(_advance(state, _pick(session, session.highlight)))
    if key.key in ("up", "left") or key.char == "k":
        moved = replace(session, highlight=(session.highlight - 1) % count)
        return Transition(_with_session(state, moved))
    if key.key in ("down", "right") or key.char == "j":
        moved = replace(session, highlight=(session.highlight + 1) % count)
        return Transition(_with_session(state, moved))
    return Transition(state)


def _wizard_tags(state: AddWizard | UpdateWizard, key: KeyEvent) -> Transition:
    session = state.session
    editor = session.editor or TextEditState()
    tags = session.task.sorted_tags

    if key.key == "enter":
        entered = editor.buffer.strip()
        if not entered:
            return Transition(_advance(state, session.task))
        # Sets ignore duplicates; re-entering an existing tag just clears the input.
        task = replace(session.task, tags=session.task.tags | {entered})
        return Transition(_with_session(state, replace(session, task=task, editor=editor.clear())))

    if session.tag_cursor is not None:
        cursor = session.tag_cursor
        if key.key == "left":
            return Transition(_with_session(state, replace(session, tag_cursor=max(cursor - 1, 0))))
        if key.key == "right":
            moved = min(cursor + 1, len(tags) - 1)
            return Transition(_with_session(state, replace(session, tag_cursor=moved)))
        if key.key == "up":
            return Transition(_with_session(state, replace(session, tag_cursor=None)))
        if key.key == "delete" or key.char == "d":
            remaining = session.task.tags - {tags[cursor]}
            task = replace(session.task, tags=remaining)
            next_cursor = max(cursor - 1, 0) if remaining else None
            return Transition(_with_session(state, replace(session, task=task, tag_cursor=next_cursor)))
        return Transition(state)

    if key.key == "down":
        if tags:
            return Transition(_with_session(state, replace(session, tag_cursor=0)))
        return Transition(state)
    edited = edit_text(editor, key)
    if edited is None:
        return Transition(state)
    return Transition(_with_session(state, replace(session, editor=edited)))


def _wizard_confirm(state: AddWizard | UpdateWizard, key: KeyEvent) -> Transition:
    task = state.session.task
    if key.key != "enter":
        return Transition(state)
    if not task.title.strip():
        return Transition(
            _with_session(state, EditSession.at(Step.EDITING_TITLE, task)),
            error=EMPTY_TITLE_ERROR,
        )
    if isinstance(state, UpdateWizard):
        return Transition(Browsing(), UpdateTask(task))
    return Transition(Browsing(), CreateTask(task))


def _quick_add(state: QuickAdd, key: KeyEvent) -> Transition:
    if key.key == "escape":
        return Transition(Browsing())
    if key.key == "enter":
        title = state.editor.buffer.strip()
        if not title:
            return Transition(state, error=EMPTY_TITLE_ERROR)
        return Transition(Browsing(), CreateTask(replace(Task.blank(), title=title)))
    edited = edit_text(state.editor, key)
    if edited is None:
        return Transition(state)
    return Transition(QuickAdd(edited))


def _update_picker(state: UpdatePicker, key: KeyEvent, selected: Task | None) -> Transition:
    if key.key == "escape":
        return Transition(Browsing())
    if not key.printable or not (key.char or "").isdigit():
        return Transition(state)
    field_index = int(key.char or "0")
    if field_index not in UPDATE_FIELDS:
        return Transition(state)
    if selected is None or selected.task_id != state.task_id:
        return Transition(Browsing())
    session = EditSession.at(UPDATE_FIELDS[field_index], selected)
    return Transition(UpdateWizard(session=session, field_index=field_index))


def _delete_confirm(state: DeleteConfirm, key: KeyEvent) -> Transition:
    if key.key == "enter" or key.char in ("y", "Y", "d"):
        return Transition(Browsing(), DeleteTask(state.task_id))
    if key.key in ("escape", "backspace") or key.char in ("n", "N", "x"):
        return Transition(Browsing())
    return Transition(state)


def _quit_confirm(state: QuitConfirm, key: KeyEvent) -> Transition:
    if key.key == "enter" or key.char in ("y", "Y", "x"):
        return Transition(Browsing(), Command.QUIT)
    if key.key == "escape" or key.char in ("n", "N"):
        return Transition(Browsing())
    return Transition(state)


def _help_overlay(state: HelpOverlay, key: KeyEvent) -> Transition:
    if key.key == "escape" or key.char in ("h", "?"):
        return Transition(Browsing())
    if key.key == "up" or key.char == "k":
        return Transition(state, Command.HELP_UP)
    if key.key == "down" or key.char == "j":
        return Transition(state, Command.HELP_DOWN)
    return Transition(state)


def _tag_filter(state: TagFilterEntry, key: KeyEvent) -> Transition:
    if key.key == "escape":
        return Transition(Browsing(), SetTagFilter(None))
    if key.key == "enter":
        return Transition(Browsing(), SetTagFilter(state.editor.buffer.strip() or None))
    edited = edit_text(state.editor, key)
    if edited is None:
        return Transition(state)
    return Transition(TagFilterEntry(edited), SetTagFilter(edited.buffer.strip() or None))

from __future__ import annotations

from dataclasses import replace

from checklist.editor import TextEditState
from checklist.modal import (
    EMPTY_TITLE_ERROR,
    AddWizard,
    Browsing,
    Command,
    CreateTask,
    DeleteConfirm,
    DeleteTask,
    EditSession,
    HelpOverlay,
    KeyEvent,
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
from checklist.models import Status, Task, Urgency


def _type(state, text: str, selected: Task | None = None):
    for char in text:
        state = handle_key(state, KeyEvent.of(char), selected).state
    return state


def _press(state, *keys: str, selected: Task | None = None):
    transition = None
    for key in keys:
        transition = handle_key(state, KeyEvent.of(key), selected)
        state = transition.state
    return transition


def _task(**overrides) -> Task:
    base = Task(task_id="t1", title="Write docs", description="draft", urgency=Urgency.MEDIUM)
    return replace(base, **overrides)


def test_add_wizard_walks_every_step_and_creates_task() -> None:
    state = handle_key(Browsing(), KeyEvent.of("a")).state
    assert isinstance(state, AddWizard)
    assert state.session.step is Step.EDITING_TITLE

    state = _type(state, "Buy milk")
    state = _press(state, "enter").state
    assert state.session.step is Step.EDITING_DESCRIPTION
    state = _type(state, "2 litres")
    state = _press(state, "enter").state
    assert state.session.step is Step.PICKING_URGENCY
    state = _press(state, "3").state
    assert state.session.step is Step.PICKING_STATUS
    state = _press(state, "down", "enter").state
    assert state.session.step is Step.EDITING_TAGS
    state = _type(state, "shop")
    state = _press(state, "enter").state
    assert state.session.task.tags == frozenset({"shop"})
    state = _press(state, "enter").state
    assert state.session.step is Step.CONFIRM

    transition = _press(state, "enter")
    assert isinstance(transition.state, Browsing)
    assert isinstance(transition.effect, CreateTask)
    created = transition.effect.task
    assert created.title == "Buy milk"
    assert created.description == "2 litres"
    assert created.urgency is Urgency.HIGH
    assert created.status is Status.WORKING
    assert created.tags == frozenset({"shop"})


def test_empty_title_rejected_on_title_step() -> None:
    state = handle_key(Browsing(), KeyEvent.of("a")).state
    state = _type(state, "   ")
    transition = _press(state, "enter")
    assert transition.error == EMPTY_TITLE_ERROR
    assert transition.effect is None
    assert transition.state.session.step is Step.EDITING_TITLE


def test_empty_title_at_confirm_returns_to_title_without_effect() -> None:
    session = EditSession.at(Step.CONFIRM, replace(Task.blank(), title=""))
    transition = handle_key(AddWizard(session), KeyEvent.of("enter"))
    assert transition.effect is None
    assert transition.error == EMPTY_TITLE_ERROR
    assert isinstance(transition.state, AddWizard)
    assert transition.state.session.step is Step.EDITING_TITLE


def test_escape_cancels_wizard_without_effect() -> None:
    state = _type(handle_key(Browsing(), KeyEvent.of("a")).state, "half")
    transition = _press(state, "escape")
    assert isinstance(transition.state, Browsing)
    assert transition.effect is None


def test_ctrl_left_steps_back_and_keeps_typed_text() -> None:
    state = handle_key(Browsing(), KeyEvent.of("a")).state
    state = _type(state, "Title")
    state = _press(state, "enter").state
    state = _press(state, "ctrl+left").state
    assert state.session.step is Step.EDITING_TITLE
    assert state.session.editor.buffer == "Title"


def test_editing_keys_inside_wizard() -> None:
    state = handle_key(Browsing(), KeyEvent.of("a")).state
    state = _type(state, "hello")
    state = _press(state, "ctrl+a").state
    state = _type(state, "x")
    assert state.session.editor == TextEditState(buffer="x", cursor=1)
    state = _press(state, "backspace").state
    assert state.session.editor.buffer == ""


def test_tag_highlight_mode_removes_tags() -> None:
    session = EditSession.at(Step.EDITING_TAGS, _task(tags=frozenset({"a", "b", "c"})))
    state = AddWizard(session)
    state = _press(state, "down").state
    assert state.session.tag_cursor == 0
    state = _press(state, "right", "d").state
    assert state.session.task.tags == frozenset({"a", "c"})
    assert state.session.tag_cursor == 0
    state = _press(state, "up").state
    assert state.session.tag_cursor is None


def test_duplicate_tag_is_noop() -> None:
    state = AddWizard(EditSession.at(Step.EDITING_TAGS, _task(tags=frozenset({"home"}))))
    state = _type(state, "home")
    state = _press(state, "enter").state
    assert state.session.task.tags == frozenset({"home"})
    assert state.session.editor.buffer == ""
    assert state.session.step is Step.EDITING_TAGS


def test_update_picker_targets_one_field_then_confirms() -> None:
    task = _task()
    state = handle_key(Browsing(), KeyEvent.of("u"), task).state
    assert state == UpdatePicker("t1")

    state = handle_key(state, KeyEvent.of("3"), task).state
    assert isinstance(state, UpdateWizard)
    assert state.session.step is Step.PICKING_URGENCY
    assert state.session.highlight == 1

    state = _press(state, "4").state
    assert state.session.step is Step.CONFIRM
    transition = _press(state, "enter")
    assert isinstance(transition.effect, UpdateTask)
    assert transition.effect.task.urgency is Urgency.CRITICAL
    assert transition.effect.task.task_id == "t1"


def test_update_title_seeds_editor_from_task() -> None:
    task = _task()
    state = handle_key(UpdatePicker("t1"), KeyEvent.of("1"), task).state
    assert state.session.editor.buffer == "Write docs"
    assert state.session.editor.cursor == len("Write docs")
    back = _press(state, "ctrl+left").state
    assert back == UpdatePicker("t1")


def test_update_status_to_completed_stamps_completion() -> None:
    task = _task()
    state = handle_key(UpdatePicker("t1"), KeyEvent.of("4"), task).state
    state = _press(state, "4").state
    assert state.session.task.status is Status.COMPLETED
    assert state.session.task.completed_on is not None


def test_browsing_actions_need_selection() -> None:
    for char in ("u", "d", "c"):
        transition = handle_key(Browsing(), KeyEvent.of(char), None)
        assert isinstance(transition.state, Browsing)
        assert transition.effect is None


def test_toggle_complete_bypasses_modal_flow() -> None:
    transition = handle_key(Browsing(), KeyEvent.of("c"), _task())
    assert isinstance(transition.state, Browsing)
    assert transition.effect == ToggleComplete("t1")


def test_delete_confirm_paths() -> None:
    task = _task()
    state = handle_key(Browsing(), KeyEvent.of("d"), task).state
    assert state == DeleteConfirm("t1")
    assert _press(state, "y").effect == DeleteTask("t1")
    cancelled = _press(state, "n")
    assert isinstance(cancelled.state, Browsing)
    assert cancelled.effect is None
    assert _press(state, "escape").effect is None


def test_quit_confirm() -> None:
    state = handle_key(Browsing(), KeyEvent.of("x")).state
    assert isinstance(state, QuitConfirm)
    assert _press(state, "y").effect is Command.QUIT
    assert isinstance(_press(state, "escape").state, Browsing)
    assert isinstance(handle_key(Browsing(), KeyEvent.of("escape")).state, QuitConfirm)


def test_help_overlay_consumes_keys() -> None:
    state = handle_key(Browsing(), KeyEvent.of("h")).state
    assert isinstance(state, HelpOverlay)
    assert _press(state, "down").effect is Command.HELP_DOWN
    swallowed = _press(state, "d")
    assert isinstance(swallowed.state, HelpOverlay)
    assert swallowed.effect is None
    assert isinstance(_press(state, "?").state, Browsing)


def test_quick_add_creates_title_only_task() -> None:
    state = handle_key(Browsing(), KeyEvent.of("n")).state
    assert isinstance(state, QuickAdd)
    assert _press(state, "enter").error == EMPTY_TITLE_ERROR
    state = _type(state, "Call bank")
    transition = _press(state, "enter")
    assert isinstance(transition.effect, CreateTask)
    assert transition.effect.task.title == "Call bank"
    assert transition.effect.task.urgency is Urgency.LOW


def test_tag_filter_entry_updates_live_and_clears_on_escape() -> None:
    transition = handle_key(Browsing(), KeyEvent.of("/"))
    assert isinstance(transition.state, TagFilterEntry)
    transition = handle_key(transition.state, KeyEvent.of("w"))
    assert transition.effect == SetTagFilter("w")
    kept = handle_key(transition.state, KeyEvent.of("enter"))
    assert isinstance(kept.state, Browsing)
    assert kept.effect == SetTagFilter("w")
    cleared = handle_key(transition.state, KeyEvent.of("escape"))
    assert cleared.effect == SetTagFilter(None)


def test_navigation_keys_map_to_commands() -> None:
    assert handle_key(Browsing(), KeyEvent.of("j")).effect is Command.SELECT_NEXT
    assert handle_key(Browsing(), KeyEvent.of("down")).effect is Command.SELECT_NEXT
    assert handle_key(Browsing(), KeyEvent.of("G")).effect is Command.SELECT_LAST
    assert handle_key(Browsing(), KeyEvent.of("ctrl+right")).effect is Command.GROW_LIST
    assert handle_key(Browsing(), KeyEvent.of("v")).effect is Command.CYCLE_LAYOUT

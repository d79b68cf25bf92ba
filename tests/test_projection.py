from __future__ import annotations

from checklist.models import Status, StatusFilter, Task, Urgency
from checklist.projection import SortOrder, ViewFilter, known_tags, project


def _task(task_id: str, urgency: Urgency, status: Status = Status.OPEN, tags: tuple[str, ...] = ()) -> Task:
    return Task(task_id=task_id, title=task_id, urgency=urgency, status=status, tags=frozenset(tags))


TASKS = (
    _task("a", Urgency.LOW),
    _task("b", Urgency.HIGH, tags=("work",)),
    _task("c", Urgency.HIGH, Status.COMPLETED, tags=("work", "home")),
    _task("d", Urgency.CRITICAL, Status.WORKING),
    _task("e", Urgency.LOW, Status.PAUSED, tags=("home",)),
    _task("f", Urgency.MEDIUM),
)


def _ids(tasks) -> list[str]:
    return [task.task_id for task in tasks]


def test_descending_sort_keeps_ties_in_input_order() -> None:
    assert _ids(project(TASKS)) == ["d", "b", "c", "f", "a", "e"]


def test_ascending_sort_keeps_ties_in_input_order() -> None:
    assert _ids(project(TASKS, sort_order=SortOrder(descending=False))) == ["a", "e", "f", "b", "c", "d"]


def test_status_filters() -> None:
    completed = project(TASKS, ViewFilter(status=StatusFilter.COMPLETED))
    assert _ids(completed) == ["c"]
    open_tasks = project(TASKS, ViewFilter(status=StatusFilter.NOT_COMPLETED))
    assert "c" not in _ids(open_tasks)
    assert len(open_tasks) == 5


def test_tag_filter_uses_exact_membership() -> None:
    assert _ids(project(TASKS, ViewFilter(tag="work"))) == ["b", "c"]
    assert _ids(project(TASKS, ViewFilter(tag="wor"))) == []
    both = project(TASKS, ViewFilter(status=StatusFilter.NOT_COMPLETED, tag="home"))
    assert _ids(both) == ["e"]


def test_required_tags_must_all_be_present() -> None:
    assert _ids(project(TASKS, ViewFilter(tags=frozenset({"work", "home"})))) == ["c"]
    assert _ids(project(TASKS, ViewFilter(tags=frozenset({"work"})))) == ["b", "c"]
    assert _ids(project(TASKS, ViewFilter(tags=frozenset({"work", "garden"})))) == []


def test_projection_is_idempotent_and_does_not_mutate_input() -> None:
    view_filter = ViewFilter(status=StatusFilter.NOT_COMPLETED)
    order = SortOrder(descending=True)
    source = list(TASKS)
    once = project(source, view_filter, order)
    twice = project(once, view_filter, order)
    assert once == twice
    assert source == list(TASKS)


def test_empty_collection_projects_to_empty_tuple() -> None:
    assert project([]) == ()


def test_known_tags_sorted_and_unique() -> None:
    assert known_tags(TASKS) == ["home", "work"]


def test_status_filter_cycles() -> None:
    assert StatusFilter.ALL.next() is StatusFilter.COMPLETED
    assert StatusFilter.COMPLETED.next() is StatusFilter.NOT_COMPLETED
    assert StatusFilter.NOT_COMPLETED.next() is StatusFilter.ALL

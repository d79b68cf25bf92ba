"""Filtered and sorted read-only views over a task snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import Status, StatusFilter, Task


@dataclass(frozen=True, slots=True)
class ViewFilter:
    """``tag`` is the view's single tag filter; every tag in ``tags`` must also be present."""

    status: StatusFilter = StatusFilter.ALL
    tag: str | None = None
    tags: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class SortOrder:
    descending: bool = True

    @property
    def label(self) -> str:
        return "urgency desc" if self.descending else "urgency asc"

    def flipped(self) -> SortOrder:
        return SortOrder(descending=not self.descending)


def status_matches(task: Task, status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.COMPLETED:
        return task.status is Status.COMPLETED
    if status_filter is StatusFilter.NOT_COMPLETED:
        return task.status is not Status.COMPLETED
    return True


def tag_matches(task: Task, tag: str | None) -> bool:
    if not tag:
        return True
    return tag in task.tags


def project(
    tasks: Iterable[Task],
    view_filter: ViewFilter = ViewFilter(),
    sort_order: SortOrder = SortOrder(),
) -> tuple[Task, ...]:
    filtered = [
        task
        for task in tasks
        if status_matches(task, view_filter.status)
        and tag_matches(task, view_filter.tag)
        and view_filter.tags <= task.tags
    ]
    # sorted() stays stable with reverse=True, so equal urgencies keep filtered order.
    return tuple(
        sorted(filtered, key=lambda task: task.urgency.rank, reverse=sort_order.descending)
    )


def known_tags(tasks: Iterable[Task]) -> list[str]:
    found: set[str] = set()
    for task in tasks:
        found.update(task.tags)
    return sorted(found)

"""Core task models and constants."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
import datetime as dt
from enum import Enum
from typing import Any, Iterable
import uuid


class Urgency(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return URGENCY_RANK[self]


class Status(str, Enum):
    OPEN = "Open"
    WORKING = "Working"
    PAUSED = "Paused"
    COMPLETED = "Completed"


class StatusFilter(str, Enum):
    ALL = "All"
    COMPLETED = "Completed"
    NOT_COMPLETED = "NotCompleted"

    def next(self) -> StatusFilter:
        order = list(StatusFilter)
        return order[(order.index(self) + 1) % len(order)]


URGENCY_RANK = {
    Urgency.LOW: 0,
    Urgency.MEDIUM: 1,
    Urgency.HIGH: 2,
    Urgency.CRITICAL: 3,
}
VALID_URGENCIES = tuple(item.value for item in Urgency)
VALID_STATUSES = tuple(item.value for item in Status)
VALID_FILTERS = tuple(item.value for item in StatusFilter)


def now_stamp() -> str:
    return dt.datetime.now().isoformat(timespec="seconds")


def new_task_id() -> str:
    return uuid.uuid4().hex


def normalize_tags(tags: Iterable[str] | None) -> frozenset[str]:
    if not tags:
        return frozenset()
    return frozenset(tag.strip() for tag in tags if tag.strip())


@dataclass(frozen=True, slots=True)
class Task:
    task_id: str
    title: str
    description: str = ""
    urgency: Urgency = Urgency.LOW
    status: Status = Status.OPEN
    tags: frozenset[str] = field(default_factory=frozenset)
    created: str = ""
    updated: str = ""
    completed_on: str | None = None

    @classmethod
    def new(
        cls,
        title: str,
        *,
        description: str = "",
        urgency: Urgency = Urgency.LOW,
        status: Status = Status.OPEN,
        tags: Iterable[str] | None = None,
    ) -> Task:
        stamp = now_stamp()
        return cls(
            task_id=new_task_id(),
            title=title,
            description=description,
            urgency=urgency,
            status=status,
            tags=normalize_tags(tags),
            created=stamp,
            updated=stamp,
            completed_on=stamp if status is Status.COMPLETED else None,
        )

    @classmethod
    def blank(cls) -> Task:
        return cls(task_id="", title="")

    @property
    def is_completed(self) -> bool:
        return self.status is Status.COMPLETED

    @property
    def sorted_tags(self) -> list[str]:
        return sorted(self.tags)

    def with_status(self, status: Status) -> Task:
        """Return a copy with ``status`` applied and ``completed_on`` kept in step."""
        if status is self.status:
            return self
        completed_on = now_stamp() if status is Status.COMPLETED else None
        return replace(self, status=status, completed_on=completed_on)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["urgency"] = self.urgency.value
        data["status"] = self.status.value
        data["tags"] = self.sorted_tags
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            task_id=str(data["task_id"]),
            title=str(data["title"]),
            description=str(data.get("description") or ""),
            urgency=Urgency(data.get("urgency", Urgency.LOW.value)),
            status=Status(data.get("status", Status.OPEN.value)),
            tags=normalize_tags(data.get("tags") or []),
            created=str(data.get("created") or ""),
            updated=str(data.get("updated") or ""),
            completed_on=data.get("completed_on") or None,
        )


class TaskError(Exception):
    """Base error for task operations."""


class TaskValidationError(TaskError):
    """Raised when a task field is invalid, e.g. an empty title."""


class StoreError(TaskError):
    """Raised when the task store cannot be read or written."""


class TaskNotFoundError(StoreError):
    """Raised when a task id is not present in the store."""


class ConfigError(TaskError):
    """Raised when the configuration file cannot be written or is missing."""

"""Renderers for `checklist list` output."""

from __future__ import annotations

import json
from typing import Iterable

from .models import Status, Task, Urgency

STATUS_ORDER = (Status.WORKING, Status.OPEN, Status.PAUSED, Status.COMPLETED)
COLUMNS = (
    ("title", 36),
    ("urgency", 8),
    ("status", 9),
    ("tags", 24),
    ("task_id", 10),
)


def _urgency_style(urgency: Urgency) -> str:
    return {
        Urgency.CRITICAL: "bold red",
        Urgency.HIGH: "bold yellow",
        Urgency.MEDIUM: "cyan",
        Urgency.LOW: "dim",
    }[urgency]


def _status_style(status: Status) -> str:
    return {
        Status.OPEN: "magenta",
        Status.WORKING: "cyan",
        Status.PAUSED: "yellow",
        Status.COMPLETED: "green",
    }[status]


def _task_row(task: Task) -> dict[str, str]:
    return {
        "title": task.title,
        "urgency": task.urgency.value,
        "status": task.status.value,
        "tags": ", ".join(task.sorted_tags) or "-",
        "task_id": task.task_id,
    }


def _truncate(value: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width == 1:
        return "…"
    return f"{value[: width - 1]}…"


def render_task_list_plain(tasks: Iterable[Task]) -> str:
    rows = [_task_row(task) for task in tasks]
    if not rows:
        return "No tasks found."

    lines = [
        "  ".join(name.ljust(width) for name, width in COLUMNS),
        "  ".join("-" * width for _, width in COLUMNS),
    ]
    for row in rows:
        lines.append("  ".join(_truncate(row[name], width).ljust(width) for name, width in COLUMNS))
    return "\n".join(line.rstrip() for line in lines)


def render_task_list_rich(tasks: Iterable[Task]):
    """Tables grouped by status; each group keeps the order it was given."""
    from rich import box
    from rich.console import Group
    from rich.table import Table
    from rich.text import Text

    task_list = list(tasks)
    if not task_list:
        return "No tasks found."

    renderables = []
    for status in STATUS_ORDER:
        bucket = [task for task in task_list if task.status is status]
        if not bucket:
            continue
        renderables.append(Text(f"{status.value.upper()} ({len(bucket)})", style=f"bold {_status_style(status)}"))

        table = Table(box=box.SIMPLE_HEAVY, show_header=True, header_style="bold white", pad_edge=False)
        for name, width in COLUMNS:
            table.add_column(
                name,
                style="bold" if name == "title" else ("dim" if name == "task_id" else ""),
                min_width=width,
                max_width=width,
                overflow="ellipsis",
                no_wrap=True,
            )
        for task in bucket:
            row = _task_row(task)
            table.add_row(
                row["title"],
                Text(row["urgency"], style=_urgency_style(task.urgency)),
                Text(row["status"], style=_status_style(task.status)),
                row["tags"],
                row["task_id"],
            )
        renderables.append(table)
        renderables.append(Text(""))

    if renderables and isinstance(renderables[-1], Text) and not renderables[-1].plain:
        renderables.pop()
    return Group(*renderables)


def render_task_list_json(tasks: Iterable[Task]) -> str:
    return json.dumps([task.to_dict() for task in tasks], indent=2)

"""YAML-file task store."""

from __future__ import annotations

from dataclasses import replace
import logging
import os
from pathlib import Path

import yaml

from .models import StoreError, Task, TaskNotFoundError, new_task_id, now_stamp

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def _dump(tasks: list[Task]) -> str:
    payload = {
        "version": STORE_VERSION,
        "tasks": [task.to_dict() for task in tasks],
    }
    return yaml.safe_dump(payload, sort_keys=False, default_flow_style=False, allow_unicode=True)


def _parse(text: str, path: Path) -> list[Task]:
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise StoreError(f"Unable to parse task store at {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise StoreError(f"Invalid task store format at {path}")
    records = payload.get("tasks") or []
    if not isinstance(records, list):
        raise StoreError(f"Invalid task list in {path}")

    tasks: list[Task] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise StoreError(f"Invalid task record #{index} in {path}")
        try:
            tasks.append(Task.from_dict(record))
        except (KeyError, ValueError) as exc:
            raise StoreError(f"Invalid task record #{index} in {path}: {exc}") from exc
    return tasks


class TaskStore:
    """All tasks live in one YAML document, rewritten atomically on each change."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def ensure(self) -> bool:
        """Create an empty store file; return False when it already exists."""
        if self.path.exists():
            return False
        self._write([])
        return True

    def _read(self) -> list[Task]:
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Unable to read task store at {self.path}: {exc}") from exc
        return _parse(text, self.path)

    def _write(self, tasks: list[Task]) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(_dump(tasks), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StoreError(f"Unable to write task store at {self.path}: {exc}") from exc

    def _index(self, tasks: list[Task], task_id: str) -> int:
        for idx, task in enumerate(tasks):
            if task.task_id == task_id:
                return idx
        raise TaskNotFoundError(f"Task not found: {task_id}")

    def list(self) -> list[Task]:
        return self._read()

    def get(self, task_id: str) -> Task | None:
        for task in self._read():
            if task.task_id == task_id:
                return task
        return None

    def create(self, task: Task) -> str:
        stamp = now_stamp()
        created = replace(
            task,
            task_id=task.task_id or new_task_id(),
            created=task.created or stamp,
            updated=stamp,
        )
        tasks = self._read()
        if any(existing.task_id == created.task_id for existing in tasks):
            raise StoreError(f"Task id already exists: {created.task_id}")
        tasks.append(created)
        self._write(tasks)
        logger.debug("created task %s", created.task_id)
        return created.task_id

    def update(self, task_id: str, task: Task) -> None:
        tasks = self._read()
        idx = self._index(tasks, task_id)
        tasks[idx] = replace(task, task_id=task_id, updated=now_stamp())
        self._write(tasks)
        logger.debug("updated task %s", task_id)

    def delete(self, task_id: str) -> None:
        tasks = self._read()
        idx = self._index(tasks, task_id)
        del tasks[idx]
        self._write(tasks)
        logger.debug("deleted task %s", task_id)

    def import_from(self, other: Path | TaskStore) -> int:
        source = other if isinstance(other, TaskStore) else TaskStore(Path(other))
        if not source.path.exists():
            raise StoreError(f"Task store not found: {source.path}")
        incoming = source.list()
        tasks = self._read()
        existing_ids = {task.task_id for task in tasks}

        added = 0
        for task in incoming:
            if task.task_id in existing_ids:
                logger.warning("skipping imported task %s: id already present", task.task_id)
                continue
            tasks.append(task)
            existing_ids.add(task.task_id)
            added += 1
        self._write(tasks)
        return added

    def wipe(self) -> None:
        self._write([])


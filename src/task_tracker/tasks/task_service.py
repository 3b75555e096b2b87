# src/task_tracker/tasks/task_service.py

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime

from ..core.ports import Clock, TaskRepo
from .task_models import Task, TaskStatus, ValidationError, sanitize_description

logger = logging.getLogger(__name__)

FILTER_ALL = "all"


def utc_now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def _valid_id(task_id: object) -> bool:
    return isinstance(task_id, int) and not isinstance(task_id, bool) and task_id > 0


class TaskService:
    """
    Validation and orchestration on top of a TaskRepo.

    Every operation re-reads the whole collection, mutates a copy in memory and
    writes it back with one save() call. If save() raises, nothing was
    persisted and the error reaches the caller unchanged.

    "Not found" is a normal outcome and is reported as False, never raised.
    """

    def __init__(self, store: TaskRepo, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock: Clock = clock or utc_now

    def _now(self) -> datetime:
        return self._clock()

    @staticmethod
    def _clean_description(description: str | None) -> str:
        text = sanitize_description(description)
        if not text:
            raise ValidationError("description must not be empty")
        return text

    # ---- mutations ----

    def add(self, description: str) -> int:
        text = self._clean_description(description)

        collection, next_id = self._store.load_state()
        task_id = next_id
        now = self._now()
        updated = dict(collection)
        updated[task_id] = Task(
            id=task_id,
            description=text,
            status=TaskStatus.TODO,
            created_at=now,
            updated_at=now,
        )
        self._store.save(updated, next_id=task_id + 1)

        logger.info("Task added id=%s", task_id)
        return task_id

    def _mutate(self, task_id: int, **changes: object) -> bool:
        if not _valid_id(task_id):
            return False

        collection, next_id = self._store.load_state()
        task = collection.get(task_id)
        if task is None:
            logger.debug("Task id=%s not found; nothing to change.", task_id)
            return False

        # Never move updated_at behind created_at, even if the clock went backwards.
        now = max(self._now(), task.created_at)
        updated = dict(collection)
        updated[task_id] = replace(task, updated_at=now, **changes)
        self._store.save(updated, next_id=next_id)
        return True

    def update(self, task_id: int, description: str) -> bool:
        text = self._clean_description(description)
        found = self._mutate(task_id, description=text)
        if found:
            logger.info("Task updated id=%s", task_id)
        return found

    def set_status(self, task_id: int, status: TaskStatus | str) -> bool:
        new_status = TaskStatus.parse(status)
        found = self._mutate(task_id, status=new_status)
        if found:
            logger.info("Task status changed id=%s status=%s", task_id, new_status.value)
        return found

    def delete(self, task_id: int) -> bool:
        if not _valid_id(task_id):
            return False

        collection, next_id = self._store.load_state()
        if task_id not in collection:
            logger.debug("Task id=%s not found; nothing to delete.", task_id)
            return False

        updated = {k: v for k, v in collection.items() if k != task_id}
        # Keep the high-water mark so the deleted id is never handed out again.
        self._store.save(updated, next_id=next_id)

        logger.info("Task deleted id=%s", task_id)
        return True

    # ---- queries ----

    def find(self, status_filter: TaskStatus | str = FILTER_ALL) -> list[Task]:
        """
        Tasks matching the filter, in store order.

        status_filter is "all" or one of the TaskStatus values.
        """
        if isinstance(status_filter, str) and status_filter.strip().lower() == FILTER_ALL:
            wanted: TaskStatus | None = None
        else:
            wanted = TaskStatus.parse(status_filter)

        collection = self._store.load()
        return [t for t in collection.values() if wanted is None or t.status == wanted]

    def get(self, task_id: int) -> Task | None:
        if not _valid_id(task_id):
            return None
        return self._store.load().get(task_id)

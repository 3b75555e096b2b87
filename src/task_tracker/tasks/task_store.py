# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..core.ports import TaskCollection
from .task_models import CorruptStoreError, Task, TaskStatus

logger = logging.getLogger(__name__)


def _dt_to_str(dt: datetime) -> str:
    return dt.isoformat()


def _str_to_dt(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise ValueError(f"timestamp must be a string, got {type(raw).__name__}")
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        # Older files may hold naive timestamps; they were written in UTC.
        dt = dt.replace(tzinfo=UTC)
    return dt


class TaskStore:
    """
    JSON file task store.

    The file is the single source of truth:
    - load() reads the whole collection (missing file -> empty collection)
    - save() rewrites the whole collection via temp file + os.replace

    File layout:
        {"next_id": <int>, "tasks": [{"id", "description", "status",
                                       "createdAt", "updatedAt"}, ...]}

    A bare JSON list of task records is accepted on load as well.
    No handles are kept open between calls.
    """

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    # ---- decoding ----

    def _corrupt(self, reason: str) -> CorruptStoreError:
        return CorruptStoreError(self._path, reason)

    def _record_to_task(self, rec: Any, index: int) -> Task:
        if not isinstance(rec, dict):
            raise self._corrupt(f"task #{index} is not an object")

        task_id = rec.get("id")
        # bool is an int subclass; reject it explicitly.
        if not isinstance(task_id, int) or isinstance(task_id, bool) or task_id <= 0:
            raise self._corrupt(f"task #{index} has invalid id {task_id!r}")

        description = rec.get("description")
        if not isinstance(description, str) or not description.strip():
            raise self._corrupt(f"task id={task_id} has an empty or invalid description")

        try:
            status = TaskStatus(rec.get("status"))
        except ValueError:
            raise self._corrupt(
                f"task id={task_id} has invalid status {rec.get('status')!r}"
            ) from None

        try:
            created_at = _str_to_dt(rec.get("createdAt"))
            updated_at = _str_to_dt(rec.get("updatedAt"))
        except ValueError as e:
            raise self._corrupt(f"task id={task_id} has an invalid timestamp: {e}") from None

        if updated_at < created_at:
            raise self._corrupt(f"task id={task_id} has updatedAt before createdAt")

        return Task(
            id=task_id,
            description=description,
            status=status,
            created_at=created_at,
            updated_at=updated_at,
        )

    def _decode(self, text: str) -> tuple[TaskCollection, int]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise self._corrupt(f"invalid JSON ({e.msg} at line {e.lineno})") from None

        header_next_id = 1
        if isinstance(data, list):
            records = data
        elif isinstance(data, dict):
            records = data.get("tasks", [])
            if not isinstance(records, list):
                raise self._corrupt("'tasks' is not a list")
            raw_next = data.get("next_id", 1)
            if not isinstance(raw_next, int) or isinstance(raw_next, bool) or raw_next < 1:
                raise self._corrupt(f"invalid next_id {raw_next!r}")
            header_next_id = raw_next
        else:
            raise self._corrupt("top-level value must be an object or a list")

        collection: TaskCollection = {}
        for index, rec in enumerate(records):
            task = self._record_to_task(rec, index)
            if task.id in collection:
                raise self._corrupt(f"duplicate task id={task.id}")
            collection[task.id] = task

        next_id = max(header_next_id, max(collection, default=0) + 1)
        return collection, next_id

    # ---- encoding ----

    @staticmethod
    def _task_to_record(task: Task) -> dict[str, Any]:
        return {
            "id": task.id,
            "description": task.description,
            "status": task.status.value,
            "createdAt": _dt_to_str(task.created_at),
            "updatedAt": _dt_to_str(task.updated_at),
        }

    def _encode(self, collection: TaskCollection, next_id: int) -> str:
        payload = {
            "next_id": next_id,
            "tasks": [self._task_to_record(t) for t in collection.values()],
        }
        return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"

    # ---- public API ----

    def load_state(self) -> tuple[TaskCollection, int]:
        """
        Return (collection, next_id).

        next_id is the persisted high-water mark, never lower than max(id) + 1.
        Raises CorruptStoreError for malformed content and OSError for read failures.
        """
        try:
            text = self._path.read_text("utf-8")
        except FileNotFoundError:
            logger.debug("Task store %s does not exist yet; starting empty.", self._path)
            return {}, 1
        except UnicodeDecodeError:
            raise self._corrupt("file is not valid UTF-8") from None

        collection, next_id = self._decode(text)
        logger.debug(
            "Loaded %d tasks from %s (next_id=%d)", len(collection), self._path, next_id
        )
        return collection, next_id

    def load(self) -> TaskCollection:
        collection, _ = self.load_state()
        return collection

    def save(self, collection: TaskCollection, *, next_id: int | None = None) -> None:
        """
        Atomically rewrite the whole file.

        Writes to a sibling temp file, fsyncs it, then os.replace()s it over the
        target, so readers see either the old or the new content. Raises OSError.

        Without an explicit next_id the high-water mark already on disk is kept,
        so save(load()) never lowers it.
        """
        floor = max(collection, default=0) + 1
        if next_id is None:
            _, next_id = self.load_state()
        next_id = max(int(next_id), floor)
        text = self._encode(collection, next_id)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise

        logger.debug("Saved %d tasks to %s (next_id=%d)", len(collection), self._path, next_id)

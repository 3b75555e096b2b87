# src/task_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

TaskService depends on this Protocol instead of the concrete JSON store,
which keeps the storage swappable and lets tests use in-memory fakes.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from ..tasks.task_models import Task

TaskCollection = dict[int, Task]
# Keyed by task id; iteration order is the order tasks appear in the store.

Clock = Callable[[], datetime]


class TaskRepo(Protocol):
    """Whole-collection persistence: every save rewrites everything."""

    def load_state(self) -> tuple[TaskCollection, int]: ...
    def load(self) -> TaskCollection: ...
    # next_id=None keeps the stored high-water mark.
    def save(self, collection: TaskCollection, *, next_id: int | None = None) -> None: ...

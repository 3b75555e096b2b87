# src/task_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- takes settings (or loads them once),
- wires the JSON TaskStore into a TaskService,
- returns the AppState handed to command handlers.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    # Directories are created lazily by TaskStore.save(); read-only commands leave no trace.
    store = TaskStore(settings.tasks_path)
    logger.debug("Task store path: %s", store.path)

    return AppState(settings=settings, tasks=TaskService(store))

# src/task_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_service import TaskService


@dataclass
class AppState:
    # Settings are kept on the state so command handlers can reach paths/app name.
    settings: object
    tasks: TaskService

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_tracker.core.state import AppState
from task_tracker.tasks.task_service import TaskService
from task_tracker.tasks.task_store import TaskStore

from .fakes import StepClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="task-cli",
        log_level="WARNING",
        log_file_enabled=False,
        data_dir=tmp_path,
        tasks_path=tmp_path / "data" / "tasks.json",
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_path)


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture()
def service(store: TaskStore, clock: StepClock) -> TaskService:
    """Real JSON store on tmp_path; its correctness is part of what we test."""
    return TaskService(store, clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, service: TaskService) -> AppState:
    return AppState(settings=settings, tasks=service)

# src/task_tracker/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path

# Quotes and backslashes break shell round-trips of the description; control
# characters break the table layout.
_DISALLOWED_RE = re.compile(r'["\\\x00-\x1f\x7f]+')


class ValidationError(ValueError):
    """Caller-supplied data violates a task invariant (nothing was changed)."""


class CorruptStoreError(RuntimeError):
    """The backing file exists but does not hold a valid task collection."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Corrupt task store {self.path}: {reason}")


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Any status may be set from any other one; the usual flow is
    todo -> in-progress -> done.
    """

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def parse(cls, raw: TaskStatus | str) -> TaskStatus:
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValidationError(
                f"invalid status {raw!r} (expected one of: {cls.values_join('|')})"
            ) from None

    @classmethod
    def values_join(cls, sep: str = ", ") -> str:
        return sep.join(s.value for s in cls)


@dataclass(slots=True)
class Task:
    id: int
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


def sanitize_description(raw: str | None) -> str:
    """Strip disallowed characters and surrounding whitespace."""
    if raw is None:
        return ""
    return _DISALLOWED_RE.sub("", str(raw)).strip()

# src/task_tracker/cli/table.py

"""Box-drawn task table for the `list` command."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from ..tasks.task_models import Task

# (header, width)
COLUMNS: tuple[tuple[str, int], ...] = (
    ("ID", 6),
    ("Description", 50),
    ("Status", 12),
    ("CreatedAt", 19),
    ("UpdatedAt", 19),
)


def _rule(left: str, mid: str, right: str) -> str:
    return left + mid.join("─" * (w + 2) for _, w in COLUMNS) + right


def _row(cells: Iterable[str]) -> str:
    parts = [f" {c:<{w}} " for c, (_, w) in zip(cells, COLUMNS)]
    return "│" + "│".join(parts) + "│"


def _fit(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def format_ts(dt: datetime) -> str:
    """Local wall-clock time, seconds precision."""
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def render_task_table(tasks: Iterable[Task]) -> str:
    lines = [
        _rule("┌", "┬", "┐"),
        _row(h.center(w) for h, w in COLUMNS),
    ]
    for task in tasks:
        lines.append(_rule("├", "┼", "┤"))
        lines.append(
            _row(
                (
                    str(task.id),
                    _fit(task.description, COLUMNS[1][1]),
                    task.status.value,
                    format_ts(task.created_at),
                    format_ts(task.updated_at),
                )
            )
        )
    lines.append(_rule("└", "┴", "┘"))
    return "\n".join(lines)

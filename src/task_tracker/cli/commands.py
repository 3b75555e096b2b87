# src/task_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks.task_models import CorruptStoreError, TaskStatus, ValidationError
from .table import render_task_table

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


@dataclass(frozen=True, slots=True)
class CommandResult:
    text: str
    exit_code: int = EXIT_OK


CommandHandler = Callable[[AppState, list[str]], CommandResult]


@dataclass(frozen=True, slots=True)
class _Command:
    name: str
    handler: CommandHandler
    usage: str
    help_text: str
    # Fills "could not <action>" when the data file cannot be read or written.
    action: str


def _diagnostic(error: str, reason: str) -> str:
    return f"error:              {error}\npossible reason:    {reason}"


def _usage_error(usage: str, *examples: str) -> CommandResult:
    lines = ["invalid command", f"usage:      {usage}"]
    for i, ex in enumerate(examples):
        label = "example:" if i == 0 else ""
        lines.append(f"{label:<12}{ex}")
    return CommandResult("\n".join(lines), EXIT_USAGE)


class CommandRegistry:
    """Sub-command registry used by the CLI entrypoint (add, list, help, ...)."""

    def __init__(self) -> None:
        self._commands: dict[str, _Command] = {}
        self._aliases: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        usage: str,
        help_text: str,
        *,
        action: str = "access the data file",
        aliases: list[str] | None = None,
    ) -> None:
        key = name.lower()
        self._commands[key] = _Command(key, handler, usage, help_text, action)
        for alias in aliases or []:
            self._aliases[alias.lower()] = key

    def names(self) -> list[str]:
        return list(self._commands)

    def handle(self, state: AppState, argv: list[str]) -> CommandResult:
        """
        Run the command named by argv[0] with the remaining arguments.

        Core errors are turned into short diagnostics here; nothing escapes
        except KeyboardInterrupt/SystemExit.
        """
        if not argv:
            return CommandResult(
                "no command found\nuse 'help' for a list of commands", EXIT_USAGE
            )

        name = argv[0].lower()
        cmd = self._commands.get(self._aliases.get(name, name))
        if cmd is None:
            return CommandResult(
                "invalid command\nuse 'help' for a list of commands", EXIT_USAGE
            )

        try:
            return cmd.handler(state, argv[1:])
        except ValidationError as e:
            return CommandResult(f"invalid input: {e}", EXIT_USAGE)
        except CorruptStoreError as e:
            logger.warning("Corrupt task store: %s", e)
            return CommandResult(
                _diagnostic(
                    f"could not {cmd.action}",
                    f"data file {e.path} is damaged ({e.reason})",
                ),
                EXIT_ERROR,
            )
        except OSError as e:
            logger.warning("I/O failure in %s: %s", cmd.name, e)
            return CommandResult(
                _diagnostic(
                    f"could not {cmd.action}",
                    f"no permission to read/write the data file ({e.strerror or e})",
                ),
                EXIT_ERROR,
            )
        except Exception:
            logger.exception("Command handler crashed: %s", cmd.name)
            return CommandResult("Internal error while handling the command.", EXIT_ERROR)

    def build_help(self, prog: str = "task-cli") -> str:
        width = max((len(c.usage) for c in self._commands.values()), default=0)
        lines = [f"{prog} - Task Tracker CLI", "", "Available commands:"]
        for cmd in self._commands.values():
            lines.append(f"    {cmd.usage:<{width}}  - {cmd.help_text}")
        lines += [
            "",
            "Example usage:",
            f'    {prog} add "Buy groceries"',
            f'    {prog} update 1 "Buy groceries and cook dinner"',
            f"    {prog} delete 1",
            f"    {prog} mark-in-progress 1",
            f"    {prog} list done",
        ]
        return "\n".join(lines)


registry = CommandRegistry()

_NO_DESCRIPTION = "Task no description is not allowed"


def _parse_id(raw: str) -> int | None:
    if not (raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    return value if value > 0 else None


def _not_found(task_id: int) -> CommandResult:
    return CommandResult(f"Task(ID: {task_id}) not found", EXIT_ERROR)


def cmd_add(state: AppState, args: list[str]) -> CommandResult:
    if len(args) != 1:
        return _usage_error("add <description>", 'add "Buy groceries"')
    try:
        task_id = state.tasks.add(args[0])
    except ValidationError:
        return CommandResult(_NO_DESCRIPTION, EXIT_USAGE)
    return CommandResult(f"Task added successfully (ID: {task_id})")


def cmd_update(state: AppState, args: list[str]) -> CommandResult:
    task_id = _parse_id(args[0]) if len(args) == 2 else None
    if task_id is None:
        return _usage_error(
            "update <id> <description>", 'update 1 "Buy groceries and cook dinner"'
        )
    try:
        found = state.tasks.update(task_id, args[1])
    except ValidationError:
        return CommandResult(_NO_DESCRIPTION, EXIT_USAGE)
    if not found:
        return _not_found(task_id)
    return CommandResult("Task updated successfully")


def cmd_delete(state: AppState, args: list[str]) -> CommandResult:
    task_id = _parse_id(args[0]) if len(args) == 1 else None
    if task_id is None:
        return _usage_error("delete <id>", "delete 1")
    if not state.tasks.delete(task_id):
        return _not_found(task_id)
    return CommandResult("Task deleted successfully")


def _make_mark_handler(command: str, status: TaskStatus) -> CommandHandler:
    def handler(state: AppState, args: list[str]) -> CommandResult:
        task_id = _parse_id(args[0]) if len(args) == 1 else None
        if task_id is None:
            return _usage_error(f"{command} <id>", f"{command} 1")
        if not state.tasks.set_status(task_id, status):
            return _not_found(task_id)
        return CommandResult(f"Task marked as {status.value} successfully")

    handler.__name__ = f"cmd_{command.replace('-', '_')}"
    return handler


def cmd_list(state: AppState, args: list[str]) -> CommandResult:
    if len(args) > 1 or (args and args[0].lower() not in {s.value for s in TaskStatus}):
        return _usage_error(
            f"list [{TaskStatus.values_join('|')}]", "list", "list done"
        )
    status_filter = args[0].lower() if args else "all"
    tasks = state.tasks.find(status_filter)
    return CommandResult(render_task_table(tasks))


def cmd_help(state: AppState, args: list[str]) -> CommandResult:
    prog = str(getattr(state.settings, "app_name", "task-cli"))
    return CommandResult(registry.build_help(prog))


registry.register(
    "add",
    cmd_add,
    "add <description>",
    "Add a new task with the given description",
    action="add the Task to the data file",
)
registry.register(
    "update",
    cmd_update,
    "update <id> <description>",
    "Update the description of the task with the given ID",
    action="update the Task in the data file",
)
registry.register(
    "delete",
    cmd_delete,
    "delete <id>",
    "Delete the task with the given ID",
    action="delete the Task from the data file",
)
for _status in TaskStatus:
    _name = f"mark-{_status.value}"
    registry.register(
        _name,
        _make_mark_handler(_name, _status),
        f"{_name} <id>",
        f"Mark as '{_status.value}' the task with the given ID",
        action=f"mark the Task as {_status.value} in the data file",
    )
registry.register(
    "list",
    cmd_list,
    f"list [{TaskStatus.values_join('|')}]",
    "List all tasks, or only those with the given status",
    action="load the Tasks from the data file",
)
registry.register(
    "help", cmd_help, "help", "Display this help message", aliases=["-h", "--help"]
)

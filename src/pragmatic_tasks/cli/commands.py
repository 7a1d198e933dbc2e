# src/pragmatic_tasks/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..errors import TaskError
from ..tasks.task import Task
from ..tasks.task_api import describe_task, record_action
from ..tasks.task_log_format import format_date
from ..tasks.task_models import Status

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /status, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _find_task(state: AppState, args: list[str]) -> Task | str:
    if not args:
        return "Task id is required."
    task = state.catalog.get(args[0])
    if task is None:
        return f"Unknown task: {args[0]}"
    return task


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_tasks(state: AppState, args: list[str]) -> str:
    tasks = list(state.catalog)
    if not tasks:
        return "No tasks."
    now = state.now()
    lines = []
    for task in tasks:
        try:
            lines.append(describe_task(task, now, state.catalog, registry=state.catalog.registry))
        except (TaskError, ValueError, OSError) as e:
            logger.warning("Cannot describe task %s: %s", task.task_id, e)
            lines.append(f"[{task.task_id}] {task} | Error: {e}")
    return "\n".join(lines)


def cmd_status(state: AppState, args: list[str]) -> str:
    task = _find_task(state, args)
    if isinstance(task, str):
        return task
    result = state.catalog.status(task.task_id, state.now())
    lines = [
        f"{task}: {result.description}",
        f"  category: {result.category}",
        f"  occurrence: {format_date(result.date) if result.date else '-'}",
        f"  completed={result.completed_schedule} ready={result.ready_schedule} future={result.future_schedule}",
    ]
    if result.comments:
        lines.append(f"  comments: {result.comments}")
    return "\n".join(lines)


def cmd_log(state: AppState, args: list[str]) -> str:
    task = _find_task(state, args)
    if isinstance(task, str):
        return task
    entries = task.log(state.catalog.registry).entries()
    if not entries:
        return f"{task}: no log entries."
    lines = [f"{task}: {len(entries)} entries"]
    for entry in entries:
        scheduled = ",".join(format_date(d) for d in entry.scheduled_ons) or "-"
        who = ",".join(u.name for u in entry.who)
        line = f"  {format_date(entry.on)} [{scheduled}] {entry.status.label}"
        if who:
            line += f" by {who}"
        if entry.comments:
            line += f" - {entry.comments}"
        lines.append(line)
    return "\n".join(lines)


def _record(state: AppState, args: list[str], status: Status) -> str:
    task = _find_task(state, args)
    if isinstance(task, str):
        return task
    comments = " ".join(args[1:]).strip() or None
    entry = record_action(
        task,
        status,
        now=state.now(),
        resolver=state.catalog,
        comments=comments,
        registry=state.catalog.registry,
    )
    scheduled = ",".join(format_date(d) for d in entry.scheduled_ons) or "no occurrence"
    return f"{task}: logged {status.label} for {scheduled}."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _record(state, args, Status.COMPLETED)


def cmd_progress(state: AppState, args: list[str]) -> str:
    return _record(state, args, Status.PROGRESS)


def cmd_nothing(state: AppState, args: list[str]) -> str:
    return _record(state, args, Status.NOTHING_TO_DO)


def cmd_missed(state: AppState, args: list[str]) -> str:
    return _record(state, args, Status.MISSED)


registry.register("help", cmd_help, "show this help", aliases=["h", "?"])
registry.register("tasks", cmd_tasks, "list tasks with status, priority and assignees", aliases=["ls"])
registry.register("status", cmd_status, "/status <id> - detailed status of one task")
registry.register("log", cmd_log, "/log <id> - completion log entries")
registry.register("done", cmd_done, "/done <id> [comments] - log Completed for the current occurrence")
registry.register("progress", cmd_progress, "/progress <id> [comments] - log Progress")
registry.register("nothing", cmd_nothing, "/nothing <id> [comments] - log Nothing To Do")
registry.register("missed", cmd_missed, "/missed <id> [comments] - log Missed")

# src/pragmatic_tasks/errors.py

"""Exception hierarchy shared by the completion log and the status engine."""

from __future__ import annotations

from typing import Any


class TaskError(Exception):
    """Base class for every error raised by pragmatic_tasks."""


class MalformedLog(TaskError):
    """
    A stored completion log violates the log format.

    Always fatal to the read that found it; the log is never repaired.
    """

    def __init__(self, message: str, *, value: Any = None, resource: str | None = None) -> None:
        self.value = value
        self.resource = resource
        detail = message
        if resource is not None:
            detail = f"{message} in {resource}"
        super().__init__(detail)


class ScheduleConfigurationError(TaskError):
    """A task declaration cannot produce a schedule (raised at freeze or status time)."""


class DependencyCycleError(ScheduleConfigurationError):
    def __init__(self, chain: tuple[str, ...]) -> None:
        self.chain = chain
        super().__init__("Dependency cycle: " + " -> ".join(chain))


class TaskFrozenError(TaskError):
    """A TaskBuilder was used after freeze()."""

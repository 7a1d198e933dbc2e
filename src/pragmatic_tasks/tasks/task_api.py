# src/pragmatic_tasks/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime

from ..core.ports import TaskResolver
from .task import Task
from .task_log import CompletionLogRegistry
from .task_models import CompletionEntry, Status, StatusResult, User

logger = logging.getLogger(__name__)

_CURRENT = object()


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def record_action(
    task: Task,
    status: Status,
    *,
    now: date | datetime,
    resolver: TaskResolver | None = None,
    who: Iterable[User] = (),
    comments: str | None = None,
    custom: Mapping[str, str] | None = None,
    scheduled_on: date | None | object = _CURRENT,
    registry: CompletionLogRegistry | None = None,
) -> CompletionEntry:
    """
    Convenience helper: log an action against the task's current occurrence.

    By default the entry is filed under the date the task's status is
    anchored to (none for unscheduled tasks). Pass scheduled_on=None to log
    against no occurrence, or a date to log against a specific one.
    """
    if custom and task.custom_log_names:
        unknown = [name for name in custom if name not in task.custom_log_names]
        if unknown:
            raise ValueError(f"Task {task.task_id!r}: undeclared custom log field(s): {', '.join(unknown)}")

    if scheduled_on is _CURRENT:
        current = task.status(now, resolver, registry=registry)
        occurrence = current.date
    else:
        occurrence = scheduled_on  # type: ignore[assignment]

    entry = CompletionEntry(
        on=_as_date(now),
        status=status,
        scheduled_ons=() if occurrence is None else (occurrence,),
        who=tuple(who),
        custom=dict(custom or {}),
        comments=comments,
    )
    task.log(registry).append(entry)
    logger.info("Recorded %s for task_id=%s occurrence=%s", status.label, task.task_id, occurrence)
    return entry


def describe_task(
    task: Task,
    now: date | datetime,
    resolver: TaskResolver | None = None,
    *,
    registry: CompletionLogRegistry | None = None,
) -> str:
    """One-line summary: label, status, effective priority, current assignees."""
    result: StatusResult = task.status(now, resolver, registry=registry)
    today = _as_date(now)
    from_ = result.date or today
    priority = task.effective_priority(from_, today)
    assignees = ", ".join(str(u) for u in task.assignees_at(from_, today)) or "Unassigned"
    parts = [f"[{task.task_id}] {task}", result.description, f"priority={priority}", f"who={assignees}"]
    recurrence = task.recurrence_display
    if recurrence:
        parts.append(f"every={recurrence}")
    if result.comments:
        parts.append(f"note={result.comments}")
    return " | ".join(parts)

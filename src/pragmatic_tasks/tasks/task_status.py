# src/pragmatic_tasks/tasks/task_status.py

"""
Status derivation.

Reconciles a task's schedule (none / fixed date / recurring), the statuses
of its "do before" dependencies and its completion log into one StatusResult
for the given day:

- unscheduled: governed by the latest entry logged against no occurrence
- fixed date: governed by the latest entry for that date, else the calendar
- recurring: same as fixed date, against the anchor occurrence
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from ..core.ports import TaskResolver
from ..errors import DependencyCycleError, ScheduleConfigurationError
from .task_log import CompletionLog, CompletionLogRegistry
from .task_log_format import format_date
from .task_models import CompletionEntry, Status, StatusCategory, StatusResult

if TYPE_CHECKING:
    from .task import Task

logger = logging.getLogger(__name__)

_WAITING_SUFFIX = ' waiting for "Do Before"'


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


# ---- dependencies ----


def all_dependencies_satisfied(
    task: Task,
    now: date | datetime,
    resolver: TaskResolver | None,
    *,
    registry: CompletionLogRegistry | None = None,
    detect_cycles: bool = True,
    _chain: tuple[str, ...] = (),
) -> bool:
    """True when every dependency's current schedule is completed (stops at the first that is not)."""
    if not task.dependencies:
        return True
    if resolver is None:
        raise ScheduleConfigurationError(
            f"Task {task.task_id!r} has dependencies but no resolver was given"
        )
    chain = _chain + (task.task_id,)
    for ref in task.dependencies:
        dependency = resolver.resolve(ref)
        if detect_cycles and dependency.task_id in chain:
            raise DependencyCycleError(chain + (dependency.task_id,))
        result = task_status(
            dependency,
            now,
            resolver,
            registry=registry,
            detect_cycles=detect_cycles,
            _chain=chain,
        )
        if not result.completed_schedule:
            logger.debug("Task %s waiting on %s (%s)", task.task_id, dependency.task_id, result.category)
            return False
    return True


def task_status(
    task: Task,
    now: date | datetime,
    resolver: TaskResolver | None = None,
    *,
    registry: CompletionLogRegistry | None = None,
    detect_cycles: bool = True,
    _chain: tuple[str, ...] = (),
) -> StatusResult:
    """Resolve the dependencies, read the task's log, and derive its status."""
    satisfied = all_dependencies_satisfied(
        task,
        now,
        resolver,
        registry=registry,
        detect_cycles=detect_cycles,
        _chain=_chain,
    )
    return derive_status(task, task.log(registry), satisfied, now)


# ---- decision procedure ----


def _progress_result(
    entry: CompletionEntry,
    today: date,
    satisfied: bool,
    *,
    future: bool,
    occurrence: date | None,
) -> StatusResult:
    label = "Progress Today" if entry.on == today else f"Progress on {format_date(entry.on)}"
    if not satisfied:
        label += _WAITING_SUFFIX
    return StatusResult(
        category=StatusCategory.PROGRESS if satisfied else StatusCategory.PROGRESS_WAITING_ON_DEPENDENCY,
        description=label,
        comments=entry.comments,
        completed_schedule=False,
        ready_schedule=False,
        future_schedule=future,
        date=occurrence,
    )


def _entry_result(
    entry: CompletionEntry,
    satisfied: bool,
    *,
    occurrence: date | None,
    future: bool = False,
) -> StatusResult:
    """Result adopted straight from a log entry's status."""
    status = entry.status
    if status is Status.PROGRESS:
        category = StatusCategory.PROGRESS if satisfied else StatusCategory.PROGRESS_WAITING_ON_DEPENDENCY
    elif status is Status.MISSED:
        category = StatusCategory.MISSED
    else:
        category = StatusCategory.COMPLETED
    completed = status.is_terminal
    return StatusResult(
        category=category,
        description=status.label if satisfied else status.label_do_before,
        comments=entry.comments,
        completed_schedule=completed,
        ready_schedule=not completed and not future and satisfied,
        future_schedule=future,
        date=occurrence,
    )


def _unscheduled_status(log: CompletionLog, today: date, satisfied: bool) -> StatusResult:
    entry = log.most_recent_entry(None)
    if entry is None:
        return StatusResult(
            category=StatusCategory.NEW if satisfied else StatusCategory.NEW_WAITING_ON_DEPENDENCY,
            description="New" if satisfied else "New" + _WAITING_SUFFIX,
            ready_schedule=satisfied,
        )
    if entry.status is Status.PROGRESS and entry.on >= today:
        return _progress_result(entry, today, satisfied, future=entry.on > today, occurrence=None)
    return _entry_result(entry, satisfied, occurrence=None)


def _scheduled_status(
    log: CompletionLog,
    occurrence: date,
    today: date,
    satisfied: bool,
    *,
    recurring: bool,
) -> StatusResult:
    entry = log.most_recent_entry(occurrence)

    if entry is not None and entry.status.is_terminal:
        return _entry_result(entry, satisfied, occurrence=occurrence)

    if entry is not None and entry.status is Status.PROGRESS and entry.on >= today:
        return _progress_result(entry, today, satisfied, future=True, occurrence=occurrence)

    comments = entry.comments if entry is not None else None
    when = format_date(occurrence)

    if occurrence < today:
        return StatusResult(
            category=StatusCategory.LATE if satisfied else StatusCategory.LATE_WAITING_ON_DEPENDENCY,
            description=f"Late {when}" if satisfied else f"Late {when}{_WAITING_SUFFIX}",
            comments=comments,
            ready_schedule=satisfied,
            date=occurrence,
        )

    if occurrence == today:
        return StatusResult(
            category=StatusCategory.DUE_TODAY if satisfied else StatusCategory.DUE_TODAY_WAITING_ON_DEPENDENCY,
            description="Due Today" if satisfied else "Due Today" + _WAITING_SUFFIX,
            comments=comments,
            ready_schedule=satisfied,
            date=occurrence,
        )

    if entry is not None:
        # Progress already logged for a future occurrence.
        return _entry_result(entry, satisfied, occurrence=occurrence, future=True)

    return StatusResult(
        category=StatusCategory.IN_FUTURE,
        description=f"Waiting until {when}",
        # Recurring: the previous occurrence is done, so this cycle counts as completed.
        completed_schedule=recurring,
        future_schedule=True,
        date=occurrence,
    )


def relative_anchor(task: Task, log: CompletionLog, today: date) -> date:
    """
    Next occurrence of a relative recurrence: the first date strictly after
    the most recent terminal entry (both its "on" and its scheduled date),
    but never before the task's own "on".
    """
    assert task.recurrence is not None
    anchor = task.on if task.on is not None else today
    last_terminal: CompletionEntry | None = None
    for entry in log.entries():
        if entry.status.is_terminal:
            last_terminal = entry
    if last_terminal is None:
        return anchor

    after = last_terminal.on
    if last_terminal.scheduled_ons and last_terminal.scheduled_ons[-1] > after:
        after = last_terminal.scheduled_ons[-1]
    for candidate in task.recurrence.schedule_iterator(last_terminal.on):
        if candidate > after:
            computed = candidate
            break
    else:
        raise ScheduleConfigurationError(
            f"Task {task.task_id!r}: recurrence produced no date after {format_date(after)}"
        )
    if task.on is not None and task.on > computed:
        return task.on
    return computed


def anchor_occurrence(task: Task, log: CompletionLog, today: date) -> date:
    """The occurrence a recurring task's current status is computed against."""
    assert task.recurrence is not None
    if task.relative:
        return relative_anchor(task, log, today)
    if task.on is None:
        raise ScheduleConfigurationError(
            f"Task {task.task_id!r}: absolute recurring task requires an \"on\" date"
        )
    return log.first_incomplete_occurrence(task.on, task.recurrence)


def derive_status(
    task: Task,
    log: CompletionLog,
    dependencies_satisfied: bool,
    now: date | datetime,
) -> StatusResult:
    today = _as_date(now)

    if task.recurrence is None:
        if task.on is None:
            return _unscheduled_status(log, today, dependencies_satisfied)
        return _scheduled_status(log, task.on, today, dependencies_satisfied, recurring=False)

    occurrence = anchor_occurrence(task, log, today)
    return _scheduled_status(log, occurrence, today, dependencies_satisfied, recurring=True)

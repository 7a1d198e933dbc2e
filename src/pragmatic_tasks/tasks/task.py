# src/pragmatic_tasks/tasks/task.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from ..core.ports import Recurrence, Resource, TaskResolver
from ..errors import ScheduleConfigurationError, TaskFrozenError
from .task_log import CompletionLog, CompletionLogRegistry, LOG_REGISTRY
from .task_status import task_status
from .task_models import (
    DEFAULT_TASK_PRIORITY,
    UNASSIGNED_ASSIGNMENT,
    DayDuration,
    Priority,
    StatusResult,
    TaskAssignment,
    TaskPriority,
    User,
    ZERO_DAYS,
)

logger = logging.getLogger(__name__)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _none_if_empty(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True, slots=True)
class Task:
    """
    Frozen task declaration. Safe to share between threads without locking.

    Built through TaskBuilder; every invariant was checked by freeze().
    """

    task_id: str
    label: str | None
    on: date | None
    recurrence: Recurrence | None
    relative: bool
    assignments: tuple[TaskAssignment, ...]
    priorities: tuple[TaskPriority, ...]
    dependencies: tuple[str, ...]
    custom_log_names: tuple[str, ...]
    log_resource: Resource | None
    pay: str | None = None
    cost: str | None = None

    def __str__(self) -> str:
        return self.label or self.task_id

    @property
    def recurrence_display(self) -> str | None:
        return None if self.recurrence is None else self.recurrence.display

    # ---- completion log ----

    def log(self, registry: CompletionLogRegistry | None = None) -> CompletionLog:
        if self.log_resource is None:
            raise ScheduleConfigurationError(f"Task {self.task_id!r} has no log resource")
        return (registry or LOG_REGISTRY).get(self.log_resource)

    # ---- assignments ----

    def assignment_for(self, who: User) -> TaskAssignment | None:
        """The assignment for this person, or None when not assigned."""
        for assignment in self.assignments:
            if assignment.who == who:
                return assignment
        return None

    def assignees_at(self, from_: date, now: date | datetime) -> list[User]:
        """Zero-day assignees plus everyone whose "after" delay from `from_` has elapsed."""
        today = _as_date(now)
        return [a.who for a in self.assignments if a.after.count == 0 or a.after.offset(from_) <= today]

    # ---- priorities ----

    def zero_day_priority(self) -> Priority:
        for task_priority in self.priorities:
            if task_priority.after.count == 0:
                return task_priority.priority
        raise AssertionError("There should always be one, and only one, zero-day TaskPriority")

    def effective_priority(self, from_: date, now: date | datetime) -> Priority:
        """
        The priority whose activation day (from_ + after) is the latest one
        not after `now`. Falls back to the zero-day priority.
        """
        today = _as_date(now)
        best_day: date | None = None
        best: Priority | None = None
        for task_priority in self.priorities:
            effective_day = task_priority.after.offset(from_)
            if effective_day <= today and (best_day is None or effective_day > best_day):
                best_day = effective_day
                best = task_priority.priority
        return best if best is not None else self.zero_day_priority()

    # ---- status ----

    def status(
        self,
        now: date | datetime,
        resolver: TaskResolver | None = None,
        *,
        registry: CompletionLogRegistry | None = None,
        detect_cycles: bool = True,
    ) -> StatusResult:
        return task_status(
            self,
            now,
            resolver,
            registry=registry,
            detect_cycles=detect_cycles,
        )


class TaskBuilder:
    """
    Mutable construction phase of a Task.

    freeze() validates and returns the immutable Task; the builder is
    consumed and every later call raises TaskFrozenError.
    """

    def __init__(self, task_id: str) -> None:
        task_id = (task_id or "").strip()
        if not task_id:
            raise ValueError("task_id is required")
        self._task_id = task_id
        self._frozen = False
        self._label: str | None = None
        self._on: date | None = None
        self._recurrence: Recurrence | None = None
        self._relative = False
        self._assignments: list[TaskAssignment] = []
        self._priorities: list[TaskPriority] = []
        self._do_befores: list[str] = []
        self._custom_logs: list[str] = []
        self._log_resource: Resource | None = None
        self._pay: str | None = None
        self._cost: str | None = None

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise TaskFrozenError(f"Task {self._task_id!r} is already frozen")

    def set_label(self, label: str | None) -> TaskBuilder:
        self._check_not_frozen()
        self._label = _none_if_empty(label)
        return self

    def set_on(self, on: date | datetime | None) -> TaskBuilder:
        self._check_not_frozen()
        self._on = None if on is None else _as_date(on)
        return self

    def set_recurrence(self, recurrence: Recurrence | None) -> TaskBuilder:
        self._check_not_frozen()
        self._recurrence = recurrence
        return self

    def set_relative(self, relative: bool) -> TaskBuilder:
        self._check_not_frozen()
        self._relative = bool(relative)
        return self

    def add_assigned_to(self, who: User, after: DayDuration = ZERO_DAYS) -> TaskBuilder:
        self._check_not_frozen()
        if not who.is_person:
            raise ValueError(f"Not a person: {who}")
        self._assignments.append(TaskAssignment(who, after))
        return self

    def add_priority(self, priority: Priority, after: DayDuration = ZERO_DAYS) -> TaskBuilder:
        self._check_not_frozen()
        self._priorities.append(TaskPriority(priority, after))
        return self

    def add_do_before(self, ref: str) -> TaskBuilder:
        self._check_not_frozen()
        ref = (ref or "").strip()
        if not ref:
            raise ValueError("doBefore reference is required")
        if ref in self._do_befores:
            raise ValueError(f"Duplicate doBefore: {ref}")
        self._do_befores.append(ref)
        return self

    def add_custom_log(self, name: str) -> TaskBuilder:
        self._check_not_frozen()
        clean = _none_if_empty(name)
        if clean is None:
            raise ValueError("custom log name is required")
        if clean in self._custom_logs:
            raise ValueError(f"Custom log added twice: {clean}")
        self._custom_logs.append(clean)
        return self

    def set_log_resource(self, resource: Resource | None) -> TaskBuilder:
        self._check_not_frozen()
        self._log_resource = resource
        return self

    def set_pay(self, pay: str | None) -> TaskBuilder:
        self._check_not_frozen()
        self._pay = _none_if_empty(pay)
        return self

    def set_cost(self, cost: str | None) -> TaskBuilder:
        self._check_not_frozen()
        self._cost = _none_if_empty(cost)
        return self

    def _validate(self) -> None:
        # At least one person must be assigned the "0 days" task; nobody twice.
        if self._assignments:
            seen: set[User] = set()
            for assignment in self._assignments:
                if assignment.who in seen:
                    raise ScheduleConfigurationError(
                        f"Task {self._task_id!r}: assigned to person twice: {assignment.who}"
                    )
                seen.add(assignment.who)
            if not any(a.after.count == 0 for a in self._assignments):
                raise ScheduleConfigurationError(
                    f'Task {self._task_id!r}: at least one person must be assigned the "0 days" task'
                )

        # One and only one priority may have the "0 days" priority.
        if self._priorities:
            zero_day = [p for p in self._priorities if p.after.count == 0]
            if len(zero_day) > 1:
                raise ScheduleConfigurationError(
                    f"Task {self._task_id!r}: more than one zero-day priority assigned: "
                    + " and ".join(str(p.priority) for p in zero_day)
                )
            if not zero_day:
                raise ScheduleConfigurationError(
                    f'Task {self._task_id!r}: one priority must be assigned the "0 days" task'
                )

        if self._on is not None and any(p.priority is Priority.FUTURE for p in self._priorities):
            raise ScheduleConfigurationError(
                f"Task {self._task_id!r}: tasks with Future priority may not be scheduled"
            )

    def freeze(self) -> Task:
        self._check_not_frozen()
        self._validate()
        self._frozen = True
        task = Task(
            task_id=self._task_id,
            label=self._label,
            on=self._on,
            recurrence=self._recurrence,
            relative=self._relative,
            assignments=tuple(self._assignments) or (UNASSIGNED_ASSIGNMENT,),
            priorities=tuple(self._priorities) or (DEFAULT_TASK_PRIORITY,),
            dependencies=tuple(self._do_befores),
            custom_log_names=tuple(self._custom_logs),
            log_resource=self._log_resource,
            pay=self._pay,
            cost=self._cost,
        )
        logger.debug("Froze task %s", task.task_id)
        return task

# src/pragmatic_tasks/tasks/task_models.py

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum, StrEnum
from types import MappingProxyType

# Characters outside the XML 1.0 Char production cannot be stored in a log.
_XML_INVALID_RE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def check_xml_text(what: str, text: str) -> None:
    m = _XML_INVALID_RE.search(text)
    if m:
        raise ValueError(f"{what} contains a character XML cannot store: {m.group()!r}")


def _normalize_newlines(text: str) -> str:
    # XML parsers turn CR and CRLF into LF; store the same form up front.
    return text.replace("\r\n", "\n").replace("\r", "\n")


class Status(Enum):
    """
    Status of one completion-log entry.

    Every status except PROGRESS is terminal: it resolves the occurrence it
    was logged against.
    """

    PROGRESS = ("Progress", 'Progress waiting for "Do Before"', False)
    COMPLETED = ("Completed", "Completed", True)
    NOTHING_TO_DO = ("Nothing To Do", 'Nothing To Do after "Do Before"', True)
    MISSED = ("Missed", 'Missed after "Do Before"', True)

    def __init__(self, label: str, label_do_before: str, is_terminal: bool) -> None:
        self.label = label
        self.label_do_before = label_do_before
        self.is_terminal = is_terminal

    def __str__(self) -> str:
        return self.label

    @classmethod
    def from_label(cls, label: str) -> Status:
        for status in cls:
            if status.label == label:
                return status
        raise ValueError(f"Unexpected status label: {label}")


@dataclass(frozen=True, slots=True)
class User:
    name: str
    is_person: bool = True

    def __post_init__(self) -> None:
        check_xml_text("user name", self.name)
        if not self.name or self.name != self.name.strip():
            raise ValueError(f"user name must be non-empty without surrounding whitespace: {self.name!r}")
        if "\n" in self.name or "\r" in self.name:
            raise ValueError(f"user name must be a single line: {self.name!r}")
        if self.is_person and self.name == "Unassigned":
            raise ValueError("\"Unassigned\" is not a person")

    def __str__(self) -> str:
        return self.name

    @staticmethod
    def parse(text: str) -> User:
        name = (text or "").strip()
        if not name:
            raise ValueError("user name is required")
        if name == UNASSIGNED.name:
            return UNASSIGNED
        return User(name)


UNASSIGNED = User("Unassigned", is_person=False)


class Priority(StrEnum):
    FUTURE = "Future"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def parse(cls, raw: str) -> Priority:
        value = (raw or "").strip().lower()
        for p in cls:
            if p.value.lower() == value:
                return p
        raise ValueError(f"Unknown priority: {raw}")


DEFAULT_PRIORITY = Priority.MEDIUM
MAX_PRIORITY = Priority.CRITICAL


class DayUnit(StrEnum):
    DAY = "day"
    WEEK = "week"


_DURATION_RE = re.compile(r"^\s*(\d+)\s*(day|days|week|weeks)\s*$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class DayDuration:
    """A whole number of days or weeks, used for "after N days" rules."""

    count: int
    unit: DayUnit = DayUnit.DAY

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"count < 0: {self.count}")

    @property
    def days(self) -> int:
        return self.count * 7 if self.unit is DayUnit.WEEK else self.count

    def offset(self, d: date) -> date:
        return d + timedelta(days=self.days)

    def __str__(self) -> str:
        name = self.unit.value if self.count == 1 else self.unit.value + "s"
        return f"{self.count} {name}"

    @staticmethod
    def parse(text: str | int) -> DayDuration:
        if isinstance(text, int):
            return DayDuration(text)
        m = _DURATION_RE.match(text or "")
        if not m:
            raise ValueError(f"Invalid duration: {text!r}")
        unit = DayUnit.WEEK if m.group(2).lower().startswith("week") else DayUnit.DAY
        return DayDuration(int(m.group(1)), unit)


ZERO_DAYS = DayDuration(0)


@dataclass(frozen=True, slots=True)
class TaskAssignment:
    """
    Tasks may be assigned to multiple people. At least one of them must have
    a zero "after" value; the others join once their delay has elapsed.
    """

    who: User
    after: DayDuration = ZERO_DAYS

    def __str__(self) -> str:
        if self.after.count == 0:
            return str(self.who)
        return f"{self.who} (after {self.after})"


UNASSIGNED_ASSIGNMENT = TaskAssignment(UNASSIGNED, ZERO_DAYS)


@dataclass(frozen=True, slots=True)
class TaskPriority:
    """
    Tasks may escalate priority over time. Exactly one rule has a zero
    "after" value; the rule with the latest elapsed activation wins.
    """

    priority: Priority
    after: DayDuration = ZERO_DAYS

    def __str__(self) -> str:
        if self.after.count == 0:
            return str(self.priority)
        return f"{self.priority} (after {self.after})"


DEFAULT_TASK_PRIORITY = TaskPriority(DEFAULT_PRIORITY, ZERO_DAYS)


class StatusCategory(StrEnum):
    NEW = "New"
    NEW_WAITING_ON_DEPENDENCY = "NewWaitingOnDependency"
    IN_FUTURE = "InFuture"
    DUE_TODAY = "DueToday"
    DUE_TODAY_WAITING_ON_DEPENDENCY = "DueTodayWaitingOnDependency"
    LATE = "Late"
    LATE_WAITING_ON_DEPENDENCY = "LateWaitingOnDependency"
    PROGRESS = "Progress"
    PROGRESS_WAITING_ON_DEPENDENCY = "ProgressWaitingOnDependency"
    COMPLETED = "Completed"
    MISSED = "Missed"


@dataclass(frozen=True, slots=True)
class StatusResult:
    category: StatusCategory
    description: str
    comments: str | None = None
    completed_schedule: bool = False
    ready_schedule: bool = False
    future_schedule: bool = False
    date: date | None = None

    def __post_init__(self) -> None:
        if self.completed_schedule and self.ready_schedule:
            raise ValueError("A schedule cannot be both completed and ready")
        if self.ready_schedule and self.future_schedule:
            raise ValueError("A schedule cannot be both ready and future")

    def __str__(self) -> str:
        return self.description


@dataclass(frozen=True)
class CompletionEntry:
    """
    One action taken against a task. Immutable once built.

    scheduled_ons are the occurrence dates this action counts toward,
    strictly ascending; empty means it applies to no specific occurrence.
    on is the date the action was actually taken, which need not match any
    scheduled date.
    """

    on: date
    status: Status
    scheduled_ons: tuple[date, ...] = ()
    who: tuple[User, ...] = ()
    custom: Mapping[str, str] = field(default_factory=dict)
    comments: str | None = None

    def __post_init__(self) -> None:
        if self.on is None:
            raise ValueError("on is required")
        scheduled_ons = tuple(self.scheduled_ons or ())
        for prev, cur in zip(scheduled_ons, scheduled_ons[1:]):
            if cur <= prev:
                raise ValueError(f"scheduled_ons not strictly ascending: {cur} <= {prev}")
        who = tuple(self.who or ())
        for user in who:
            if not user.is_person:
                raise ValueError(f"Not a person: {user}")
        custom: dict[str, str] = {}
        for name, value in (self.custom or {}).items():
            check_xml_text("custom log name", name)
            if not name or any(c in name for c in "\t\n\r"):
                raise ValueError(f"custom log name must be a non-empty single line: {name!r}")
            check_xml_text(f"custom log {name!r}", value)
            custom[name] = _normalize_newlines(value)
        comments = self.comments
        if comments is not None:
            check_xml_text("comments", comments)
            comments = _normalize_newlines(comments)
        object.__setattr__(self, "scheduled_ons", scheduled_ons)
        object.__setattr__(self, "who", who)
        object.__setattr__(self, "custom", MappingProxyType(custom))
        object.__setattr__(self, "comments", comments)

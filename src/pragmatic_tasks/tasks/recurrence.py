# src/pragmatic_tasks/tasks/recurrence.py

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime

from dateutil.rrule import rrulestr

_SHORTHANDS = {
    "daily": "FREQ=DAILY",
    "weekly": "FREQ=WEEKLY",
    "monthly": "FREQ=MONTHLY",
    "yearly": "FREQ=YEARLY",
    "annually": "FREQ=YEARLY",
    "weekdays": "FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR",
}

_EVERY_RE = re.compile(r"^every\s+(\d+)\s+(day|week|month|year)s?$", re.IGNORECASE)

_FREQ_BY_UNIT = {
    "day": "DAILY",
    "week": "WEEKLY",
    "month": "MONTHLY",
    "year": "YEARLY",
}

_DISPLAY_BY_FREQ = {
    "DAILY": ("Daily", "days"),
    "WEEKLY": ("Weekly", "weeks"),
    "MONTHLY": ("Monthly", "months"),
    "YEARLY": ("Yearly", "years"),
}


@dataclass(frozen=True, slots=True)
class RRuleRecurrence:
    """
    RFC 5545 recurrence rule evaluated by dateutil.

    The rule is anchored at whatever start date is asked for, so the same
    instance serves both absolute schedules (start = the task's "on") and
    relative ones (start = the last completion).
    """

    rule: str

    def __post_init__(self) -> None:
        rule = self.rule.strip()
        if rule.upper().startswith("RRULE:"):
            rule = rule[len("RRULE:"):]
        rule = rule.upper()
        if "COUNT=" in rule or "UNTIL=" in rule:
            raise ValueError(f"Recurrence must be unbounded: {self.rule!r}")
        # Validate eagerly so bad declarations fail at load time.
        rrulestr(rule, dtstart=datetime(2000, 1, 1))
        object.__setattr__(self, "rule", rule)

    @property
    def display(self) -> str:
        parts = dict(p.split("=", 1) for p in self.rule.split(";") if "=" in p)
        freq = parts.get("FREQ", "")
        interval = int(parts.get("INTERVAL", "1") or 1)
        if self.rule == _SHORTHANDS["weekdays"]:
            return "Weekdays"
        label, unit = _DISPLAY_BY_FREQ.get(freq, (self.rule, ""))
        if interval != 1 and unit:
            return f"Every {interval} {unit}"
        return label

    def schedule_iterator(self, start: date) -> Iterator[date]:
        dtstart = datetime(start.year, start.month, start.day)
        for dt in rrulestr(self.rule, dtstart=dtstart):
            yield dt.date()

    def __str__(self) -> str:
        return self.display


def parse_recurrence(text: str) -> RRuleRecurrence:
    """
    Accepts an RRULE ("FREQ=WEEKLY;INTERVAL=2") or a shorthand:
    daily, weekly, monthly, yearly, weekdays, "every N days|weeks|months|years".
    """
    raw = (text or "").strip()
    if not raw:
        raise ValueError("recurrence is required")
    shorthand = _SHORTHANDS.get(raw.lower())
    if shorthand:
        return RRuleRecurrence(shorthand)
    m = _EVERY_RE.match(raw)
    if m:
        interval = int(m.group(1))
        if interval <= 0:
            raise ValueError(f"Recurrence interval must be positive: {raw!r}")
        freq = _FREQ_BY_UNIT[m.group(2).lower()]
        if interval == 1:
            return RRuleRecurrence(f"FREQ={freq}")
        return RRuleRecurrence(f"FREQ={freq};INTERVAL={interval}")
    return RRuleRecurrence(raw)

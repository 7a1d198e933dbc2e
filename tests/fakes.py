# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta


class MemoryResource:
    """
    In-memory Resource used for completion-log unit tests.

    The stamp is a write counter, so every write (ours or "external") is seen
    as a modification. Counts reads so tests can assert on cache hits.
    """

    def __init__(self, key: str = "mem/task.tasklog.xml", data: bytes | None = None) -> None:
        self._key = key
        self.data = data
        self.version = 0 if data is None else 1
        self.reads = 0
        self.fail_writes = False

    @property
    def key(self) -> str:
        return self._key

    def exists(self) -> bool:
        return self.data is not None

    def last_modified(self) -> int | None:
        return None if self.data is None else self.version

    def read_bytes(self) -> bytes:
        if self.data is None:
            raise FileNotFoundError(self._key)
        self.reads += 1
        return self.data

    def write_bytes(self, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.data = data
        self.version += 1

    def external_write(self, text: str) -> None:
        """Simulate another process replacing the file."""
        self.data = text.encode("utf-8")
        self.version += 1


class StepRecurrence:
    """Every `days` days from the start date. Counts schedule_iterator() calls."""

    def __init__(self, days: int) -> None:
        self.days = days
        self.calls = 0

    @property
    def display(self) -> str:
        return f"Every {self.days} days"

    def schedule_iterator(self, start: date) -> Iterator[date]:
        self.calls += 1
        current = start
        while True:
            yield current
            current = current + timedelta(days=self.days)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, StepRecurrence) and other.days == self.days

    def __hash__(self) -> int:
        return hash(("step", self.days))


def tasklog_xml(*entries: str) -> str:
    return "<?xml version='1.0' encoding='utf-8'?>\n<tasklog>" + "".join(entries) + "</tasklog>"


def entry_xml(
    on: str,
    status: str = "Completed",
    *scheduled_ons: str,
    who: tuple[str, ...] = (),
    comments: str | None = None,
) -> str:
    parts = [f"<scheduledOn>{d}</scheduledOn>" for d in scheduled_ons]
    parts.append(f"<on>{on}</on>")
    parts.append(f"<status>{status}</status>")
    parts.extend(f"<who>{w}</who>" for w in who)
    if comments is not None:
        parts.append(f"<comments>{comments}</comments>")
    return "<entry>" + "".join(parts) + "</entry>"

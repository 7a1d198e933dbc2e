# src/pragmatic_tasks/tasks/task_log.py

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable, Iterator, Mapping
from datetime import date
from types import MappingProxyType

from ..core.ports import Recurrence, Resource
from ..errors import MalformedLog
from .task_log_format import format_date, parse_entries, serialize_entries
from .task_models import CompletionEntry

logger = logging.getLogger(__name__)

# Bucket key for entries that apply to no specific occurrence.
NO_OCCURRENCE: str | None = None


def occurrence_key(occurrence: date | None) -> str | None:
    return NO_OCCURRENCE if occurrence is None else format_date(occurrence)


class CompletionLog:
    """
    The persistent list of entries stored for one task.

    - Read lazily on first access.
    - Re-read whenever the resource's modification stamp changes.
    - Rewritten in full whenever an entry is appended.

    Thread-safety:
    - one re-entrant lock per instance serializes reload detection, derived
      cache rebuilds and appends
    - snapshots handed out are immutable tuples and never change afterwards
    """

    def __init__(self, resource: Resource) -> None:
        self._resource = resource
        self._lock = threading.RLock()
        self._stamp: Hashable | None = None
        self._entries: tuple[CompletionEntry, ...] | None = None
        self._by_date: Mapping[str | None, tuple[CompletionEntry, ...]] | None = None
        self._first_incomplete_key: tuple[date, Recurrence] | None = None
        self._first_incomplete_result: date | None = None

    @property
    def resource(self) -> Resource:
        return self._resource

    def __repr__(self) -> str:
        return f"CompletionLog({self._resource.key!r})"

    # ---- low-level helpers ----

    def _clear_derived(self) -> None:
        self._by_date = None
        self._first_incomplete_key = None
        self._first_incomplete_result = None

    def _load(self) -> tuple[CompletionEntry, ...]:
        if not self._resource.exists():
            return ()
        data = self._resource.read_bytes()
        try:
            return tuple(parse_entries(data, resource=self._resource.key))
        except MalformedLog as e:
            logger.warning("Malformed completion log %s: %s", self._resource.key, e)
            raise

    # ---- public API ----

    def entries(self) -> tuple[CompletionEntry, ...]:
        """
        Snapshot of all entries, ordered by "on".

        The returned tuple never changes, even when the log is later updated;
        call again for a fresh snapshot.
        """
        with self._lock:
            stamp = self._resource.last_modified()
            if self._entries is None or stamp != self._stamp:
                entries = self._load()
                self._entries = entries
                self._clear_derived()
                self._stamp = stamp
                logger.debug("Loaded %d entries from %s", len(entries), self._resource.key)
            return self._entries

    def __iter__(self) -> Iterator[CompletionEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self.entries())

    def entries_grouped_by_date(self) -> Mapping[str | None, tuple[CompletionEntry, ...]]:
        """
        Snapshot of the entries grouped by scheduled date (YYYY-MM-DD key).
        Entries without scheduled dates are filed under NO_OCCURRENCE only.
        """
        with self._lock:
            # Always go through entries(): it refreshes when the resource changed.
            all_entries = self.entries()
            if self._by_date is None:
                grouped: dict[str | None, list[CompletionEntry]] = {}
                for entry in all_entries:
                    if not entry.scheduled_ons:
                        grouped.setdefault(NO_OCCURRENCE, []).append(entry)
                        continue
                    for scheduled_on in entry.scheduled_ons:
                        grouped.setdefault(format_date(scheduled_on), []).append(entry)
                self._by_date = MappingProxyType({k: tuple(v) for k, v in grouped.items()})
            return self._by_date

    def entries_for(self, occurrence: date | None) -> tuple[CompletionEntry, ...]:
        """Entries logged against one occurrence (None: against no occurrence)."""
        return self.entries_grouped_by_date().get(occurrence_key(occurrence), ())

    def most_recent_entry(self, occurrence: date | None) -> CompletionEntry | None:
        bucket = self.entries_for(occurrence)
        return bucket[-1] if bucket else None

    def first_incomplete_occurrence(self, from_: date, recurrence: Recurrence) -> date:
        """
        First occurrence on or after `from_` that has no entry, or whose most
        recent entry is not terminal.

        Does not terminate if the recurrence stops producing dates that could
        be incomplete; recurrences are trusted to progress.
        """
        with self._lock:
            by_date = self.entries_grouped_by_date()
            key = (from_, recurrence)
            if self._first_incomplete_result is None or self._first_incomplete_key != key:
                for candidate in recurrence.schedule_iterator(from_):
                    bucket = by_date.get(format_date(candidate))
                    if not bucket or not bucket[-1].status.is_terminal:
                        self._first_incomplete_key = key
                        self._first_incomplete_result = candidate
                        break
                else:
                    raise ValueError(f"Recurrence ended without an incomplete occurrence: {recurrence!r}")
            assert self._first_incomplete_result is not None
            return self._first_incomplete_result

    def append(self, entry: CompletionEntry) -> None:
        """
        Add an entry and rewrite the stored log immediately.

        If the write fails nothing changes: the previous snapshot and stamp
        stay in place.
        """
        if entry is None or entry.on is None:
            raise ValueError("entry.on is required")
        with self._lock:
            old_entries = self.entries()
            if old_entries and entry.on < old_entries[-1].on:
                raise ValueError(
                    f'Entry not in order by "on": {format_date(entry.on)} < {format_date(old_entries[-1].on)}'
                )
            new_entries = old_entries + (entry,)
            self._resource.write_bytes(serialize_entries(new_entries))

            stamp = self._resource.last_modified()
            if stamp is None:
                raise FileNotFoundError(f"Resource missing after write: {self._resource.key}")
            self._entries = new_entries
            self._clear_derived()
            self._stamp = stamp
            logger.info(
                "Appended %s entry on %s to %s (%d entries)",
                entry.status.label,
                format_date(entry.on),
                self._resource.key,
                len(new_entries),
            )


class CompletionLogRegistry:
    """
    At most one CompletionLog per resource key.

    Log instances carry invalidation-sensitive caches, so two live instances
    for the same resource would disagree. The lock is held only for lookup
    and insert.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._logs: dict[str, CompletionLog] = {}

    def get(self, resource: Resource) -> CompletionLog:
        with self._lock:
            log = self._logs.get(resource.key)
            if log is None:
                log = CompletionLog(resource)
                self._logs[resource.key] = log
            return log

    def evict(self, resource: Resource | str) -> None:
        key = resource if isinstance(resource, str) else resource.key
        with self._lock:
            self._logs.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._logs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._logs)


LOG_REGISTRY = CompletionLogRegistry()


def get_completion_log(resource: Resource) -> CompletionLog:
    return LOG_REGISTRY.get(resource)

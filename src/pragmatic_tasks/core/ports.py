# src/pragmatic_tasks/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The completion log and the status engine depend on Protocols instead of
concrete implementations. This keeps storage, recurrence rules and task
lookup swappable and makes testing easier.
"""

from collections.abc import Hashable, Iterator
from datetime import date
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..tasks.task import Task


class Resource(Protocol):
    """
    A stored byte stream identified by a stable path-like key.

    last_modified() returns an opaque stamp that changes whenever the
    content changes, or None when the resource does not exist.
    write_bytes() always replaces the whole content.
    """

    @property
    def key(self) -> str: ...

    def exists(self) -> bool: ...
    def last_modified(self) -> Hashable | None: ...
    def read_bytes(self) -> bytes: ...
    def write_bytes(self, data: bytes) -> None: ...


class Recurrence(Protocol):
    """
    Calendar rule enumerating occurrence dates.

    schedule_iterator(start) yields ascending dates without end, starting at
    `start` when `start` itself matches. Each call restarts the sequence.
    Implementations must be hashable and compare by value: the completion
    log caches query results keyed on them.
    """

    @property
    def display(self) -> str: ...

    def schedule_iterator(self, start: date) -> Iterator[date]: ...
    def __hash__(self) -> int: ...
    def __eq__(self, other: Any) -> bool: ...


class TaskResolver(Protocol):
    """Resolves an opaque dependency reference to a frozen Task."""

    def resolve(self, ref: str) -> Task: ...

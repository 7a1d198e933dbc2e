# src/pragmatic_tasks/tasks/task_catalog.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from datetime import date, datetime

from ..errors import ScheduleConfigurationError
from .task import Task
from .task_log import CompletionLogRegistry, LOG_REGISTRY
from .task_models import StatusResult

logger = logging.getLogger(__name__)


class TaskCatalog:
    """
    In-memory set of frozen tasks, keyed by task id.

    Acts as the dependency resolver for status derivation. Tasks are
    immutable, so only the id map itself needs the lock.
    """

    def __init__(
        self,
        tasks: list[Task] | None = None,
        *,
        registry: CompletionLogRegistry | None = None,
        detect_cycles: bool = True,
    ) -> None:
        self._lock = threading.Lock()
        self._tasks: dict[str, Task] = {}
        self._registry = registry or LOG_REGISTRY
        self._detect_cycles = detect_cycles
        for task in tasks or []:
            self.add(task)

    @property
    def registry(self) -> CompletionLogRegistry:
        return self._registry

    def add(self, task: Task) -> None:
        with self._lock:
            if task.task_id in self._tasks:
                raise ValueError(f"Duplicate task id: {task.task_id}")
            self._tasks[task.task_id] = task

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def resolve(self, ref: str) -> Task:
        task = self.get(ref)
        if task is None:
            raise ScheduleConfigurationError(f"Unknown doBefore task: {ref}")
        return task

    def __iter__(self) -> Iterator[Task]:
        with self._lock:
            tasks = list(self._tasks.values())
        return iter(tasks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._tasks

    def check_dependencies(self) -> None:
        """Fail fast on dangling references (cycles are caught at status time)."""
        for task in self:
            for ref in task.dependencies:
                if ref not in self:
                    raise ScheduleConfigurationError(f"Task {task.task_id!r}: unknown doBefore task {ref!r}")

    def status(self, task_id: str, now: date | datetime) -> StatusResult:
        return self.resolve(task_id).status(
            now,
            self,
            registry=self._registry,
            detect_cycles=self._detect_cycles,
        )

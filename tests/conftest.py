# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from pragmatic_tasks.core.ports import Recurrence
from pragmatic_tasks.core.state import AppState
from pragmatic_tasks.storage.resource import ResourceStore
from pragmatic_tasks.tasks.task import Task, TaskBuilder
from pragmatic_tasks.tasks.task_catalog import TaskCatalog
from pragmatic_tasks.tasks.task_log import LOG_REGISTRY, CompletionLogRegistry

from .fakes import MemoryResource


@pytest.fixture(autouse=True)
def _reset_log_registry():
    LOG_REGISTRY.clear()
    yield
    LOG_REGISTRY.clear()


@pytest.fixture()
def registry() -> CompletionLogRegistry:
    return CompletionLogRegistry()


@pytest.fixture()
def store(tmp_path: Path) -> ResourceStore:
    return ResourceStore(tmp_path / "logs")


@pytest.fixture()
def make_task() -> Callable[..., Task]:
    """
    Build a frozen task backed by a fresh MemoryResource unless one is given.

    The resource is reachable afterwards as task.log_resource.
    """

    def _make(
        task_id: str = "t1",
        *,
        on: date | None = None,
        recurrence: Recurrence | None = None,
        relative: bool = False,
        do_before: tuple[str, ...] = (),
        resource: MemoryResource | None = None,
    ) -> Task:
        builder = TaskBuilder(task_id).set_label(f"Task {task_id}")
        builder.set_on(on).set_recurrence(recurrence).set_relative(relative)
        for ref in do_before:
            builder.add_do_before(ref)
        builder.set_log_resource(resource or MemoryResource(key=f"mem/{task_id}.tasklog.xml"))
        return builder.freeze()

    return _make


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="ptasks-test",
        log_level="DEBUG",
        log_dir=tmp_path,
        data_dir=tmp_path,
        tasks_file=tmp_path / "tasks.json",
        logs_dir=tmp_path / "logs",
        timezone=None,
        detect_cycles=True,
        console_enabled=False,
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState with a real file-backed resource store and an empty catalog."""
    return AppState(
        settings=settings,
        catalog=TaskCatalog(),
        store=ResourceStore(settings.logs_dir),
    )

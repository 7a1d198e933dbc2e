# src/pragmatic_tasks/tasks/task_loader.py

"""
Task declarations from JSON.

    [
      {
        "id": "backup",
        "label": "Verify offsite backup",
        "on": "2024-01-01",
        "recurrence": "weekly",
        "relative": false,
        "assigned_to": [{"who": "Dan"}, {"who": "Kaori", "after": "3 days"}],
        "priorities": [{"priority": "Medium"}, {"priority": "High", "after": "1 week"}],
        "do_before": ["restore-test"],
        "custom_logs": ["hours"],
        "log": "backup.tasklog.xml"
      }
    ]
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from ..storage.resource import ResourceStore
from .recurrence import parse_recurrence
from .task import Task, TaskBuilder
from .task_catalog import TaskCatalog
from .task_log import CompletionLogRegistry
from .task_models import ZERO_DAYS, DayDuration, Priority, User

logger = logging.getLogger(__name__)


def _after(raw: Any) -> DayDuration:
    if raw is None or raw == "":
        return ZERO_DAYS
    return DayDuration.parse(raw)


def _build_task(decl: dict[str, Any], store: ResourceStore) -> Task:
    task_id = str(decl.get("id") or "").strip()
    if not task_id:
        raise ValueError("task declaration without id")

    try:
        builder = TaskBuilder(task_id)
        builder.set_label(decl.get("label"))
        if decl.get("on"):
            builder.set_on(date.fromisoformat(str(decl["on"])))
        if decl.get("recurrence"):
            builder.set_recurrence(parse_recurrence(str(decl["recurrence"])))
        builder.set_relative(bool(decl.get("relative", False)))

        for item in decl.get("assigned_to") or []:
            if isinstance(item, str):
                item = {"who": item}
            builder.add_assigned_to(User.parse(str(item.get("who", ""))), _after(item.get("after")))

        for item in decl.get("priorities") or []:
            if isinstance(item, str):
                item = {"priority": item}
            builder.add_priority(Priority.parse(str(item.get("priority", ""))), _after(item.get("after")))

        for ref in decl.get("do_before") or []:
            builder.add_do_before(str(ref))
        for name in decl.get("custom_logs") or []:
            builder.add_custom_log(str(name))

        log_key = decl.get("log") or f"{task_id}.tasklog.xml"
        builder.set_log_resource(store.resource(str(log_key)))
        builder.set_pay(decl.get("pay"))
        builder.set_cost(decl.get("cost"))
        return builder.freeze()
    except ValueError as e:
        raise ValueError(f"Task {task_id!r}: {e}") from e


def load_tasks(
    path: str | Path,
    store: ResourceStore,
    *,
    registry: CompletionLogRegistry | None = None,
    detect_cycles: bool = True,
) -> TaskCatalog:
    path = Path(path)
    data = json.loads(path.read_text("utf-8"))
    if isinstance(data, dict):
        data = data.get("tasks", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of task declarations")

    catalog = TaskCatalog(registry=registry, detect_cycles=detect_cycles)
    for decl in data:
        if not isinstance(decl, dict):
            raise ValueError(f"{path}: task declaration must be an object, got {type(decl).__name__}")
        catalog.add(_build_task(decl, store))
    catalog.check_dependencies()
    logger.info("Loaded %d tasks from %s", len(catalog), path)
    return catalog

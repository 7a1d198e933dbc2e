# tests/test_task_loader.py

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from pragmatic_tasks.errors import ScheduleConfigurationError
from pragmatic_tasks.storage.resource import ResourceStore
from pragmatic_tasks.tasks.task_loader import load_tasks
from pragmatic_tasks.tasks.task_models import DayDuration, DayUnit, Priority, StatusCategory, User


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_loads_full_declaration(tmp_path: Path, store: ResourceStore) -> None:
    path = _write(
        tmp_path,
        [
            {
                "id": "backup",
                "label": "Verify offsite backup",
                "on": "2024-01-01",
                "recurrence": "weekly",
                "assigned_to": ["Dan", {"who": "Kaori", "after": "3 days"}],
                "priorities": ["Medium", {"priority": "High", "after": "1 week"}],
                "do_before": ["restore-test"],
                "custom_logs": ["hours"],
                "pay": "10",
            },
            {"id": "restore-test", "log": "drills/restore.tasklog.xml"},
        ],
    )
    catalog = load_tasks(path, store)

    assert len(catalog) == 2
    backup = catalog.get("backup")
    assert backup is not None
    assert str(backup) == "Verify offsite backup"
    assert backup.on == date(2024, 1, 1)
    assert backup.recurrence_display == "Weekly"
    assert [a.who for a in backup.assignments] == [User("Dan"), User("Kaori")]
    assert backup.assignments[1].after == DayDuration(3)
    assert backup.priorities[1].priority is Priority.HIGH
    assert backup.priorities[1].after == DayDuration(1, DayUnit.WEEK)
    assert backup.dependencies == ("restore-test",)
    assert backup.custom_log_names == ("hours",)
    assert backup.pay == "10"
    assert backup.log_resource.key == "backup.tasklog.xml"

    restore = catalog.get("restore-test")
    assert restore.log_resource.key == "drills/restore.tasklog.xml"
    assert restore.log_resource.path == store.root / "drills" / "restore.tasklog.xml"


def test_loaded_tasks_derive_status(tmp_path: Path, store: ResourceStore) -> None:
    path = _write(tmp_path, {"tasks": [{"id": "a"}, {"id": "b", "on": "2024-01-01", "do_before": ["a"]}]})
    catalog = load_tasks(path, store)

    assert catalog.status("a", date(2024, 1, 1)).category is StatusCategory.NEW
    assert catalog.status("b", date(2024, 1, 1)).category is StatusCategory.DUE_TODAY_WAITING_ON_DEPENDENCY


def test_dangling_dependency_fails_at_load(tmp_path: Path, store: ResourceStore) -> None:
    path = _write(tmp_path, [{"id": "a", "do_before": ["missing"]}])
    with pytest.raises(ScheduleConfigurationError, match="missing"):
        load_tasks(path, store)


def test_invalid_declaration_names_the_task(tmp_path: Path, store: ResourceStore) -> None:
    path = _write(tmp_path, [{"id": "a", "priorities": ["Urgent"]}])
    with pytest.raises(ValueError, match="'a'"):
        load_tasks(path, store)


def test_freeze_errors_propagate(tmp_path: Path, store: ResourceStore) -> None:
    path = _write(tmp_path, [{"id": "a", "on": "2024-01-01", "priorities": ["Future"]}])
    with pytest.raises(ScheduleConfigurationError):
        load_tasks(path, store)


@pytest.mark.parametrize(
    "data",
    [
        [{"label": "no id"}],
        [{"id": "a"}, {"id": "a"}],
        ["just a string"],
        {"tasks": "nope"},
        [{"id": "a", "log": "../outside.xml"}],
    ],
)
def test_bad_files(tmp_path: Path, store: ResourceStore, data) -> None:
    with pytest.raises(ValueError):
        load_tasks(_write(tmp_path, data), store)

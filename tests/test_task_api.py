# tests/test_task_api.py

from __future__ import annotations

from datetime import date

import pytest

from pragmatic_tasks.tasks.task import TaskBuilder
from pragmatic_tasks.tasks.task_api import describe_task, record_action
from pragmatic_tasks.tasks.task_models import DayDuration, Priority, Status, StatusCategory, User

from .fakes import MemoryResource, StepRecurrence


def test_record_action_files_under_current_occurrence(make_task, registry) -> None:
    task = make_task(on=date(2024, 3, 1), recurrence=StepRecurrence(7))

    entry = record_action(
        task,
        Status.COMPLETED,
        now=date(2024, 3, 10),
        who=[User("Dan")],
        comments="late but done",
        registry=registry,
    )

    assert entry.scheduled_ons == (date(2024, 3, 1),)
    assert entry.on == date(2024, 3, 10)
    assert task.log(registry).entries() == (entry,)

    result = task.status(date(2024, 3, 10), registry=registry)
    assert result.category is StatusCategory.LATE
    assert result.date == date(2024, 3, 8)


def test_record_action_on_unscheduled_task(make_task, registry) -> None:
    task = make_task()
    entry = record_action(task, Status.PROGRESS, now=date(2024, 3, 10), registry=registry)

    assert entry.scheduled_ons == ()
    assert task.status(date(2024, 3, 10), registry=registry).description == "Progress Today"


def test_record_action_explicit_occurrence(make_task, registry) -> None:
    task = make_task(on=date(2024, 3, 1), recurrence=StepRecurrence(7))
    entry = record_action(
        task,
        Status.NOTHING_TO_DO,
        now=date(2024, 3, 2),
        scheduled_on=date(2024, 3, 8),
        registry=registry,
    )
    assert entry.scheduled_ons == (date(2024, 3, 8),)

    entry = record_action(task, Status.PROGRESS, now=date(2024, 3, 2), scheduled_on=None, registry=registry)
    assert entry.scheduled_ons == ()


def test_record_action_checks_custom_fields(registry) -> None:
    task = TaskBuilder("t").add_custom_log("hours").set_log_resource(MemoryResource()).freeze()

    entry = record_action(task, Status.COMPLETED, now=date(2024, 3, 2), custom={"hours": "2"}, registry=registry)
    assert dict(entry.custom) == {"hours": "2"}

    with pytest.raises(ValueError, match="miles"):
        record_action(task, Status.COMPLETED, now=date(2024, 3, 3), custom={"miles": "4"}, registry=registry)
    assert len(task.log(registry)) == 1


def test_describe_task(registry) -> None:
    task = (
        TaskBuilder("water")
        .set_label("Water plants")
        .set_on(date(2024, 3, 1))
        .set_recurrence(StepRecurrence(7))
        .add_assigned_to(User("Dan"))
        .add_assigned_to(User("Kaori"), DayDuration(2))
        .add_priority(Priority.LOW)
        .add_priority(Priority.HIGH, DayDuration(3))
        .set_log_resource(MemoryResource())
        .freeze()
    )

    line = describe_task(task, date(2024, 3, 5), registry=registry)

    assert line == "[water] Water plants | Late 2024-03-01 | priority=High | who=Dan, Kaori | every=Every 7 days"

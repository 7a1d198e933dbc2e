# tests/test_commands.py

from __future__ import annotations

from pragmatic_tasks.cli.commands import CommandRegistry
from pragmatic_tasks.cli.commands import registry as command_registry
from pragmatic_tasks.connectors.console_connector import handle_line
from pragmatic_tasks.tasks.task_models import Status

from .fakes import MemoryResource


def test_command_registry_routes_args(state) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def handler(state, args):
        seen.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["x"])

    assert reg.handle(state, "/a one two") == "ok"
    assert reg.handle(state, "/X three") == "ok"
    assert seen == [["one", "two"], ["three"]]
    assert "/a - a" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_tasks_lists_catalog(state, make_task) -> None:
    assert command_registry.handle(state, "/tasks") == "No tasks."

    state.catalog.add(make_task("water"))
    out = command_registry.handle(state, "/ls") or ""
    assert out.startswith("[water] Task water | New | priority=Medium | who=Unassigned")


def test_done_then_log(state, make_task) -> None:
    task = make_task("water")
    state.catalog.add(task)

    reply = command_registry.handle(state, "/done water finally watered") or ""
    assert reply == "Task water: logged Completed for no occurrence."

    entries = task.log().entries()
    assert [e.status for e in entries] == [Status.COMPLETED]
    assert entries[0].comments == "finally watered"

    out = command_registry.handle(state, "/log water") or ""
    assert "1 entries" in out
    assert "Completed - finally watered" in out

    status = command_registry.handle(state, "/status water") or ""
    assert "category: Completed" in status
    assert "comments: finally watered" in status


def test_commands_need_a_known_task(state) -> None:
    assert command_registry.handle(state, "/status") == "Task id is required."
    assert command_registry.handle(state, "/progress ghost") == "Unknown task: ghost"


def test_handle_line_reports_errors(state, make_task) -> None:
    state.catalog.add(make_task("broken", do_before=("ghost",)))

    assert handle_line(state, "/status broken") == "Error: Unknown doBefore task: ghost"
    assert handle_line(state, "hello").startswith("Not a command")
    assert handle_line(state, "/help").startswith("Available commands:")


def test_tasks_listing_reports_broken_logs_per_task(state, make_task) -> None:
    broken = MemoryResource(key="mem/broken.tasklog.xml", data=b"<tasklog><entry>")
    state.catalog.add(make_task("broken", resource=broken))
    state.catalog.add(make_task("water"))

    out = handle_line(state, "/tasks") or ""
    lines = out.splitlines()

    assert len(lines) == 2
    assert lines[0].startswith("[broken] Task broken | Error: Unparseable XML")
    assert lines[1].startswith("[water] Task water | New")

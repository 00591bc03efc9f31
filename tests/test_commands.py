# tests/test_commands.py

from __future__ import annotations

from datetime import datetime

from tsktrack.cli.commands import CommandRegistry, registry
from tsktrack.connectors.console_connector import run_single_command
from tsktrack.errors import TaskNotRunning
from tsktrack.notes import note_api
from tsktrack.tasks import task_api
from tsktrack.tasks.task_models import Task, TimeTrack


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(state, args):
        called.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["alpha"])

    assert reg.handle(state, "/a x y") == "ok"
    assert reg.handle(state, "/ALPHA") == "ok"
    assert called == [["x", "y"], []]
    assert "/a (also /alpha) - a" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_command_registry_turns_core_errors_into_replies(state) -> None:
    reg = CommandRegistry()

    def failing(state, args):
        raise TaskNotRunning()

    reg.register("f", failing, "f")
    assert reg.handle(state, "/f") == "Error: task is not running"


def test_new_list_done_flow(state) -> None:
    reply = registry.handle(state, "/new buy milk @home #errand") or ""
    assert reply.startswith("Task created: ")
    task_id = reply.split(": ", 1)[1]

    listing = registry.handle(state, "/list") or ""
    assert task_id in listing
    assert "@home" in listing and "#errand" in listing

    assert "is done" in (registry.handle(state, f"/done {task_id[:8]}") or "")
    assert registry.handle(state, "/list") == "No tasks."
    assert "[done]" in (registry.handle(state, "/ls --all") or "")


def test_time_tracking_commands(state) -> None:
    task = task_api.new_task(state, "x")

    assert "Started" in (registry.handle(state, f"/start {task.id} writing tests") or "")
    assert "running" in (registry.handle(state, "/list") or "")
    assert "Stopped" in (registry.handle(state, f"/stop {task.id}") or "")
    assert registry.handle(state, f"/stop {task.id}") == "Error: task is not running"
    assert task_api.load_task(state, task.id).timetracker[0].annotation == "writing tests"


def test_set_unset_and_show(state) -> None:
    task = task_api.new_task(state, "x #a %x-ref=1")

    registry.handle(state, f"/set {task.id} @proj prio:high")
    shown = registry.handle(state, f"/show {task.id}") or ""
    assert "project: proj" in shown
    assert "priority: High" in shown

    registry.handle(state, f"/unset {task.id} project priority #a x-ref")
    loaded = task_api.load_task(state, task.id)
    assert loaded.project is None
    assert loaded.priority is None
    assert loaded.tags == []
    assert "x-ref" not in loaded.metadata


def test_note_commands(state) -> None:
    task = task_api.new_task(state, "trip")

    assert "saved" in (registry.handle(state, f"/note {task.id} - [ ] pack bag") or "")
    shown = registry.handle(state, f"/note {task.id}") or ""
    assert "# trip" in shown
    assert "[ ] pack bag" in shown

    registry.handle(state, f"/del {task.id}")
    assert registry.handle(state, "/notes") == "No notes."
    assert "(orphaned)" in (registry.handle(state, "/notes --orphaned") or "")


def test_notemeta_command(state) -> None:
    task = task_api.new_task(state, "trip")
    registry.handle(state, f"/note {task.id} pack bag")

    reply = registry.handle(state, f"/notemeta {task.id} set X-Owner=me x-ref=12") or ""
    assert reply.endswith("x-owner=me, x-ref=12")
    assert note_api.load_note(state, task.id).metadata["x-owner"] == "me"

    reply = registry.handle(state, f"/notemeta {task.id} unset x-owner") or ""
    assert reply.endswith("x-ref=12")
    assert "x-owner" not in note_api.load_note(state, task.id).metadata

    assert (registry.handle(state, f"/notemeta {task.id} set owner=me") or "").startswith("Error:")
    assert (registry.handle(state, f"/notemeta {task.id} set x-owner") or "").startswith("Error:")
    assert (registry.handle(state, f"/notemeta {task.id} drop x-ref") or "").startswith("Usage:")


def test_report_command(state) -> None:
    task = Task.new("write report", now=datetime(2024, 5, 1, 8, 0))
    task.timetracker = [
        TimeTrack(start=datetime(2024, 5, 1, 23, 0), end=datetime(2024, 5, 2, 0, 30)),
    ]
    state.tasks.save(task)

    reply = registry.handle(state, "/report 2024-05-01 2024-05-04") or ""
    assert reply.splitlines() == [
        "2024-05-01",
        f"  {task.id}  01:00:00  write report",
        "2024-05-02",
        f"  {task.id}  00:30:00  write report",
        "2024-05-03",
        "  (nothing tracked)",
    ]

    assert (registry.handle(state, "/report 2024-05-03 2024-05-01") or "").startswith("Error:")
    assert (registry.handle(state, "/report yesterday") or "").startswith("Error:")
    assert (registry.handle(state, "/report") or "").startswith("Usage:")


def test_summary_commands(state) -> None:
    task_api.new_task(state, "a @home #x")
    task_api.new_task(state, "b @home #x")

    assert "2  home" in (registry.handle(state, "/projects") or "")
    assert "2  #x" in (registry.handle(state, "/tags") or "")
    assert f"* {state.settings.namespace}" in (registry.handle(state, "/ns") or "")
    assert "Tasks: 2" in (registry.handle(state, "/status") or "")


def test_run_single_command_exit_codes(state, capsys) -> None:
    assert run_single_command(state, ["new", "buy", "milk"]) == 0
    assert "Task created" in capsys.readouterr().out

    assert run_single_command(state, ["start", "does-not-exist"]) == 1
    assert "Error:" in capsys.readouterr().out

    assert run_single_command(state, ["bogus"]) == 1

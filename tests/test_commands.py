# tests/test_commands.py

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

import pytest

from finish_it.cli.commands import NOT_LOGGED_IN, CommandRegistry, registry
from finish_it.tasks.task_cache import STALE_NOTE
from finish_it.tasks.task_models import ALL, SortKey, TaskStatus

from .fakes import FakeBackend


def _login(state) -> str:
    return registry.handle(state, "/login ana@example.com Secret123") or ""


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, '/a x "y z"') == "h2:x,y z"
    assert reg.handle(state, "/bee", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_task_commands_require_login(state) -> None:
    for line in ("/tasks", "/dashboard", "/add hello", "/done 1", "/delete 1", "/refresh"):
        assert registry.handle(state, line) == NOT_LOGGED_IN


def test_login_persists_session_and_loads_tasks(state, backend: FakeBackend, settings) -> None:
    backend.add_task("Write report")

    reply = _login(state)

    assert "1 tasks loaded" in reply
    assert state.session.is_authenticated
    assert settings.session_path.exists()
    assert [t.title for t in state.cache.tasks] == ["Write report"]


def test_bad_login_reports_server_message(state) -> None:
    reply = registry.handle(state, "/login ana@example.com nope")
    assert reply == "Invalid credentials"
    assert not state.session.is_authenticated


def test_signup_mismatch_and_success(state, backend: FakeBackend) -> None:
    assert registry.handle(state, "/signup Bob bob@example.com abc123 abc124") == "Passwords do not match!"
    reply = registry.handle(state, "/signup Bob bob@example.com Abcdefgh1! Abcdefgh1!") or ""
    assert reply.startswith("User registered")
    assert "Password strength: strong" in reply
    assert "bob@example.com" in backend.users


def test_add_done_and_list_with_filters(state, backend: FakeBackend) -> None:
    _login(state)

    assert registry.handle(state, "/add --priority high Write report | quarterly numbers") == "Task created"
    registry.handle(state, "/add Buy milk")
    assert [t["title"] for t in backend.tasks.values()] == ["Write report", "Buy milk"]
    report_id = next(tid for tid, t in backend.tasks.items() if t["title"] == "Write report")
    assert backend.tasks[report_id]["priority"] == "high"
    assert backend.tasks[report_id]["description"] == "quarterly numbers"

    reply = registry.handle(state, f"/done {report_id}") or ""
    assert "marked as Completed" in reply
    assert backend.tasks[report_id]["status"] == "completed"
    assert state.cache.get(report_id).status is TaskStatus.COMPLETED

    registry.handle(state, "/filter status completed")
    listing = registry.handle(state, "/tasks") or ""
    assert "Write report" in listing
    assert "Buy milk" not in listing
    assert "(1 of 2)" in listing

    registry.handle(state, "/clear")
    registry.handle(state, "/search milk")
    listing = registry.handle(state, "/tasks") or ""
    assert "Buy milk" in listing
    assert "Write report" not in listing


def test_add_rejects_bad_options(state) -> None:
    _login(state)
    assert (registry.handle(state, "/add --priority extreme x") or "").startswith("Usage")
    assert "Invalid due date" in (registry.handle(state, "/add --due someday x") or "")
    assert "Missing value" in (registry.handle(state, "/add x --priority") or "")
    assert (registry.handle(state, "/add   ") or "").startswith("Usage")


def test_edit_and_delete(state, backend: FakeBackend) -> None:
    task_id = backend.add_task("Draft")
    _login(state)

    assert registry.handle(state, f"/edit {task_id} title Final draft") == "Task updated"
    assert backend.tasks[task_id]["title"] == "Final draft"
    assert registry.handle(state, f"/edit {task_id} status in-progress") == "Task updated"
    assert backend.tasks[task_id]["status"] == "in_progress"
    assert registry.handle(state, "/edit 999 title x") == "Task #999 not found."

    assert registry.handle(state, f"/delete {task_id}") == f"Task #{task_id} deleted."
    assert backend.tasks == {}
    assert state.cache.tasks == ()


def test_view_parameter_commands(state) -> None:
    assert registry.handle(state, "/sort title_desc") == "Sorting by title_desc."
    assert state.view.sort_key is SortKey.TITLE_DESC
    assert "Unknown sort key" in (registry.handle(state, "/sort bogus") or "")

    registry.handle(state, "/filter priority low")
    assert state.view.filter_priority == "low"
    assert (registry.handle(state, "/filter colour red") or "").startswith("Usage")

    registry.handle(state, "/clear")
    assert state.view.filter_priority == ALL
    assert state.view.sort_key is SortKey.CREATED_DESC


def test_dashboard_shows_stats_and_deadlines(state, backend: FakeBackend) -> None:
    soon = (datetime.now(timezone.utc) + timedelta(hours=6)).isoformat()
    backend.add_task("Ship release", status="completed", priority="high")
    backend.add_task("Call Bob", due_date=soon)
    _login(state)

    reply = registry.handle(state, "/dashboard") or ""

    assert "Total: 2" in reply
    assert "Completion: 50%" in reply
    assert "Productivity score: 55" in reply
    assert "Call Bob - Due today!" in reply


def test_auth_failure_ends_session(state, backend: FakeBackend, settings) -> None:
    _login(state)
    assert settings.session_path.exists()
    backend.tokens.clear()

    reply = registry.handle(state, "/refresh") or ""

    assert "log in again" in reply
    assert not state.session.is_authenticated
    assert not settings.session_path.exists()
    assert state.cache.tasks == ()


def test_logout(state, settings) -> None:
    _login(state)
    registry.handle(state, "/search x")
    assert registry.handle(state, "/logout") == "Logged out."
    assert not settings.session_path.exists()
    assert state.view.search_query == ""
    assert registry.handle(state, "/logout") == "Already logged out."


def test_bad_login_401_keeps_saved_session(state, backend: FakeBackend, settings) -> None:
    _login(state)
    backend.login_failure_status = 401

    reply = registry.handle(state, "/login ana@example.com wrong")

    assert reply == "Invalid credentials"
    assert state.session.is_authenticated
    assert settings.session_path.exists()


def test_mutation_succeeds_even_if_reload_fails(state, backend: FakeBackend) -> None:
    task_id = backend.add_task("Call Bob")
    _login(state)
    backend.list_status = 503

    reply = registry.handle(state, f"/done {task_id}") or ""
    assert reply.startswith(f"Task #{task_id} marked as Completed")
    assert reply.endswith(STALE_NOTE)
    assert backend.tasks[task_id]["status"] == "completed"

    assert registry.handle(state, "/add Write report") == f"Task created {STALE_NOTE}"
    assert [t["title"] for t in backend.tasks.values()] == ["Call Bob", "Write report"]

    backend.list_status = 200
    listing = registry.handle(state, "/tasks") or ""
    assert "Tasks (2 of 2)" in listing
    assert "Write report" in listing


def test_edit_can_clear_description_and_due(state, backend: FakeBackend) -> None:
    task_id = backend.add_task("Draft", description="old notes", due_date="2026-03-01T09:00:00+00:00")
    _login(state)

    assert registry.handle(state, f"/edit {task_id} description -") == "Task updated"
    assert registry.handle(state, f"/edit {task_id} due none") == "Task updated"

    assert backend.tasks[task_id]["description"] is None
    assert backend.tasks[task_id]["due_date"] is None
    task = state.cache.get(task_id)
    assert task.description is None
    assert task.due_date is None


@pytest.fixture()
def utc_minus_5(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TZ", "EST+05")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_task_list_shows_due_date_in_local_time(state, backend: FakeBackend, utc_minus_5) -> None:
    # 02:00 UTC on the 6th is still the evening of the 5th at UTC-5.
    backend.add_task("Pay rent", due_date="2026-01-06T02:00:00Z")
    _login(state)

    listing = registry.handle(state, "/tasks") or ""

    assert "due 2026-01-05" in listing

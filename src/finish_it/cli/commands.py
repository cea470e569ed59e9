# src/finish_it/cli/commands.py

from __future__ import annotations

import inspect
import logging
import shlex
from collections.abc import Callable, Sequence
from typing import cast

from ..api.errors import AuthFailure, FinishItError, friendly_error_message
from ..api.validation import password_strength
from ..core.state import AppState
from ..tasks.task_cache import STALE_NOTE
from ..tasks.task_models import ALL, SortKey, Task, TaskPriority, TaskStatus, parse_timestamp
from ..tasks.view_model import (
    compute_stats,
    deadline_info,
    derive_recent_tasks,
    derive_upcoming_deadlines,
    filter_and_sort,
)
from .bootstrap import persist_session

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

NOT_LOGGED_IN = "Not logged in. Use /login <email> <password>."


class CommandRegistry:
    """Slash-command registry used by the console (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        API errors become user-facing messages; an AuthFailure also ends the session.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            # Unbalanced quotes: fall back to whitespace splitting.
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except AuthFailure as e:
            logger.info("Auth failure in /%s; ending session", name)
            state.end_session()
            return friendly_error_message(e)
        except FinishItError as e:
            logger.info("/%s failed: %s", name, e.message)
            return friendly_error_message(e)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _parse_status(raw: str) -> TaskStatus | None:
    try:
        return TaskStatus(raw.strip().lower().replace("-", "_"))
    except ValueError:
        return None


def _parse_priority(raw: str) -> TaskPriority | None:
    try:
        return TaskPriority(raw.strip().lower())
    except ValueError:
        return None


def _status_label(status: TaskStatus) -> str:
    return {
        TaskStatus.COMPLETED: "Completed",
        TaskStatus.IN_PROGRESS: "In Progress",
        TaskStatus.TODO: "To Do",
    }.get(status, "Unknown")


def _format_task(task: Task) -> str:
    mark = "x" if task.status == TaskStatus.COMPLETED else ("~" if task.status == TaskStatus.IN_PROGRESS else " ")
    line = f"[{mark}] #{task.id} {task.title} [{task.priority.value.upper()}] ({_status_label(task.status)})"
    if task.due_date is not None:
        line += f" due {task.due_date.astimezone().date().isoformat()}"
    if task.description:
        line += f"\n      {task.description}"
    return line


def _format_deadline(task: Task) -> str:
    info = deadline_info(task)
    if info is None:
        return f"  #{task.id} {task.title}"
    if info.urgent:
        when = "Due today!"
    else:
        when = f"Due in {info.days_until_due} days"
    flag = "!!" if info.urgent else ("! " if info.due_soon else "  ")
    return f"{flag}#{task.id} {task.title} - {when}"


def _require_session(state: AppState) -> str | None:
    if not state.session.is_authenticated:
        return NOT_LOGGED_IN
    return None


def _ensure_loaded(state: AppState) -> None:
    if not state.cache.loaded:
        state.cache.refresh()


def _find_task(state: AppState, raw_id: str) -> Task | None:
    _ensure_loaded(state)
    return state.cache.get(raw_id)


def _describe_view(state: AppState) -> str:
    v = state.view
    query = v.search_query or "-"
    return (
        f"search={query} status={v.filter_status} "
        f"priority={v.filter_priority} sort={v.sort_key}"
    )


# ---- account ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_signup(state: AppState, args: list[str]) -> str:
    """/signup <name> <email> <password> <confirm>"""
    if len(args) != 4:
        return "Usage: /signup <name> <email> <password> <confirm_password>"
    name, email, password, confirm = args
    message = state.client.signup(name, email, password, confirm)
    return f"{message}\nPassword strength: {password_strength(password)}. Use /login {email} <password>."


def cmd_login(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/login <email> <password>"""
    if len(args) != 2:
        return "Usage: /login <email> <password>"
    email, password = args

    state.client.login(email, password)
    state.cache.clear()
    persist_session(state)

    if emit:
        emit("Login successful! Loading your tasks...")
    state.cache.refresh()
    return f"Welcome back, {email}! {len(state.cache.tasks)} tasks loaded."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if not state.session.is_authenticated:
        return "Already logged out."
    state.end_session()
    state.reset_view()
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    if not state.session.is_authenticated:
        return NOT_LOGGED_IN
    return f"Logged in as {state.session.email or 'unknown user'} ({state.settings.api_url})."


# ---- views ----


def cmd_dashboard(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    err = _require_session(state)
    if err is not None:
        return err

    if emit:
        emit("Loading dashboard...")
    state.cache.refresh()
    tasks = list(state.cache.tasks)
    settings = state.settings

    stats = compute_stats(tasks, with_productivity=True)
    lines = [
        "Dashboard:",
        f"  Total: {stats.total}  Completed: {stats.completed}  "
        f"In progress: {stats.in_progress}  To do: {stats.todo}",
        f"  Completion: {stats.completion_percentage}%  Productivity score: {stats.productivity_score}",
        "",
        "Recent tasks:",
    ]

    recent = derive_recent_tasks(tasks, settings.recent_limit)
    if recent:
        lines.extend(f"  {_format_task(t)}" for t in recent)
    else:
        lines.append("  No tasks yet. Use /add <title> to create one.")

    lines.extend(["", "Upcoming deadlines:"])
    upcoming = derive_upcoming_deadlines(
        tasks,
        settings.upcoming_window_days,
        settings.upcoming_limit,
    )
    if upcoming:
        lines.extend(_format_deadline(t) for t in upcoming)
    else:
        lines.append("  No upcoming deadlines.")

    return "\n".join(lines)


def cmd_tasks(state: AppState, args: list[str]) -> str:
    err = _require_session(state)
    if err is not None:
        return err

    _ensure_loaded(state)
    tasks = state.cache.tasks
    shown = filter_and_sort(tasks, state.view)

    header = f"Tasks ({len(shown)} of {len(tasks)}) [{_describe_view(state)}]"
    if not shown:
        hint = "Use /clear to reset filters." if tasks else "Use /add <title> to create one."
        return f"{header}\n  No tasks found. {hint}"
    return "\n".join([header, *(f"  {_format_task(t)}" for t in shown)])


def cmd_search(state: AppState, args: list[str]) -> str:
    state.view.search_query = " ".join(args).strip()
    if not state.view.search_query:
        return "Search cleared."
    return f"Searching for: {state.view.search_query}"


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter status <todo|in_progress|completed|all>
    /filter priority <low|medium|high|all>
    """
    usage = "Usage: /filter status <todo|in_progress|completed|all> | /filter priority <low|medium|high|all>"
    if len(args) != 2:
        return usage

    field_name, raw = args[0].lower(), args[1].lower()

    if field_name == "status":
        if raw == ALL:
            state.view.filter_status = ALL
            return "Status filter: all."
        status = _parse_status(raw)
        if status is None:
            return usage
        state.view.filter_status = status
        return f"Status filter: {status.value}."

    if field_name == "priority":
        if raw == ALL:
            state.view.filter_priority = ALL
            return "Priority filter: all."
        priority = _parse_priority(raw)
        if priority is None:
            return usage
        state.view.filter_priority = priority
        return f"Priority filter: {priority.value}."

    return usage


def cmd_sort(state: AppState, args: list[str]) -> str:
    keys = ", ".join(k.value for k in SortKey)
    if len(args) != 1:
        return f"Usage: /sort <{keys}>"
    try:
        state.view.sort_key = SortKey(args[0].lower())
    except ValueError:
        return f"Unknown sort key. Use one of: {keys}"
    return f"Sorting by {state.view.sort_key.value}."


def cmd_clear(state: AppState, args: list[str]) -> str:
    state.reset_view()
    return "Filters cleared."


def cmd_view(state: AppState, args: list[str]) -> str:
    return f"Current view: {_describe_view(state)}"


def cmd_refresh(state: AppState, args: list[str]) -> str:
    err = _require_session(state)
    if err is not None:
        return err
    state.cache.refresh()
    return f"{len(state.cache.tasks)} tasks loaded."


# ---- mutations ----


def _split_options(args: Sequence[str], names: set[str]) -> tuple[dict[str, str], list[str]]:
    opts: dict[str, str] = {}
    rest: list[str] = []
    it = iter(args)
    for a in it:
        if a.startswith("--") and a[2:] in names:
            value = next(it, None)
            if value is None:
                raise ValueError(f"Missing value for {a}")
            opts[a[2:]] = value
        else:
            rest.append(a)
    return opts, rest


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add [--priority p] [--status s] [--due YYYY-MM-DD] <title> [| description]"""
    err = _require_session(state)
    if err is not None:
        return err

    usage = "Usage: /add [--priority low|medium|high] [--status s] [--due YYYY-MM-DD] <title> [| description]"
    try:
        opts, rest = _split_options(args, {"priority", "status", "due"})
    except ValueError as e:
        return f"{e}. {usage}"

    text = " ".join(rest)
    title, _, description = text.partition("|")
    if not title.strip():
        return usage

    priority = _parse_priority(opts.get("priority", "medium"))
    status = _parse_status(opts.get("status", "todo"))
    if priority is None or status is None:
        return usage

    due_date = None
    if "due" in opts:
        due_date = parse_timestamp(opts["due"])
        if due_date is None:
            return f"Invalid due date: {opts['due']}. {usage}"

    message = state.cache.create(
        title.strip(),
        description=description.strip() or None,
        priority=priority,
        status=status,
        due_date=due_date,
    )
    return message


_CLEAR_VALUES = {"-", "none"}


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> <title|description|priority|status|due> <value>

    Use "-" or "none" as the value to clear a description or due date.
    """
    err = _require_session(state)
    if err is not None:
        return err

    usage = "Usage: /edit <id> <title|description|priority|status|due> <value>"
    if len(args) < 3:
        return usage

    raw_id, field_name, value = args[0], args[1].lower(), " ".join(args[2:]).strip()
    task = _find_task(state, raw_id)
    if task is None:
        return f"Task #{raw_id} not found."

    if field_name == "description" and value.lower() in _CLEAR_VALUES:
        return state.cache.update(task.id, description=None)

    if field_name in ("title", "description"):
        return state.cache.update(task.id, **{field_name: value})

    if field_name == "priority":
        priority = _parse_priority(value)
        if priority is None:
            return usage
        return state.cache.update(task.id, priority=priority)

    if field_name == "status":
        status = _parse_status(value)
        if status is None:
            return usage
        return state.cache.update(task.id, status=status)

    if field_name == "due":
        if value.lower() in _CLEAR_VALUES:
            return state.cache.update(task.id, due_date=None)
        due = parse_timestamp(value)
        if due is None:
            return f"Invalid due date: {value}."
        return state.cache.update(task.id, due_date=due)

    return usage


def _status_command(status: TaskStatus) -> CommandHandler2:
    def handler(state: AppState, args: list[str]) -> str:
        err = _require_session(state)
        if err is not None:
            return err
        if len(args) != 1:
            return "Usage: /<command> <id>"
        task = _find_task(state, args[0])
        if task is None:
            return f"Task #{args[0]} not found."
        message = state.cache.set_status(task.id, status)
        reply = f"Task #{task.id} marked as {_status_label(status)}: {task.title}"
        if message.endswith(STALE_NOTE):
            reply += f" {STALE_NOTE}"
        return reply

    return handler


def cmd_delete(state: AppState, args: list[str]) -> str:
    err = _require_session(state)
    if err is not None:
        return err
    if len(args) != 1:
        return "Usage: /delete <id>"
    task = _find_task(state, args[0])
    if task is None:
        return f"Task #{args[0]} not found."
    state.cache.delete(task.id)
    return f"Task #{task.id} deleted."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("signup", cmd_signup, help_text="Create an account: /signup <name> <email> <password> <confirm>.")
registry.register("login", cmd_login, help_text="Sign in: /login <email> <password>.")
registry.register("logout", cmd_logout, help_text="Sign out and forget the saved session.")
registry.register("whoami", cmd_whoami, help_text="Show the current account.")
registry.register("dashboard", cmd_dashboard, help_text="Stats, recent tasks and upcoming deadlines.", aliases=["dash"])
registry.register("tasks", cmd_tasks, help_text="List tasks using the current search/filter/sort.", aliases=["ls"])
registry.register("search", cmd_search, help_text="Search title/description: /search <text> (empty clears).")
registry.register("filter", cmd_filter, help_text="/filter status <value|all> | /filter priority <value|all>.")
registry.register("sort", cmd_sort, help_text="Sort tasks: /sort <created_desc|created_asc|title_asc|title_desc|priority|status>.")
registry.register("clear", cmd_clear, help_text="Reset search, filters and sort.")
registry.register("view", cmd_view, help_text="Show the current search/filter/sort.")
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the server.")
registry.register("add", cmd_add, help_text="Add a task: /add [--priority p] [--status s] [--due date] <title> [| description].")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> <title|description|priority|status|due> <value> (\"-\" clears description or due).")
registry.register("start", _status_command(TaskStatus.IN_PROGRESS), help_text="Mark a task as in progress: /start <id>.")
registry.register("done", _status_command(TaskStatus.COMPLETED), help_text="Mark a task as completed: /done <id>.")
registry.register("todo", _status_command(TaskStatus.TODO), help_text="Move a task back to to-do: /todo <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])

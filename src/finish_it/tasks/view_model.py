# src/finish_it/tasks/view_model.py

"""
Task view model.

Pure helpers that turn the raw task collection into what the dashboard and the
task list display:
- compute_stats / productivity_score: counters and percentages,
- filter_and_sort: search + status/priority filters + ordering,
- derive_upcoming_deadlines / deadline_info: the deadline panel,
- derive_recent_tasks: the "recent tasks" panel.

Nothing here performs I/O or mutates its inputs, and no function raises for
well-typed input (empty collections included).
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

from .task_models import (
    ALL,
    DeadlineInfo,
    DerivedStats,
    SortKey,
    Task,
    TaskPriority,
    TaskStatus,
    ViewParameters,
)

HIGH_PRIORITY_BONUS = 5
HIGH_PRIORITY_BONUS_CAP = 20

URGENT_DAYS = 1
DUE_SOON_DAYS = 3

_PRIORITY_RANK = {
    TaskPriority.HIGH: 3,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 1,
}

_STATUS_RANK = {
    TaskStatus.TODO: 3,
    TaskStatus.IN_PROGRESS: 2,
    TaskStatus.COMPLETED: 1,
}

_DAY_SECONDS = 24 * 60 * 60


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _now(now: datetime | None) -> datetime:
    return _aware(now) if now is not None else datetime.now(timezone.utc)


def productivity_score(tasks: Sequence[Task]) -> int:
    """
    Completion ratio (0..100) plus a bonus for finished high-priority work.

    Each completed high-priority task adds 5 points (20 at most); the result is
    clamped to 0..100.
    """
    total = len(tasks)
    if total == 0:
        return 0

    completed = 0
    high_completed = 0
    for t in tasks:
        if t.status == TaskStatus.COMPLETED:
            completed += 1
            if t.priority == TaskPriority.HIGH:
                high_completed += 1

    score = 100.0 * completed / total
    score += min(HIGH_PRIORITY_BONUS * high_completed, HIGH_PRIORITY_BONUS_CAP)
    return max(0, min(100, _round_half_up(score)))


def compute_stats(tasks: Sequence[Task], *, with_productivity: bool = False) -> DerivedStats:
    total = len(tasks)
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
    in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS)
    todo = sum(1 for t in tasks if t.status == TaskStatus.TODO)

    percentage = _round_half_up(100.0 * completed / total) if total else 0

    return DerivedStats(
        total=total,
        completed=completed,
        in_progress=in_progress,
        todo=todo,
        completion_percentage=percentage,
        productivity_score=productivity_score(tasks) if with_productivity else None,
    )


def _matches_query(task: Task, needle: str) -> bool:
    if needle in (task.title or "").lower():
        return True
    return bool(task.description) and needle in task.description.lower()


def _sort_by_created(tasks: list[Task], *, descending: bool) -> list[Task]:
    # Undated tasks keep their relative order and always go last.
    dated = [t for t in tasks if t.created_at is not None]
    undated = [t for t in tasks if t.created_at is None]
    dated.sort(key=lambda t: _aware(t.created_at), reverse=descending)  # type: ignore[arg-type]
    return dated + undated


def _sort(tasks: list[Task], sort_key: SortKey | str) -> list[Task]:
    try:
        key = SortKey(sort_key)
    except ValueError:
        return tasks

    if key is SortKey.CREATED_DESC:
        return _sort_by_created(tasks, descending=True)
    if key is SortKey.CREATED_ASC:
        return _sort_by_created(tasks, descending=False)

    if key in (SortKey.TITLE_ASC, SortKey.TITLE_DESC):
        # Python's sort stays stable with reverse=True, so ties keep filtered order.
        tasks.sort(
            key=lambda t: ((t.title or "").casefold(), t.title or ""),
            reverse=key is SortKey.TITLE_DESC,
        )
        return tasks

    if key is SortKey.PRIORITY:
        tasks.sort(key=lambda t: -_PRIORITY_RANK.get(t.priority, 0))
        return tasks

    tasks.sort(key=lambda t: -_STATUS_RANK.get(t.status, 0))
    return tasks


def filter_and_sort(tasks: Iterable[Task], params: ViewParameters) -> list[Task]:
    """
    Apply search, status filter, priority filter and ordering, in that order.

    Returns a new list; the input collection is left untouched.
    """
    out = list(tasks)

    needle = (params.search_query or "").strip().lower()
    if needle:
        out = [t for t in out if _matches_query(t, needle)]

    if params.filter_status != ALL:
        out = [t for t in out if t.status == params.filter_status]

    if params.filter_priority != ALL:
        out = [t for t in out if t.priority == params.filter_priority]

    return _sort(out, params.sort_key)


def derive_recent_tasks(tasks: Iterable[Task], max_count: int = 5) -> list[Task]:
    return _sort_by_created(list(tasks), descending=True)[: max(0, max_count)]


def derive_upcoming_deadlines(
    tasks: Iterable[Task],
    window_days: int | None = 7,
    max_count: int = 3,
    *,
    now: datetime | None = None,
) -> list[Task]:
    """
    Tasks due strictly after `now`, soonest first, capped at max_count.

    window_days limits how far ahead to look; None disables the horizon.
    """
    now_dt = _now(now)
    horizon = now_dt + timedelta(days=window_days) if window_days is not None else None

    upcoming: list[Task] = []
    for t in tasks:
        if t.due_date is None:
            continue
        due = _aware(t.due_date)
        if due <= now_dt:
            continue
        if horizon is not None and due > horizon:
            continue
        upcoming.append(t)

    upcoming.sort(key=lambda t: _aware(t.due_date))  # type: ignore[arg-type]
    return upcoming[: max(0, max_count)]


def deadline_info(task: Task, *, now: datetime | None = None) -> DeadlineInfo | None:
    """Days left until the due date (rounded up) plus urgency flags."""
    if task.due_date is None:
        return None

    delta = _aware(task.due_date) - _now(now)
    days = math.ceil(delta.total_seconds() / _DAY_SECONDS)
    return DeadlineInfo(
        task=task,
        days_until_due=days,
        urgent=days <= URGENT_DAYS,
        due_soon=days <= DUE_SOON_DAYS,
    )

# src/finish_it/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Literal

ALL = "all"


class TaskStatus(StrEnum):
    """Task lifecycle status as reported by the API."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_api(cls, raw: Any) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.TODO


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_api(cls, raw: Any) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


class SortKey(StrEnum):
    CREATED_DESC = "created_desc"
    CREATED_ASC = "created_asc"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"
    PRIORITY = "priority"
    STATUS = "status"


def parse_timestamp(raw: Any) -> datetime | None:
    """
    Best-effort timestamp parsing for API payloads.

    Accepts ISO-8601 strings (a trailing "Z" included), epoch seconds and
    epoch milliseconds. Naive values are treated as UTC. Returns None for
    anything it cannot read.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, (int, float)):
        ts = float(raw)
        # Millisecond epochs (JS Date.now()) are three orders of magnitude larger.
        if abs(ts) > 1e11:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        s = str(raw).strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _format_timestamp(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


@dataclass(slots=True)
class Task:
    id: Any
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    created_at: datetime | None = None
    due_date: datetime | None = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Task:
        """Build a Task from one JSON record of GET /api/tasks."""
        task_id = data.get("id")
        if task_id is None:
            # Mongo-style backends expose the identifier as "_id".
            task_id = data.get("_id")

        raw_desc = data.get("description")
        description = None if raw_desc is None else str(raw_desc)

        return cls(
            id=task_id,
            title=str(data.get("title") or ""),
            description=description,
            status=TaskStatus.from_api(data.get("status")),
            priority=TaskPriority.from_api(data.get("priority")),
            created_at=parse_timestamp(data.get("created_at")),
            due_date=parse_timestamp(data.get("due_date")),
        )

    def to_payload(self) -> dict[str, Any]:
        """Full JSON body for PUT /api/tasks/{id}."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "created_at": _format_timestamp(self.created_at),
            "due_date": _format_timestamp(self.due_date),
        }


StatusFilter = TaskStatus | Literal["all"]
PriorityFilter = TaskPriority | Literal["all"]


@dataclass(slots=True)
class ViewParameters:
    """
    Filter/sort/search selections of the current session.

    A fresh instance is the "cleared filters" state.
    """

    search_query: str = ""
    filter_status: StatusFilter = ALL
    filter_priority: PriorityFilter = ALL
    sort_key: SortKey = SortKey.CREATED_DESC


@dataclass(slots=True, frozen=True)
class DerivedStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0
    completion_percentage: int = 0
    productivity_score: int | None = None


@dataclass(slots=True, frozen=True)
class DeadlineInfo:
    task: Task
    days_until_due: int
    urgent: bool
    due_soon: bool

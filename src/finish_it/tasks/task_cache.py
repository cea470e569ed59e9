# src/finish_it/tasks/task_cache.py

"""
Client-side task cache.

The local collection is always replaced wholesale by a full GET, never patched:
- every successful mutation triggers exactly one refresh,
- a failed mutation leaves the collection as it was,
- a failed refresh after a successful mutation does not undo or fail the
  mutation: the cache is marked unloaded so the next view re-fetches,
- each refresh takes a ticket; a result is applied only if no newer refresh
  has been started since, so a slow stale response cannot overwrite a fresh one.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ..api.errors import AuthFailure, FinishItError
from ..core.ports import TaskApi
from .task_models import Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

STALE_NOTE = "The task list may be out of date; use /refresh."

_EDITABLE_FIELDS = {"title", "description", "status", "priority", "due_date"}


class TaskCache:
    def __init__(self, api: TaskApi) -> None:
        self._api = api
        self._lock = threading.Lock()
        self._tasks: tuple[Task, ...] = ()
        self._issued = 0
        self._loaded = False

    @property
    def tasks(self) -> tuple[Task, ...]:
        with self._lock:
            return self._tasks

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, task_id: Any) -> Task | None:
        wanted = str(task_id)
        for t in self.tasks:
            if str(t.id) == wanted:
                return t
        return None

    # ---- refresh ----

    def begin_refresh(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def apply(self, ticket: int, tasks: Iterable[Task]) -> bool:
        """Install a fetched collection unless a newer refresh was started."""
        snapshot = tuple(tasks)
        with self._lock:
            if ticket != self._issued:
                logger.debug("Discarding stale task list ticket=%s latest=%s", ticket, self._issued)
                return False
            self._tasks = snapshot
            self._loaded = True
        logger.debug("Task cache replaced: %d tasks (ticket=%s)", len(snapshot), ticket)
        return True

    def refresh(self) -> bool:
        ticket = self.begin_refresh()
        fetched = self._api.list_tasks()
        return self.apply(ticket, fetched)

    def clear(self) -> None:
        with self._lock:
            # Invalidate anything still in flight.
            self._issued += 1
            self._tasks = ()
            self._loaded = False

    def _refresh_after_mutation(self, message: str) -> str:
        try:
            self.refresh()
        except AuthFailure:
            raise
        except FinishItError as e:
            logger.warning("Refresh after mutation failed: %s", e.message)
            with self._lock:
                self._loaded = False
            return f"{message} {STALE_NOTE}"
        return message

    # ---- mutations ----

    def create(
        self,
        title: str,
        description: str | None = None,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        status: TaskStatus | str = TaskStatus.TODO,
        due_date: datetime | None = None,
    ) -> str:
        message = self._api.create_task(
            title,
            description=description,
            priority=priority,
            status=status,
            due_date=due_date,
        )
        return self._refresh_after_mutation(message)

    def update(self, task_id: Any, **changes: Any) -> str:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        current = self.get(task_id)
        if current is not None:
            payload = current.to_payload()
        else:
            logger.debug("Task %s not cached; sending partial update", task_id)
            payload = {}

        for name, value in changes.items():
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, (TaskStatus, TaskPriority)):
                value = value.value
            payload[name] = value

        message = self._api.update_task(task_id, payload)
        return self._refresh_after_mutation(message)

    def set_status(self, task_id: Any, status: TaskStatus | str) -> str:
        return self.update(task_id, status=TaskStatus(status))

    def delete(self, task_id: Any) -> str:
        message = self._api.delete_task(task_id)
        return self._refresh_after_mutation(message)

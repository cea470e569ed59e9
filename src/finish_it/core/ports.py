# src/finish_it/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

TaskCache depends on this Protocol rather than on the HTTP client, so tests can
swap in an in-memory fake.
"""

from collections.abc import Mapping
from typing import Any, Protocol


class TaskApi(Protocol):
    """Task endpoints of the Finish-It API."""

    def list_tasks(self) -> list[Any]: ...

    def create_task(
            self,
            title: str,
            description: str | None = None,
            priority: Any = "medium",
            status: Any = "todo",
            due_date: Any = None,
    ) -> str: ...

    def update_task(self, task_id: Any, payload: Mapping[str, Any]) -> str: ...

    def delete_task(self, task_id: Any) -> str: ...

# src/finish_it/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..api.client import FinishItClient
from ..api.session import Session, SessionStore
from ..tasks.task_cache import TaskCache
from ..tasks.task_models import ViewParameters


@dataclass
class AppState:
    # Settings object (config.Settings or a test double with the same attributes).
    settings: Any

    session: Session
    client: FinishItClient
    cache: TaskCache

    # None when the session should not outlive the process.
    session_store: SessionStore | None = None

    view: ViewParameters = field(default_factory=ViewParameters)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def reset_view(self) -> None:
        self.view = ViewParameters()

    def end_session(self) -> None:
        """Logout / 401 path: forget the token everywhere and drop cached tasks."""
        self.session.logout()
        self.cache.clear()
        if self.session_store is not None:
            self.session_store.clear()

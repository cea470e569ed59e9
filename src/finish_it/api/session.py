# src/finish_it/api/session.py

"""
Session context.

The token issued at login lives on an explicit Session object that is handed to
the API client, instead of being looked up from ambient storage. SessionStore
optionally keeps it on disk between runs.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class Session:
    token: str | None = None
    email: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def login(self, token: str, email: str | None = None) -> None:
        token = (token or "").strip()
        if not token:
            raise ValueError("token is required")
        self.token = token
        self.email = email

    def logout(self) -> None:
        self.token = None
        self.email = None

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


class SessionStore:
    """JSON file holding the last session (kept private on disk)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session:
        if not self._path.exists():
            return Session()
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self._path)
            return Session()

        if not isinstance(data, dict):
            return Session()

        token = data.get("token")
        email = data.get("email")
        if not isinstance(token, str) or not token.strip():
            return Session()

        logger.info("Restored session from %s", self._path)
        return Session(token=token.strip(), email=email if isinstance(email, str) else None)

    def save(self, session: Session) -> None:
        if not session.is_authenticated:
            self.clear()
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"token": session.token, "email": session.email}), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # The token is a credential.
            os.chmod(self._path, 0o600)
        logger.debug("Session saved to %s", self._path)

    def clear(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path.unlink()

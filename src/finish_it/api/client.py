# src/finish_it/api/client.py

"""
HTTP client for the Finish-It REST API.

Endpoints:
- POST   /api/users/signup
- POST   /api/users/login
- GET    /api/tasks
- POST   /api/tasks
- PUT    /api/tasks/{id}
- DELETE /api/tasks/{id}

Every response body is an object with a boolean "success" (plus "message",
"token" or "tasks"). Failures are mapped onto finish_it.api.errors. An HTTP 401 on an
authenticated request clears the session before AuthFailure is raised; on
login or signup it is just a rejection carrying the server message.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx

from ..tasks.task_models import Task, TaskPriority, TaskStatus
from .errors import ApiRejected, AuthFailure, NetworkFailure, ValidationFailure
from .session import Session
from .validation import validate_signup, validate_title

logger = logging.getLogger(__name__)

_MALFORMED = "Server response error. Please try again."


def make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


class FinishItClient:
    """Synchronous API client bound to one explicit Session."""

    def __init__(
        self,
        base_url: str,
        session: Session,
        *,
        timeout: httpx.Timeout | float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base_url = (base_url or "").strip()
        if not base_url:
            raise ValueError("API base URL is not set. Set FINISH_IT_API_URL in your .env.")

        self.session = session
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout if timeout is not None else make_timeout(5.0, 15.0),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    # ---- lifecycle ----

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> FinishItClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ---- low-level ----

    def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Mapping[str, Any] | None = None,
        authenticated: bool = True,
        failure_message: str | None = None,
    ) -> dict[str, Any]:
        headers: dict[str, str] = {}
        if authenticated:
            if not self.session.is_authenticated:
                raise AuthFailure("Not logged in.")
            headers.update(self.session.auth_headers())

        try:
            resp = self._http.request(method, path, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.info("API: timeout on %s %s", method, path)
            raise NetworkFailure("The server took too long to respond. Please try again.") from e
        except httpx.TransportError as e:
            logger.info("API: transport error on %s %s (%s)", method, path, e.__class__.__name__)
            raise NetworkFailure() from e

        logger.debug("API: %s %s -> %s", method, path, resp.status_code)

        # On login/signup a 401 means bad credentials, not an expired token.
        if resp.status_code == 401 and authenticated:
            logger.info("API: unauthorized on %s %s; clearing session", method, path)
            self.session.logout()
            raise AuthFailure(status_code=401)

        try:
            data = resp.json()
        except ValueError:
            if resp.is_error:
                raise ApiRejected(
                    failure_message or f"HTTP error! status: {resp.status_code}",
                    status_code=resp.status_code,
                )
            raise ValidationFailure(_MALFORMED, status_code=resp.status_code)

        if not isinstance(data, dict):
            raise ValidationFailure(_MALFORMED, status_code=resp.status_code)

        if resp.is_error:
            raise ApiRejected(
                _message(data) or failure_message or f"HTTP error! status: {resp.status_code}",
                status_code=resp.status_code,
            )

        if not data.get("success"):
            raise ApiRejected(_message(data) or failure_message, status_code=resp.status_code)

        return data

    # ---- users ----

    def login(self, email: str, password: str) -> str:
        """Authenticate and store the issued token on the session."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationFailure("Email and password are required.")

        data = self._request(
            "POST",
            "/api/users/login",
            payload={"email": email, "password": password},
            authenticated=False,
            failure_message="Login failed. Please try again.",
        )

        token = data.get("token")
        if not isinstance(token, str) or not token.strip():
            raise ValidationFailure("Login response did not include a token.")

        self.session.login(token, email)
        logger.info("Logged in as %s", email)
        return self.session.token or ""

    def signup(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str | None = None,
    ) -> str:
        validate_signup(name, email, password, confirm_password)

        data = self._request(
            "POST",
            "/api/users/signup",
            payload={"name": name.strip(), "email": email.strip(), "password": password},
            authenticated=False,
            failure_message="Signup failed. Please try again.",
        )

        logger.info("Signed up %s", email.strip())
        return _message(data) or "Account created successfully! You can now log in."

    def logout(self) -> None:
        self.session.logout()

    # ---- tasks ----

    def list_tasks(self) -> list[Task]:
        data = self._request("GET", "/api/tasks")
        raw_tasks = data.get("tasks")
        if not isinstance(raw_tasks, list):
            raise ValidationFailure(_MALFORMED)

        tasks: list[Task] = []
        for raw in raw_tasks:
            if not isinstance(raw, Mapping):
                logger.warning("Skipping malformed task record: %r", type(raw).__name__)
                continue
            tasks.append(Task.from_api(raw))

        logger.debug("Loaded %d tasks", len(tasks))
        return tasks

    def create_task(
        self,
        title: str,
        description: str | None = None,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        status: TaskStatus | str = TaskStatus.TODO,
        due_date: datetime | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "title": validate_title(title),
            "description": (description or "").strip(),
            "priority": TaskPriority.from_api(priority).value,
            "status": TaskStatus.from_api(status).value,
        }
        if due_date is not None:
            payload["due_date"] = due_date.isoformat()

        data = self._request("POST", "/api/tasks", payload=payload)
        return _message(data) or "Task created."

    def update_task(self, task_id: Any, payload: Mapping[str, Any]) -> str:
        """PUT a full or partial task payload."""
        body = dict(payload)
        if "title" in body:
            body["title"] = validate_title(body["title"])

        data = self._request("PUT", f"/api/tasks/{task_id}", payload=body)
        return _message(data) or "Task updated."

    def delete_task(self, task_id: Any) -> str:
        data = self._request("DELETE", f"/api/tasks/{task_id}")
        return _message(data) or "Task deleted."


def _message(data: Mapping[str, Any]) -> str:
    msg = data.get("message")
    return msg.strip() if isinstance(msg, str) else ""

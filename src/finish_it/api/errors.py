# src/finish_it/api/errors.py

"""
Error taxonomy for everything that talks to the Finish-It API.

- NetworkFailure: the request could not complete (connection, timeout).
- AuthFailure: missing/invalid token (HTTP 401). The session is already cleared.
- ValidationFailure: bad user input or a malformed response body.
- ApiRejected: the API answered, but refused (success=false or an error status).

All of them are recoverable: retrying the triggering action is always allowed.
"""

from __future__ import annotations


class FinishItError(Exception):
    """Base class; `message` is safe to show to the user."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = (message or "").strip() or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class NetworkFailure(FinishItError):
    default_message = "Error connecting to server. Please try again."


class AuthFailure(FinishItError):
    default_message = "Session expired or invalid. Please log in again."


class ValidationFailure(FinishItError):
    default_message = "Invalid input."


class ApiRejected(FinishItError):
    default_message = "The server rejected the request."


def friendly_error_message(err: Exception) -> str:
    if isinstance(err, AuthFailure):
        return f"{err.message} Use /login <email> <password>."
    if isinstance(err, FinishItError):
        return err.message
    return "Internal error. Please try again."

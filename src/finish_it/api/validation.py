# src/finish_it/api/validation.py

from __future__ import annotations

import re
from typing import Literal

from .errors import ValidationFailure

PasswordStrength = Literal["weak", "medium", "strong"]

_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(r"[!@#$%^&*]")


def validate_title(title: str | None) -> str:
    clean = (title or "").strip()
    if not clean:
        raise ValidationFailure("Task title is required.")
    return clean


def validate_signup(name: str, email: str, password: str, confirm_password: str | None) -> None:
    """Checks the signup form before anything is sent to the API."""
    if not (name or "").strip():
        raise ValidationFailure("Name is required.")
    if not (email or "").strip():
        raise ValidationFailure("Email is required.")
    if not password:
        raise ValidationFailure("Password is required.")
    if confirm_password is not None and password != confirm_password:
        raise ValidationFailure("Passwords do not match!")


def password_strength(password: str) -> PasswordStrength:
    if len(password) < 6:
        return "weak"
    has_upper = bool(_UPPER.search(password))
    has_digit = bool(_DIGIT.search(password))
    if len(password) >= 10 and has_upper and has_digit and _SYMBOL.search(password):
        return "strong"
    return "medium"

# tests/test_session.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from finish_it.api.errors import ValidationFailure
from finish_it.api.session import Session, SessionStore
from finish_it.api.validation import password_strength, validate_signup, validate_title


def test_session_lifecycle() -> None:
    s = Session()
    assert not s.is_authenticated
    assert s.auth_headers() == {}

    s.login("abc", "ana@example.com")
    assert s.is_authenticated
    assert s.auth_headers() == {"Authorization": "Bearer abc"}

    s.logout()
    assert s.token is None and s.email is None


def test_session_login_requires_token() -> None:
    with pytest.raises(ValueError):
        Session().login("  ")


def test_store_save_load_clear(tmp_path: Path) -> None:
    store = SessionStore(tmp_path / "nested" / "session.json")
    store.save(Session(token="tok", email="ana@example.com"))

    assert store.path.exists()
    if os.name == "posix":
        assert (store.path.stat().st_mode & 0o777) == 0o600

    loaded = store.load()
    assert loaded == Session(token="tok", email="ana@example.com")

    store.clear()
    assert not store.path.exists()
    assert store.load() == Session()
    store.clear()


def test_store_saving_logged_out_session_removes_file(tmp_path: Path) -> None:
    store = SessionStore(tmp_path / "session.json")
    store.save(Session(token="tok"))
    store.save(Session())
    assert not store.path.exists()


def test_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", "utf-8")
    assert SessionStore(path).load() == Session()

    path.write_text('{"token": 12}', "utf-8")
    assert SessionStore(path).load() == Session()


def test_validate_title() -> None:
    assert validate_title("  Ship it ") == "Ship it"
    with pytest.raises(ValidationFailure):
        validate_title("   ")
    with pytest.raises(ValidationFailure):
        validate_title(None)


def test_validate_signup() -> None:
    validate_signup("Ana", "ana@example.com", "pw", "pw")
    validate_signup("Ana", "ana@example.com", "pw", None)
    with pytest.raises(ValidationFailure, match="Passwords do not match!"):
        validate_signup("Ana", "ana@example.com", "pw", "px")
    with pytest.raises(ValidationFailure):
        validate_signup(" ", "ana@example.com", "pw", "pw")


@pytest.mark.parametrize(
    ("password", "expected"),
    [
        ("abc", "weak"),
        ("abcdef", "medium"),
        ("Abcdef1", "medium"),
        ("Abcdefgh1!", "strong"),
        ("abcdefgh1!", "medium"),
    ],
)
def test_password_strength(password: str, expected: str) -> None:
    assert password_strength(password) == expected

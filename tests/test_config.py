# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from finish_it.config import Settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for name in list(os.environ):
        if name.startswith("FINISH_IT_") or name == "NEXT_PUBLIC_API_URL":
            monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    s = Settings.from_env()
    assert s.app_name == "finish-it"
    assert s.api_url == "http://localhost:5000"
    assert s.data_dir == Path(".local/finish_it")
    assert s.session_path == Path(".local/finish_it") / "session.json"
    assert s.remember_session is True
    assert (s.recent_limit, s.upcoming_limit, s.upcoming_window_days) == (5, 3, 7)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FINISH_IT_API_URL", "https://api.example.com ")
    monkeypatch.setenv("FINISH_IT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FINISH_IT_REMEMBER_SESSION", "no")
    monkeypatch.setenv("FINISH_IT_READ_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("FINISH_IT_RECENT_LIMIT", "10")

    s = Settings.from_env()

    assert s.api_url == "https://api.example.com"
    assert s.session_path == tmp_path / "session.json"
    assert s.remember_session is False
    assert s.read_timeout_seconds == 2.5
    assert s.recent_limit == 10


def test_next_public_api_url_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEXT_PUBLIC_API_URL", "http://backend:8080")
    assert Settings.from_env().api_url == "http://backend:8080"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FINISH_IT_UPCOMING_LIMIT", "many")
    monkeypatch.setenv("FINISH_IT_CONNECT_TIMEOUT_SECONDS", "soon")
    s = Settings.from_env()
    assert s.upcoming_limit == 3
    assert s.connect_timeout_seconds == 5.0


@pytest.mark.parametrize("raw", ["0", "-3", "none", "OFF"])
def test_upcoming_window_can_be_disabled(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("FINISH_IT_UPCOMING_WINDOW_DAYS", raw)
    assert Settings.from_env().upcoming_window_days is None


def test_upcoming_window_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FINISH_IT_UPCOMING_WINDOW_DAYS", "14")
    assert Settings.from_env().upcoming_window_days == 14

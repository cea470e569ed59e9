# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from finish_it.cli.bootstrap import create_initial_state
from finish_it.core.state import AppState

from .fakes import FakeBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="finish-it",
        log_level="INFO",
        api_url="http://api.test",
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
        remember_session=True,
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        recent_limit=5,
        upcoming_limit=3,
        upcoming_window_days=7,
    )


@pytest.fixture()
def backend() -> FakeBackend:
    b = FakeBackend()
    b.add_user("ana@example.com", "Secret123", name="Ana")
    return b


@pytest.fixture()
def state(settings: SimpleNamespace, backend: FakeBackend) -> Iterator[AppState]:
    """AppState wired to the in-memory backend through httpx.MockTransport."""
    st = create_initial_state(settings=settings, transport=backend.transport())
    yield st
    st.client.close()

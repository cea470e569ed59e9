# src/finish_it/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- restores the saved session (optional),
- wires the API client and task cache into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..api.client import FinishItClient, make_timeout
from ..api.session import Session, SessionStore
from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_cache import TaskCache

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, transport: httpx.BaseTransport | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the HTTP transport) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store: SessionStore | None = None
    session = Session()
    if settings.remember_session:
        store = SessionStore(settings.session_path)
        session = store.load()

    client = FinishItClient(
        settings.api_url,
        session,
        timeout=make_timeout(settings.connect_timeout_seconds, settings.read_timeout_seconds),
        transport=transport,
    )

    logger.info(
        "State ready api=%s authenticated=%s remember_session=%s",
        settings.api_url,
        session.is_authenticated,
        settings.remember_session,
    )

    return AppState(
        settings=settings,
        session=session,
        client=client,
        cache=TaskCache(client),
        session_store=store,
    )


def persist_session(state: AppState) -> None:
    """Write the current session to disk (or remove it after logout). Best-effort."""
    if state.session_store is None:
        return
    try:
        state.session_store.save(state.session)
    except OSError:
        logger.exception("Failed to save session to %s", state.session_store.path)

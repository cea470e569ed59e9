# src/finish_it/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the session token is obtained at login).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "FINISH_IT"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_window_days(name: str, default: int) -> int | None:
    raw = os.getenv(name)
    if raw is not None and raw.strip().lower() in {"none", "off"}:
        return None
    days = _env_int(name, default)
    return days if days > 0 else None


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- API ----
    api_url: str
    connect_timeout_seconds: float
    read_timeout_seconds: float

    # ---- Session ----
    remember_session: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path

    # ---- Dashboard tuning ----
    recent_limit: int
    upcoming_limit: int
    upcoming_window_days: int | None

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "finish-it") or "finish-it"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        # NEXT_PUBLIC_API_URL is what the web front-end is configured with; accept it too.
        api_url = (
            _first_env(_k("API_URL"), "NEXT_PUBLIC_API_URL", default="http://localhost:5000") or ""
        ).strip()
        connect_timeout_seconds = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout_seconds = _env_float(_k("READ_TIMEOUT_SECONDS"), 15.0)

        remember_session = _env_bool(_k("REMEMBER_SESSION"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/finish_it"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")

        recent_limit = max(0, _env_int(_k("RECENT_LIMIT"), 5))
        upcoming_limit = max(0, _env_int(_k("UPCOMING_LIMIT"), 3))
        # 0 (or "none") shows every future deadline.
        upcoming_window_days = _env_window_days(_k("UPCOMING_WINDOW_DAYS"), 7)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_url=api_url,
            connect_timeout_seconds=connect_timeout_seconds,
            read_timeout_seconds=read_timeout_seconds,
            remember_session=remember_session,
            data_dir=data_dir,
            session_path=session_path,
            recent_limit=recent_limit,
            upcoming_limit=upcoming_limit,
            upcoming_window_days=upcoming_window_days,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit session files; they hold a bearer token.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "FINISH_IT_APP_NAME": "App display name (default: finish-it).",
    "FINISH_IT_LOG_LEVEL": "Console logging level (default: INFO).",
    # API
    "FINISH_IT_API_URL": "Base URL of the Finish-It API (default: http://localhost:5000).",
    "NEXT_PUBLIC_API_URL": "Fallback for FINISH_IT_API_URL (same variable the web front-end uses).",
    "FINISH_IT_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5.0).",
    "FINISH_IT_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 15.0).",
    # Session
    "FINISH_IT_REMEMBER_SESSION": "Keep the login token between runs (true/false, default: true).",
    # Paths (gitignored)
    "FINISH_IT_DATA_DIR": "Local data directory for logs and session (default: .local/finish_it).",
    "FINISH_IT_SESSION_PATH": "Session file (default: <data_dir>/session.json).",
    # Dashboard
    "FINISH_IT_RECENT_LIMIT": "Recent tasks shown on the dashboard (default: 5).",
    "FINISH_IT_UPCOMING_LIMIT": "Upcoming deadlines shown on the dashboard (default: 3).",
    "FINISH_IT_UPCOMING_WINDOW_DAYS": "How far ahead deadlines are shown, in days (default: 7; 0 or \"none\" shows all future deadlines).",
}

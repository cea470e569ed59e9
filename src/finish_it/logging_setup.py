# src/finish_it/logging_setup.py

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

LOG_FILE_NAME = "finish_it.log"

_BEARER_RE = re.compile(r"(Bearer\s+)[^\s'\",]+", re.IGNORECASE)


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable: finish_it logs pass, everything else
    (httpx request lines, captured 'py.warnings') only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "finish_it" or record.name.startswith("finish_it."):
            return True
        return record.levelno >= logging.ERROR


class _RedactTokensFilter(logging.Filter):
    """Mask bearer tokens before a record reaches any handler output."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _BEARER_RE.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _formatter() -> logging.Formatter:
    return logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    *,
    log_dir: str | Path = ".local/finish_it",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure root logging and return the log file path.

    - stderr: filtered for interactive use, at `console_level`
    - file: every logger at `file_level`, including httpx request lines;
      httpcore connection traces are capped at INFO

    Bearer tokens are masked in both outputs. Call once, before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    redact = _RedactTokensFilter()

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(_formatter())
    ch.addFilter(redact)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(_formatter())
    fh.addFilter(redact)
    root.addHandler(fh)

    logging.captureWarnings(True)

    logging.getLogger("httpcore").setLevel(logging.INFO)

    return log_file

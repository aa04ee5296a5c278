"""Common utilities for Serial Monitor.

This module centralises logging setup and trace identifier management used
across the application.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import platform
import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Iterator, Optional


_TRACE_ID_DEFAULT = "-"
_TRACE_ID_VAR: ContextVar[str] = ContextVar("serial_monitor_trace_id", default=_TRACE_ID_DEFAULT)

# Track whether log cleanup has already run for the current day.
_logs_cleaned_today = False

LOG_FILE_PREFIX = "serial_monitor_"


class TraceIdFilter(logging.Filter):
    """Augment log records with their active trace identifier."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


def generate_trace_id() -> str:
    """Return a new random trace identifier."""
    return uuid.uuid4().hex


def get_trace_id() -> str:
    """Return the current trace identifier ("-" when unset)."""
    return _TRACE_ID_VAR.get()


def set_trace_id(trace_id: Optional[str]) -> Token[str]:
    """Set the active trace identifier and return the context token."""
    value = trace_id or _TRACE_ID_DEFAULT
    return _TRACE_ID_VAR.set(value)


def reset_trace_id(token: Token[str]) -> None:
    """Reset the trace identifier to the previous context."""
    _TRACE_ID_VAR.reset(token)


@contextmanager
def trace_id_scope(trace_id: Optional[str]) -> Iterator[None]:
    """Context manager that temporarily sets the trace identifier."""
    token = set_trace_id(trace_id)
    try:
        yield
    finally:
        reset_trace_id(token)


def _resolve_logs_dir() -> Path:
    """Return the directory path where log files should be stored."""
    system = platform.system().lower()
    home_dir = Path.home()

    if system == "linux":
        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if xdg_data_home:
            return Path(xdg_data_home) / "serial_monitor" / "logs"
        return home_dir / ".local" / "share" / "serial_monitor" / "logs"

    return home_dir / ".serial_monitor_logs"


def _cleanup_old_logs(logs_dir: Path, bootstrap_logger: logging.Logger) -> int:
    """Remove log files that do not belong to today (runs at most once per day)."""
    global _logs_cleaned_today

    if _logs_cleaned_today:
        return 0

    today = dt.date.today().strftime("%Y%m%d")
    cleaned_count = 0
    prefix_len = len(LOG_FILE_PREFIX)

    try:
        filenames = os.listdir(logs_dir)
    except OSError:
        bootstrap_logger.exception("Unable to list logs directory", extra={"logs_dir": str(logs_dir)})
        return 0

    for filename in filenames:
        if not (filename.startswith(LOG_FILE_PREFIX) and filename.endswith(".log")):
            continue

        date_part = filename[prefix_len:prefix_len + 8]
        if len(date_part) != 8 or not date_part.isdigit() or date_part == today:
            continue

        old_log_path = logs_dir / filename
        try:
            old_log_path.unlink()
            cleaned_count += 1
        except OSError:
            bootstrap_logger.exception("Error removing stale log file", extra={"stale_log": str(old_log_path)})

    _logs_cleaned_today = True
    return cleaned_count


def _ensure_logger_filters(logger: logging.Logger) -> None:
    """Attach the TraceIdFilter to the logger if not already present."""
    if any(isinstance(item, TraceIdFilter) for item in logger.filters):
        return
    logger.addFilter(TraceIdFilter())


def _open_file_handler(logs_dir: Path, log_filename: str) -> logging.FileHandler:
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(logs_dir / log_filename, encoding="utf-8")
    except OSError:
        fallback_dir = Path.cwd() / "logs"
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(fallback_dir / log_filename, encoding="utf-8")


def get_logger(name: str = "serial_monitor") -> logging.Logger:
    """Return a configured logger augmented with trace identifiers."""
    logger = logging.getLogger(name)
    _ensure_logger_filters(logger)

    if logger.handlers:
        return logger

    logs_dir = _resolve_logs_dir()
    bootstrap_logger = logging.getLogger("serial_monitor.bootstrap")
    if not any(isinstance(handler, logging.NullHandler) for handler in bootstrap_logger.handlers):
        bootstrap_logger.addHandler(logging.NullHandler())

    current_time = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = f"{LOG_FILE_PREFIX}{current_time}.log"
    file_handler = _open_file_handler(logs_dir, log_filename)
    cleaned_count = _cleanup_old_logs(logs_dir, bootstrap_logger) if logs_dir.exists() else 0

    file_formatter = logging.Formatter(
        "%(asctime)s %(trace_id)s %(name)-20s %(levelname)-8s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(file_formatter)
    file_handler.addFilter(TraceIdFilter())

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_formatter = logging.Formatter("%(levelname)s [%(trace_id)s] %(message)s")
    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(TraceIdFilter())

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    logger.setLevel(logging.INFO)

    if cleaned_count > 0:
        logger.info("Removed %s old log file(s)", cleaned_count)

    if name == "serial_monitor":
        logger.info("Log file created: %s", file_handler.baseFilename)

    return logger


def set_log_level(level: str, names: Optional[list] = None) -> None:
    """Apply ``level`` to the given project loggers (all known ones by default)."""
    from config.constants import LoggingConstants

    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    for logger_name in names or LoggingConstants.RELATED_LOGGERS:
        logging.getLogger(logger_name).setLevel(numeric)


__all__ = [
    "TraceIdFilter",
    "generate_trace_id",
    "get_logger",
    "get_trace_id",
    "reset_trace_id",
    "set_log_level",
    "set_trace_id",
    "trace_id_scope",
]

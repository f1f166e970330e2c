"""
Console logging.

Modules log through ``logging.getLogger(__name__)``. Stores, the session
controller and the notice board attach console context to their records via
``extra=`` (see the ``*_context`` helpers); the formatters here render that
context so a log line says which collection, session phase or notice it is
about.

    logger.info("doctors cache refreshed", extra=store_context(EntityKind.DOCTORS))
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

# Record attributes the formatters pick up when present
CONTEXT_FIELDS = ("entity_kind", "session_phase", "principal_id", "notice_id", "notice_level")

# Chatty third-party loggers kept at WARNING or above
QUIET_LOGGERS = ("httpx", "httpcore")


def store_context(kind: Any) -> dict[str, Any]:
    """Context for an entity cache store record."""
    return {"entity_kind": getattr(kind, "value", kind)}


def session_context(session: Any) -> dict[str, Any]:
    """Context for a session transition record."""
    principal = getattr(session, "principal", None)
    return {
        "session_phase": session.phase.value,
        "principal_id": principal.id if principal is not None else None,
    }


def notice_context(notice: Any) -> dict[str, Any]:
    return {"notice_id": notice.id, "notice_level": notice.level.value}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Console context fields carried by ``record``, in a stable order."""
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if getattr(record, name, None) is not None}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; console context goes under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Terminal formatter: colored level name, context appended as ``key=value``."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers see the original record
        copy = logging.makeLogRecord(record.__dict__)
        if self.use_color:
            color = self.COLORS.get(copy.levelname, self.RESET)
            copy.levelname = f"{color}{copy.levelname}{self.RESET}"
        line = super().format(copy)
        context = record_context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line


LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: str = "INFO",
    format_type: str = "colored",
    log_file: str | None = None,
) -> None:
    """
    Install console log handlers on the root logger.

    Args:
        level: Log level name
        format_type: 'colored', 'json' or 'plain'
        log_file: Optional path; the file always receives JSON records
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if format_type == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ColoredFormatter(LINE_FORMAT, DATE_FORMAT, use_color=format_type == "colored")
        )
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

"""
Centralized logging configuration with structured logging support.
"""
import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Context variable for correlating log entries with the exam session that
# emitted them, including entries logged from the generation tasks.
session_id_context: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for production logging.

    Produces structured log entries with consistent fields for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        session_id = session_id_context.get()
        if session_id:
            log_entry["session_id"] = session_id

        # Add extra structured fields from record
        if hasattr(record, "test_id"):
            log_entry["test_id"] = record.test_id
        if hasattr(record, "batch"):
            log_entry["batch"] = record.batch
        if hasattr(record, "duration_ms"):
            log_entry["duration_ms"] = record.duration_ms
        if hasattr(record, "error"):
            log_entry["error"] = record.error

        # Add source location for error-level logs
        if record.levelno >= logging.ERROR:
            log_entry["source"] = f"{record.pathname}:{record.lineno}"

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_file_logging: bool = False,
    json_format: bool = False,
) -> None:
    """
    Configure package-wide logging.

    Configures:
    - Log level for the root and ``practice_exam`` loggers
    - JSON formatting (structured for log aggregators) or human-readable output
    - An optional file handler alongside the console handler

    Args:
        log_level: Level name such as "DEBUG" or "INFO"
        log_file: Path of the log file, used when file logging is enabled
        enable_file_logging: Whether to also write log records to ``log_file``
        json_format: Emit JSON lines instead of the plain text format
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    formatter = "json" if json_format else "default"

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": formatter,
            "stream": sys.stderr,
        },
    }
    if enable_file_logging and log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": level,
            "formatter": formatter,
            "filename": log_file,
            "encoding": "utf-8",
        }

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers),
        },
        "loggers": {
            "practice_exam": {
                "level": level,
                "handlers": list(handlers),
                "propagate": False,
            },
            # The Google client logs every request at INFO
            "google": {
                "level": logging.WARNING,
            },
        },
    }

    logging.config.dictConfig(logging_config)

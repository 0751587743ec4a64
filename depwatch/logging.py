"""depwatch logging with colored console output and optional JSON file logs."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from depwatch.constants import LOG_FILE

# Context attached to every record while a batch is being handled
_batch_context: dict[str, Any] = {}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "ts": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if _batch_context:
            log_data.update(_batch_context)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key in ["path", "import_path", "command", "exit_code", "targets"]:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Args:
            record: Log record to format

        Returns:
            Colored log string
        """
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")

        context = f"[B{_batch_context['batch']}]" if "batch" in _batch_context else ""

        return f"{color}{timestamp} {record.levelname:8s}{self.RESET} {context} {record.getMessage()}"


def set_batch_context(batch: int | None = None, **kwargs: Any) -> None:
    """Set context for all subsequent log messages.

    Args:
        batch: Sequential batch number
        **kwargs: Additional context fields
    """
    global _batch_context
    _batch_context = {}

    if batch is not None:
        _batch_context["batch"] = batch
    _batch_context.update(kwargs)


def clear_batch_context() -> None:
    """Clear all batch context."""
    global _batch_context
    _batch_context = {}


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the depwatch namespace.

    Args:
        name: Logger name (typically module name)

    Returns:
        Logger instance
    """
    if name == "depwatch" or name.startswith("depwatch."):
        return logging.getLogger(name)
    return logging.getLogger(f"depwatch.{name}")


def setup_logging(
    level: str = "info",
    log_dir: str | Path | None = None,
    json_output: bool = True,
    console_output: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Set up logging configuration.

    Args:
        level: Log level (debug, info, warn, error)
        log_dir: Directory for log files
        json_output: Whether to output JSON logs to file
        console_output: Whether to output to console
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
    """
    level_name = "WARNING" if level.lower() == "warn" else level.upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger("depwatch")
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ConsoleFormatter())
        root_logger.addHandler(console_handler)

    if log_dir and json_output:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / LOG_FILE,
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    root_logger.propagate = False


# Initialize default logging on import; warnings only until the CLI configures it
setup_logging(level="warn", console_output=True, json_output=False)

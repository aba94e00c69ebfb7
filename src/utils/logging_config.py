"""Structured logging configuration.

Console output goes to stdout. With LOG_TO_FILE enabled, records are also
written to date-rotated files under LOG_DIR:

    logs/los/los.log      - records from the 'los' category
    logs/lms/lms.log      - records from the 'lms' category
    logs/all/all.log      - every record
    logs/errors/error.log - ERROR and above only
"""

import json
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from src.utils.config import get_settings

# Pod categories that get their own log file
POD_CATEGORIES = ("los", "lms")


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string with log data
        """
        settings = get_settings()

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "app_name": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Standard text formatter with consistent format."""

    def __init__(self) -> None:
        """Initialize with standard format."""
        fmt = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
        datefmt = "%Y-%m-%d %H:%M:%S"
        super().__init__(fmt=fmt, datefmt=datefmt)


class CategoryFilter(logging.Filter):
    """Pass records whose logger name starts with a pod category."""

    def __init__(self, category: str) -> None:
        super().__init__()
        self.category = category

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == self.category or record.name.startswith(f"{self.category}.")


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(path, when="midnight", encoding="utf-8")
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _build_file_handlers(log_dir: Path, level: int) -> list[logging.Handler]:
    """Create the per-category, all and error-only file handlers."""
    formatter = StandardFormatter()
    handlers = []

    for category in POD_CATEGORIES:
        handler = _file_handler(log_dir / category / f"{category}.log", level, formatter)
        handler.addFilter(CategoryFilter(category))
        handlers.append(handler)

    handlers.append(_file_handler(log_dir / "all" / "all.log", level, formatter))
    handlers.append(_file_handler(log_dir / "errors" / "error.log", logging.ERROR, formatter))
    return handlers


# Track if logging has been configured
_logging_configured = False
_file_handlers: list[logging.Handler] = []


def setup_logging(use_json: bool = False, force_reconfigure: bool = False) -> None:
    """
    Configure framework logging.

    Sets up console logging with the LOG_LEVEL from settings and, when
    LOG_TO_FILE is set, the rotating file handlers.
    Prevents duplicate handlers by checking if already configured.

    Args:
        use_json: If True, use JSON format. If False, use standard text format.
        force_reconfigure: If True, force reconfiguration even if already set up.
    """
    global _logging_configured

    # Skip if already configured (unless forced)
    if _logging_configured and not force_reconfigure:
        return

    settings = get_settings()

    # Get root logger
    root_logger = logging.getLogger()

    # Remove only our own handlers to prevent duplicates
    # Preserve other handlers (like pytest's caplog handler)
    handlers_to_remove = [
        h for h in root_logger.handlers
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) == sys.stdout
    ]
    handlers_to_remove.extend(_file_handlers)
    for handler in handlers_to_remove:
        root_logger.removeHandler(handler)
        if handler in _file_handlers:
            handler.close()
    _file_handlers.clear()

    # Set log level from settings
    log_level = getattr(logging, settings.LOG_LEVEL)
    root_logger.setLevel(log_level)

    # Create console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    # Set formatter based on preference
    if use_json:
        formatter = JsonFormatter()
    else:
        formatter = StandardFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        _file_handlers.extend(_build_file_handlers(settings.LOG_DIR, log_level))
        for handler in _file_handlers:
            root_logger.addHandler(handler)

    # Mark as configured
    _logging_configured = True

    logger = logging.getLogger(__name__)
    logger.debug(
        f"Logging configured: level={settings.LOG_LEVEL}, "
        f"format={'json' if use_json else 'standard'}, files={settings.LOG_TO_FILE}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Ensures logging is set up before returning the logger.

    Args:
        name: Name for the logger (a module __name__ or a pod category
            such as 'los')

    Returns:
        Logger instance
    """
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name)


def reset_logging() -> None:
    """
    Reset logging configuration.

    Useful for testing to clear state between tests.
    """
    global _logging_configured

    for handler in _file_handlers:
        handler.close()
    _file_handlers.clear()

    # Clear all handlers from root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.WARNING)  # Reset to default

    _logging_configured = False

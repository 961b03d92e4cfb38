"""Logging configuration for the catalog browser.

Provides console output for interactive use and a JSONL file with one
structured entry per request/query event, so a browsing session can be
replayed from the log.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = [
    "setup_logging",
    "get_logger",
    "log_browse_event",
    "LOG_DIR",
    "EVENT_LEVELS",
]

LOG_DIR = Path(__file__).parent.parent / "logs"

ROOT_LOGGER_NAME = "browse"

# Default level per event type; callers may override
EVENT_LEVELS: Dict[str, int] = {
    "request": logging.DEBUG,
    "request_error": logging.ERROR,
    "query_start": logging.DEBUG,
    "query_complete": logging.INFO,
    "query_discarded": logging.INFO,
    "fallback": logging.INFO,
    "bootstrap_step": logging.DEBUG,
    "bootstrap_failed": logging.ERROR,
}


class JSONLFileHandler(logging.Handler):
    """Writes one JSON object per record, rotating the file daily."""

    def __init__(self, log_dir: Path, prefix: str = "browse"):
        super().__init__()
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix

    def _get_log_file(self) -> Path:
        today = datetime.now().strftime("%Y%m%d")
        return self.log_dir / f"{self.prefix}_{today}.jsonl"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: Dict[str, Any] = {
                "timestamp": datetime.now().isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }

            if hasattr(record, "event_type"):
                entry["event_type"] = record.event_type
            if hasattr(record, "extra_data"):
                entry.update(record.extra_data)

            with open(self._get_log_file(), "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")

        except Exception:
            self.handleError(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """Console handler that colors the level name on a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if hasattr(self.stream, "isatty") and self.stream.isatty():
            color = self.COLORS.get(record.levelname, "")
            if color:
                message = message.replace(
                    record.levelname, f"{color}{record.levelname}{self.RESET}", 1
                )
        return message


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Set up logging for the catalog browser.

    Args:
        level: Console logging level (default: INFO)
        log_to_file: Whether to write the JSONL event log
        log_to_console: Whether to log to stderr
        log_dir: Custom log directory (default: project logs/)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_to_file else level)
    logger.handlers.clear()

    if log_to_console:
        console_handler = ColoredConsoleHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S")
        )
        logger.addHandler(console_handler)

    if log_to_file:
        file_handler = JSONLFileHandler(log_dir or LOG_DIR)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger under the package namespace ('api' -> 'browse.api')."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_browse_event(
    event_type: str,
    data: Dict[str, Any],
    level: Optional[int] = None,
    logger_name: str = ROOT_LOGGER_NAME,
) -> None:
    """Log a structured browsing event.

    Args:
        event_type: One of EVENT_LEVELS (e.g. 'request', 'query_complete', 'fallback')
        data: Event-specific fields; an optional 'message' key becomes the log text
        level: Overrides the event's default level from EVENT_LEVELS
        logger_name: Logger to use
    """
    if level is None:
        level = EVENT_LEVELS.get(event_type, logging.INFO)

    logger = get_logger(logger_name)
    if not logger.isEnabledFor(level):
        return

    fields = {k: v for k, v in data.items() if k != "message"}
    record = logger.makeRecord(
        logger.name,
        level,
        "(browse)",
        0,
        data.get("message") or _summary(event_type, fields),
        (),
        None,
    )
    record.event_type = event_type
    record.extra_data = fields

    logger.handle(record)


def _summary(event_type: str, fields: Dict[str, Any]) -> str:
    if not fields:
        return event_type
    details = " ".join(f"{key}={value}" for key, value in fields.items())
    return f"{event_type}: {details}"

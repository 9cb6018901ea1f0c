"""
dirmirror structured logging.

Provides structlog-based logging for the CLI and the synchronization
engine, plus the line-oriented sink the engine reports through.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections import deque
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, WrappedLogger

if TYPE_CHECKING:
    from dirmirror.core.config import LoggingConfig


_configured = False


def add_timestamp(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now().isoformat(timespec="seconds")
    return event_dict


def add_log_level(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add log level to event dict."""
    event_dict["level"] = method_name.upper()
    return event_dict


def setup_logging(config: LoggingConfig, force: bool = False) -> None:
    """Configure structured logging for dirmirror."""
    global _configured

    if _configured and not force:
        return

    handlers: list[logging.Handler] = []

    if config.console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, config.level))
        handlers.append(console_handler)

    if config.file_enabled:
        log_file = config.resolve_log_file()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # Appends so restarts keep the history of earlier runs
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    if not handlers:
        # Keeps logging's last-resort stderr handler out of quiet runs
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        add_timestamp,
        add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.json_format:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        processors = shared_processors + [structlog.processors.format_exc_info, renderer]
    else:
        # File output stays free of color codes
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        processors = shared_processors + [renderer]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name or "dirmirror")


class SyncLogger:
    """
    Line-oriented log sink used by the synchronization engine.

    Calls are serialized under a lock so entries from the startup path and
    the scheduler's worker threads never interleave, and sequential calls
    are recorded in call order. Logging never raises into the caller.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        max_entries: int = 1000,
    ) -> None:
        self.logger = logger or get_logger("dirmirror.sync")
        self.entries: deque[dict[str, Any]] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def log(self, message: str, level: str = "INFO", **kwargs: Any) -> None:
        """Append one entry and forward it to structlog."""
        entry = {
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "level": level,
            "message": message,
            **kwargs,
        }
        with self._lock:
            self.entries.append(entry)
            try:
                log_method = getattr(self.logger, level.lower(), self.logger.info)
                log_method(message, **kwargs)
            except Exception as e:
                # A failing sink must not take the pass down with it
                print(f"dirmirror: logging failed: {e}", file=sys.stderr)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log(message, "INFO", **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log(message, "WARNING", **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log(message, "ERROR", **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log(message, "DEBUG", **kwargs)

    def messages(self, level: str | None = None) -> list[str]:
        """Get recorded messages, optionally filtered by level."""
        with self._lock:
            return [
                e["message"]
                for e in self.entries
                if level is None or e["level"] == level
            ]

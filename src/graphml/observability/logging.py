"""Structured logging configuration for graphml.

The library logs through structlog. Until :func:`configure_logging` is
called, events below WARNING are dropped and nothing is attached to the
root logger, so host programs keep control of their own logging.

Provides two output modes once configured:
- Console logging: level chosen by verbosity (rich handler on stderr)
- File logging: all events as JSON lines to a given file
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

# Module-level state
_configured = False
_file_handler: logging.FileHandler | None = None


class JSONLFileHandler(logging.FileHandler):
    """File handler that writes JSONL format."""

    def emit(self, record: logging.LogRecord) -> None:
        """Write log record as JSON line."""
        try:
            entry = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
            }

            # structlog passes the event dict via record.msg when using wrap_for_formatter
            if isinstance(record.msg, dict):
                event_dict = record.msg.copy()
                event_dict.pop("level", None)
                event_dict.pop("timestamp", None)
                entry["message"] = event_dict.pop("event", str(record.msg))
                entry.update(event_dict)
            else:
                entry["message"] = record.getMessage()

            line = json.dumps(entry, default=str) + "\n"
            if self.stream:
                self.stream.write(line)
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _configure_structlog(level: int) -> None:
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


def configure_logging(verbosity: int = 0, log_file: Path | None = None) -> None:
    """Configure console and optional file logging.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG
        log_file: If given, every event (DEBUG and up) is also appended to this
            file as JSON lines.
    """
    global _configured, _file_handler

    # Close existing file handler if reconfiguring
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None

    levels = {0: logging.WARNING, 1: logging.INFO}
    console_level = levels.get(verbosity, logging.DEBUG)

    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
        level=console_level,
    )
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
            foreign_pre_chain=_shared_processors(),
        )
    )

    handlers: list[logging.Handler] = [console_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = JSONLFileHandler(str(log_file), mode="a", encoding="utf-8")
        _file_handler.setLevel(logging.DEBUG)  # Capture everything
        handlers.append(_file_handler)

    root_level = logging.DEBUG if (verbosity > 1 or log_file is not None) else console_level
    logger = logging.getLogger("graphml")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(root_level)
    logger.propagate = False

    _configure_structlog(root_level)
    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger instance.

    Sets up a quiet (WARNING) structlog pipeline if logging has not been
    configured yet; it does not attach any handlers.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Bound logger instance.
    """
    if not _configured and not structlog.is_configured():
        _configure_structlog(logging.WARNING)

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def close_file_logging() -> None:
    """Close file logging handler."""
    global _file_handler
    if _file_handler:
        logging.getLogger("graphml").removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

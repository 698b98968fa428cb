"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from graphml import Document, EdgeDirection
from graphml.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_file_logging() -> Iterator[None]:
    yield
    close_file_logging()


def test_configure_logging_sets_level_warning() -> None:
    """Default verbosity (0) sets WARNING level."""
    configure_logging(verbosity=0)

    logger = logging.getLogger("graphml")
    assert logger.level == logging.WARNING
    assert logger.propagate is False


def test_configure_logging_very_verbose_sets_debug() -> None:
    """verbosity=2 sets DEBUG level."""
    configure_logging(verbosity=2)

    assert logging.getLogger("graphml").level == logging.DEBUG


def test_configure_logging_does_not_touch_root_logger() -> None:
    """Handlers are attached to the package logger only."""
    root_handlers = list(logging.getLogger().handlers)

    configure_logging(verbosity=1)

    assert logging.getLogger().handlers == root_handlers


def test_reconfiguration_replaces_handlers() -> None:
    configure_logging(verbosity=0)
    configure_logging(verbosity=0)

    assert len(logging.getLogger("graphml").handlers) == 1


def test_get_logger_returns_bound_logger() -> None:
    """get_logger returns a structlog logger with expected methods."""
    logger = get_logger(__name__)

    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")


def test_configure_logging_with_file_logging(tmp_path: Path) -> None:
    """File logging creates the log file and its parent directory."""
    log_file = tmp_path / "logs" / "graphml.jsonl"

    configure_logging(verbosity=0, log_file=log_file)

    assert log_file.parent.exists()


def test_close_file_logging_clears_handler(tmp_path: Path) -> None:
    """close_file_logging closes handler and clears reference."""
    import graphml.observability.logging as log_module

    configure_logging(verbosity=0, log_file=tmp_path / "graphml.jsonl")
    assert log_module._file_handler is not None

    close_file_logging()

    assert log_module._file_handler is None


def test_jsonl_file_handler_writes_model_events(tmp_path: Path) -> None:
    """Model operations log structured events to the JSONL file."""
    log_file = tmp_path / "graphml.jsonl"
    configure_logging(verbosity=0, log_file=log_file)

    document = Document("logged")
    graph = document.add_graph("g", EdgeDirection.DIRECTED, {"acyclic": False})
    graph.add_node({"weight": 1.5})
    close_file_logging()

    with log_file.open() as f:
        entries = [json.loads(line) for line in f]
    messages = [e["message"] for e in entries]
    assert "key_registered" in messages
    assert "graph_added" in messages
    assert "node_added" in messages

    registered = next(e for e in entries if e["message"] == "key_registered")
    assert registered["name"] == "acyclic"
    assert registered["scope"] == "graph"
    assert registered["level"] == "DEBUG"

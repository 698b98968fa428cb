"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from graphml import Document, EdgeDirection, Graph


@pytest.fixture(autouse=True)
def clear_graphml_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep environment overrides from leaking into tests."""
    monkeypatch.delenv("GRAPHML_DEFAULT_KEY_TYPE", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the directory holding GraphML fixture files."""
    return Path(__file__).parent / "fixtures" / "graphml"


@pytest.fixture
def document() -> Document:
    """An empty document."""
    return Document("test document")


@pytest.fixture
def directed_graph(document: Document) -> Graph:
    """An empty directed graph inside ``document``."""
    return document.add_graph("test graph", EdgeDirection.DIRECTED)


@pytest.fixture
def sample_attributes() -> dict[str, object]:
    """One attribute of each common Python type."""
    return {
        "attr_double": 100.1,
        "attr_bool": False,
        "attr_integer": 120,
        "attr_string": "string data",
    }

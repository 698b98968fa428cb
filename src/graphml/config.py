"""Codec and model configuration.

Settings are resolved in this order:
1. Environment variable (``GRAPHML_DEFAULT_KEY_TYPE``)
2. Values passed in code or loaded from a YAML file
3. Built-in defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

from graphml.model.types import WireType

DEFAULT_KEY_TYPE = WireType.STRING
DEFAULT_INDENT = "  "

ENV_DEFAULT_KEY_TYPE = "GRAPHML_DEFAULT_KEY_TYPE"

_NONE_WORDS = frozenset({"", "none", "null"})


@dataclass
class GraphMLConfig:
    """Settings shared by a document and the codec.

    Attributes:
        default_key_type: Wire type given to decoded keys without
            ``attr.type``. None makes ``attr.type`` required.
        indent: Indentation unit for pretty-printed output.
        xml_declaration: Whether encoded output starts with an XML declaration.
    """

    default_key_type: WireType | None = DEFAULT_KEY_TYPE
    indent: str = DEFAULT_INDENT
    xml_declaration: bool = False

    def __post_init__(self) -> None:
        if self.default_key_type is not None:
            self.default_key_type = WireType(self.default_key_type)
        if self.indent.strip():
            raise ValueError(f"indent must be whitespace, got: {self.indent!r}")

    def effective_default_key_type(self) -> WireType | None:
        """Default key type after applying the environment override.

        Raises:
            ConfigError: If the environment variable names no wire type.
        """
        override = os.getenv(ENV_DEFAULT_KEY_TYPE)
        if override is None:
            return self.default_key_type
        value = override.strip().lower()
        if value in _NONE_WORDS:
            return None
        try:
            return WireType(value)
        except ValueError as e:
            raise ConfigError(
                ENV_DEFAULT_KEY_TYPE, f"unsupported wire type {override!r}"
            ) from e

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GraphMLConfig:
        """Create config from a dictionary.

        Args:
            data: Dictionary with optional ``default_key_type`` (a wire type
                name or null), ``indent`` (a number of spaces or a string) and
                ``xml_declaration`` keys.

        Returns:
            GraphMLConfig instance.

        Raises:
            ValueError: If a value is not valid.
        """
        default_key_type = data.get("default_key_type", DEFAULT_KEY_TYPE)
        indent = data.get("indent", DEFAULT_INDENT)
        if isinstance(indent, int) and not isinstance(indent, bool):
            indent = " " * indent
        return cls(
            default_key_type=None if default_key_type is None else WireType(default_key_type),
            indent=str(indent),
            xml_declaration=bool(data.get("xml_declaration", False)),
        )


class ConfigError(Exception):
    """Error loading configuration from a file or the environment."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config from {path}: {reason}")


def load_config(config_path: Path) -> GraphMLConfig:
    """Load configuration from a YAML file.

    The settings may sit at the top level or under a ``graphml`` section.

    Args:
        config_path: Path to the YAML file.

    Returns:
        GraphMLConfig instance.

    Raises:
        ConfigError: If the file is missing, empty or invalid.
    """
    if not config_path.exists():
        raise ConfigError(config_path, "File not found")

    yaml = YAML()
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise ConfigError(config_path, "Empty file")

        data = dict(data)
        section = data.get("graphml", data)
        return GraphMLConfig.from_dict(dict(section))
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(config_path, str(e)) from e

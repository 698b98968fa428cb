"""Value type system for GraphML data-functions.

GraphML declares six wire types for attribute values. This module maps
Python values onto them and converts between values and their textual
wire representation.

Plain Python values are mapped by their type:

- ``bool`` -> ``boolean``
- ``int`` -> ``int`` when it fits in 32 bits, ``long`` when it fits in 64 bits
- ``float`` -> ``double``
- ``str`` -> ``string``

When a specific width is wanted, wrap the value with one of the
constructors (:func:`int32`, :func:`int64`, :func:`float32`, :func:`float64`,
:func:`boolean`, :func:`string`), which produce a :class:`TypedValue`.

:data:`NO_VALUE` marks an attribute that is mentioned without a value; the
key's default is used in its place.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import TypeAlias

from graphml.model.errors import TypeMismatchError, UnsupportedTypeError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_TRUE_WORDS = frozenset({"true", "1"})
_FALSE_WORDS = frozenset({"false", "0"})

# XML Schema lexical forms of xs:int/xs:long and xs:float/xs:double
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?|[+-]?INF|NaN"
)
# characters outside the XML 1.0 Char production
_XML_ILLEGAL = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


class WireType(StrEnum):
    """GraphML ``attr.type`` values."""

    BOOLEAN = "boolean"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"


class KeyScope(StrEnum):
    """GraphML ``for`` values: which element kind a key applies to."""

    GRAPHML = "graphml"
    GRAPH = "graph"
    NODE = "node"
    EDGE = "edge"
    ALL = "all"


class EdgeDirection(StrEnum):
    """Edge directionality.

    ``DEFAULT`` means "not specified": graphs reject it, edges inherit the
    graph's default.
    """

    DEFAULT = "default"
    DIRECTED = "directed"
    UNDIRECTED = "undirected"


class NoValue(Enum):
    """Sentinel type for an attribute supplied without a value."""

    NO_VALUE = "no-value"


NO_VALUE = NoValue.NO_VALUE

_INTEGER_TYPES = frozenset({WireType.INT, WireType.LONG})
_FLOAT_TYPES = frozenset({WireType.FLOAT, WireType.DOUBLE})


@dataclass(frozen=True)
class TypedValue:
    """A value tagged with the wire type it should be declared as."""

    wire_type: WireType
    value: bool | int | float | str


AttributeValue: TypeAlias = bool | int | float | str | TypedValue | NoValue
"""Anything accepted as an attribute value when building elements."""


def boolean(value: bool) -> TypedValue:
    if not isinstance(value, bool):
        raise UnsupportedTypeError(type(value).__name__)
    return TypedValue(WireType.BOOLEAN, value)


def int32(value: int) -> TypedValue:
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnsupportedTypeError(type(value).__name__)
    return TypedValue(WireType.INT, value)


def int64(value: int) -> TypedValue:
    if isinstance(value, bool) or not isinstance(value, int):
        raise UnsupportedTypeError(type(value).__name__)
    return TypedValue(WireType.LONG, value)


def float32(value: float) -> TypedValue:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise UnsupportedTypeError(type(value).__name__)
    return TypedValue(WireType.FLOAT, float(value))


def float64(value: float) -> TypedValue:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise UnsupportedTypeError(type(value).__name__)
    return TypedValue(WireType.DOUBLE, float(value))


def string(value: str) -> TypedValue:
    if not isinstance(value, str):
        raise UnsupportedTypeError(type(value).__name__)
    return TypedValue(WireType.STRING, value)


def infer_wire_type(value: object, name: str = "") -> WireType:
    """Determine the wire type of a Python value.

    Args:
        value: A plain Python value or a :class:`TypedValue`.
        name: Attribute name, used only in error messages.

    Returns:
        The wire type the value maps to.

    Raises:
        UnsupportedTypeError: If the value has no wire type (including
            :data:`NO_VALUE` and integers wider than 64 bits).
    """
    if isinstance(value, TypedValue):
        return value.wire_type
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return WireType.BOOLEAN
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return WireType.INT
        if INT64_MIN <= value <= INT64_MAX:
            return WireType.LONG
        raise UnsupportedTypeError("int (wider than 64 bits)", name)
    if isinstance(value, float):
        return WireType.DOUBLE
    if isinstance(value, str):
        return WireType.STRING
    raise UnsupportedTypeError(type(value).__name__, name)


def is_compatible(actual: WireType, expected: WireType) -> bool:
    """Whether a value of ``actual`` type may be stored under an ``expected`` key.

    int/long and float/double are each interchangeable; rendering adjusts the
    width to the key's declaration.
    """
    if actual == expected:
        return True
    if actual in _INTEGER_TYPES and expected in _INTEGER_TYPES:
        return True
    return actual in _FLOAT_TYPES and expected in _FLOAT_TYPES


def render_value(value: object, wire_type: WireType, name: str = "") -> str:
    """Render a value to its wire text for a key of ``wire_type``.

    Args:
        value: A plain Python value or a :class:`TypedValue`.
        wire_type: The key's declared wire type.
        name: Attribute name, used only in error messages.

    Returns:
        The serialized value.

    Raises:
        UnsupportedTypeError: If the value has no wire type.
        TypeMismatchError: If the value is incompatible with ``wire_type`` or
            does not fit its width.
    """
    actual = infer_wire_type(value, name)
    if not is_compatible(actual, wire_type):
        raise TypeMismatchError(str(wire_type), str(actual), name)

    raw = value.value if isinstance(value, TypedValue) else value

    if wire_type == WireType.BOOLEAN:
        return "true" if raw else "false"
    if wire_type == WireType.STRING:
        return check_xml_text(str(raw), name)
    if wire_type in _INTEGER_TYPES:
        low, high = (INT32_MIN, INT32_MAX) if wire_type == WireType.INT else (INT64_MIN, INT64_MAX)
        if not low <= raw <= high:  # type: ignore[operator]
            raise TypeMismatchError(str(wire_type), f"{actual} ({raw})", name)
        return str(int(raw))
    return _format_float(float(raw), wire_type, name)


def parse_value(text: str, wire_type: WireType, name: str = "") -> bool | int | float | str:
    """Parse wire text back into a Python value.

    Raises:
        TypeMismatchError: If ``text`` is not a valid lexical form of ``wire_type``.
    """
    if wire_type == WireType.STRING:
        return text

    stripped = text.strip()
    if wire_type == WireType.BOOLEAN:
        lowered = stripped.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise TypeMismatchError(str(wire_type), repr(text), name)

    if wire_type in _INTEGER_TYPES:
        if not _INTEGER_PATTERN.fullmatch(stripped):
            raise TypeMismatchError(str(wire_type), repr(text), name)
        parsed = int(stripped)
        low, high = (INT32_MIN, INT32_MAX) if wire_type == WireType.INT else (INT64_MIN, INT64_MAX)
        if not low <= parsed <= high:
            raise TypeMismatchError(str(wire_type), repr(text), name)
        return parsed

    if not _FLOAT_PATTERN.fullmatch(stripped):
        raise TypeMismatchError(str(wire_type), repr(text), name)
    return float(stripped)


def check_xml_text(text: str, name: str = "") -> str:
    """Return ``text`` unchanged if XML can carry it.

    Raises:
        TypeMismatchError: If ``text`` contains characters outside the XML 1.0
            character range (NUL and most control characters).
    """
    match = _XML_ILLEGAL.search(text)
    if match is not None:
        raise TypeMismatchError(
            str(WireType.STRING), f"string with character {match.group()!r}", name
        )
    return text


def _narrow_float32(value: float) -> float:
    result: float = struct.unpack("<f", struct.pack("<f", value))[0]
    return result


def _format_float(value: float, wire_type: WireType, name: str) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if wire_type == WireType.DOUBLE:
        return repr(value)

    try:
        narrowed = _narrow_float32(value)
    except OverflowError as e:
        raise TypeMismatchError(str(wire_type), f"double ({value!r})", name) from e
    # shortest decimal that narrows back to the same float32
    for precision in range(1, 10):
        text = f"{narrowed:.{precision}g}"
        if _narrow_float32(float(text)) == narrowed:
            return repr(float(text))
    return repr(narrowed)

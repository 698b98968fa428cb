"""Attribute resolution: named values <-> data records.

Encoding turns a mapping of attribute names to Python values into
:class:`Data` records that reference keys, registering keys on the fly for
names that are not declared yet. Decoding turns data records back into a
mapping of names to typed values, substituting key defaults where values
are missing and filling in defaults for keys that have no record at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphml.model.errors import (
    DanglingKeyReferenceError,
    MissingValueError,
    NoValueNoDefaultError,
)
from graphml.model.types import (
    NoValue,
    WireType,
    check_xml_text,
    infer_wire_type,
    parse_value,
    render_value,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphml.model.keys import Key, KeyRegistry
    from graphml.model.types import AttributeValue, KeyScope


@dataclass
class Data:
    """One value of a key attached to an element.

    Attributes:
        id: Identifier within the holding element (``d<n>``); not serialized.
        key: ID of the key this value instantiates.
        value: The value in its wire representation.
    """

    id: str
    key: str
    value: str


@dataclass
class _PendingKey:
    """A key that will be registered only once the whole batch is valid."""

    name: str
    wire_type: WireType


def resolve_or_create_key(
    registry: KeyRegistry,
    name: str,
    value: AttributeValue,
    scope: KeyScope,
) -> Key | _PendingKey:
    """Find the key serving ``name`` for ``scope`` or describe a new one.

    A new key is not registered here; it is returned as a pending
    declaration whose wire type is inferred from ``value``.

    Raises:
        MissingValueError: If no key exists and ``value`` is NO_VALUE, so
            there is nothing to infer a type from.
        TypeMismatchError: If no key exists and ``name`` has characters XML
            cannot carry.
        UnsupportedTypeError: If the value's type has no wire type.
    """
    key = registry.lookup(name, scope)
    if key is not None:
        return key
    if isinstance(value, NoValue):
        raise MissingValueError(name)
    check_xml_text(name, name)
    return _PendingKey(name, infer_wire_type(value, name))


def build_data(
    registry: KeyRegistry,
    attributes: Mapping[str, AttributeValue] | None,
    scope: KeyScope,
    start: int = 0,
) -> list[Data]:
    """Convert named attribute values into data records for ``scope``.

    Names are processed in lexicographic order so the output does not depend
    on the mapping's iteration order. Every value is validated and rendered
    before any implicitly declared key is registered, so a failure leaves
    the registry untouched.

    Args:
        registry: The document's key registry.
        attributes: Attribute names mapped to values; NO_VALUE selects the
            key's default.
        scope: Element kind the attributes are attached to.
        start: Index of the first data ID to assign.

    Returns:
        One data record per attribute.

    Raises:
        MissingValueError: NO_VALUE given for a key without a default.
        TypeMismatchError: A value incompatible with its key's wire type.
        UnsupportedTypeError: A value with no wire type.
    """
    if not attributes:
        return []

    planned: list[tuple[Key | _PendingKey, str]] = []
    for name in sorted(attributes):
        value = attributes[name]
        key = resolve_or_create_key(registry, name, value, scope)
        if isinstance(value, NoValue) and not isinstance(key, _PendingKey):
            if not key.has_default:
                raise MissingValueError(name)
            rendered = key.default or ""
        else:
            rendered = render_value(value, key.wire_type, name)
        planned.append((key, rendered))

    records: list[Data] = []
    for index, (key, rendered) in enumerate(planned, start=start):
        if isinstance(key, _PendingKey):
            key = registry.register(scope, key.name, key.wire_type)
        records.append(Data(id=f"d{index}", key=key.id, value=rendered))
    return records


def resolve_attributes(
    registry: KeyRegistry,
    data: list[Data],
    scope: KeyScope,
) -> dict[str, bool | int | float | str]:
    """Convert data records back into attribute names mapped to typed values.

    For each record the value is taken from the record if non-empty, else from
    the key's default; an empty value is legal only for string keys. Keys
    applicable to ``scope`` that have a default but no record contribute
    their default as well.

    Returns:
        A fresh mapping; it is a derived view, not stored state.

    Raises:
        DanglingKeyReferenceError: A record references an unknown key ID.
        NoValueNoDefaultError: A non-string record is empty and has no default.
        TypeMismatchError: A stored value is not valid for its wire type.
    """
    result: dict[str, bool | int | float | str] = {}
    seen: set[str] = set()

    for record in data:
        key = registry.by_id(record.key)
        if key is None:
            raise DanglingKeyReferenceError(record.key)
        seen.add(key.id)

        text = record.value
        if text == "" and key.has_default:
            text = key.default or ""
        if text == "" and key.wire_type != WireType.STRING:
            raise NoValueNoDefaultError(key.id, key.name)
        result[key.name] = parse_value(text, key.wire_type, key.name)

    for key in registry.applicable(scope):
        if key.id in seen or key.name in result or not key.has_default:
            continue
        result[key.name] = parse_value(key.default or "", key.wire_type, key.name)

    return result


def strip_key(data: list[Data], key_id: str) -> int:
    """Remove every record referencing ``key_id`` in place.

    Returns:
        Number of records removed.
    """
    before = len(data)
    data[:] = [d for d in data if d.key != key_id]
    return before - len(data)

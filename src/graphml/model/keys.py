"""Key declarations and the per-document key registry.

A key declares one named, typed data-function (attribute) for an element
kind. Keys are looked up by scope with a fallback to ``all``: a key declared
for all elements serves every element kind unless a narrower key of the
same name exists, and the registry never lets both exist at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphml.model.errors import DuplicateKeyError, KeyNotFoundError
from graphml.model.types import KeyScope, WireType, check_xml_text, render_value
from graphml.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

log = get_logger(__name__)


@dataclass
class Key:
    """Declaration of a named, typed attribute.

    Attributes:
        id: Document-unique identifier (``d<n>``), fixed once assigned.
        scope: Element kind the key applies to.
        name: Attribute name (``attr.name``).
        wire_type: Declared value type (``attr.type``).
        description: Optional human readable description.
        default: Default value, already serialized; None if there is none.
        scope_declared: False when the key carries no explicit ``for``; it then
            acts as ``all`` but is written without the attribute.
    """

    id: str
    scope: KeyScope
    name: str
    wire_type: WireType
    description: str = ""
    default: str | None = None
    scope_declared: bool = True

    @property
    def has_default(self) -> bool:
        """Whether the default can stand in for a missing value.

        An empty default only counts for string keys.
        """
        if self.default is None:
            return False
        return self.default != "" or self.wire_type == WireType.STRING

    def applies_to(self, scope: KeyScope) -> bool:
        """Whether data of this key may be attached to elements of ``scope``."""
        return self.scope in (scope, KeyScope.ALL)


class KeyRegistry:
    """Ordered catalog of a document's keys with scoped lookup indexes.

    The ordered list is the source of truth; the two indexes (by ID and by
    ``(name, scope)``) are derived and can be rebuilt with :meth:`rebuild`.
    """

    def __init__(self) -> None:
        self._keys: list[Key] = []
        self._by_id: dict[str, Key] = {}
        self._by_name: dict[tuple[str, KeyScope], Key] = {}
        self._next_index = 0

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._keys)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, Key) and self._by_id.get(key.id) is key

    @property
    def keys(self) -> list[Key]:
        """Keys in declaration order."""
        return list(self._keys)

    # -- Lookup ----------------------------------------------------------------

    def lookup(self, name: str, scope: KeyScope) -> Key | None:
        """Find the key serving ``name`` for ``scope``.

        Tries the exact scope first, then ``all``.
        """
        key = self._by_name.get((name, scope))
        if key is None and scope != KeyScope.ALL:
            key = self._by_name.get((name, KeyScope.ALL))
        return key

    def by_id(self, key_id: str) -> Key | None:
        return self._by_id.get(key_id)

    def applicable(self, scope: KeyScope) -> list[Key]:
        """Keys whose data may be attached to elements of ``scope``."""
        return [k for k in self._keys if k.applies_to(scope)]

    def names(self) -> list[str]:
        return [k.name for k in self._keys]

    # -- Registration ----------------------------------------------------------

    def check_available(self, name: str, scope: KeyScope) -> None:
        """Raise DuplicateKeyError if a key for ``(name, scope)`` would clash.

        A key for ``all`` also clashes with any narrower key of the same name.
        """
        existing = self.lookup(name, scope)
        if existing is None and scope == KeyScope.ALL:
            existing = next((k for k in self._keys if k.name == name), None)
        if existing is not None:
            raise DuplicateKeyError(name, str(scope), existing.id)

    def register(
        self,
        scope: KeyScope | None,
        name: str,
        wire_type: WireType,
        description: str = "",
        default: object = None,
    ) -> Key:
        """Declare a new key and give it the next sequential ID.

        Args:
            scope: Element kind the key applies to; None declares a key without
                an explicit ``for`` (treated as ``all``).
            name: Attribute name.
            wire_type: Declared value type.
            description: Optional description.
            default: Optional default value (a Python value or TypedValue);
                it is rendered according to ``wire_type``.

        Returns:
            The registered key.

        Raises:
            DuplicateKeyError: If ``(name, scope)`` already resolves to a key.
            TypeMismatchError: If the default doesn't fit ``wire_type``, or the
                name or description has characters XML cannot carry.
            UnsupportedTypeError: If the default has no wire type.
        """
        wire_type = WireType(wire_type)
        effective_scope = KeyScope.ALL if scope is None else KeyScope(scope)
        self.check_available(name, effective_scope)
        check_xml_text(name, "attr.name")
        check_xml_text(description, "description")

        rendered = None if default is None else render_value(default, wire_type, name)
        key = Key(
            id=self._allocate_id(),
            scope=effective_scope,
            name=name,
            wire_type=wire_type,
            description=description,
            default=rendered,
            scope_declared=scope is not None,
        )
        self._insert(key)
        log.debug("key_registered", key_id=key.id, name=name, scope=str(effective_scope))
        return key

    def add(self, key: Key) -> None:
        """Append an already constructed key (used when decoding)."""
        self._keys.append(key)
        self._by_id[key.id] = key
        self._by_name[(key.name, key.scope)] = key

    def _insert(self, key: Key) -> None:
        self.add(key)
        self._next_index += 1

    def _allocate_id(self) -> str:
        while f"d{self._next_index}" in self._by_id:
            self._next_index += 1
        return f"d{self._next_index}"

    # -- Removal ---------------------------------------------------------------

    def remove(self, key: Key) -> None:
        """Remove ``key`` from the list and both indexes.

        Data referencing the key is not touched here; the owning document
        cascades the removal.

        Raises:
            KeyNotFoundError: If the key is not registered.
        """
        if key not in self:
            raise KeyNotFoundError(key.name, str(key.scope), available=self.names())
        self._keys.remove(key)
        del self._by_id[key.id]
        if self._by_name.get((key.name, key.scope)) is key:
            del self._by_name[(key.name, key.scope)]
        log.debug("key_removed", key_id=key.id, name=key.name, scope=str(key.scope))

    def rebuild(self) -> None:
        """Recompute both indexes and the ID counter from the ordered list."""
        self._by_id = {k.id: k for k in self._keys}
        self._by_name = {(k.name, k.scope): k for k in self._keys}
        self._next_index = len(self._keys)

"""The GraphML document: root container of keys, data and graphs.

The document owns the key registry shared by every element below it. All
attribute values anywhere in the document reference keys of this registry,
and removing a key cascades to every value that references it.
"""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

from graphml.config import GraphMLConfig
from graphml.model.attributes import Data, build_data, resolve_attributes, strip_key
from graphml.model.errors import DirectionRequiredError, KeyNotFoundError
from graphml.model.graph import Graph
from graphml.model.keys import Key, KeyRegistry
from graphml.model.types import EdgeDirection, KeyScope, WireType, check_xml_text
from graphml.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from graphml.model.types import AttributeValue

log = get_logger(__name__)


class Document:
    """A GraphML document.

    Attributes:
        description: Human readable description (``<desc>`` of ``<graphml>``).
        data: Attribute values attached to the document itself.
        graphs: Graphs in insertion order.
        registry: Key declarations and their lookup indexes.
        config: Codec and model settings.
    """

    def __init__(self, description: str = "", *, config: GraphMLConfig | None = None) -> None:
        self.description = check_xml_text(description, "description")
        self.config = config or GraphMLConfig()
        self.registry = KeyRegistry()
        self.data: list[Data] = []
        self.graphs: list[Graph] = []
        self._next_graph = 0

    @classmethod
    def with_attributes(
        cls,
        description: str,
        attributes: Mapping[str, AttributeValue] | None,
        *,
        config: GraphMLConfig | None = None,
    ) -> Document:
        """Create a document carrying its own (``graphml``-scoped) attributes.

        Raises:
            MissingValueError: NO_VALUE given for a key without a default.
            TypeMismatchError: A value incompatible with its key's wire type.
            UnsupportedTypeError: A value with no wire type.
        """
        document = cls(description, config=config)
        document.data = build_data(document.registry, attributes, KeyScope.GRAPHML)
        return document

    def __repr__(self) -> str:
        return (
            f"Document(keys={len(self.registry)}, graphs={len(self.graphs)}, "
            f"data={len(self.data)})"
        )

    @property
    def keys(self) -> list[Key]:
        """Declared keys in declaration order."""
        return self.registry.keys

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def register_key(
        self,
        scope: KeyScope | None,
        name: str,
        wire_type: WireType,
        description: str = "",
        default: object = None,
    ) -> Key:
        """Declare a key (data-function).

        Args:
            scope: Element kind the key applies to. None declares it without a
                ``for`` attribute, which GraphML reads as ``all``.
            name: Attribute name.
            wire_type: Declared value type.
            description: Optional description.
            default: Optional default value, rendered according to ``wire_type``.

        Returns:
            The registered key, with the next sequential ID.

        Raises:
            DuplicateKeyError: If ``(name, scope)`` already resolves to a key,
                including through an ``all`` key of the same name.
            TypeMismatchError: If the default doesn't fit ``wire_type``.
            UnsupportedTypeError: If the default has no wire type.
        """
        return self.registry.register(scope, name, wire_type, description, default)

    def get_key(self, name: str, scope: KeyScope) -> Key | None:
        """Look up the key serving ``name`` for ``scope`` (falls back to ``all``)."""
        return self.registry.lookup(name, KeyScope(scope))

    def remove_key(self, key: Key) -> None:
        """Remove a key and every data value that references it.

        The cascade covers the document's own data and every graph, node and
        edge, whatever the key's scope.

        Raises:
            KeyNotFoundError: If the key is not registered in this document.
        """
        self.registry.remove(key)

        removed = strip_key(self.data, key.id)
        for graph in self.graphs:
            removed += strip_key(graph.data, key.id)
            for node in graph.nodes:
                removed += strip_key(node.data, key.id)
            for edge in graph.edges:
                removed += strip_key(edge.data, key.id)
        log.debug("key_cascade_removed", key_id=key.id, name=key.name, data_removed=removed)

    def remove_key_by_name(self, scope: KeyScope, name: str) -> None:
        """Look up a key by name and scope and remove it.

        Raises:
            KeyNotFoundError: If no key serves ``name`` for ``scope``.
        """
        key = self.get_key(name, scope)
        if key is None:
            raise KeyNotFoundError(name, str(scope), available=self.registry.names())
        self.remove_key(key)

    # -------------------------------------------------------------------------
    # Graphs
    # -------------------------------------------------------------------------

    def add_graph(
        self,
        description: str,
        edge_default: EdgeDirection,
        attributes: Mapping[str, AttributeValue] | None = None,
    ) -> Graph:
        """Add a graph to the document.

        Args:
            description: Human readable description.
            edge_default: DIRECTED or UNDIRECTED; DEFAULT is rejected.
            attributes: Attribute names mapped to values (graph scope).

        Returns:
            The new graph, with the next sequential ID.

        Raises:
            DirectionRequiredError: If ``edge_default`` is DEFAULT.
            MissingValueError: NO_VALUE given for a key without a default.
            TypeMismatchError: A value incompatible with its key's wire type. Also raised for a
                description XML cannot carry.
            UnsupportedTypeError: A value with no wire type.
        """
        edge_default = EdgeDirection(edge_default)
        if edge_default == EdgeDirection.DEFAULT:
            raise DirectionRequiredError()
        check_xml_text(description, "description")

        data = build_data(self.registry, attributes, KeyScope.GRAPH)
        graph = Graph(self._allocate_graph_id(), edge_default, description, data, document=self)
        self.graphs.append(graph)
        self._next_graph += 1
        log.debug("graph_added", graph_id=graph.id, edgedefault=str(edge_default))
        return graph

    def get_graph(self, graph_id: str) -> Graph | None:
        return next((g for g in self.graphs if g.id == graph_id), None)

    def _allocate_graph_id(self) -> str:
        taken = {g.id for g in self.graphs}
        while f"g{self._next_graph}" in taken:
            self._next_graph += 1
        return f"g{self._next_graph}"

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def get_attributes(self) -> dict[str, bool | int | float | str]:
        """Resolve the document's own data to attribute names and typed values."""
        return resolve_attributes(self.registry, self.data, KeyScope.GRAPHML)

    # -------------------------------------------------------------------------
    # Codec
    # -------------------------------------------------------------------------

    def rebuild_indexes(self) -> None:
        """Recompute every derived index and back-reference.

        Called after decoding; none of this state is part of the wire format.
        """
        self.registry.rebuild()
        for graph in self.graphs:
            graph.document = self
            graph.rebuild_indexes()
        self._next_graph = len(self.graphs)

    def encode(self, stream: IO[str] | IO[bytes], pretty: bool = False) -> None:
        """Write the document as GraphML XML to ``stream``."""
        from graphml.codec import encode

        encode(self, stream, pretty=pretty)

    def dumps(self, pretty: bool = False) -> str:
        """Return the document as a GraphML XML string."""
        from graphml.codec import dumps

        return dumps(self, pretty=pretty)

    @classmethod
    def decode(
        cls,
        source: IO[str] | IO[bytes] | Path | str,
        *,
        config: GraphMLConfig | None = None,
    ) -> Document:
        """Read a GraphML document from a stream or file path."""
        from graphml.codec import decode

        return decode(source, config=config)

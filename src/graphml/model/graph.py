"""Graphs, nodes and edges of a GraphML document.

A graph owns its nodes and edges and keeps two derived indexes: nodes by
ID and edges by ``(source, target)``. Nodes and edges hold a back-reference
to their graph and the graph to its document, which is how attribute
values reach the document's key registry. The back-references are lookup
relations only; children never mutate their owner through them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from graphml.model.attributes import Data, build_data, resolve_attributes
from graphml.model.errors import EdgeExistsError, NodeNotFoundError
from graphml.model.types import EdgeDirection, KeyScope, check_xml_text
from graphml.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphml.model.document import Document
    from graphml.model.keys import KeyRegistry
    from graphml.model.types import AttributeValue

log = get_logger(__name__)


def edge_identifier(source: str, target: str) -> tuple[str, str]:
    """Key of an edge in the edges-by-endpoints index."""
    return (source, target)


class Node:
    """A node of a graph.

    Attributes:
        id: Graph-unique identifier (``n<n>``).
        description: Human readable description.
        data: Attribute values attached to the node.
        graph: Owning graph.
    """

    def __init__(
        self,
        node_id: str,
        description: str = "",
        data: list[Data] | None = None,
        graph: Graph | None = None,
    ) -> None:
        self.id = node_id
        self.description = description
        self.data: list[Data] = data or []
        self.graph = graph

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, data={len(self.data)})"

    def get_attributes(self) -> dict[str, bool | int | float | str]:
        """Resolve the node's data to attribute names and typed values."""
        return _resolve(self.graph, self.data, KeyScope.NODE)


class Edge:
    """An edge between two nodes of a graph.

    Attributes:
        id: Graph-unique identifier (``e<n>``).
        source: Source node ID.
        target: Target node ID.
        directed: Per-edge direction override; None inherits the graph default.
        description: Human readable description.
        data: Attribute values attached to the edge.
        graph: Owning graph.
    """

    def __init__(
        self,
        edge_id: str,
        source: str,
        target: str,
        *,
        directed: bool | None = None,
        description: str = "",
        data: list[Data] | None = None,
        graph: Graph | None = None,
    ) -> None:
        self.id = edge_id
        self.source = source
        self.target = target
        self.directed = directed
        self.description = description
        self.data: list[Data] = data or []
        self.graph = graph

    def __repr__(self) -> str:
        return f"Edge(id={self.id!r}, source={self.source!r}, target={self.target!r})"

    @property
    def is_directed(self) -> bool:
        """Effective directionality, taking the graph default into account."""
        if self.directed is not None:
            return self.directed
        return self.graph is None or self.graph.edge_default == EdgeDirection.DIRECTED

    def source_node(self) -> Node | None:
        if self.graph is None:
            return None
        return self.graph.get_node(self.source)

    def target_node(self) -> Node | None:
        if self.graph is None:
            return None
        return self.graph.get_node(self.target)

    def get_attributes(self) -> dict[str, bool | int | float | str]:
        """Resolve the edge's data to attribute names and typed values."""
        return _resolve(self.graph, self.data, KeyScope.EDGE)


class Graph:
    """One graph of a GraphML document.

    Create graphs with :meth:`Document.add_graph`; nodes and edges with
    :meth:`add_node` and :meth:`add_edge`. IDs are assigned sequentially in
    insertion order and failed additions don't consume one.

    Attributes:
        id: Document-unique identifier (``g<n>``).
        edge_default: Default directionality of the graph's edges.
        description: Human readable description.
        nodes: Nodes in insertion order.
        edges: Edges in insertion order.
        data: Attribute values attached to the graph.
        document: Owning document.
    """

    def __init__(
        self,
        graph_id: str,
        edge_default: EdgeDirection,
        description: str = "",
        data: list[Data] | None = None,
        document: Document | None = None,
    ) -> None:
        self.id = graph_id
        self.edge_default = edge_default
        self.description = description
        self.data: list[Data] = data or []
        self.document = document
        self.nodes: list[Node] = []
        self.edges: list[Edge] = []
        self._nodes_by_id: dict[str, Node] = {}
        self._edges_by_pair: dict[tuple[str, str], Edge] = {}
        self._edge_ids: set[str] = set()
        self._next_node = 0
        self._next_edge = 0

    def __repr__(self) -> str:
        return (
            f"Graph(id={self.id!r}, edgedefault={self.edge_default}, "
            f"nodes={len(self.nodes)}, edges={len(self.edges)})"
        )

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def add_node(
        self,
        attributes: Mapping[str, AttributeValue] | None = None,
        description: str = "",
    ) -> Node:
        """Add a node with the given attributes.

        Args:
            attributes: Attribute names mapped to values. Undeclared names get
                a node-scoped key with a type inferred from the value.
            description: Human readable description.

        Returns:
            The new node.

        Raises:
            MissingValueError: NO_VALUE given for a key without a default.
            TypeMismatchError: A value incompatible with its key's wire type.
            UnsupportedTypeError: A value with no wire type.
        """
        check_xml_text(description, "description")
        data = build_data(self._registry(), attributes, KeyScope.NODE)
        node = Node(self._allocate_node_id(), description, data, graph=self)
        self._index_node(node)
        self._next_node += 1
        log.debug("node_added", graph_id=self.id, node_id=node.id, attributes=len(data))
        return node

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes_by_id.get(node_id)

    def _allocate_node_id(self) -> str:
        while f"n{self._next_node}" in self._nodes_by_id:
            self._next_node += 1
        return f"n{self._next_node}"

    def _index_node(self, node: Node) -> None:
        self.nodes.append(node)
        self._nodes_by_id[node.id] = node

    # -------------------------------------------------------------------------
    # Edges
    # -------------------------------------------------------------------------

    def add_edge(
        self,
        source: Node | str,
        target: Node | str,
        attributes: Mapping[str, AttributeValue] | None = None,
        direction: EdgeDirection = EdgeDirection.DEFAULT,
        description: str = "",
    ) -> Edge:
        """Add an edge between two nodes of this graph.

        An edge is rejected if one already connects ``(source, target)``. When
        either the edge's own direction or the graph default is undirected,
        an existing ``(target, source)`` edge counts as well.

        Args:
            source: Source node or its ID.
            target: Target node or its ID.
            attributes: Attribute names mapped to values.
            direction: Per-edge direction; DEFAULT inherits the graph's.
            description: Human readable description.

        Returns:
            The new edge.

        Raises:
            NodeNotFoundError: If an endpoint is not a node of this graph.
            EdgeExistsError: If the edge already exists.
            MissingValueError: NO_VALUE given for a key without a default.
            TypeMismatchError: A value incompatible with its key's wire type.
            UnsupportedTypeError: A value with no wire type.
        """
        source_id = self._endpoint_id(source)
        target_id = self._endpoint_id(target)
        direction = EdgeDirection(direction)

        existing = self._edges_by_pair.get(edge_identifier(source_id, target_id))
        if existing is None and EdgeDirection.UNDIRECTED in (direction, self.edge_default):
            existing = self._edges_by_pair.get(edge_identifier(target_id, source_id))
        if existing is not None:
            raise EdgeExistsError(source_id, target_id, existing.id)

        check_xml_text(description, "description")
        data = build_data(self._registry(), attributes, KeyScope.EDGE)
        directed = None
        if direction != EdgeDirection.DEFAULT:
            directed = direction == EdgeDirection.DIRECTED
        edge = Edge(
            self._allocate_edge_id(),
            source_id,
            target_id,
            directed=directed,
            description=description,
            data=data,
            graph=self,
        )
        self._index_edge(edge)
        self._next_edge += 1
        log.debug(
            "edge_added",
            graph_id=self.id,
            edge_id=edge.id,
            source=source_id,
            target=target_id,
        )
        return edge

    def get_edge(self, source_id: str, target_id: str) -> Edge | None:
        return self._edges_by_pair.get(edge_identifier(source_id, target_id))

    def edges_of(self, node_id: str) -> list[Edge]:
        """Edges that have ``node_id`` as source or target, in insertion order."""
        return [e for e in self.edges if node_id in (e.source, e.target)]

    def _endpoint_id(self, endpoint: Node | str) -> str:
        node_id = endpoint.id if isinstance(endpoint, Node) else endpoint
        node = self._nodes_by_id.get(node_id)
        if node is None or (isinstance(endpoint, Node) and node is not endpoint):
            raise NodeNotFoundError(node_id, self.id, available=list(self._nodes_by_id))
        return node_id

    def _allocate_edge_id(self) -> str:
        while f"e{self._next_edge}" in self._edge_ids:
            self._next_edge += 1
        return f"e{self._next_edge}"

    def _index_edge(self, edge: Edge) -> None:
        self.edges.append(edge)
        self._edge_ids.add(edge.id)
        self._edges_by_pair.setdefault(edge_identifier(edge.source, edge.target), edge)

    # -------------------------------------------------------------------------
    # Attributes and indexes
    # -------------------------------------------------------------------------

    def get_attributes(self) -> dict[str, bool | int | float | str]:
        """Resolve the graph's data to attribute names and typed values."""
        if self.document is None:
            return {}
        return resolve_attributes(self.document.registry, self.data, KeyScope.GRAPH)

    def rebuild_indexes(self) -> None:
        """Recompute node/edge indexes, back-references and ID counters."""
        self._nodes_by_id = {}
        self._edges_by_pair = {}
        self._edge_ids = set()
        nodes, edges = self.nodes, self.edges
        self.nodes, self.edges = [], []
        for node in nodes:
            node.graph = self
            self._index_node(node)
        for edge in edges:
            edge.graph = self
            self._index_edge(edge)
        self._next_node = len(self.nodes)
        self._next_edge = len(self.edges)

    def _registry(self) -> KeyRegistry:
        if self.document is None:
            raise RuntimeError(f"graph {self.id} is not attached to a document")
        return self.document.registry


def _resolve(
    graph: Graph | None, data: list[Data], scope: KeyScope
) -> dict[str, bool | int | float | str]:
    if graph is None or graph.document is None:
        return {}
    return resolve_attributes(graph.document.registry, data, scope)

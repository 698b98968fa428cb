"""Tests for graphs, nodes and edges."""

from __future__ import annotations

import pytest

from graphml import (
    NO_VALUE,
    DirectionRequiredError,
    Document,
    EdgeDirection,
    EdgeExistsError,
    Graph,
    KeyScope,
    MissingValueError,
    Node,
    NodeNotFoundError,
    TypeMismatchError,
    WireType,
)


class TestAddGraph:
    """Test Document.add_graph."""

    def test_add_graph(self, document: Document) -> None:
        graph = document.add_graph("test graph", EdgeDirection.DIRECTED, {"acyclic": False})

        assert document.graphs == [graph]
        assert graph.id == "g0"
        assert graph.description == "test graph"
        assert graph.edge_default == EdgeDirection.DIRECTED
        assert graph.document is document
        assert graph.get_attributes() == {"acyclic": False}

    def test_graph_keys_are_graph_scoped(self, document: Document) -> None:
        document.add_graph("g", EdgeDirection.DIRECTED, {"acyclic": False, "max_depth": 10})

        acyclic = document.get_key("acyclic", KeyScope.GRAPH)
        max_depth = document.get_key("max_depth", KeyScope.GRAPH)
        assert acyclic is not None and acyclic.wire_type == WireType.BOOLEAN
        assert max_depth is not None and max_depth.wire_type == WireType.INT
        assert document.get_key("acyclic", KeyScope.NODE) is None

    def test_default_direction_rejected(self, document: Document) -> None:
        with pytest.raises(DirectionRequiredError) as exc_info:
            document.add_graph("test graph", EdgeDirection.DEFAULT)

        assert str(exc_info.value) == "default edge direction must be provided"
        assert document.graphs == []

    def test_graph_ids_are_sequential(self, document: Document) -> None:
        first = document.add_graph("a", EdgeDirection.DIRECTED)
        second = document.add_graph("b", EdgeDirection.UNDIRECTED)

        assert (first.id, second.id) == ("g0", "g1")
        assert document.get_graph("g1") is second
        assert document.get_graph("g7") is None

    def test_failed_add_does_not_consume_id(self, document: Document) -> None:
        with pytest.raises(MissingValueError):
            document.add_graph("a", EdgeDirection.DIRECTED, {"missing": NO_VALUE})

        assert document.add_graph("b", EdgeDirection.DIRECTED).id == "g0"


class TestAddNode:
    """Test Graph.add_node."""

    def test_add_node(
        self, directed_graph: Graph, sample_attributes: dict[str, object]
    ) -> None:
        node = directed_graph.add_node(sample_attributes, "test node")  # type: ignore[arg-type]

        assert directed_graph.nodes == [node]
        assert node.id == "n0"
        assert node.description == "test node"
        assert node.graph is directed_graph
        assert len(node.data) == len(sample_attributes)
        assert node.get_attributes() == sample_attributes
        assert directed_graph.get_node("n0") is node

    def test_node_without_attributes(self, directed_graph: Graph) -> None:
        node = directed_graph.add_node()

        assert node.data == []
        assert node.get_attributes() == {}

    def test_no_value_takes_key_default(self, document: Document, directed_graph: Graph) -> None:
        document.register_key(KeyScope.NODE, "weight", WireType.DOUBLE, default=1.0)

        first = directed_graph.add_node({"weight": NO_VALUE}, "n")
        second = directed_graph.add_node({"weight": 2.5}, "n2")

        assert first.get_attributes() == {"weight": 1.0}
        assert second.get_attributes() == {"weight": 2.5}

    def test_node_ids_are_sequential(self, directed_graph: Graph) -> None:
        ids = [directed_graph.add_node().id for _ in range(3)]

        assert ids == ["n0", "n1", "n2"]

    def test_failed_add_does_not_consume_id(self, directed_graph: Graph) -> None:
        with pytest.raises(MissingValueError):
            directed_graph.add_node({"weight": NO_VALUE})

        assert directed_graph.nodes == []
        assert directed_graph.add_node().id == "n0"

    def test_node_keys_reused_across_nodes(
        self, document: Document, directed_graph: Graph
    ) -> None:
        directed_graph.add_node({"weight": 1.5})
        directed_graph.add_node({"weight": 2.5})

        assert len(document.keys) == 1

    def test_get_missing_node(self, directed_graph: Graph) -> None:
        assert directed_graph.get_node("n5") is None


class TestAddEdge:
    """Test Graph.add_edge."""

    @pytest.fixture
    def nodes(self, directed_graph: Graph) -> tuple[Node, Node]:
        return directed_graph.add_node(), directed_graph.add_node()

    def test_add_edge(
        self,
        directed_graph: Graph,
        nodes: tuple[Node, Node],
        sample_attributes: dict[str, object],
    ) -> None:
        n1, n2 = nodes
        edge = directed_graph.add_edge(
            n1, n2, sample_attributes, description="test edge"  # type: ignore[arg-type]
        )

        assert directed_graph.edges == [edge]
        assert edge.id == "e0"
        assert edge.source == n1.id
        assert edge.target == n2.id
        assert edge.description == "test edge"
        assert edge.directed is None
        assert edge.is_directed
        assert edge.get_attributes() == sample_attributes
        assert directed_graph.get_edge(n1.id, n2.id) is edge
        assert edge.source_node() is n1
        assert edge.target_node() is n2

    def test_add_edge_by_id(self, directed_graph: Graph, nodes: tuple[Node, Node]) -> None:
        edge = directed_graph.add_edge("n0", "n1")

        assert (edge.source, edge.target) == ("n0", "n1")

    def test_duplicate_edge_raises(self, directed_graph: Graph, nodes: tuple[Node, Node]) -> None:
        n1, n2 = nodes
        directed_graph.add_edge(n1, n2)

        with pytest.raises(EdgeExistsError) as exc_info:
            directed_graph.add_edge(n1, n2)

        assert str(exc_info.value) == "edge already added to the graph"
        assert exc_info.value.existing_id == "e0"
        assert len(directed_graph.edges) == 1

    def test_reverse_edge_allowed_in_directed_graph(
        self, directed_graph: Graph, nodes: tuple[Node, Node]
    ) -> None:
        n1, n2 = nodes
        directed_graph.add_edge(n1, n2)

        reverse = directed_graph.add_edge(n2, n1)

        assert reverse.id == "e1"
        assert directed_graph.get_edge(n2.id, n1.id) is reverse

    def test_reverse_edge_rejected_in_undirected_graph(self, document: Document) -> None:
        graph = document.add_graph("u", EdgeDirection.UNDIRECTED)
        n1, n2 = graph.add_node(), graph.add_node()
        graph.add_edge(n1, n2)

        with pytest.raises(EdgeExistsError):
            graph.add_edge(n2, n1)

    def test_undirected_edge_in_directed_graph_checks_reverse(
        self, directed_graph: Graph, nodes: tuple[Node, Node]
    ) -> None:
        n1, n2 = nodes
        directed_graph.add_edge(n1, n2)

        with pytest.raises(EdgeExistsError):
            directed_graph.add_edge(n2, n1, direction=EdgeDirection.UNDIRECTED)

    def test_direction_override(self, directed_graph: Graph, nodes: tuple[Node, Node]) -> None:
        n1, n2 = nodes

        edge = directed_graph.add_edge(n1, n2, direction=EdgeDirection.UNDIRECTED)

        assert edge.directed is False
        assert not edge.is_directed

    def test_edge_in_undirected_graph_inherits(self, document: Document) -> None:
        graph = document.add_graph("u", EdgeDirection.UNDIRECTED)
        edge = graph.add_edge(graph.add_node(), graph.add_node())

        assert edge.directed is None
        assert not edge.is_directed

    def test_unknown_endpoint_raises(
        self, directed_graph: Graph, nodes: tuple[Node, Node]
    ) -> None:
        with pytest.raises(NodeNotFoundError) as exc_info:
            directed_graph.add_edge("n0", "n9")

        assert exc_info.value.node_id == "n9"
        assert exc_info.value.graph_id == directed_graph.id
        assert directed_graph.edges == []

    def test_node_from_another_graph_raises(
        self, document: Document, directed_graph: Graph, nodes: tuple[Node, Node]
    ) -> None:
        other = document.add_graph("other", EdgeDirection.DIRECTED)
        stranger = other.add_node()

        with pytest.raises(NodeNotFoundError):
            directed_graph.add_edge(nodes[1], stranger)

    def test_failed_add_does_not_consume_id(
        self, directed_graph: Graph, nodes: tuple[Node, Node]
    ) -> None:
        n1, n2 = nodes
        with pytest.raises(MissingValueError):
            directed_graph.add_edge(n1, n2, {"weight": NO_VALUE})

        assert directed_graph.add_edge(n1, n2).id == "e0"

    def test_edge_keys_are_edge_scoped(
        self, document: Document, directed_graph: Graph, nodes: tuple[Node, Node]
    ) -> None:
        directed_graph.add_edge(*nodes, {"weight": 1.5})

        assert document.get_key("weight", KeyScope.EDGE) is not None
        assert document.get_key("weight", KeyScope.NODE) is None

    def test_edges_of(self, directed_graph: Graph, nodes: tuple[Node, Node]) -> None:
        n1, n2 = nodes
        n3 = directed_graph.add_node()
        e1 = directed_graph.add_edge(n1, n2)
        e2 = directed_graph.add_edge(n3, n1)
        directed_graph.add_edge(n2, n3)

        assert directed_graph.edges_of(n1.id) == [e1, e2]
        assert directed_graph.edges_of("missing") == []


class TestDocumentAttributes:
    """Test attributes attached to the document itself."""

    def test_with_attributes(self) -> None:
        document = Document.with_attributes("test document", {"author": "me", "version": 3})

        assert document.description == "test document"
        assert document.get_attributes() == {"author": "me", "version": 3}
        assert {k.scope for k in document.keys} == {KeyScope.GRAPHML}

    def test_repr(self, document: Document, directed_graph: Graph) -> None:
        directed_graph.add_node()

        assert repr(document) == "Document(keys=0, graphs=1, data=0)"
        assert repr(directed_graph) == (
            "Graph(id='g0', edgedefault=directed, nodes=1, edges=0)"
        )


class TestXmlIncompatibleText:
    """Test that text XML cannot carry is rejected before anything is added."""

    def test_string_value_with_control_character(
        self, document: Document, directed_graph: Graph
    ) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            directed_graph.add_node({"label": "a\x01b", "weight": 1.5})

        assert exc_info.value.name == "label"
        assert document.keys == []
        assert directed_graph.nodes == []
        assert directed_graph.add_node().id == "n0"
        assert "<node" in document.dumps()

    def test_attribute_name_with_control_character(self, directed_graph: Graph) -> None:
        with pytest.raises(TypeMismatchError):
            directed_graph.add_node({"bad\x02": 1})

        assert directed_graph.document.keys == []

    def test_node_description(self, directed_graph: Graph) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            directed_graph.add_node({"weight": 1.5}, "nul\x00")

        assert exc_info.value.name == "description"
        assert directed_graph.nodes == []
        assert directed_graph.document.keys == []

    def test_edge_description(self, directed_graph: Graph) -> None:
        a, b = directed_graph.add_node(), directed_graph.add_node()

        with pytest.raises(TypeMismatchError):
            directed_graph.add_edge(a, b, description="\x1b[0m")

        assert directed_graph.edges == []
        assert directed_graph.add_edge(a, b).id == "e0"

    def test_graph_description(self, document: Document) -> None:
        with pytest.raises(TypeMismatchError):
            document.add_graph("g\x0c", EdgeDirection.DIRECTED, {"acyclic": True})

        assert document.graphs == []
        assert document.keys == []

    def test_document_description(self) -> None:
        with pytest.raises(TypeMismatchError):
            Document("x\x02")

    def test_registered_key_name_and_description(self, document: Document) -> None:
        with pytest.raises(TypeMismatchError):
            document.register_key(KeyScope.NODE, "bad\x01", WireType.STRING)
        with pytest.raises(TypeMismatchError):
            document.register_key(KeyScope.NODE, "label", WireType.STRING, "desc\x01")

        assert document.keys == []
        assert document.register_key(KeyScope.NODE, "label", WireType.STRING).id == "d0"

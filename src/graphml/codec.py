"""GraphML XML encoding and decoding.

The wire format is fixed::

    <graphml xmlns=... xmlns:xsi=... xsi:schemaLocation=...>
      <desc/>?
      <key id for? attr.name attr.type> <desc/>? <default/>? </key>*
      <data key>value</data>*
      <graph id edgedefault>
        <desc/>? <data/>* <node id><desc/>?<data/>*</node>*
        <edge id source target directed?><desc/>?<data/>*</edge>*
      </graph>*
    </graphml>

Encoding is deterministic: keys in declaration order, data in the order the
values were resolved. Inside a graph, its own data is written before the
nodes and edges; GraphML allows either placement and decoding accepts both.
Decoding builds a fresh :class:`Document` and then rebuilds every derived
index and back-reference, none of which is stored in the XML. Element
attributes are validated with pydantic models named after the elements;
problems are reported as :class:`DocumentDecodeError`. XML syntax errors
surface unchanged from lxml.
"""

from __future__ import annotations

import io
import os
from typing import IO, TYPE_CHECKING, Literal, TypeVar

from lxml import etree
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from graphml.model.attributes import Data
from graphml.model.document import Document
from graphml.model.errors import DocumentDecodeError
from graphml.model.graph import Edge, Graph, Node
from graphml.model.keys import Key
from graphml.model.types import EdgeDirection, KeyScope, WireType
from graphml.observability.logging import get_logger

if TYPE_CHECKING:
    from graphml.config import GraphMLConfig

log = get_logger(__name__)

GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = f"{GRAPHML_NS} http://graphml.graphdrawing.org/xmlns/1.0/graphml.xsd"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

_ElementModel = TypeVar("_ElementModel", bound="_WireElement")


# -----------------------------------------------------------------------------
# Wire element attribute models
# -----------------------------------------------------------------------------


class _WireElement(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class KeyElement(_WireElement):
    """Attributes of ``<key>``."""

    id: str = Field(min_length=1)
    target: str = Field("", alias="for")
    name: str = Field(alias="attr.name")
    type: str | None = Field(None, alias="attr.type")


class DataElement(_WireElement):
    """Attributes of ``<data>``."""

    key: str = Field(min_length=1)


class GraphElement(_WireElement):
    """Attributes of ``<graph>``."""

    id: str | None = None
    edgedefault: Literal["directed", "undirected"]


class NodeElement(_WireElement):
    """Attributes of ``<node>``."""

    id: str = Field(min_length=1)


class EdgeElement(_WireElement):
    """Attributes of ``<edge>``."""

    id: str | None = None
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    directed: bool | None = None


def _validate(model: type[_ElementModel], element: etree._Element) -> _ElementModel:
    try:
        return model.model_validate(dict(element.attrib))
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'attributes'}: {err['msg']}"
            for err in e.errors()
        )
        raise DocumentDecodeError(_local_name(element), reasons) from e


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------


def _tag(name: str) -> str:
    return f"{{{GRAPHML_NS}}}{name}"


def _sub(parent: etree._Element, name: str, text: str | None = None) -> etree._Element:
    element = etree.SubElement(parent, _tag(name))
    if text is not None:
        element.text = text
    return element


def _append_desc(parent: etree._Element, description: str) -> None:
    if description:
        _sub(parent, "desc", description)


def _append_data(parent: etree._Element, data: list[Data]) -> None:
    for record in data:
        _sub(parent, "data", record.value).set("key", record.key)


def _key_element(parent: etree._Element, key: Key) -> None:
    element = _sub(parent, "key")
    element.set("id", key.id)
    if key.scope_declared:
        element.set("for", str(key.scope))
    element.set("attr.name", key.name)
    element.set("attr.type", str(key.wire_type))
    _append_desc(element, key.description)
    if key.default is not None:
        _sub(element, "default", key.default)


def _graph_element(parent: etree._Element, graph: Graph) -> None:
    element = _sub(parent, "graph")
    element.set("id", graph.id)
    element.set("edgedefault", str(graph.edge_default))
    _append_desc(element, graph.description)
    _append_data(element, graph.data)

    for node in graph.nodes:
        node_element = _sub(element, "node")
        node_element.set("id", node.id)
        _append_desc(node_element, node.description)
        _append_data(node_element, node.data)

    for edge in graph.edges:
        edge_element = _sub(element, "edge")
        edge_element.set("id", edge.id)
        edge_element.set("source", edge.source)
        edge_element.set("target", edge.target)
        if edge.directed is not None:
            edge_element.set("directed", "true" if edge.directed else "false")
        _append_desc(edge_element, edge.description)
        _append_data(edge_element, edge.data)


def to_element(document: Document) -> etree._Element:
    """Build the ``<graphml>`` element tree for ``document``."""
    root = etree.Element(_tag("graphml"), nsmap={None: GRAPHML_NS, "xsi": XSI_NS})
    root.set(f"{{{XSI_NS}}}schemaLocation", SCHEMA_LOCATION)
    _append_desc(root, document.description)
    for key in document.keys:
        _key_element(root, key)
    _append_data(root, document.data)
    for graph in document.graphs:
        _graph_element(root, graph)
    return root


def dumps(document: Document, pretty: bool = False) -> str:
    """Serialize ``document`` to a GraphML string.

    Args:
        document: Document to serialize.
        pretty: Indent nested elements (using ``config.indent``) instead of
            writing everything on one line.

    Returns:
        The XML text.
    """
    root = to_element(document)
    if pretty:
        etree.indent(root, space=document.config.indent)
    text: str = etree.tostring(root, encoding="unicode")
    if pretty:
        text += "\n"
    if document.config.xml_declaration:
        text = XML_DECLARATION + text
    return text


def encode(document: Document, stream: IO[str] | IO[bytes], pretty: bool = False) -> None:
    """Write ``document`` as GraphML to a text or binary stream.

    Binary streams receive UTF-8.
    """
    text = dumps(document, pretty=pretty)
    if _is_binary(stream):
        stream.write(text.encode("utf-8"))  # type: ignore[arg-type]
    else:
        stream.write(text)  # type: ignore[arg-type]
    log.debug(
        "document_encoded",
        keys=len(document.keys),
        graphs=len(document.graphs),
        pretty=pretty,
    )


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def _is_binary(stream: object) -> bool:
    if isinstance(stream, io.RawIOBase | io.BufferedIOBase):
        return True
    mode = getattr(stream, "mode", "")
    return isinstance(mode, str) and "b" in mode


def _parser(encoding: str | None = None) -> etree.XMLParser:
    # an explicit encoding overrides the one named in the XML declaration
    return etree.XMLParser(resolve_entities=False, no_network=True, encoding=encoding)


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _children(element: etree._Element) -> list[tuple[str, etree._Element]]:
    # comments and processing instructions have non-string tags
    return [(_local_name(child), child) for child in element if isinstance(child.tag, str)]


def _text(element: etree._Element) -> str:
    # text split by comments or processing instructions is joined back
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def _decode_key(element: etree._Element, config: GraphMLConfig) -> Key:
    attrs = _validate(KeyElement, element)

    scope_declared = attrs.target != ""
    try:
        scope = KeyScope(attrs.target) if scope_declared else KeyScope.ALL
    except ValueError as e:
        raise DocumentDecodeError("key", f"unsupported for={attrs.target!r}") from e

    if attrs.type is None:
        wire_type = config.effective_default_key_type()
        if wire_type is None:
            raise DocumentDecodeError("key", f"attr.type is required (key {attrs.id})")
    else:
        try:
            wire_type = WireType(attrs.type)
        except ValueError as e:
            raise DocumentDecodeError("key", f"unsupported attr.type={attrs.type!r}") from e

    key = Key(
        id=attrs.id,
        scope=scope,
        name=attrs.name,
        wire_type=wire_type,
        scope_declared=scope_declared,
    )
    for name, child in _children(element):
        if name == "desc":
            key.description = _text(child)
        elif name == "default":
            key.default = _text(child)
    return key


def _decode_data(element: etree._Element, index: int) -> Data:
    attrs = _validate(DataElement, element)
    return Data(id=f"d{index}", key=attrs.key, value=_text(element))


def _decode_node(element: etree._Element) -> Node:
    attrs = _validate(NodeElement, element)
    node = Node(attrs.id)
    for name, child in _children(element):
        if name == "desc":
            node.description = _text(child)
        elif name == "data":
            node.data.append(_decode_data(child, len(node.data)))
        else:
            log.warning("unsupported_element_skipped", element=name, parent="node", node_id=node.id)
    return node


def _decode_edge(element: etree._Element, index: int) -> Edge:
    attrs = _validate(EdgeElement, element)
    edge = Edge(attrs.id or f"e{index}", attrs.source, attrs.target, directed=attrs.directed)
    for name, child in _children(element):
        if name == "desc":
            edge.description = _text(child)
        elif name == "data":
            edge.data.append(_decode_data(child, len(edge.data)))
        else:
            log.warning("unsupported_element_skipped", element=name, parent="edge", edge_id=edge.id)
    return edge


def _decode_graph(element: etree._Element, index: int) -> Graph:
    attrs = _validate(GraphElement, element)
    graph = Graph(attrs.id or f"g{index}", EdgeDirection(attrs.edgedefault))
    for name, child in _children(element):
        if name == "desc":
            graph.description = _text(child)
        elif name == "data":
            graph.data.append(_decode_data(child, len(graph.data)))
        elif name == "node":
            graph.nodes.append(_decode_node(child))
        elif name == "edge":
            graph.edges.append(_decode_edge(child, len(graph.edges)))
        else:
            log.warning(
                "unsupported_element_skipped", element=name, parent="graph", graph_id=graph.id
            )
    return graph


def from_element(root: etree._Element, config: GraphMLConfig | None = None) -> Document:
    """Build a document from a parsed ``<graphml>`` element.

    Raises:
        DocumentDecodeError: If the root is not ``<graphml>`` or an element has
            missing or invalid attributes.
    """
    if _local_name(root) != "graphml":
        raise DocumentDecodeError(_local_name(root), "root element must be <graphml>")

    document = Document(config=config)
    for name, child in _children(root):
        if name == "desc":
            document.description = _text(child)
        elif name == "key":
            document.registry.add(_decode_key(child, document.config))
        elif name == "data":
            document.data.append(_decode_data(child, len(document.data)))
        elif name == "graph":
            document.graphs.append(_decode_graph(child, len(document.graphs)))
        else:
            log.warning("unsupported_element_skipped", element=name, parent="graphml")

    document.rebuild_indexes()
    log.debug(
        "document_decoded",
        keys=len(document.keys),
        graphs=len(document.graphs),
        nodes=sum(len(g.nodes) for g in document.graphs),
        edges=sum(len(g.edges) for g in document.graphs),
    )
    return document


def decode(
    source: IO[str] | IO[bytes] | os.PathLike[str] | str,
    *,
    config: GraphMLConfig | None = None,
) -> Document:
    """Read a GraphML document from a stream or a file path.

    Args:
        source: Open file object (text or binary) or path to a file.
        config: Settings for the new document (e.g. default key type).

    Returns:
        A fresh, fully indexed document.

    Raises:
        lxml.etree.XMLSyntaxError: If the input is not well-formed XML.
        DocumentDecodeError: If GraphML elements are missing required attributes.
    """
    if isinstance(source, str | os.PathLike):
        source = os.fspath(source)
    elif not _is_binary(source):
        return loads(source.read(), config=config)
    tree = etree.parse(source, _parser())
    return from_element(tree.getroot(), config)


def loads(text: str | bytes, *, config: GraphMLConfig | None = None) -> Document:
    """Read a GraphML document from a string or bytes.

    For ``str`` input any encoding named in the XML declaration is ignored.
    """
    if isinstance(text, str):
        root = etree.fromstring(text.encode("utf-8"), _parser("utf-8"))
    else:
        root = etree.fromstring(text, _parser())
    return from_element(root, config)

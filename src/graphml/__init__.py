"""graphml - GraphML document model and codec.

Build typed graphs in memory (keys, data values, graphs, nodes, edges)
and convert them losslessly to and from GraphML XML.

Example:
    >>> from graphml import Document, EdgeDirection, KeyScope, WireType, NO_VALUE
    >>> doc = Document("example")
    >>> _ = doc.register_key(KeyScope.NODE, "weight", WireType.DOUBLE, default=1.0)
    >>> graph = doc.add_graph("g", EdgeDirection.DIRECTED)
    >>> graph.add_node({"weight": NO_VALUE}).get_attributes()
    {'weight': 1.0}
"""

from graphml.codec import decode, dumps, encode, loads
from graphml.config import ConfigError, GraphMLConfig, load_config
from graphml.model.attributes import Data, build_data, resolve_attributes, resolve_or_create_key
from graphml.model.document import Document
from graphml.model.errors import (
    DanglingKeyReferenceError,
    DirectionRequiredError,
    DocumentDecodeError,
    DuplicateKeyError,
    EdgeExistsError,
    GraphMLError,
    KeyNotFoundError,
    MissingValueError,
    NodeNotFoundError,
    NoValueNoDefaultError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from graphml.model.graph import Edge, Graph, Node
from graphml.model.keys import Key, KeyRegistry
from graphml.model.types import (
    NO_VALUE,
    EdgeDirection,
    KeyScope,
    NoValue,
    TypedValue,
    WireType,
    boolean,
    float32,
    float64,
    int32,
    int64,
    string,
)

__version__ = "0.1.0"

__all__ = [
    "NO_VALUE",
    "ConfigError",
    "DanglingKeyReferenceError",
    "Data",
    "DirectionRequiredError",
    "Document",
    "DocumentDecodeError",
    "DuplicateKeyError",
    "Edge",
    "EdgeDirection",
    "EdgeExistsError",
    "Graph",
    "GraphMLConfig",
    "GraphMLError",
    "Key",
    "KeyNotFoundError",
    "KeyRegistry",
    "KeyScope",
    "MissingValueError",
    "NoValue",
    "NoValueNoDefaultError",
    "Node",
    "NodeNotFoundError",
    "TypeMismatchError",
    "TypedValue",
    "UnsupportedTypeError",
    "WireType",
    "__version__",
    "boolean",
    "build_data",
    "decode",
    "dumps",
    "encode",
    "float32",
    "float64",
    "int32",
    "int64",
    "load_config",
    "loads",
    "resolve_attributes",
    "resolve_or_create_key",
    "string",
]

"""Document model error types.

These errors are raised when an operation would break the consistency of a
GraphML document: duplicate key declarations, values that do not fit the
declared wire type, dangling references and so on.

All errors are local validation failures. None of them is transient, and an
operation that raises leaves the document exactly as it was before the call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches


class GraphMLError(Exception):
    """Base class for every error raised by the document model and codec."""


@dataclass
class DuplicateKeyError(GraphMLError):
    """Raised when registering a key whose (name, scope) already resolves.

    Attributes:
        name: Attribute name of the rejected key.
        scope: Scope the key was requested for.
        existing_id: ID of the key that already covers this name.
    """

    name: str
    scope: str
    existing_id: str = ""

    def __post_init__(self) -> None:
        super().__init__(f"key with given name already registered: {self.name}")


@dataclass
class KeyNotFoundError(GraphMLError):
    """Raised when removing a key that is not registered.

    Attributes:
        name: Attribute name that was looked up.
        scope: Scope used for the lookup.
        available: Names of the keys currently registered.
    """

    name: str
    scope: str
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        msg = f"key not found: {self.name} (for={self.scope})"
        suggestions = self.suggestions()
        if suggestions:
            msg += f"; did you mean: {', '.join(suggestions)}"
        super().__init__(msg)

    def suggestions(self) -> list[str]:
        """Find registered key names that might be typos of ``name``."""
        return get_close_matches(self.name, sorted(set(self.available)), n=3, cutoff=0.6)


@dataclass
class DirectionRequiredError(GraphMLError):
    """Raised when a graph is created without a default edge direction."""

    def __post_init__(self) -> None:
        super().__init__("default edge direction must be provided")


@dataclass
class EdgeExistsError(GraphMLError):
    """Raised when adding an edge that already connects the same nodes.

    For undirected edges (or graphs) the reverse pair counts as the same edge.

    Attributes:
        source: Source node ID of the rejected edge.
        target: Target node ID of the rejected edge.
        existing_id: ID of the edge that already connects them.
    """

    source: str
    target: str
    existing_id: str = ""

    def __post_init__(self) -> None:
        super().__init__("edge already added to the graph")


@dataclass
class NodeNotFoundError(GraphMLError):
    """Raised when an edge endpoint is not a node of the graph.

    Attributes:
        node_id: The ID that was referenced but doesn't exist.
        graph_id: Graph in which the lookup happened.
        available: Node IDs that exist in the graph.
    """

    node_id: str
    graph_id: str = ""
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        msg = f"node '{self.node_id}' not found"
        if self.graph_id:
            msg += f" in graph '{self.graph_id}'"
        suggestions = get_close_matches(self.node_id, self.available, n=3, cutoff=0.6)
        if suggestions:
            msg += f"; did you mean: {', '.join(suggestions)}"
        super().__init__(msg)


@dataclass
class UnsupportedTypeError(GraphMLError):
    """Raised when a value has no GraphML wire type.

    Attributes:
        type_name: Python type name of the rejected value.
        name: Attribute name the value was supplied for, if known.
    """

    type_name: str
    name: str = ""

    def __post_init__(self) -> None:
        msg = f"unsupported attribute value type: {self.type_name}"
        if self.name:
            msg += f" (attribute: {self.name})"
        super().__init__(msg)


@dataclass
class TypeMismatchError(GraphMLError):
    """Raised when a value does not fit the wire type of its key.

    Also raised when a serialized value cannot be parsed as its wire type.

    Attributes:
        expected: Wire type declared by the key.
        actual: Wire type inferred from the value, or its raw text.
        name: Attribute name, if known.
    """

    expected: str
    actual: str
    name: str = ""

    def __post_init__(self) -> None:
        msg = f"value of type {self.actual} is not compatible with {self.expected}"
        if self.name:
            msg += f" (attribute: {self.name})"
        super().__init__(msg)


@dataclass
class MissingValueError(GraphMLError):
    """Raised when an attribute is given NO_VALUE and its key has no default.

    Attributes:
        name: Attribute name.
    """

    name: str

    def __post_init__(self) -> None:
        super().__init__(f"empty attribute without default value: {self.name}")


@dataclass
class NoValueNoDefaultError(GraphMLError):
    """Raised on decode when a non-string data value is empty and has no default.

    Attributes:
        key_id: ID of the key the data element refers to.
        name: Attribute name of that key.
    """

    key_id: str
    name: str

    def __post_init__(self) -> None:
        super().__init__(f"data for key '{self.key_id}' ({self.name}) has no value and no default")


@dataclass
class DanglingKeyReferenceError(GraphMLError):
    """Raised when a data value references a key ID that is not registered.

    This indicates an inconsistent document rather than bad user input.

    Attributes:
        key_id: The referenced key ID.
    """

    key_id: str

    def __post_init__(self) -> None:
        super().__init__(f"data references unknown key: {self.key_id}")


@dataclass
class DocumentDecodeError(GraphMLError):
    """Raised when a GraphML element lacks a required attribute or has a bad one.

    Attributes:
        element: Local name of the offending element.
        reason: What is wrong with it.
    """

    element: str
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"invalid <{self.element}> element: {self.reason}")

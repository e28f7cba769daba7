"""Exception hierarchy for the proptree package.

Every error raised by proptree derives from ProptreeError, which carries an
optional context dictionary with the details needed for diagnostics (the
offending property name, the node ID, the unknown parent ID, ...).

Property lookup failures are also KeyError/AttributeError subclasses so that
they interoperate with code written against plain mappings and objects.

Example:
    ```python
    from proptree import Node
    from proptree.exceptions import MissingPropertyError

    node = Node({"id": 7, "parent": 0})
    try:
        node.get("title")
    except MissingPropertyError as e:
        print(e.context)  # {'name': 'title', 'node_id': 7}
    ```
"""

from typing import Any, Dict


class ProptreeError(Exception):
    """Base exception for all proptree errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence if both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = details or context or {}
        self.details = self.context

    def __str__(self) -> str:
        return self.message


class NotFoundError(ProptreeError):
    """Raised when a requested item (property, node) is not found."""

    pass


class ValidationError(ProptreeError):
    """Raised when input data fails validation."""

    pass


class ConfigurationError(ProptreeError):
    """Raised when builder configuration is invalid or missing."""

    pass


class MissingPropertyError(NotFoundError, KeyError):
    """Raised when a node has no property with the requested name."""

    def __init__(self, name: str, node_id: Any):
        self.name = name
        self.node_id = node_id
        super().__init__(
            f"Undefined property: {name} (Node ID: {node_id})",
            context={"name": name, "node_id": node_id},
        )


class InvalidAccessorError(ProptreeError, AttributeError):
    """Raised when attribute-style access names no stored property."""

    def __init__(self, name: str, node_id: Any):
        super().__init__(
            f"Invalid accessor {name} called (Node ID: {node_id})",
            context={"name": name, "node_id": node_id},
        )
        # AttributeError.__init__ resets ``name``
        self.name = name
        self.node_id = node_id


class NodeNotFoundError(NotFoundError):
    """Raised when a tree has no node with the requested ID."""

    def __init__(self, node_id: Any):
        self.node_id = node_id
        super().__init__(f"Node with ID '{node_id}' not found", context={"node_id": node_id})


class InvalidParentError(ValidationError):
    """Raised when a record references a parent that cannot be used."""

    def __init__(self, node_id: Any, parent_id: Any, reason: str):
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(
            f"Node with ID '{node_id}' {reason} (parent ID: {parent_id})",
            context={"node_id": node_id, "parent_id": parent_id},
        )


class InvalidDataError(ValidationError):
    """Raised when builder input is not a sequence of records."""

    pass

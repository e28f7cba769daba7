"""Tree node built from a flat property record.

A Node holds a case-insensitive bag of scalar properties (at least an ``id``
and usually a ``parent`` reference), an ordered list of child nodes and a
back-reference to its parent. All navigation (siblings, descendants,
ancestors, level) is derived from the parent/child links.

Nodes are normally created and linked by a builder such as
:class:`proptree.tree.Tree`, then treated as read-only:

    ```python
    from proptree import Node

    root = Node({"id": 0, "parent": None})
    a = Node({"ID": 1, "Title": "A"})
    b = Node({"id": 2, "title": "B"})
    root.add_child(a)
    root.add_child(b)

    a.get("title")                 # "A"
    a.title                        # "A"
    a.get("parent")                # 0
    a.get_following_sibling() is b  # True
    [str(n) for n in root.get_descendants_and_self()]  # ["0", "1", "2"]
    ```

Note:
    The parent/child graph must be acyclic. This is not checked; walking the
    ancestors or descendants of a cyclic structure never terminates.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from typing import Any, Deque, Dict, List

from proptree.exceptions import InvalidAccessorError, MissingPropertyError

ID_PROPERTY = "id"
PARENT_PROPERTY = "parent"

_MISSING = object()


class Node:
    """A tree node with a property bag and parent/child links.

    Attributes:
        id: The value of the node's ``id`` property (None if absent).
        parent: Parent Node, or None if this is a root node.
        children: Copy of the ordered list of child nodes.
        level: Number of hops from the root to this node (root has level 0).

    Properties not shadowed by one of the attributes above can also be read
    as attributes, case-insensitively (``node.title``, ``node.TITLE``).
    Unknown names raise :class:`~proptree.exceptions.InvalidAccessorError`.
    """

    def __init__(self, properties: Mapping[str, Any] | None = None) -> None:
        """Initialize a detached node from a property record.

        Args:
            properties: Mapping of property names to values. Keys are
                lower-cased; the mapping is copied, so later changes to it
                do not affect the node.
        """
        self._properties: Dict[str, Any] = {
            str(key).lower(): value for key, value in (properties or {}).items()
        }
        self._parent: Node | None = None
        self._children: List[Node] = []

    def __str__(self) -> str:
        node_id = self._properties.get(ID_PROPERTY)
        return "" if node_id is None else str(node_id)

    def __repr__(self) -> str:
        return (
            f"Node(id={self._properties.get(ID_PROPERTY)!r}, "
            f"parent={self._properties.get(PARENT_PROPERTY)!r})"
        )

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name in ("parent", "children") or name.lower() in self._properties

    def __getattr__(self, name: str) -> Any:
        # Only called when regular attribute lookup fails
        properties = self.__dict__.get("_properties")
        if properties is None or name.startswith("__"):
            raise AttributeError(name)
        lower_name = name.lower()
        if lower_name in properties:
            return properties[lower_name]
        raise InvalidAccessorError(name, properties.get(ID_PROPERTY))

    @property
    def id(self) -> Any:
        """The node's ID property, or None if it has none."""
        return self._properties.get(ID_PROPERTY)

    def get_id(self) -> Any:
        """Get the node's ID.

        Returns:
            The value of the ``id`` property, or None if it has none.
        """
        return self._properties.get(ID_PROPERTY)

    def get(self, name: str, default: Any = _MISSING) -> Any:
        """Get a single property by name, ignoring case.

        Args:
            name: The property name.
            default: Optional value to return when the property is missing.
                If not given, a missing property raises an error.

        Returns:
            The property value (or the default).

        Raises:
            MissingPropertyError: If the property does not exist and no
                default was given. The error names the property and this
                node's ID.

        Example:
            ```python
            node = Node({"id": 3, "Name": "Three"})
            node.get("NAME")          # "Three"
            node.get("size", 0)       # 0
            node.get("size")          # raises MissingPropertyError
            ```
        """
        lower_name = name.lower()
        if lower_name in self._properties:
            return self._properties[lower_name]
        if default is not _MISSING:
            return default
        raise MissingPropertyError(name, self._properties.get(ID_PROPERTY))

    def to_dict(self) -> Dict[str, Any]:
        """Get a copy of this node's properties.

        Returns:
            Dictionary of lower-cased property names to values. Changing it
            does not change the node.
        """
        return dict(self._properties)

    @property
    def parent(self) -> Node | None:
        """This node's parent, or None if this is a root node."""
        return self._parent

    def get_parent(self) -> Node | None:
        return self._parent

    @property
    def children(self) -> List[Node]:
        """This node's children in insertion order (as a new list)."""
        return list(self._children)

    def get_children(self) -> List[Node]:
        return list(self._children)

    def has_children(self) -> bool:
        return len(self._children) > 0

    def count_children(self) -> int:
        return len(self._children)

    def add_child(self, child: Node) -> None:
        """Append a node to this node's children.

        The child's parent reference is set to this node and its ``parent``
        property is overwritten with this node's ID.

        Args:
            child: The node to attach.

        Note:
            Nothing prevents attaching the same node twice or creating a
            cycle; doing so corrupts the tree. Builders must attach each node
            exactly once, parent before child.
        """
        self._children.append(child)
        child._parent = self
        child._properties[PARENT_PROPERTY] = self.get_id()

    def get_sibling(self, offset: int) -> Node | None:
        """Get the sibling at the given offset from this node.

        The position of this node among its parent's children is found by
        identity, not by ID.

        Args:
            offset: 1 for the next node, -1 for the previous one; any other
                offset is allowed as well.

        Returns:
            The sibling, or None if there is no node at that position or this
            is a root node.
        """
        if self._parent is None:
            return None
        siblings_and_self = self._parent._children
        for pos, sibling in enumerate(siblings_and_self):
            if sibling is self:
                break
        else:
            return None
        idx = pos + offset
        if 0 <= idx < len(siblings_and_self):
            return siblings_and_self[idx]
        return None

    def get_preceding_sibling(self) -> Node | None:
        """Get the previous node on the same level, or None."""
        return self.get_sibling(-1)

    def get_following_sibling(self) -> Node | None:
        """Get the next node on the same level, or None."""
        return self.get_sibling(1)

    def get_siblings(self) -> List[Node]:
        """Get the other children of this node's parent.

        Nodes are excluded by ID (compared as strings), so any sibling that
        shares this node's ID is excluded as well.

        Returns:
            The siblings in order; empty for a root node.
        """
        return self._get_siblings(include_self=False)

    def get_siblings_and_self(self) -> List[Node]:
        """Get all children of this node's parent, this node included.

        Returns:
            The siblings and this node in order; just this node for a root.
        """
        return self._get_siblings(include_self=True)

    def _get_siblings(self, include_self: bool) -> List[Node]:
        if self._parent is None:
            return [self] if include_self else []
        own_id = str(self.get_id())
        return [
            child
            for child in self._parent._children
            if include_self or str(child.get_id()) != own_id
        ]

    def get_descendants(self) -> List[Node]:
        """Get all nodes below this node in pre-order.

        The order is A, A1, A2, ..., B, B1, B2, ..., where A and B are this
        node's children, A1/A2 are children of A, and so on, each level in
        insertion order.

        Returns:
            List of descendant nodes; empty for a leaf.
        """
        return self._get_descendants(include_self=False)

    def get_descendants_and_self(self) -> List[Node]:
        """Get this node followed by all its descendants in pre-order."""
        return self._get_descendants(include_self=True)

    def _get_descendants(self, include_self: bool) -> List[Node]:
        queue: Deque[Node] = deque()
        found: List[Node] = []
        if include_self:
            queue.append(self)
        else:
            queue.extend(self._children)
        while queue:
            item = queue.popleft()
            found.append(item)
            queue.extendleft(reversed(item._children))
        return found

    def get_ancestors(self) -> List[Node]:
        """Get all nodes above this node, nearest first.

        The root node is included as the last element; drop it with
        ``ancestors[:-1]`` if it is not wanted.

        Returns:
            List ``[parent, grandparent, ..., root]``; empty for a root.
        """
        return self._get_ancestors(include_self=False)

    def get_ancestors_and_self(self) -> List[Node]:
        """Get ``[self, parent, ..., root]``; ``[self]`` for a root."""
        return self._get_ancestors(include_self=True)

    def _get_ancestors(self, include_self: bool) -> List[Node]:
        ancestors: List[Node] = [self] if include_self else []
        node = self._parent
        while node is not None:
            ancestors.append(node)
            node = node._parent
        return ancestors

    @property
    def level(self) -> int:
        """Number of hops from the root to this node (root has level 0)."""
        result = 0
        curp = self._parent
        while curp is not None:
            curp = curp._parent
            result += 1
        return result

    def get_level(self) -> int:
        return self.level

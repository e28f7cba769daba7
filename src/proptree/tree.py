"""Build a tree of Nodes from flat records.

Records are mappings (or pandas DataFrame rows) that each carry an ID and the
ID of their parent, such as rows from a table with a self-referencing foreign
key. Tree creates one Node per record, attaches each node to its parent and
gives access to the result:

    ```python
    from proptree import Tree

    records = [
        {"id": 1, "parent": 0, "name": "Europe"},
        {"id": 2, "parent": 1, "name": "Germany"},
        {"id": 3, "parent": 1, "name": "France"},
        {"id": 4, "parent": 0, "name": "Asia"},
    ]
    tree = Tree(records)

    [str(n) for n in tree.get_root_nodes()]     # ["1", "4"]
    tree.get_node_by_id(3).get_ancestors()      # [node 1, root node 0]
    tree.get_node_by_value_path("name", ["Europe", "France"]).id  # 3
    print(tree.as_string())                     # (0 (1 2 3) 4)
    ```

All top-level records (those whose parent is ``options.root_id``) become
children of a synthetic root node whose ID is ``options.root_id``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any, Dict, List, Sequence, Set, Tuple, Union

import graphviz
import pandas as pd
from pyparsing import OneOrMore, nestedExpr

from proptree.exceptions import (
    InvalidDataError,
    InvalidParentError,
    NodeNotFoundError,
)
from proptree.node import ID_PROPERTY, PARENT_PROPERTY, Node
from proptree.options import TreeOptions

logger = logging.getLogger(__name__)

BuildWarningCallback = Callable[[Node, Any, str], None]

Records = Union[Iterable[Mapping[str, Any]], pd.DataFrame, None]


def raise_build_warning(node: Node, parent_id: Any, reason: str) -> None:
    """Default build warning handler: fail the build."""
    raise InvalidParentError(node.get_id(), parent_id, reason)


def log_build_warning(node: Node, parent_id: Any, reason: str) -> None:
    """Build warning handler that logs and leaves the node out of the tree."""
    logger.warning("Skipping node %s: %s (parent ID: %s)", node, reason, parent_id)


class Tree:
    """A tree of Nodes assembled from flat records.

    Attributes:
        options: The TreeOptions used for building.
        root: The synthetic root node (ID ``options.root_id``).

    Note:
        Records that reference their own ID as parent, reference a parent that
        does not exist, or cannot be reached from the root (cycles) are passed
        to the build warning callback. The default callback raises
        :class:`~proptree.exceptions.InvalidParentError`; use
        :func:`log_build_warning` (or any callable) to skip such records.
    """

    def __init__(
        self,
        data: Records = None,
        options: TreeOptions | Mapping[str, Any] | None = None,
        build_warning_callback: BuildWarningCallback | None = None,
    ):
        """Build a tree.

        Args:
            data: The records, as an iterable of mappings or a DataFrame.
            options: TreeOptions, or a dictionary of option values.
            build_warning_callback: Called as ``callback(node, parent_id,
                reason)`` for each record that cannot be attached.

        Raises:
            InvalidDataError: If the data is not a sequence of records, a
                record has no ID, two records share an ID, or a record's ID
                equals the root ID.
            InvalidParentError: From the default build warning callback.
        """
        if options is None:
            options = TreeOptions()
        elif not isinstance(options, TreeOptions):
            options = TreeOptions.from_dict(dict(options))
        self.options = options
        self.build_warning_callback = build_warning_callback or raise_build_warning
        self._root, self._nodes_by_id = self._build(data)

    def __str__(self) -> str:
        return self.as_string(delim="  ", multiline=True)

    def __len__(self) -> int:
        """Number of nodes in the tree, not counting the synthetic root."""
        return len(self._nodes_by_id) - 1

    @property
    def root(self) -> Node:
        return self._root

    def rebuild_with_data(self, data: Records) -> None:
        """Discard all nodes and build again from new records.

        If building fails, the tree keeps its previous nodes.
        """
        self._root, self._nodes_by_id = self._build(data)

    def _build(self, data: Records) -> Tuple[Node, Dict[str, Node]]:
        root_key = _key(self.options.root_id)
        nodes: Dict[str, Node] = {}
        children: Dict[str, List[Node]] = {}
        skipped: Set[str] = set()

        for record in _to_records(data):
            node = self._create_node(record)
            node_key = _key(node.get_id())
            if node_key == root_key:
                raise InvalidDataError(
                    f"Record ID {node.get_id()!r} equals the root ID",
                    context={"node_id": node.get_id()},
                )
            if node_key in nodes:
                raise InvalidDataError(
                    f"Duplicate record ID {node.get_id()!r}",
                    context={"node_id": node.get_id()},
                )
            nodes[node_key] = node

        for node_key, node in nodes.items():
            parent_id = node.get(PARENT_PROPERTY, None)
            parent_key = root_key if parent_id is None else _key(parent_id)
            if parent_key == node_key:
                skipped.add(node_key)
                self.build_warning_callback(node, parent_id, "references itself as parent")
            elif parent_key != root_key and parent_key not in nodes:
                skipped.add(node_key)
                self.build_warning_callback(
                    node, parent_id, "references a nonexistent parent"
                )
            else:
                children.setdefault(parent_key, []).append(node)

        # Attach parent before child, starting from the root
        root = Node({ID_PROPERTY: self.options.root_id, PARENT_PROPERTY: None})
        nodes_by_id = {root_key: root}
        stack = [root]
        while stack:
            parent = stack.pop()
            for child in children.get(_key(parent.get_id()), []):
                parent.add_child(child)
                nodes_by_id[_key(child.get_id())] = child
                stack.append(child)

        for node_key, node in nodes.items():
            if node_key not in nodes_by_id and node_key not in skipped:
                self.build_warning_callback(
                    node, node.get(PARENT_PROPERTY, None), "is not reachable from the root"
                )

        logger.debug(
            "Built tree with %d nodes from %d records", len(nodes_by_id) - 1, len(nodes)
        )
        return root, nodes_by_id

    def _create_node(self, record: Mapping[str, Any]) -> Node:
        properties = {str(key).lower(): value for key, value in record.items()}
        id_key, parent_key = self.options.id_key, self.options.parent_key
        if id_key not in properties:
            raise InvalidDataError(
                f"Record has no '{id_key}' field",
                context={"record": dict(record), "id_key": id_key},
            )
        node_id = properties.pop(id_key)
        parent_id = properties.pop(parent_key, None)
        # Plain "id"/"parent" fields are kept as "record_id"/"record_parent"
        for name in (ID_PROPERTY, PARENT_PROPERTY):
            if name in properties:
                properties[f"record_{name}"] = properties.pop(name)
        return Node({ID_PROPERTY: node_id, PARENT_PROPERTY: parent_id, **properties})

    def get_root_nodes(self) -> List[Node]:
        """Get the top-level nodes (the children of the synthetic root)."""
        return self._root.get_children()

    def get_nodes(self) -> List[Node]:
        """Get all nodes except the synthetic root, in pre-order."""
        return self._root.get_descendants()

    def get_node_by_id(self, node_id: Any) -> Node:
        """Get the node with the given ID.

        IDs are compared by their string form, so ``1`` and ``"1"`` find the
        same node. The root ID returns the synthetic root.

        Args:
            node_id: The ID to look up.

        Returns:
            The matching node.

        Raises:
            NodeNotFoundError: If the tree has no such node.
        """
        node = self._nodes_by_id.get(_key(node_id))
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def get_node_by_value_path(self, name: str, path: Sequence[Any]) -> Node | None:
        """Find a node by following property values from the top level down.

        Args:
            name: Name of the property to match at every level.
            path: The values to match, starting with a top-level node.

        Returns:
            The node at the end of the path, or None if any step has no match.

        Example:
            ```python
            # Find the "img" folder inside "assets" inside "www"
            node = tree.get_node_by_value_path("name", ["www", "assets", "img"])
            ```
        """
        node = self._root
        for value in path:
            for child in node.get_children():
                if child.get(name, None) == value:
                    node = child
                    break
            else:
                return None
        return None if node is self._root else node

    def to_records(self) -> List[Dict[str, Any]]:
        """Get every node's properties in pre-order."""
        return [node.to_dict() for node in self.get_nodes()]

    def to_dataframe(self) -> pd.DataFrame:
        """Get every node's properties as a DataFrame, one row per node."""
        return pd.DataFrame.from_records(self.to_records())

    def as_string(self, delim: str = " ", multiline: bool = False) -> str:
        """Get a parenthesized representation of this tree's IDs.

        Args:
            delim: The delimiter/indentation between levels.
            multiline: If True, put each node on its own line, indented by
                its level.

        Returns:
            String like ``(0 (1 2 3) 4)``, which build_tree_from_string()
            can parse back.
        """
        return _as_string(self._root, delim, multiline)

    def build_dot(
        self, node_name_fn: Callable[[Node], str] | None = None, **kwargs: Any
    ) -> graphviz.graphs.Digraph:
        """Build a Graphviz Digraph for visualizing this tree.

        Args:
            node_name_fn: Optional function producing each node's label. If
                None, uses str(node), i.e. the node's ID.
            **kwargs: Passed to the graphviz.Digraph constructor (e.g. name,
                format, node_attr).

        Returns:
            A graphviz.Digraph; render it with ``dot.render(...)``.
        """
        if node_name_fn is None:
            node_name_fn = str
        dot = graphviz.Digraph(**kwargs)
        ids = {}  # ids[node] -> idx
        for idx, node in enumerate(self._root.get_descendants_and_self()):
            ids[node] = idx
            dot.node(f"N_{idx:03}", node_name_fn(node))
        for node in self.get_nodes():
            dot.edge(f"N_{ids[node.parent]:03}", f"N_{ids[node]:03}")
        return dot


def build_tree_from_string(
    from_string: str, options: TreeOptions | Mapping[str, Any] | None = None
) -> Tree:
    """Build a Tree from a parenthesized string of IDs.

    The first token is the root ID; each parenthesized group starts with a
    parent ID followed by its children, e.g. ``"(0 (1 3 4) 2)"``. IDs are
    kept as strings.

    Args:
        from_string: The tree string, as produced by Tree.as_string().
        options: Optional options; ``root_id`` is taken from the string.

    Returns:
        The built Tree.
    """
    if options is None:
        options = TreeOptions()
    elif not isinstance(options, TreeOptions):
        options = TreeOptions.from_dict(dict(options))

    if not from_string.strip().startswith("("):
        return Tree(None, replace(options, root_id=from_string.strip()))

    data = OneOrMore(nestedExpr()).parseString(from_string).as_list()[0]
    records: List[Dict[str, Any]] = []
    _collect_records(data, records, options)
    root_id = data[0]
    return Tree(records, replace(options, root_id=root_id))


def _collect_records(
    data: List[Any], records: List[Dict[str, Any]], options: TreeOptions
) -> None:
    parent_id = data[0]
    for item in data[1:]:
        child_id = item[0] if isinstance(item, list) else item
        records.append({options.id_key: child_id, options.parent_key: parent_id})
        if isinstance(item, list):
            _collect_records(item, records, options)


def _as_string(node: Node, delim: str, multiline: bool) -> str:
    if not node.has_children():
        return str(node)
    btwn = "\n" if multiline else ""
    result = "(" + str(node)
    level = node.level
    for child in node.get_children():
        d = (level + 1 if multiline else 1) * delim
        result += btwn + d + _as_string(child, delim, multiline)
    return result + ")"


def _key(value: Any) -> str:
    # DataFrames turn int columns holding NaN into floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _to_records(data: Records) -> List[Mapping[str, Any]]:
    if data is None:
        return []
    if isinstance(data, pd.DataFrame):
        return [
            {key: value for key, value in row.items() if not _is_missing(value)}
            for row in data.to_dict(orient="records")
        ]
    if isinstance(data, (str, bytes, Mapping)) or not isinstance(data, Iterable):
        raise InvalidDataError(
            f"Expected a sequence of records or a DataFrame, got {type(data).__name__}",
            context={"type": type(data).__name__},
        )
    records = list(data)
    for idx, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise InvalidDataError(
                f"Record {idx} is not a mapping: {type(record).__name__}",
                context={"index": idx, "type": type(record).__name__},
            )
    return records


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False

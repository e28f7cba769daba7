"""Ordered trees of property-bag nodes built from flat records.

The proptree package turns flat records, such as rows carrying an ``id`` and
a ``parent`` column, into an in-memory tree that can be navigated from any
node.

## Modules

### Node - The tree element
Each Node holds:
- A case-insensitive bag of properties (``node.get("Title")``, ``node.title``)
- An ordered list of children and a reference to its parent
- Sibling, descendant (pre-order) and ancestor (nearest first) queries

### Tree - Building from records
Tree creates a Node per record and links them:
- Input as a list of dictionaries or a pandas DataFrame
- Configurable ID/parent field names and root ID (TreeOptions)
- Lookup by ID or by a path of property values
- Parenthesized string and Graphviz renderings

## Quick Example

```python
from proptree import Tree

tree = Tree([
    {"id": 1, "parent": 0, "name": "Europe"},
    {"id": 2, "parent": 1, "name": "Germany"},
    {"id": 3, "parent": 0, "name": "Asia"},
])

germany = tree.get_node_by_id(2)
germany.name                                  # "Germany"
germany.level                                 # 2
[str(n) for n in germany.get_ancestors()]     # ["1", "0"]
[str(n) for n in tree.root.get_descendants()] # ["1", "2", "3"]
```

The parent/child graph is expected to be acyclic; Node does not check this.
"""

from proptree.exceptions import (
    ConfigurationError,
    InvalidAccessorError,
    InvalidDataError,
    InvalidParentError,
    MissingPropertyError,
    NodeNotFoundError,
    NotFoundError,
    ProptreeError,
    ValidationError,
)
from proptree.node import Node
from proptree.options import TreeOptions
from proptree.tree import Tree, build_tree_from_string, log_build_warning

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "InvalidAccessorError",
    "InvalidDataError",
    "InvalidParentError",
    "MissingPropertyError",
    "Node",
    "NodeNotFoundError",
    "NotFoundError",
    "ProptreeError",
    "Tree",
    "TreeOptions",
    "ValidationError",
    "build_tree_from_string",
    "log_build_warning",
]

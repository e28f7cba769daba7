import copy
import pickle

import pytest

from proptree.exceptions import InvalidAccessorError, MissingPropertyError
from proptree.node import Node


def test_basics():
    tree = make_simple_tree()
    assert tree.get_id() == "a"
    assert tree.id == "a"
    assert str(tree) == "a"

    assert tree.has_children() is True
    assert tree.count_children() == 2
    assert [str(node) for node in tree.get_children()] == ["b", "c"]
    assert ["a"] * tree.count_children() == [node.get_parent().get_id() for node in tree.children]

    assert tree.parent is None
    assert tree.get_parent() is None
    assert tree.level == 0
    assert tree.get_level() == 0
    assert repr(tree) == "Node(id='a', parent=0)"


def test_children_link_back_to_parent():
    tree = make_simple_tree()
    for node in tree.get_descendants_and_self():
        for child in node.get_children():
            assert child.get_parent() is node
        if node.parent is not None:
            assert sum(1 for c in node.parent.get_children() if c is node) == 1


def test_leaf():
    h = find(make_simple_tree(), "h")
    assert h.has_children() is False
    assert h.count_children() == 0
    assert h.get_children() == []
    assert h.get_descendants() == []
    assert h.get_descendants_and_self() == [h]


def test_add_child():
    parent = Node({"id": 10, "parent": 0})
    child = Node({"id": 11, "parent": 99, "name": "eleven"})
    parent.add_child(child)
    assert child.get_parent() is parent
    assert child.get("parent") == parent.get_id() == 10
    assert parent.get_children() == [child]
    assert child.get("name") == "eleven"


def test_add_child_keeps_insertion_order():
    parent = Node({"id": 1})
    kids = [Node({"id": n}) for n in (5, 3, 4)]
    for kid in kids:
        parent.add_child(kid)
    assert [kid.get_id() for kid in parent.get_children()] == [5, 3, 4]


def test_add_child_twice_duplicates_entry():
    parent = Node({"id": 1})
    child = Node({"id": 2})
    parent.add_child(child)
    parent.add_child(child)
    assert parent.count_children() == 2


def test_returned_lists_are_copies():
    tree = make_simple_tree()
    tree.get_children().clear()
    tree.children.append(Node({"id": "x"}))
    tree.get_descendants().clear()
    assert tree.count_children() == 2
    assert len(tree.get_descendants()) == 8


def test_properties_case_insensitive():
    node = Node({"ID": 5, "Parent": 0, "Title": "Five"})
    assert node.get("ID") == node.get("id") == node.get("Id") == 5
    assert node.get("title") == "Five"
    assert node.get("TITLE") == "Five"
    assert node.to_dict() == {"id": 5, "parent": 0, "title": "Five"}


def test_get_missing_property():
    node = Node({"id": 5, "parent": 0})
    with pytest.raises(MissingPropertyError) as exc_info:
        node.get("nonexistent")
    assert exc_info.value.name == "nonexistent"
    assert exc_info.value.node_id == 5
    assert exc_info.value.context == {"name": "nonexistent", "node_id": 5}
    assert str(exc_info.value) == "Undefined property: nonexistent (Node ID: 5)"
    # Also usable as a KeyError
    with pytest.raises(KeyError):
        node.get("nonexistent")


def test_get_with_default():
    node = Node({"id": 5, "size": None})
    assert node.get("missing", 42) == 42
    assert node.get("missing", None) is None
    assert node.get("size", 42) is None


def test_to_dict_is_a_copy():
    node = Node({"id": 1, "parent": 0})
    props = node.to_dict()
    props["id"] = 99
    props["extra"] = True
    assert node.get_id() == 1
    assert "extra" not in node


def test_construction_copies_input():
    record = {"id": 1, "name": "one"}
    node = Node(record)
    record["name"] = "changed"
    assert node.get("name") == "one"


def test_attribute_access():
    node = Node({"id": 1, "Title": "One"})
    assert node.title == "One"
    assert node.TITLE == "One"
    assert hasattr(node, "title")
    assert not hasattr(node, "colour")
    assert getattr(node, "colour", "red") == "red"
    with pytest.raises(InvalidAccessorError) as exc_info:
        node.colour
    assert exc_info.value.name == "colour"
    assert exc_info.value.node_id == 1
    assert "colour" in str(exc_info.value)


def test_contains():
    node = Node({"id": 1, "Title": "One"})
    assert "title" in node
    assert "TITLE" in node
    assert "colour" not in node
    assert 1 not in node
    # Structural attributes count as present, even without a parent property
    assert "children" in node
    assert "parent" in node


def test_str_without_id():
    node = Node({"name": "anonymous"})
    assert str(node) == ""
    assert node.get_id() is None
    with pytest.raises(MissingPropertyError):
        node.get("id")


def test_empty_construction():
    node = Node()
    assert node.to_dict() == {}
    assert node.get_children() == []


def test_copy_and_pickle():
    tree = make_simple_tree()
    clone = copy.deepcopy(tree)
    assert [str(n) for n in clone.get_descendants()] == [str(n) for n in tree.get_descendants()]
    restored = pickle.loads(pickle.dumps(tree))
    assert restored.get_children()[0].get_parent() is restored


def test_siblings():
    tree = make_simple_tree()
    b, c = tree.get_children()
    assert b.get_preceding_sibling() is None
    assert b.get_following_sibling() is c
    assert c.get_preceding_sibling() is b
    assert c.get_following_sibling() is None
    assert b.get_siblings() == [c]
    assert b.get_siblings_and_self() == [b, c]
    assert c.get_siblings_and_self() == [b, c]


def test_sibling_offsets():
    parent = Node({"id": 0})
    kids = [Node({"id": n}) for n in range(1, 6)]
    for kid in kids:
        parent.add_child(kid)
    assert kids[0].get_sibling(3) is kids[3]
    assert kids[4].get_sibling(-4) is kids[0]
    assert kids[0].get_sibling(-1) is None
    assert kids[1].get_sibling(-2) is None
    assert kids[2].get_sibling(3) is None
    assert kids[2].get_sibling(0) is kids[2]


def test_siblings_exclude_shared_id():
    parent = Node({"id": 0})
    first = Node({"id": 1})
    twin = Node({"id": "1"})
    other = Node({"id": 2})
    for node in (first, twin, other):
        parent.add_child(node)
    # Excluded by string-compared ID ...
    assert first.get_siblings() == [other]
    assert twin.get_siblings() == [other]
    assert first.get_siblings_and_self() == [first, twin, other]
    # ... but located by identity
    assert first.get_following_sibling() is twin
    assert twin.get_preceding_sibling() is first


def test_root_siblings():
    tree = make_simple_tree()
    assert tree.get_preceding_sibling() is None
    assert tree.get_following_sibling() is None
    assert tree.get_siblings() == []
    assert tree.get_siblings_and_self() == [tree]


def test_descendants_pre_order():
    tree = make_simple_tree()
    assert [str(n) for n in tree.get_descendants()] == ["b", "d", "e", "h", "c", "f", "g", "i"]
    and_self = tree.get_descendants_and_self()
    assert and_self[0] is tree
    assert len(and_self) == 1 + len(tree.get_descendants())
    b = find(tree, "b")
    assert [str(n) for n in b.get_descendants()] == ["d", "e", "h"]


def test_descendants_a_b_order():
    n = Node({"id": "n"})
    a, b = Node({"id": "A"}), Node({"id": "B"})
    a1, a2, b1 = Node({"id": "A1"}), Node({"id": "A2"}), Node({"id": "B1"})
    n.add_child(a)
    n.add_child(b)
    a.add_child(a1)
    a.add_child(a2)
    b.add_child(b1)
    assert n.get_descendants() == [a, a1, a2, b, b1]


def test_ancestors():
    tree = make_simple_tree()
    h = find(tree, "h")
    assert [str(n) for n in h.get_ancestors()] == ["e", "b", "a"]
    assert [str(n) for n in h.get_ancestors_and_self()] == ["h", "e", "b", "a"]
    assert h.get_ancestors() == h.get_ancestors_and_self()[1:]
    assert h.get_ancestors()[-1] is tree
    assert tree.get_ancestors() == []
    assert tree.get_ancestors_and_self() == [tree]


def test_levels():
    tree = make_simple_tree()
    for node in tree.get_descendants_and_self():
        assert len(node.get_ancestors_and_self()) == node.get_level() + 1
        assert node.get_ancestors_and_self()[-1] is tree
    assert [find(tree, x).level for x in "abcdefghi"] == [0, 1, 1, 2, 2, 2, 2, 3, 3]


def test_deep_tree_traversal():
    root = Node({"id": 0})
    node = root
    for idx in range(1, 5001):
        child = Node({"id": idx})
        node.add_child(child)
        node = child
    assert len(root.get_descendants()) == 5000
    assert len(node.get_ancestors()) == 5000
    assert node.level == 5000


def find(tree, node_id):
    return next(n for n in tree.get_descendants_and_self() if str(n) == node_id)


def make_simple_tree():
    # (a (b d (e h)) (c f (g i)))
    nodes = {x: Node({"id": x, "parent": 0}) for x in "abcdefghi"}
    for parent, child in [
        ("a", "b"),
        ("a", "c"),
        ("b", "d"),
        ("b", "e"),
        ("c", "f"),
        ("c", "g"),
        ("e", "h"),
        ("g", "i"),
    ]:
        nodes[parent].add_child(nodes[child])
    return nodes["a"]

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .types import Node, NodeKind, Path

# =============================================================================
# Tree query and surgery helpers.
#
# Trees are immutable: every operation returns a new node, or the very same
# reference when nothing underneath changed. Rules rely on that to leave
# untouched subtrees shared between the input and output trees.
# =============================================================================


@dataclass(frozen=True)
class Match:
    name: str
    node: Node
    depth: int     # from the traversal root
    position: int  # index among the parent's children


Classifier = Callable[[Node], Optional[str]]
Predicate = Callable[[Node], bool]


# -----------------------------
# Query
# -----------------------------

def locate(tree: Any, kind: NodeKind, path: Path = ()) -> Optional[Tuple[Node, Path]]:
    """Depth-first pre-order search for the first node of `kind`, with its path."""
    if not isinstance(tree, Node):
        return None
    if tree.kind == kind:
        return tree, path
    for idx, child in enumerate(tree.children):
        hit = locate(child, kind, path + (idx,))
        if hit is not None:
            return hit
    return None


def find_first(tree: Any, kind: NodeKind) -> Optional[Node]:
    hit = locate(tree, kind)
    return hit[0] if hit else None


def iter_matches(node: Any, classify: Classifier, depth: int = 0, position: int = 0) -> Iterator[Match]:
    """Yield every classified node below (and including) `node`, depth first."""
    if not isinstance(node, Node):
        return
    name = classify(node)
    if name is not None:
        yield Match(name=name, node=node, depth=depth, position=position)
    for idx, child in enumerate(node.children):
        yield from iter_matches(child, classify, depth + 1, idx)


def collect_matches(node: Any, classify: Classifier, min_depth: int = 0, depth: int = 0) -> Dict[str, Match]:
    """First occurrence per name, ignoring matches shallower than `min_depth`."""
    found: Dict[str, Match] = {}
    for m in iter_matches(node, classify, depth):
        if m.depth >= min_depth and m.name not in found:
            found[m.name] = m
    return found


def body_statements(body: Optional[Node]) -> List[Node]:
    if body is None:
        return []
    if body.kind == NodeKind.SEQUENCE:
        return list(body.children)
    return [body]


def member_name(node: Node) -> Optional[str]:
    """Name of a member definition or of a block call's method, else None."""
    if node.kind == NodeKind.MEMBER_DEF:
        return node.children[0]
    if node.kind == NodeKind.BLOCK_CALL:
        call = node.children[0]
        if isinstance(call, Node) and call.kind == NodeKind.CALL:
            return call.children[1]
    return None


# -----------------------------
# Surgery
# -----------------------------

def with_body(class_node: Node, statements: List[Node]) -> Node:
    name, superclass, _ = class_node.children
    body = Node(NodeKind.SEQUENCE, tuple(statements)) if statements else None
    return class_node.updated([name, superclass, body])


def remove_matching(node: Any, predicate: Predicate) -> Any:
    """Return `node` with every descendant satisfying `predicate` removed.

    Emptied SEQUENCE nodes and BLOCK_CALL nodes whose body went away collapse
    to None, which propagates to the parent.
    """
    if not isinstance(node, Node):
        return node

    if node.kind == NodeKind.CLASS_DECL:
        name, superclass, body = node.children
        if isinstance(body, Node) and predicate(body):
            new_body = None
        else:
            new_body = remove_matching(body, predicate)
        if new_body is body:
            return node
        return node.updated([name, superclass, new_body])

    changed = False
    body_removed = False
    new_children: List[Any] = []
    for idx, child in enumerate(node.children):
        if isinstance(child, Node) and predicate(child):
            new_children.append(None)
            changed = True
            if node.kind == NodeKind.BLOCK_CALL and idx == 2:
                body_removed = True
            continue
        new_child = remove_matching(child, predicate)
        if new_child is not child:
            changed = True
            if node.kind == NodeKind.BLOCK_CALL and idx == 2 and new_child is None:
                body_removed = True
        new_children.append(new_child)

    if not changed:
        return node

    if node.kind == NodeKind.SEQUENCE:
        kept = [c for c in new_children if c is not None]
        if not kept:
            return None
        return node.updated(kept)

    if node.kind == NodeKind.BLOCK_CALL and body_removed:
        return None

    return node.updated(new_children)


def replace_by_identity(tree: Any, old: Node, new: Any) -> Any:
    """Substitute `new` wherever a node is the very same object as `old`."""
    if tree is old:
        return new
    if not isinstance(tree, Node):
        return tree
    new_children = [replace_by_identity(c, old, new) for c in tree.children]
    if all(a is b for a, b in zip(new_children, tree.children)):
        return tree
    return tree.updated(new_children)


def replace_at_path(tree: Node, path: Path, new: Any) -> Any:
    """Rebuild the spine along `path` with `new` at its end."""
    if not path:
        return new
    idx, rest = path[0], path[1:]
    children = list(tree.children)
    children[idx] = replace_at_path(children[idx], rest, new)
    return tree.updated(children)

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..tree import body_statements, member_name, replace_at_path, with_body
from ..types import Node, TransformConfig
from .common import Transform


class ReorderMethods(Transform):
    """Put class-level members (`def install`, `test do`, ...) in configured order.

    Everything else in the class body keeps its relative order and moves ahead
    of the members.
    """

    def __init__(self, config: Optional[TransformConfig] = None):
        super().__init__(name="reorder_methods", config=config or TransformConfig())

    def _member(self, node: Node) -> Optional[str]:
        name = member_name(node)
        return name if name in self.member_names else None

    def member_positions(self, statements: List[Node]) -> Dict[str, int]:
        """name -> index of its last occurrence; keys in first-seen order."""
        positions: Dict[str, int] = {}
        for idx, stmt in enumerate(statements):
            name = self._member(stmt)
            if name:
                positions[name] = idx
        return positions

    def applies(self, content: str, tree: Node) -> bool:
        hit = self.find_class(tree)
        if hit is None:
            return False
        positions = self.member_positions(body_statements(hit[0].children[2]))
        if len(positions) < 2:
            return False
        seen = list(positions)
        return seen != self.sort_by_order(seen)

    def apply(self, content: str, tree: Node) -> Node:
        hit = self.find_class(tree)
        if hit is None:
            return tree
        class_node, path = hit
        if class_node.children[2] is None:
            return tree

        members, others = self.partition(body_statements(class_node.children[2]))
        ordered = [members[name] for name in self.sort_by_order(list(members))]
        return replace_at_path(tree, path, with_body(class_node, others + ordered))

    def partition(self, statements: List[Node]) -> Tuple[Dict[str, Node], List[Node]]:
        members: Dict[str, Node] = {}
        others: List[Node] = []
        for stmt in statements:
            name = self._member(stmt)
            if name is None:
                others.append(stmt)
                continue
            if name in members:
                self.log.warning("`%s` appears twice in the class body; keeping the last one", name)
            members[name] = stmt
        return members, others

from __future__ import annotations

from typing import Dict, List, Optional

from ..tree import (
    Match,
    body_statements,
    collect_matches,
    iter_matches,
    remove_matching,
    replace_at_path,
    with_body,
)
from ..types import Node, NodeKind, TransformConfig
from .common import Transform

# =============================================================================
# Hoist: lift member definitions out of wrapping blocks into the class body.
#
# GoReleaser emits `def install` inside `on_macos do / if Hardware::CPU.intel?`
# blocks. Class-body statements sit at depth 1; anything deeper is nested.
# =============================================================================


class HoistMethods(Transform):
    def __init__(self, config: Optional[TransformConfig] = None):
        super().__init__(name="hoist_methods", config=config or TransformConfig())

    def _member_def_name(self, node: Node) -> Optional[str]:
        if node.kind == NodeKind.MEMBER_DEF and node.children[0] in self.member_names:
            return node.children[0]
        return None

    def _matches(self, class_node: Node) -> List[Match]:
        out: List[Match] = []
        for pos, stmt in enumerate(body_statements(class_node.children[2])):
            out.extend(iter_matches(stmt, self._member_def_name, depth=1, position=pos))
        return out

    def nested_members(self, class_node: Node) -> Dict[str, Match]:
        """First nested occurrence (depth > 1) of each configured member."""
        found: Dict[str, Match] = {}
        for stmt in body_statements(class_node.children[2]):
            for name, m in collect_matches(stmt, self._member_def_name, min_depth=2, depth=1).items():
                found.setdefault(name, m)
        return found

    def applies(self, content: str, tree: Node) -> bool:
        hit = self.find_class(tree)
        if hit is None:
            return False
        return bool(self.nested_members(hit[0]))

    def apply(self, content: str, tree: Node) -> Node:
        hit = self.find_class(tree)
        if hit is None:
            return tree
        class_node, path = hit

        extracted = self.nested_members(class_node)
        if not extracted:
            return tree
        self._warn_duplicates(class_node, extracted)

        names = set(extracted)
        cleaned = remove_matching(
            class_node,
            lambda n: n.kind == NodeKind.MEMBER_DEF and n.children[0] in names,
        )
        order = self.sort_by_order(list(extracted))
        statements = body_statements(cleaned.children[2]) + [extracted[name].node for name in order]
        self.log.debug("hoisted %s", ", ".join(order))

        return replace_at_path(tree, path, with_body(cleaned, statements))

    def _warn_duplicates(self, class_node: Node, extracted: Dict[str, Match]) -> None:
        # Per-platform copies of `def install` are expected; a class-body copy
        # next to a nested one is ambiguous.
        for m in self._matches(class_node):
            if m.name not in extracted or m.node is extracted[m.name].node:
                continue
            if m.depth == 1:
                self.log.warning(
                    "`%s` is defined both in the class body and nested; keeping the first nested definition",
                    m.name,
                )
            else:
                self.log.debug("dropping nested duplicate of `%s` at depth %d", m.name, m.depth)

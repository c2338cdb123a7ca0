from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..tree import locate
from ..types import Node, NodeKind, Path, TransformConfig


@dataclass
class Transform:
    """A structural rewrite of one formula tree.

    applies() answers whether the rule has anything to do; apply() returns the
    rewritten tree, or the input tree itself when there is nothing to do.
    Both receive the raw file text alongside the tree.
    """
    name: str = ""
    config: TransformConfig = field(default_factory=TransformConfig)

    def __post_init__(self) -> None:
        self.log = logging.getLogger(f"{__package__}.{self.name or type(self).__name__}")

    def applies(self, content: str, tree: Node) -> bool:
        raise NotImplementedError

    def apply(self, content: str, tree: Node) -> Node:
        raise NotImplementedError

    @property
    def member_names(self) -> List[str]:
        return self.config.member_names

    def sort_by_order(self, names: List[str]) -> List[str]:
        # sorted() is stable: unconfigured names keep encounter order
        return sorted(names, key=self.config.index_of)

    def find_class(self, tree: Node) -> Optional[Tuple[Node, Path]]:
        return locate(tree, NodeKind.CLASS_DECL)

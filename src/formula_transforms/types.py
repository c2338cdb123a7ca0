from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_MEMBER_NAMES = ["install", "test", "caveats"]


class NodeKind(Enum):
    """Node tags of the formula syntax tree."""
    CLASS_DECL = auto()   # (name, superclass, body)
    MODULE_DECL = auto()  # (name, body)
    SEQUENCE = auto()     # statements
    MEMBER_DEF = auto()   # (name, params, body)
    BLOCK_CALL = auto()   # (call, block_params, body)
    CALL = auto()         # (receiver, method, args, operator)
    CONDITIONAL = auto()  # (keyword, condition, consequence, alternative)
    ELSE = auto()         # (body,)
    SOURCE = auto()       # (snippet,) opaque statement


@dataclass(frozen=True)
class Snippet:
    """Verbatim source text.

    indent is the width of the leading whitespace of the line the text starts
    on. verbatim snippets keep their continuation lines untouched when moved
    (multi-line strings, `<<-` and plain heredocs). Squiggly heredocs strip
    their own indentation, so they move with the code.
    """
    text: str
    indent: int = 0
    verbatim: bool = False


@dataclass(frozen=True, eq=False)
class Node:
    """Immutable tree node. Equality and hashing are by identity."""
    kind: NodeKind
    children: Tuple[Any, ...] = ()
    trailer: Optional[str] = None  # comment after the closing `end`

    def updated(self, children) -> "Node":
        return Node(self.kind, tuple(children), self.trailer)

    def __repr__(self) -> str:
        return f"Node({self.kind.name}, {len(self.children)} children)"


Path = Tuple[int, ...]


@dataclass
class TransformConfig:
    member_names: List[str] = field(default_factory=lambda: list(DEFAULT_MEMBER_NAMES))

    def index_of(self, name: str) -> float:
        try:
            return self.member_names.index(name)
        except ValueError:
            return float("inf")

    @staticmethod
    def from_dict(d: Optional[Dict[str, Any]]) -> "TransformConfig":
        d = d or {}
        names = d.get("member_names", d.get("methods"))
        if names is None:
            return TransformConfig()
        return TransformConfig(member_names=[str(x) for x in names])


@dataclass
class FileResult:
    path: str
    status: str  # "skipped" | "unchanged" | "processed" | "would_process" | "failed"
    applied: List[str] = field(default_factory=list)
    error: Optional[str] = None

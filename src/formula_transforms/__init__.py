"""Normalize the layout of GoReleaser-generated Homebrew formulae.

Generated formulae sometimes nest `def install` inside `on_macos`/`on_linux`
blocks and list install/test/caveats out of order; the transforms in
`formula_transforms.rules` hoist and reorder them.
"""

from .processor import FormulaProcessor
from .types import Node, NodeKind, Snippet, TransformConfig

__all__ = ["FormulaProcessor", "Node", "NodeKind", "Snippet", "TransformConfig"]

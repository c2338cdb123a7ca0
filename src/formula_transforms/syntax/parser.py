from __future__ import annotations

from dataclasses import replace
from functools import lru_cache
from typing import List, Optional, Sequence

import tree_sitter_ruby
from tree_sitter import Language, Parser

from ..types import Node, NodeKind, Snippet

# Containers whose statements belong to the enclosing construct.
_WRAPPERS = {"body_statement", "then"}

# Literals whose continuation lines are content, not indentation.
_VERBATIM_TYPES = {
    "string", "string_array", "symbol_array", "regex",
    "subshell", "delimited_symbol", "chained_string", "uninterpreted",
}


class RubySyntaxError(SyntaxError):
    """The source did not parse cleanly."""


@lru_cache(maxsize=None)
def ruby_language() -> Language:
    return Language(tree_sitter_ruby.language())


def parse(text: str, path: str = "<string>") -> Node:
    """Parse Ruby source into a SEQUENCE of top-level statements.

    Only the constructs the rules look into are modeled (modules, classes,
    method definitions, `do` block calls, if/unless chains); everything else
    becomes an opaque SOURCE statement carrying its original text.
    """
    source = text.encode("utf-8")
    tree = Parser(ruby_language()).parse(source)
    root = tree.root_node
    if root.has_error:
        raise _syntax_error(root, source, path)
    conv = _Converter(source)
    return Node(NodeKind.SEQUENCE, tuple(conv.statements(root)))


def _syntax_error(root, source: bytes, path: str) -> RubySyntaxError:
    stack = [root]
    bad = root
    while stack:
        n = stack.pop()
        if n.type == "ERROR" or n.is_missing:
            bad = n
            break
        stack.extend(reversed(n.children))
    row, col = bad.start_point[0], bad.start_point[1]
    lines = source.split(b"\n")
    line = lines[row].decode("utf-8", errors="replace") if row < len(lines) else ""
    what = f"missing {bad.type}" if bad.is_missing else "invalid syntax"
    return RubySyntaxError(what, (path, row + 1, col + 1, line))


class _Converter:
    def __init__(self, source: bytes):
        self.source = source
        self.lines = source.split(b"\n")

    # -----------------------------
    # Snippets
    # -----------------------------

    def indent_at(self, ts_node) -> int:
        line = self.lines[ts_node.start_point[0]]
        return len(line) - len(line.lstrip(b" \t"))

    def snippet(self, nodes: Sequence) -> Snippet:
        text = self.source[nodes[0].start_byte:nodes[-1].end_byte].decode("utf-8")
        return Snippet(
            text=text,
            indent=self.indent_at(nodes[0]),
            verbatim=self.has_verbatim_text(nodes),
        )

    def text(self, ts_node) -> str:
        return self.source[ts_node.start_byte:ts_node.end_byte].decode("utf-8")

    def has_verbatim_text(self, nodes: Sequence) -> bool:
        """True when some continuation line is literal content."""
        stack = list(nodes)
        while stack:
            n = stack.pop()
            if n.type == "heredoc_beginning":
                if not self.text(n).startswith("<<~"):
                    return True
                continue
            if n.type == "heredoc_body":
                continue
            if n.type in _VERBATIM_TYPES and n.start_point[0] != n.end_point[0]:
                return True
            stack.extend(n.children)
        return False

    def opt_snippet(self, ts_node) -> Optional[Snippet]:
        return self.snippet([ts_node]) if ts_node is not None else None

    def source_node(self, nodes: Sequence) -> Node:
        return Node(NodeKind.SOURCE, (self.snippet(nodes),))

    # -----------------------------
    # Statement lists
    # -----------------------------

    def flatten(self, ts_node, skip: Sequence = ()) -> List:
        skip = [s for s in skip if s is not None]
        out = []
        for child in ts_node.named_children:
            if any(child == s for s in skip):
                continue
            if child.type in _WRAPPERS:
                out.extend(self.flatten(child))
            else:
                out.append(child)
        out.sort(key=lambda n: n.start_byte)
        return out

    def groups(self, parts: List) -> List[List]:
        # trailing comments and heredoc bodies stay with their statement
        groups: List[List] = []
        for n in parts:
            if groups and (
                n.type == "heredoc_body"
                or (n.type == "comment" and n.start_point[0] == groups[-1][-1].end_point[0])
            ):
                groups[-1].append(n)
            else:
                groups.append([n])
        return groups

    def statements(self, ts_node, skip: Sequence = ()) -> List[Node]:
        return [self.convert(g) for g in self.groups(self.flatten(ts_node, skip))]

    def body(self, ts_node, skip: Sequence = ()) -> Optional[Node]:
        stmts = self.statements(ts_node, skip)
        if not stmts:
            return None
        if len(stmts) == 1:
            return stmts[0]
        return Node(NodeKind.SEQUENCE, tuple(stmts))

    # -----------------------------
    # Statements
    # -----------------------------

    def convert(self, group: List) -> Node:
        node, rest = self.statement(group[0]), group[1:]
        if not rest:
            return node
        if node.kind == NodeKind.SOURCE or any(n.type != "comment" for n in rest):
            return self.source_node(group)
        return replace(node, trailer=self.text(rest[0]))

    def statement(self, n) -> Node:
        if n.type == "module":
            return self.module_decl(n)
        if n.type == "class":
            return self.class_decl(n)
        if n.type == "method":
            return self.member_def(n)
        if n.type == "call":
            return self.block_call(n)
        if n.type in ("if", "unless"):
            return self.conditional(n)
        return self.source_node([n])

    def module_decl(self, n) -> Node:
        name = n.child_by_field_name("name")
        if name is None:
            return self.source_node([n])
        return Node(NodeKind.MODULE_DECL, (self.text(name), self.body(n, skip=[name])))

    def class_decl(self, n) -> Node:
        name = n.child_by_field_name("name")
        superclass = n.child_by_field_name("superclass")
        if name is None:
            return self.source_node([n])
        sc_text = None
        if superclass is not None:
            expr = superclass.named_children
            sc_text = self.snippet(expr).text if expr else None
        return Node(NodeKind.CLASS_DECL, (
            self.snippet([name]).text,
            sc_text,
            self.body(n, skip=[name, superclass]),
        ))

    def member_def(self, n) -> Node:
        name = n.child_by_field_name("name")
        params = n.child_by_field_name("parameters")
        # endless `def foo = expr` has no body to speak of
        if name is None or any(c.type == "=" for c in n.children):
            return self.source_node([n])
        return Node(NodeKind.MEMBER_DEF, (
            self.snippet([name]).text,
            self.opt_snippet(params),
            self.body(n, skip=[name, params]),
        ))

    def block_call(self, n) -> Node:
        block = n.child_by_field_name("block")
        method = n.child_by_field_name("method")
        if block is None or block.type != "do_block" or method is None:
            return self.source_node([n])
        operator = n.child_by_field_name("operator")
        call = Node(NodeKind.CALL, (
            self.opt_snippet(n.child_by_field_name("receiver")),
            self.snippet([method]).text,
            self.opt_snippet(n.child_by_field_name("arguments")),
            self.snippet([operator]).text if operator is not None else ".",
        ))
        params = block.child_by_field_name("parameters")
        return Node(NodeKind.BLOCK_CALL, (
            call,
            self.opt_snippet(params),
            self.body(block, skip=[params]),
        ))

    def conditional(self, n) -> Node:
        condition = n.child_by_field_name("condition")
        alternative = n.child_by_field_name("alternative")
        if condition is None:
            return self.source_node([n])
        alt = None
        if alternative is not None:
            if alternative.type == "elsif":
                alt = self.conditional(alternative)
            else:
                alt = Node(NodeKind.ELSE, (self.body(alternative),))
        return Node(NodeKind.CONDITIONAL, (
            n.type,
            self.snippet([condition]),
            self.body(n, skip=[condition, alternative]),
            alt,
        ))


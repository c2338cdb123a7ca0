from __future__ import annotations

from typing import List, Optional

from ..types import Node, NodeKind, Snippet

INDENT = "  "

_COMPOUND = {NodeKind.MODULE_DECL, NodeKind.CLASS_DECL, NodeKind.MEMBER_DEF, NodeKind.BLOCK_CALL, NodeKind.CONDITIONAL}


def unparse(tree: Node) -> str:
    """Serialize a tree back to Ruby source, ending with a newline."""
    out: List[str] = []
    _emit(tree, 0, out)
    return "\n".join(out) + "\n" if out else ""


def reindent(snippet: Snippet, level: int) -> str:
    """Move a snippet to `level`; continuation lines shift by the same amount."""
    lines = snippet.text.split("\n")
    head = INDENT * level + lines[0]
    if snippet.verbatim or len(lines) == 1:
        return "\n".join([head] + lines[1:])
    delta = len(INDENT) * level - snippet.indent
    rest = []
    for line in lines[1:]:
        if not line.strip():
            rest.append("")
        elif delta >= 0:
            rest.append(" " * delta + line)
        else:
            lead = len(line) - len(line.lstrip(" "))
            rest.append(line[min(lead, -delta):])
    return "\n".join([head] + rest)


def _is_comment(node: Node) -> bool:
    return node.kind == NodeKind.SOURCE and node.children[0].text.lstrip().startswith("#")


def _emit_body(body: Optional[Node], level: int, out: List[str]) -> None:
    if body is not None:
        _emit(body, level, out)


def _end(node: Node, pad: str) -> str:
    return f"{pad}end" + (f" {node.trailer}" if node.trailer else "")


def _emit(node: Node, level: int, out: List[str]) -> None:
    pad = INDENT * level
    kind = node.kind

    if kind == NodeKind.SEQUENCE:
        prev: Optional[Node] = None
        for stmt in node.children:
            if prev is not None and not _is_comment(prev) and (stmt.kind in _COMPOUND or prev.kind in _COMPOUND):
                out.append("")
            _emit(stmt, level, out)
            prev = stmt
        return

    if kind == NodeKind.SOURCE:
        out.append(reindent(node.children[0], level))
        return

    if kind == NodeKind.MODULE_DECL:
        name, body = node.children
        out.append(f"{pad}module {name}")
        _emit_body(body, level + 1, out)
        out.append(_end(node, pad))
        return

    if kind == NodeKind.CLASS_DECL:
        name, superclass, body = node.children
        out.append(f"{pad}class {name}" + (f" < {superclass}" if superclass else ""))
        _emit_body(body, level + 1, out)
        out.append(_end(node, pad))
        return

    if kind == NodeKind.MEMBER_DEF:
        name, params, body = node.children
        head = f"def {name}"
        if params is not None:
            head += _attached(params, level)
        out.append(pad + head)
        _emit_body(body, level + 1, out)
        out.append(_end(node, pad))
        return

    if kind == NodeKind.BLOCK_CALL:
        call, params, body = node.children
        head = _call_text(call, level) + " do"
        if params is not None:
            head += " " + reindent(params, level)[len(pad):]
        out.append(pad + head)
        _emit_body(body, level + 1, out)
        out.append(_end(node, pad))
        return

    if kind == NodeKind.CONDITIONAL:
        _emit_conditional(node, level, out)
        out.append(_end(node, pad))
        return

    raise ValueError(f"cannot unparse {kind.name} as a statement")


def _attached(args: Snippet, level: int) -> str:
    """Argument text glued to what precedes it: `(a, b)` or ` a, b`."""
    text = reindent(args, level)[len(INDENT * level):]
    return text if text.startswith("(") else " " + text


def _call_text(call: Node, level: int) -> str:
    receiver, method, args, operator = call.children
    text = method
    if receiver is not None:
        text = reindent(receiver, level)[len(INDENT * level):] + operator + method
    if args is not None:
        text += _attached(args, level)
    return text


def _emit_conditional(node: Node, level: int, out: List[str]) -> None:
    pad = INDENT * level
    keyword, condition, consequence, alternative = node.children
    out.append(f"{pad}{keyword} " + reindent(condition, level)[len(pad):])
    _emit_body(consequence, level + 1, out)
    if alternative is None:
        return
    if alternative.kind == NodeKind.CONDITIONAL:
        _emit_conditional(alternative, level, out)
    else:
        out.append(f"{pad}else")
        _emit_body(alternative.children[0], level + 1, out)

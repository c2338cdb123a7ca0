from formula_transforms.tree import body_statements
from formula_transforms.types import Node, NodeKind, Snippet


def src(text, indent=0):
    return Node(NodeKind.SOURCE, (Snippet(text, indent),))


def seq(*stmts):
    return Node(NodeKind.SEQUENCE, tuple(stmts))


def body(*stmts):
    if not stmts:
        return None
    if len(stmts) == 1:
        return stmts[0]
    return seq(*stmts)


def mdef(name, *stmts):
    return Node(NodeKind.MEMBER_DEF, (name, None, body(*stmts)))


def call(method, args=None, receiver=None):
    return Node(NodeKind.CALL, (
        Snippet(receiver) if receiver else None,
        method,
        Snippet(args) if args else None,
        ".",
    ))


def block(method, *stmts, args=None):
    return Node(NodeKind.BLOCK_CALL, (call(method, args), None, body(*stmts)))


def cond(condition, *stmts, keyword="if", alt=None):
    return Node(NodeKind.CONDITIONAL, (keyword, Snippet(condition), body(*stmts), alt))


def klass(name, *stmts, superclass="Formula"):
    return Node(NodeKind.CLASS_DECL, (name, superclass, body(*stmts)))


def labels(class_node):
    """Readable summary of a class body: member names, block methods, source text."""
    out = []
    for stmt in body_statements(class_node.children[2]):
        if stmt.kind == NodeKind.MEMBER_DEF:
            out.append(f"def {stmt.children[0]}")
        elif stmt.kind == NodeKind.BLOCK_CALL:
            out.append(f"{stmt.children[0].children[1]} do")
        elif stmt.kind == NodeKind.SOURCE:
            out.append(stmt.children[0].text)
        else:
            out.append(stmt.kind.name)
    return out

import logging

from formula_transforms.rules import HoistMethods
from formula_transforms.tree import body_statements, find_first, iter_matches
from formula_transforms.types import NodeKind, TransformConfig

from trees import block, cond, klass, labels, mdef, seq, src


def _class(tree):
    return find_first(tree, NodeKind.CLASS_DECL)


def _nested_defs(class_node):
    out = []
    for stmt in body_statements(class_node.children[2]):
        for m in iter_matches(stmt, lambda n: n.children[0] if n.kind == NodeKind.MEMBER_DEF else None, depth=1):
            if m.depth > 1:
                out.append(m.name)
    return out


def test_hoists_nested_install_after_existing_body():
    install = mdef("install", src('bin.install "foo"'))
    tree = seq(klass(
        "Foo",
        src('desc "Foo"'),
        block("on_macos", cond("Hardware::CPU.intel?", src('url "x"'), install)),
        mdef("caveats", src('"hi"')),
        block("test", src('system "foo"')),
    ))
    rule = HoistMethods()
    assert rule.applies("", tree)

    out = rule.apply("", tree)
    c = _class(out)
    assert labels(c) == ['desc "Foo"', "on_macos do", "def caveats", "test do", "def install"]
    assert body_statements(c.children[2])[-1] is install
    assert _nested_defs(c) == []
    assert not rule.applies("", out)


def test_first_nested_occurrence_wins_and_all_copies_go():
    intel = mdef("install", src("intel"))
    arm = mdef("install", src("arm"))
    tree = seq(klass(
        "Foo",
        block("on_macos", cond("intel?", src('url "a"'), intel), cond("arm?", src('url "b"'), arm)),
    ))
    out = HoistMethods().apply("", tree)
    stmts = body_statements(_class(out).children[2])
    assert [s.kind for s in stmts] == [NodeKind.BLOCK_CALL, NodeKind.MEMBER_DEF]
    assert stmts[1] is intel
    assert _nested_defs(_class(out)) == []


def test_extracted_members_follow_configured_order():
    tree = seq(klass(
        "Foo",
        block("on_linux", mdef("caveats"), mdef("install"), src('url "x"')),
    ))
    out = HoistMethods().apply("", tree)
    assert labels(_class(out)) == ["on_linux do", "def install", "def caveats"]


def test_untouched_statements_keep_identity():
    desc = src('desc "Foo"')
    livecheck = block("livecheck", src("skip"))
    tree = seq(src("# comment"), klass("Foo", desc, livecheck, block("on_macos", mdef("install"))))
    out = HoistMethods().apply("", tree)
    assert out.children[0] is tree.children[0]
    stmts = body_statements(_class(out).children[2])
    assert stmts[0] is desc
    assert stmts[1] is livecheck


def test_class_body_member_is_not_nested():
    tree = seq(klass("Foo", src('desc "x"'), mdef("install"), block("test", src("true"))))
    rule = HoistMethods()
    assert not rule.applies("", tree)
    assert rule.apply("", tree) is tree


def test_no_class_is_a_noop():
    tree = seq(block("on_macos", mdef("install")))
    rule = HoistMethods()
    assert not rule.applies("", tree)
    assert rule.apply("", tree) is tree


def test_unconfigured_members_stay_nested():
    tree = seq(klass("Foo", block("on_macos", mdef("post_install"))))
    assert not HoistMethods().applies("", tree)


def test_custom_member_names():
    tree = seq(klass("Foo", block("on_macos", mdef("post_install"), mdef("install"))))
    rule = HoistMethods(TransformConfig(member_names=["post_install"]))
    out = rule.apply("", tree)
    c = _class(out)
    assert labels(c) == ["on_macos do", "def post_install"]
    assert _nested_defs(c) == ["install"]


def test_class_body_copy_of_nested_member_is_flagged(caplog):
    nested = mdef("install", src("nested"))
    tree = seq(klass("Foo", mdef("install", src("top")), block("on_macos", nested)))
    with caplog.at_level(logging.WARNING):
        out = HoistMethods().apply("", tree)
    assert body_statements(_class(out).children[2]) == [nested]
    assert any("both in the class body and nested" in r.getMessage() for r in caplog.records)


def test_members_not_nested_stay_in_place():
    caveats = mdef("caveats")
    tree = seq(klass("Foo", caveats, block("on_macos", mdef("install"))))
    out = HoistMethods().apply("", tree)
    assert labels(_class(out)) == ["def caveats", "def install"]
    assert body_statements(_class(out).children[2])[0] is caveats

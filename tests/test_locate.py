"""Declaration locator and constructor synthesis tests."""

import pytest

from gocons import DuplicateConstructorError, parse
from gocons.ast import Field, FuncDecl, GenDecl, Ident, SourceFile, StructType
from gocons.emit import render_decl
from gocons.locate import (
    VISIT_CONTINUE,
    VISIT_SKIP,
    VISIT_STOP,
    inspect,
    locate,
    walk,
)
from gocons.synth import (
    insert_at,
    insertion_index,
    lower_first,
    splice,
    synthesize,
    unique_name,
)

SOURCE = """package p

type (
	A struct {
		x int
	}
	B = A
)

func helper() {}

type A struct {
	y, z string
}
"""


def test_locate_last_struct_wins():
    located = locate(parse(SOURCE), "A")
    assert located.found
    assert not located.exists
    assert [f.names for f in located.fields] == [["y", "z"]]


def test_locate_alias_has_no_fields():
    located = locate(parse(SOURCE), "B")
    assert located.found
    assert located.fields == []


def test_locate_missing_type():
    located = locate(parse(SOURCE), "Nope")
    assert not located.found
    assert located.fields == []


def test_inspect_refuses_existing_constructor():
    tree = parse("package p\ntype A struct{}\nfunc (r *R) NewA() {}\n")
    with pytest.raises(DuplicateConstructorError) as excinfo:
        inspect(tree, "A")
    assert excinfo.value.name == "NewA"


def test_walk_skip_and_stop():
    tree = parse("package p\ntype A struct{ x int }\nfunc NewB() {}\ntype C int\n")
    seen: list[str] = []

    def visit(node: object) -> str:
        seen.append(type(node).__name__)
        if isinstance(node, StructType):
            return VISIT_SKIP
        if isinstance(node, FuncDecl):
            return VISIT_STOP
        return VISIT_CONTINUE

    assert walk(tree, visit) is False
    assert "Field" not in seen
    assert seen[-1] == "FuncDecl"
    assert seen.count("GenDecl") == 1


def test_insertion_index_uses_last_group():
    tree = parse(SOURCE)
    assert insertion_index(tree, "A") == 3
    assert insertion_index(tree, "B") == 1
    assert insertion_index(tree, "Nope") == 0


def test_insert_at_shifts_tail():
    seq = ["a", "b", "c"]
    insert_at(seq, 1, "x")
    assert seq == ["a", "x", "b", "c"]
    insert_at(seq, 4, "y")
    assert seq == ["a", "x", "b", "c", "y"]
    with pytest.raises(IndexError):
        insert_at(seq, 9, "z")


def test_splice_keeps_other_declarations():
    tree = parse(SOURCE)
    before = list(tree.decls)
    decl = synthesize("A", locate(tree, "A").fields)
    assert splice(tree, "A", decl) == 3
    assert tree.decls[:3] == before[:3]
    assert tree.decls[3] is decl
    assert len(tree.decls) == len(before) + 1


def test_synthesize_field_fidelity():
    fields = [
        Field(None, ["name"], Ident(None, "string")),
        Field(None, ["a", "b"], Ident(None, "int")),
    ]
    decl = synthesize("Thing", fields)
    assert decl.name == "NewThing"
    assert decl.span is None
    assert [p.names for p in decl.typ.params] == [["name"], ["a", "b"]]
    assert render_decl(decl) == (
        "func NewThing(name string, a, b int) *Thing {\n"
        "\treturn &Thing{name: name, a: a, b: b}\n"
        "}"
    )


def test_synthesize_without_fields():
    assert render_decl(synthesize("Zero", [])) == (
        "func NewZero() *Zero {\n\treturn &Zero{}\n}"
    )


def test_parameter_naming():
    assert lower_first("Reader") == "reader"
    assert lower_first("URLParser") == "urlParser"
    assert lower_first("ID") == "id"
    assert lower_first("already") == "already"
    taken = {"conn", "conn1"}
    assert unique_name("conn", taken) == "conn2"
    assert "conn2" in taken


def test_untouched_tree_is_unchanged_by_locate():
    tree = parse(SOURCE)
    snapshot = [type(d).__name__ for d in tree.decls]
    locate(tree, "A")
    assert [type(d).__name__ for d in tree.decls] == snapshot
    assert isinstance(tree, SourceFile)
    assert isinstance(tree.decls[0], GenDecl)


def test_insertion_index_skips_leading_imports():
    tree = parse('package p\n\nimport "fmt"\nimport "io"\n\nvar _ = fmt.Sprint\n\ntype A int\n')
    assert insertion_index(tree, "Nope") == 2
    assert insertion_index(tree, "A") == 4


def test_render_decl_only_renders_constructors():
    tree = parse("package p\n\ntype A struct{}\n\nfunc (a *A) M() {}\n")
    with pytest.raises(TypeError):
        render_decl(tree.decls[0])
    with pytest.raises(ValueError):
        render_decl(tree.decls[1])


def test_locate_sees_local_types():
    tree = parse(
        "package p\n\nimport \"io\"\n\n"
        "func f() {\n\ttype Local struct{ w io.Writer }\n}\n"
    )
    located = locate(tree, "Local")
    assert located.found
    assert [f.names for f in located.fields] == [["w"]]
    assert insertion_index(tree, "Local") == 1

"""Pytest-based parser tests."""

from pathlib import Path

import pytest

from gocons import ParseError, emit, parse
from gocons.ast import (
    ArrayType,
    DeclStmt,
    FuncDecl,
    GenDecl,
    Ident,
    Instance,
    MapType,
    Pointer,
    Selector,
    StructType,
    TypeSpec,
)

PARSE_DIR = Path(__file__).parent / "parse"


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples.

    Expected is one of: 'ok', 'error: <message>'
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines) + "\n"
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_parse_tests() -> list[tuple[str, str, str]]:
    """Find all parse tests, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(PARSE_DIR.glob("*.tests")):
        for name, input_code, expected in parse_test_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over parse test files."""
    if "parse_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_parse_tests()
        ]
        metafunc.parametrize("parse_input,parse_expected", params)


def test_parse(parse_input: str, parse_expected: str):
    """Verify parser accepts or rejects the input, and round-trips what it accepts."""
    if parse_expected == "ok":
        tree = parse(parse_input)
        assert emit(tree) == parse_input
    elif parse_expected.startswith("error:"):
        expected_msg = parse_expected[6:].strip()
        with pytest.raises(ParseError) as excinfo:
            parse(parse_input)
        assert expected_msg.lower() in str(excinfo.value).lower()
    else:
        pytest.fail(f"Unknown expected format: {parse_expected}")


def _type_spec(tree, index: int) -> TypeSpec:
    decl = tree.decls[index]
    assert isinstance(decl, GenDecl)
    spec = decl.specs[0]
    assert isinstance(spec, TypeSpec)
    return spec


def test_struct_fields_in_order():
    tree = parse(
        "package p\n"
        "\n"
        "type S struct {\n"
        "\ta, b int\n"
        "\tw    io.Writer `json:\"w\"`\n"
        "\tm    map[string]*T\n"
        "\t*Base\n"
        "}\n"
    )
    spec = _type_spec(tree, 0)
    assert isinstance(spec.typ, StructType)
    fields = spec.typ.fields
    assert [f.names for f in fields] == [["a", "b"], ["w"], ["m"], []]
    assert isinstance(fields[0].typ, Ident) and fields[0].typ.name == "int"
    assert isinstance(fields[1].typ, Selector)
    assert fields[1].tag == '`json:"w"`'
    assert isinstance(fields[2].typ, MapType)
    assert isinstance(fields[3].typ, Pointer)


def test_type_params_and_arrays():
    tree = parse("package p\ntype G[T any] struct{ v T }\ntype A [4]int\n")
    generic = _type_spec(tree, 0)
    assert [tp.names for tp in generic.type_params] == [["T"]]
    array = _type_spec(tree, 1)
    assert array.type_params == []
    assert isinstance(array.typ, ArrayType)
    assert array.typ.length == "4"


def test_func_decl_signature():
    tree = parse("package p\nfunc (s *S[T]) Get(k string, v ...int) (T, error) { return }\n")
    decl = tree.decls[0]
    assert isinstance(decl, FuncDecl)
    assert decl.name == "Get"
    assert decl.recv is not None
    recv_type = decl.recv[0].typ
    assert isinstance(recv_type, Pointer) and isinstance(recv_type.elem, Instance)
    assert [p.names for p in decl.typ.params] == [["k"], ["v"]]
    assert [r.names for r in decl.typ.results] == [[], []]
    assert decl.body is not None and decl.body.span is not None


def test_span_covers_trailing_comment():
    source = "package p // pkg\n\ntype A int // note\n\n// Doc for B.\ntype B int\n"
    tree = parse(source)
    assert source[: tree.package.span.end] == "package p // pkg"
    first = tree.decls[0].span
    assert source[first.start : first.end] == "type A int // note"
    second = tree.decls[1].span
    assert source[second.start : second.end] == "type B int"


def test_error_position():
    with pytest.raises(ParseError) as excinfo:
        parse("package p\n\nfunc f() {\n\tg(]\n}\n")
    assert excinfo.value.line == 4
    assert excinfo.value.col == 4


def test_body_keeps_local_type_declarations():
    source = (
        "package p\n"
        "\n"
        "func f(v any) {\n"
        "\tswitch v.(type) {\n"
        "\tcase int:\n"
        "\t}\n"
        "\ttype T struct{ b string }\n"
        "\tif true {\n"
        "\t\ttype (\n"
        "\t\t\tU int\n"
        "\t\t\tW = U\n"
        "\t\t)\n"
        "\t}\n"
        "}\n"
    )
    tree = parse(source)
    decl = tree.decls[0]
    assert isinstance(decl, FuncDecl) and decl.body is not None
    stmts = decl.body.stmts
    assert all(isinstance(s, DeclStmt) for s in stmts)
    names = [[spec.name for spec in s.decl.specs] for s in stmts]
    assert names == [["T"], ["U", "W"]]
    local = stmts[0].decl.specs[0]
    assert isinstance(local.typ, StructType)
    assert [f.names for f in local.typ.fields] == [["b"]]
    assert emit(tree) == source


def test_embedded_generic_field():
    tree = parse("package p\ntype S struct {\n\tList[int]\n\tbuf [4]byte\n}\n")
    fields = _type_spec(tree, 0).typ.fields
    assert fields[0].names == []
    assert isinstance(fields[0].typ, Instance)
    assert fields[1].names == ["buf"]
    assert isinstance(fields[1].typ, ArrayType)

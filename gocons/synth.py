"""Constructor synthesis and splicing.

`synthesize` builds a `FuncDecl` for `New<Type>` from the struct's fields;
`splice` inserts it into the file right after the declaration of the type.
"""

from __future__ import annotations

from typing import TypeVar

from .ast import (
    BlockStmt,
    CompositeLit,
    Expr,
    Field,
    FuncDecl,
    FuncType,
    GenDecl,
    Ident,
    Instance,
    KeyValueExpr,
    Pointer,
    ReturnStmt,
    Selector,
    SourceFile,
    TypeSpec,
    UnaryExpr,
)
from .locate import VISIT_CONTINUE, constructor_name, walk
from .tokens import KEYWORDS

T = TypeVar("T")

# Predeclared identifiers a parameter must not shadow
GO_PREDECLARED: set[str] = {
    "any",
    "append",
    "bool",
    "byte",
    "cap",
    "clear",
    "close",
    "comparable",
    "complex",
    "complex128",
    "complex64",
    "copy",
    "delete",
    "error",
    "false",
    "float32",
    "float64",
    "imag",
    "int",
    "int16",
    "int32",
    "int64",
    "int8",
    "iota",
    "len",
    "make",
    "max",
    "min",
    "new",
    "nil",
    "panic",
    "print",
    "println",
    "real",
    "recover",
    "rune",
    "string",
    "true",
    "uint",
    "uint16",
    "uint32",
    "uint64",
    "uint8",
    "uintptr",
}

BLANK = "_"


# ── Naming ───────────────────────────────────────────────────


def embedded_name(typ: Expr) -> str:
    """Field name of an embedded field: the type name without package,
    pointer or type arguments."""
    if isinstance(typ, Pointer):
        return embedded_name(typ.elem)
    if isinstance(typ, Instance):
        return embedded_name(typ.base)
    if isinstance(typ, Selector):
        return typ.name
    if isinstance(typ, Ident):
        return typ.name
    raise ValueError("embedded field must be a type name")


def lower_first(name: str) -> str:
    """Reader -> reader, URLParser -> urlParser, ID -> id."""
    upper = 0
    while upper < len(name) and name[upper].isupper():
        upper += 1
    if upper == 0:
        return name
    if upper == 1 or upper == len(name):
        return name[:upper].lower() + name[upper:]
    return name[: upper - 1].lower() + name[upper - 1 :]


def unique_name(base: str, taken: set[str]) -> str:
    """First of base, base1, base2, ... not in `taken`; records the choice."""
    candidate = base
    n = 1
    while candidate in taken:
        candidate = base + str(n)
        n += 1
    taken.add(candidate)
    return candidate


def _referenced_names(fields: list[Field]) -> set[str]:
    """Every identifier and package name used inside the field types."""
    names: set[str] = set()

    def visit(node: object) -> str:
        if isinstance(node, Ident):
            names.add(node.name)
        elif isinstance(node, Selector):
            names.add(node.pkg)
        return VISIT_CONTINUE

    for field in fields:
        walk(field.typ, visit)
    return names


# ── Synthesis ────────────────────────────────────────────────


def constructor_params(type_name: str, fields: list[Field]) -> tuple[list[Field], list[tuple[str, str]]]:
    """Parameter list plus (literal key, parameter name) pairs, both in field order.

    Named entries keep their names and grouping; blank names are dropped.
    Embedded fields get a lower-cased parameter name that does not collide
    with any other parameter, the type name, a keyword, a predeclared
    identifier, or a name used inside the field types.
    """
    taken: set[str] = {type_name}
    taken |= KEYWORDS
    taken |= GO_PREDECLARED
    taken |= _referenced_names(fields)
    for field in fields:
        taken.update(field.names)
    params: list[Field] = []
    pairs: list[tuple[str, str]] = []
    for field in fields:
        if field.names:
            names = [n for n in field.names if n != BLANK]
            if not names:
                continue
            params.append(Field(None, names, field.typ))
            for n in names:
                pairs.append((n, n))
        else:
            key = embedded_name(field.typ)
            param = unique_name(lower_first(key), taken)
            params.append(Field(None, [param], field.typ))
            pairs.append((key, param))
    return params, pairs


def _type_ref(type_name: str, type_params: list[Field]) -> Expr:
    base = Ident(None, type_name)
    if not type_params:
        return base
    args: list[Expr] = []
    for tp in type_params:
        for n in tp.names:
            args.append(Ident(None, n))
    return Instance(None, base, args)


def synthesize(
    type_name: str, fields: list[Field], type_params: list[Field] | None = None
) -> FuncDecl:
    """Build `func New<T>(fields...) *T { return &T{f: f, ...} }`."""
    tparams = list(type_params) if type_params else []
    params, pairs = constructor_params(type_name, fields)
    elts: list[KeyValueExpr] = []
    for key, param in pairs:
        elts.append(KeyValueExpr(None, Ident(None, key), Ident(None, param)))
    result = Field(None, [], Pointer(None, _type_ref(type_name, tparams)))
    literal = CompositeLit(None, _type_ref(type_name, tparams), elts)
    body = BlockStmt(None, [ReturnStmt(None, [UnaryExpr(None, "&", literal)])])
    return FuncDecl(
        None,
        None,
        constructor_name(type_name),
        tparams,
        FuncType(None, params, [result]),
        body,
    )


# ── Splicing ─────────────────────────────────────────────────


def declares_type(decl: object, type_name: str) -> bool:
    """True if `decl` is a type declaration (grouped or not) naming `type_name`."""
    if not isinstance(decl, GenDecl) or decl.keyword != "type":
        return False
    for spec in decl.specs:
        if isinstance(spec, TypeSpec) and spec.name == type_name:
            return True
    return False


def insertion_index(tree: SourceFile, type_name: str) -> int:
    """Index right after the last declaration of `type_name`. When there is
    none, the index just past the leading imports, ahead of everything else."""
    last_index = -1
    imports = 0
    for i, decl in enumerate(tree.decls):
        if declares_type(decl, type_name):
            last_index = i
        if isinstance(decl, GenDecl) and decl.keyword == "import" and imports == i:
            imports = i + 1
    if last_index < 0:
        return imports
    return last_index + 1


def insert_at(seq: list[T], index: int, value: T) -> None:
    """Insert `value` at `index`, shifting the tail down by one."""
    if index < 0 or index > len(seq):
        raise IndexError("insert index " + str(index) + " out of range")
    seq[index:index] = [value]


def splice(tree: SourceFile, type_name: str, decl: FuncDecl) -> int:
    """Insert `decl` after the type's declaration. Returns its index."""
    index = insertion_index(tree, type_name)
    insert_at(tree.decls, index, decl)
    return index

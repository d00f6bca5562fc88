"""Go syntax tree — declaration-level node definitions.

Parsed nodes carry a `Span` into the original source; nodes built by the
constructor synthesizer carry `span=None` and are rendered canonically.
"""

from __future__ import annotations

from dataclasses import dataclass

from .tokens import Comment


# ============================================================
# POSITION
# ============================================================


@dataclass
class Span:
    """Source range [start, end) plus the 1-indexed start position."""

    start: int
    end: int
    line: int
    col: int


# ============================================================
# TYPE EXPRESSIONS
# ============================================================


@dataclass
class Expr:
    """Base for all expressions; Go types are expressions too."""

    span: Span | None


@dataclass
class Ident(Expr):
    """A bare name: a type name, a parameter name, or a variable reference."""

    name: str


@dataclass
class Selector(Expr):
    """pkg.Name."""

    pkg: str
    name: str


@dataclass
class Instance(Expr):
    """Name[A, B] — generic instantiation."""

    base: Expr
    args: list[Expr]


@dataclass
class Pointer(Expr):
    """*T."""

    elem: Expr


@dataclass
class ArrayType(Expr):
    """[N]T. The length expression is kept as source text."""

    length: str
    elem: Expr


@dataclass
class SliceType(Expr):
    """[]T."""

    elem: Expr


@dataclass
class MapType(Expr):
    """map[K]V."""

    key: Expr
    value: Expr


# Channel directions
CHAN_BOTH = "both"
CHAN_SEND = "send"
CHAN_RECV = "recv"


@dataclass
class ChanType(Expr):
    """chan T, chan<- T, <-chan T."""

    dir: str
    elem: Expr


@dataclass
class Field:
    """A named or embedded field, or a parameter/result entry.

    `names` is empty for embedded struct fields and unnamed parameters.
    A single entry may declare several names sharing one type (`a, b int`).
    """

    span: Span | None
    names: list[str]
    typ: Expr
    tag: str | None = None


@dataclass
class FuncType(Expr):
    """func(params) results."""

    params: list[Field]
    results: list[Field]


@dataclass
class StructType(Expr):
    """struct { fields }."""

    fields: list[Field]


@dataclass
class InterfaceType(Expr):
    """interface { methods and embedded elements }.

    Methods are fields with one name and a FuncType; embedded types and
    constraint unions are fields without names.
    """

    elems: list[Field]


@dataclass
class Ellipsis(Expr):
    """...T — variadic parameter type."""

    elem: Expr


@dataclass
class ParenType(Expr):
    """(T)."""

    inner: Expr


@dataclass
class Tilde(Expr):
    """~T — underlying-type constraint term."""

    inner: Expr


@dataclass
class Union(Expr):
    """A | B — 2+ constraint terms."""

    terms: list[Expr]


# ============================================================
# EXPRESSIONS AND STATEMENTS
# ============================================================


@dataclass
class UnaryExpr(Expr):
    """op X — only `&` is produced by the synthesizer."""

    op: str
    x: Expr


@dataclass
class KeyValueExpr(Expr):
    """Key: Value inside a composite literal."""

    key: Ident
    value: Expr


@dataclass
class CompositeLit(Expr):
    """T{elts}."""

    typ: Expr
    elts: list[KeyValueExpr]


@dataclass
class Stmt:
    """Base for all statements."""

    span: Span | None


@dataclass
class ReturnStmt(Stmt):
    """return results."""

    results: list[Expr]


@dataclass
class BlockStmt(Stmt):
    """{ stmts }. Parsed bodies keep only their local type declarations in
    `stmts`; the body text is reproduced from the span."""

    stmts: list[Stmt]


@dataclass
class DeclStmt(Stmt):
    """A declaration inside a function body."""

    decl: GenDecl


# ============================================================
# DECLARATIONS
# ============================================================


@dataclass
class Spec:
    """Base for the specs grouped by a GenDecl."""

    span: Span | None


@dataclass
class ImportSpec(Spec):
    """[name] "path"."""

    name: str | None
    path: str


@dataclass
class ValueSpec(Spec):
    """names [Type] [= values] inside const/var. Values are source text."""

    names: list[str]
    typ: Expr | None
    values: str | None


@dataclass
class TypeSpec(Spec):
    """Name[TypeParams] [=] Type."""

    name: str
    type_params: list[Field]
    assign: bool
    typ: Expr


@dataclass
class Decl:
    """Base for all top-level declarations."""

    span: Span | None


@dataclass
class GenDecl(Decl):
    """import/const/var/type, either a single spec or a parenthesised group."""

    keyword: str
    specs: list[Spec]
    grouped: bool


@dataclass
class FuncDecl(Decl):
    """func (recv) Name[TypeParams](params) results { body }."""

    recv: list[Field] | None
    name: str
    type_params: list[Field]
    typ: FuncType
    body: BlockStmt | None


@dataclass
class PackageClause:
    """package name."""

    span: Span
    name: str


@dataclass
class SourceFile:
    """One parsed Go file: the source text it came from, its package clause,
    the ordered top-level declarations, and every comment."""

    source: str
    package: PackageClause
    decls: list[Decl]
    comments: list[Comment]

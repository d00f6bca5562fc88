"""Declaration locator: find the target struct's fields and detect an
existing constructor.

Traversal is driven by `walk`, whose visitor returns one of three signals:
VISIT_CONTINUE descends into the node's children, VISIT_SKIP leaves the
subtree alone, VISIT_STOP ends the whole walk.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .ast import (
    ArrayType,
    BlockStmt,
    ChanType,
    CompositeLit,
    DeclStmt,
    Ellipsis,
    Field,
    FuncDecl,
    FuncType,
    GenDecl,
    Instance,
    InterfaceType,
    KeyValueExpr,
    MapType,
    ParenType,
    Pointer,
    ReturnStmt,
    SliceType,
    SourceFile,
    StructType,
    Tilde,
    TypeSpec,
    UnaryExpr,
    Union,
    ValueSpec,
)
from .errors import DuplicateConstructorError

VISIT_CONTINUE = "continue"
VISIT_SKIP = "skip"
VISIT_STOP = "stop"

CONSTRUCTOR_PREFIX = "New"


def constructor_name(type_name: str) -> str:
    return CONSTRUCTOR_PREFIX + type_name


def children(node: object) -> list[object]:
    """Direct child nodes, in source order."""
    if isinstance(node, SourceFile):
        return list(node.decls)
    if isinstance(node, GenDecl):
        return list(node.specs)
    if isinstance(node, TypeSpec):
        return list(node.type_params) + [node.typ]
    if isinstance(node, ValueSpec):
        return [node.typ] if node.typ is not None else []
    if isinstance(node, FuncDecl):
        out: list[object] = []
        if node.recv is not None:
            out.extend(node.recv)
        out.extend(node.type_params)
        out.append(node.typ)
        if node.body is not None:
            out.append(node.body)
        return out
    if isinstance(node, Field):
        return [node.typ]
    if isinstance(node, FuncType):
        return list(node.params) + list(node.results)
    if isinstance(node, StructType):
        return list(node.fields)
    if isinstance(node, InterfaceType):
        return list(node.elems)
    if isinstance(node, Instance):
        return [node.base] + list(node.args)
    if isinstance(node, (Pointer, ArrayType, SliceType, ChanType, Ellipsis)):
        return [node.elem]
    if isinstance(node, MapType):
        return [node.key, node.value]
    if isinstance(node, (ParenType, Tilde)):
        return [node.inner]
    if isinstance(node, Union):
        return list(node.terms)
    if isinstance(node, UnaryExpr):
        return [node.x]
    if isinstance(node, CompositeLit):
        return [node.typ] + list(node.elts)
    if isinstance(node, KeyValueExpr):
        return [node.key, node.value]
    if isinstance(node, BlockStmt):
        return list(node.stmts)
    if isinstance(node, DeclStmt):
        return [node.decl]
    if isinstance(node, ReturnStmt):
        return list(node.results)
    return []


def walk(node: object, visit: Callable[[object], str]) -> bool:
    """Depth-first pre-order walk. Returns False once the visitor stops it."""
    signal = visit(node)
    if signal == VISIT_STOP:
        return False
    if signal == VISIT_SKIP:
        return True
    for child in children(node):
        if not walk(child, visit):
            return False
    return True


@dataclass
class Located:
    """What the locator learned about the target type."""

    fields: list[Field]
    exists: bool
    found: bool
    type_params: list[Field]


def locate(tree: SourceFile, type_name: str) -> Located:
    """Collect the fields of the last struct declaring `type_name` and
    whether `New<type_name>` is already declared."""
    ctor = constructor_name(type_name)
    # Last matching declaration wins; each match overwrites the previous one.
    last_match: list[TypeSpec] = []
    exists: list[bool] = [False]

    def visit(node: object) -> str:
        if isinstance(node, TypeSpec) and node.name == type_name:
            last_match[:] = [node]
            if not isinstance(node.typ, StructType):
                return VISIT_SKIP
            return VISIT_CONTINUE
        if isinstance(node, FuncDecl) and node.name == ctor:
            exists[0] = True
            return VISIT_STOP
        return VISIT_CONTINUE

    walk(tree, visit)
    if not last_match:
        return Located([], exists[0], False, [])
    spec = last_match[0]
    fields: list[Field] = []
    if isinstance(spec.typ, StructType):
        fields = list(spec.typ.fields)
    return Located(fields, exists[0], True, list(spec.type_params))


def inspect(tree: SourceFile, type_name: str) -> Located:
    """Locate the target type, failing if its constructor already exists."""
    located = locate(tree, type_name)
    if located.exists:
        raise DuplicateConstructorError(constructor_name(type_name))
    return located

"""Go emitter — renders a SourceFile back into source text.

Parsed declarations are reproduced byte for byte from their spans, together
with the whitespace and comments between them. Synthesized declarations have
no span and are rendered in gofmt style.
"""

from __future__ import annotations

import os
import tempfile

from .ast import (
    CHAN_RECV,
    CHAN_SEND,
    ArrayType,
    ChanType,
    CompositeLit,
    Decl,
    Ellipsis,
    Expr,
    Field,
    FuncDecl,
    FuncType,
    Ident,
    Instance,
    InterfaceType,
    KeyValueExpr,
    MapType,
    ParenType,
    Pointer,
    ReturnStmt,
    Selector,
    SliceType,
    SourceFile,
    Stmt,
    StructType,
    Tilde,
    UnaryExpr,
    Union,
)
from .errors import FormatError, WriteError


def to_source(tree: SourceFile) -> str:
    """Render `tree` to Go source text."""
    try:
        return _Emitter(tree.source).emit_file(tree)
    except (TypeError, ValueError) as e:
        raise FormatError("could not write the program into a buffer: " + str(e)) from e


def render_decl(decl: Decl) -> str:
    """gofmt-style rendering of a synthesized constructor."""
    return _Emitter("").render_decl(decl)


def write_source(path: str, text: str) -> None:
    """Replace the contents of `path` with `text`.

    The text goes to a temporary file beside `path` first and is then moved
    over it, so a failed write leaves the original file intact.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        mode = os.stat(path).st_mode & 0o7777
    except OSError:
        mode = None
    tmp_path = ""
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".gocons-", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path != "" and os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise WriteError(path, e.strerror or str(e)) from e


class _Emitter:
    _INDENT: str = "\t"

    def __init__(self, source: str) -> None:
        self._source: str = source
        self._lines: list[str] = []
        self._indent_level: int = 0

    # ── Public ──────────────────────────────────────────────

    def emit_file(self, tree: SourceFile) -> str:
        src = self._source
        newline = "\r\n" if "\r\n" in src else "\n"
        prev_end = tree.package.span.end
        parts: list[str] = [src[:prev_end]]
        for decl in tree.decls:
            if decl.span is None:
                parts.append(newline + newline)
                parts.append(self.render_decl(decl).replace("\n", newline))
                continue
            parts.append(src[prev_end : decl.span.end])
            prev_end = decl.span.end
        parts.append(src[prev_end:])
        text = "".join(parts)
        if text != "" and not text.endswith("\n"):
            text += newline
        return text

    def render_decl(self, decl: Decl) -> str:
        self._lines = []
        self._indent_level = 0
        if not isinstance(decl, FuncDecl):
            raise TypeError("unhandled decl type: " + type(decl).__name__)
        self._emit_func_decl(decl)
        return "\n".join(self._lines)

    # ── Lines ───────────────────────────────────────────────

    def _emit_line(self, line: str) -> None:
        self._lines.append(self._INDENT * self._indent_level + line)

    # ── Decls ───────────────────────────────────────────────

    def _emit_func_decl(self, decl: FuncDecl) -> None:
        if decl.recv is not None or decl.body is None or decl.body.span is not None:
            raise ValueError("only synthesized constructors are rendered: " + decl.name)
        header = "func " + decl.name
        if decl.type_params:
            header += "[" + self._render_fields(decl.type_params) + "]"
        header += self._render_signature(decl.typ)
        self._emit_line(header + " {")
        self._indent_level += 1
        for stmt in decl.body.stmts:
            self._emit_stmt(stmt)
        self._indent_level -= 1
        self._emit_line("}")

    # ── Stmts ───────────────────────────────────────────────

    def _emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, ReturnStmt):
            if not stmt.results:
                self._emit_line("return")
                return
            parts: list[str] = []
            for r in stmt.results:
                parts.append(self._render_expr(r))
            self._emit_line("return " + ", ".join(parts))
            return
        raise TypeError("unhandled stmt type: " + type(stmt).__name__)

    # ── Fields / Signatures ─────────────────────────────────

    def _render_field(self, field: Field) -> str:
        typ = self._render_expr(field.typ)
        if not field.names:
            out = typ
        else:
            out = ", ".join(field.names) + " " + typ
        if field.tag is not None:
            out += " " + field.tag
        return out

    def _render_fields(self, fields: list[Field]) -> str:
        parts: list[str] = []
        for f in fields:
            parts.append(self._render_field(f))
        return ", ".join(parts)

    def _render_signature(self, sig: FuncType) -> str:
        out = "(" + self._render_fields(sig.params) + ")"
        if not sig.results:
            return out
        if len(sig.results) == 1 and not sig.results[0].names:
            return out + " " + self._render_expr(sig.results[0].typ)
        return out + " (" + self._render_fields(sig.results) + ")"

    # ── Exprs ───────────────────────────────────────────────

    def _render_expr(self, expr: Expr) -> str:
        if isinstance(expr, Ident):
            return expr.name
        if isinstance(expr, Selector):
            return expr.pkg + "." + expr.name
        if isinstance(expr, Instance):
            args: list[str] = []
            for a in expr.args:
                args.append(self._render_expr(a))
            return self._render_expr(expr.base) + "[" + ", ".join(args) + "]"
        if isinstance(expr, Pointer):
            return "*" + self._render_expr(expr.elem)
        if isinstance(expr, ArrayType):
            return "[" + expr.length + "]" + self._render_expr(expr.elem)
        if isinstance(expr, SliceType):
            return "[]" + self._render_expr(expr.elem)
        if isinstance(expr, MapType):
            return "map[" + self._render_expr(expr.key) + "]" + self._render_expr(expr.value)
        if isinstance(expr, ChanType):
            if expr.dir == CHAN_SEND:
                return "chan<- " + self._render_expr(expr.elem)
            if expr.dir == CHAN_RECV:
                return "<-chan " + self._render_expr(expr.elem)
            return "chan " + self._render_expr(expr.elem)
        if isinstance(expr, FuncType):
            return "func" + self._render_signature(expr)
        if isinstance(expr, StructType):
            if not expr.fields:
                return "struct{}"
            fields: list[str] = []
            for f in expr.fields:
                fields.append(self._render_field(f))
            return "struct{ " + "; ".join(fields) + " }"
        if isinstance(expr, InterfaceType):
            if not expr.elems:
                return "interface{}"
            elems: list[str] = []
            for e in expr.elems:
                if e.names and isinstance(e.typ, FuncType):
                    elems.append(e.names[0] + self._render_signature(e.typ))
                else:
                    elems.append(self._render_expr(e.typ))
            return "interface{ " + "; ".join(elems) + " }"
        if isinstance(expr, Ellipsis):
            return "..." + self._render_expr(expr.elem)
        if isinstance(expr, ParenType):
            return "(" + self._render_expr(expr.inner) + ")"
        if isinstance(expr, Tilde):
            return "~" + self._render_expr(expr.inner)
        if isinstance(expr, Union):
            terms: list[str] = []
            for t in expr.terms:
                terms.append(self._render_expr(t))
            return " | ".join(terms)
        if isinstance(expr, UnaryExpr):
            return expr.op + self._render_expr(expr.x)
        if isinstance(expr, KeyValueExpr):
            return self._render_expr(expr.key) + ": " + self._render_expr(expr.value)
        if isinstance(expr, CompositeLit):
            elts: list[str] = []
            for kv in expr.elts:
                elts.append(self._render_expr(kv))
            return self._render_expr(expr.typ) + "{" + ", ".join(elts) + "}"
        raise TypeError("unhandled expr type: " + type(expr).__name__)

"""Go parser — recursive descent down to the declaration level.

Declarations, specs and every type expression are parsed into nodes.
Function bodies contribute only their local `type` declarations; the rest
of a body, like a const/var initialiser, is checked for balanced brackets
and otherwise kept opaque. Its text is reproduced from the source span.
"""

from __future__ import annotations

from .ast import (
    CHAN_BOTH,
    CHAN_RECV,
    CHAN_SEND,
    ArrayType,
    BlockStmt,
    ChanType,
    Decl,
    DeclStmt,
    Ellipsis,
    Expr,
    Field,
    FuncDecl,
    FuncType,
    GenDecl,
    Ident,
    ImportSpec,
    Instance,
    InterfaceType,
    MapType,
    PackageClause,
    ParenType,
    Pointer,
    Selector,
    SliceType,
    SourceFile,
    Span,
    Spec,
    Stmt,
    StructType,
    Tilde,
    TypeSpec,
    Union,
    ValueSpec,
)
from .errors import ParseError
from .tokens import (
    TK_EOF,
    TK_IDENT,
    TK_STRING,
    Comment,
    Token,
    tokenize_with_comments,
)

# Tokens that may begin a type
TYPE_START: set[str] = {"*", "[", "(", "func", "map", "chan", "<-", "struct", "interface"}

# Tokens that, after `Name [ Ident`, mark a type parameter list rather than
# an array length
TYPE_PARAM_HINTS: set[str] = {",", "interface", "~", "func", "map", "chan", "[", "struct"}

_OPEN: dict[str, str] = {"(": ")", "[": "]", "{": "}"}
_CLOSE: set[str] = {")", "]", "}"}


def parse(source: str) -> SourceFile:
    """Parse a Go source file into a SourceFile tree."""
    tokens, comments = tokenize_with_comments(source)
    return Parser(source, tokens, comments).parse_file()


class Parser:
    """Recursive descent parser for Go declarations."""

    def __init__(self, source: str, tokens: list[Token], comments: list[Comment]):
        self.source: str = source
        self.tokens: list[Token] = tokens
        self.comments: list[Comment] = comments
        self.pos: int = 0
        self.last: Token | None = None

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        if not tok.implicit:
            self.last = tok
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.type != TK_STRING and tok.value == value

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_ident(self) -> bool:
        return self.current().type == TK_IDENT

    def at_type_start(self) -> bool:
        return self.at_ident() or self.current().value in TYPE_START

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("expected '" + value + "', found " + self._describe())
        return self.advance()

    def expect_ident(self) -> Token:
        if not self.at_ident():
            raise self.error("expected identifier, found " + self._describe())
        return self.advance()

    def expect_semi(self) -> None:
        if self.at_type(TK_EOF):
            return
        if not self.at(";"):
            raise self.error("expected ';', found " + self._describe())
        self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _describe(self) -> str:
        tok = self.current()
        if tok.type == TK_EOF:
            return "EOF"
        if tok.implicit:
            return "newline"
        return "'" + tok.value + "'"

    def _span_from(self, start: Token) -> Span:
        end = self.last.end if self.last is not None else start.start
        return Span(start.start, end, start.line, start.col)

    # ── Top Level ────────────────────────────────────────────

    def parse_file(self) -> SourceFile:
        package = self.parse_package_clause()
        decls: list[Decl] = []
        while self.at("import"):
            decls.append(self.parse_gen_decl())
            self.expect_semi()
        while not self.at_type(TK_EOF):
            if self.at("import"):
                raise self.error("imports must appear before other declarations")
            decls.append(self.parse_decl())
            self.expect_semi()
        self._attach_line_comments(package, decls)
        return SourceFile(self.source, package, decls, self.comments)

    def parse_package_clause(self) -> PackageClause:
        start = self.current()
        if not self.at("package"):
            raise self.error("expected 'package', found " + self._describe())
        self.advance()
        name = self.expect_ident()
        clause = PackageClause(self._span_from(start), name.value)
        self.expect_semi()
        return clause

    def parse_decl(self) -> Decl:
        if self.at("const") or self.at("var") or self.at("type"):
            return self.parse_gen_decl()
        if self.at("func"):
            return self.parse_func_decl()
        raise self.error("non-declaration statement outside function body")

    def _attach_line_comments(self, package: PackageClause, decls: list[Decl]) -> None:
        """Extend each span over comments starting on the line it ends on."""
        spans: list[Span] = [package.span]
        for decl in decls:
            if decl.span is not None:
                spans.append(decl.span)
        ci = 0
        for i, span in enumerate(spans):
            limit = len(self.source)
            if i + 1 < len(spans):
                limit = spans[i + 1].start
            end_line = self.source.count("\n", 0, span.end) + 1
            while ci < len(self.comments) and self.comments[ci].start < span.end:
                ci += 1
            while ci < len(self.comments):
                comment = self.comments[ci]
                if comment.start >= limit or comment.line != end_line:
                    break
                span.end = comment.end
                end_line = comment.end_line
                ci += 1

    # ── Generic declarations ─────────────────────────────────

    def parse_gen_decl(self) -> GenDecl:
        start = self.current()
        keyword = self.advance().value
        specs: list[Spec] = []
        grouped = False
        if self.at("("):
            grouped = True
            self.advance()
            while not self.at(")"):
                if self.at_type(TK_EOF):
                    raise self.error("expected ')', found EOF")
                specs.append(self.parse_spec(keyword))
                if not self.at(")"):
                    self.expect(";")
            self.expect(")")
        else:
            specs.append(self.parse_spec(keyword))
        return GenDecl(self._span_from(start), keyword, specs, grouped)

    def parse_spec(self, keyword: str) -> Spec:
        if keyword == "import":
            return self.parse_import_spec()
        if keyword == "type":
            return self.parse_type_spec()
        return self.parse_value_spec(keyword)

    def parse_import_spec(self) -> ImportSpec:
        start = self.current()
        name: str | None = None
        if self.at_ident():
            name = self.advance().value
        elif self.at("."):
            name = self.advance().value
        if not self.at_type(TK_STRING):
            raise self.error("import path must be a string")
        path = self.advance().value
        return ImportSpec(self._span_from(start), name, path)

    def parse_value_spec(self, keyword: str) -> ValueSpec:
        start = self.current()
        names = self.parse_ident_list()
        typ: Expr | None = None
        values: str | None = None
        if not self.at("=") and not self.at(";") and not self.at(")"):
            typ = self.parse_type()
        if self.at("="):
            self.advance()
            values = self.skip_expr_list()
        if keyword == "var" and typ is None and values is None:
            raise self.error("missing variable type or initialization")
        return ValueSpec(self._span_from(start), names, typ, values)

    def parse_type_spec(self) -> TypeSpec:
        start = self.current()
        name = self.expect_ident()
        type_params: list[Field] = []
        if self.at("[") and self._at_type_params():
            type_params = self.parse_type_params()
        assign = False
        if self.at("="):
            assign = True
            self.advance()
        typ = self.parse_type()
        return TypeSpec(self._span_from(start), name.value, type_params, assign, typ)

    def _at_type_params(self) -> bool:
        # `type A [N]int` is an array; `type A[T any] ...` is generic.
        if self.peek(1).type != TK_IDENT:
            return False
        nxt = self.peek(2)
        return nxt.type == TK_IDENT or nxt.value in TYPE_PARAM_HINTS

    def parse_ident_list(self) -> list[str]:
        names: list[str] = [self.expect_ident().value]
        while self.at(","):
            self.advance()
            names.append(self.expect_ident().value)
        return names

    # ── Opaque regions ───────────────────────────────────────

    def skip_expr_list(self) -> str:
        """Consume an initialiser list up to `;` or the closing `)` of a group."""
        first = self.current()
        stack: list[str] = []
        while True:
            tok = self.current()
            if tok.type == TK_EOF:
                if stack:
                    raise self.error("expected '" + stack[-1] + "', found EOF")
                break
            if not stack and (self.at(";") or self.at(")")):
                break
            self._track_bracket(tok, stack)
            self.advance()
        if self.current() is first:
            raise self.error("expected expression, found " + self._describe())
        return self.source[first.start : self.last.end if self.last else first.start]

    def parse_block(self) -> BlockStmt:
        """Consume a `{ ... }` body. Local `type` declarations are parsed;
        the rest is only checked for balanced brackets."""
        start = self.expect("{")
        stmts: list[Stmt] = []
        stack: list[str] = ["}"]
        prev = start
        while stack:
            tok = self.current()
            if tok.type == TK_EOF:
                raise self.error("expected '" + stack[-1] + "', found EOF")
            # `type` opens a declaration only at the start of a statement;
            # elsewhere it is the `x.(type)` of a type switch.
            if self.at("type") and prev.value in ("{", ";"):
                decl = self.parse_gen_decl()
                stmts.append(DeclStmt(decl.span, decl))
                prev = self.tokens[self.pos - 1]
                continue
            self._track_bracket(tok, stack)
            prev = self.advance()
        return BlockStmt(self._span_from(start), stmts)

    def _track_bracket(self, tok: Token, stack: list[str]) -> None:
        if tok.type == TK_STRING:
            return
        if tok.value in _OPEN:
            stack.append(_OPEN[tok.value])
        elif tok.value in _CLOSE:
            if not stack or stack[-1] != tok.value:
                raise self.error("unexpected '" + tok.value + "'")
            stack.pop()

    # ── Functions ────────────────────────────────────────────

    def parse_func_decl(self) -> FuncDecl:
        start = self.expect("func")
        recv: list[Field] | None = None
        if self.at("("):
            recv = self.parse_parameters()
        name = self.expect_ident()
        type_params: list[Field] = []
        if self.at("["):
            type_params = self.parse_type_params()
        sig_start = self.current()
        params = self.parse_parameters()
        results = self.parse_results()
        sig = FuncType(self._span_from(sig_start), params, results)
        body: BlockStmt | None = None
        if self.at("{"):
            body = self.parse_block()
        return FuncDecl(self._span_from(start), recv, name.value, type_params, sig, body)

    def parse_type_params(self) -> list[Field]:
        self.expect("[")
        fields: list[Field] = []
        while not self.at("]"):
            start = self.current()
            names = self.parse_ident_list()
            constraint = self.parse_constraint()
            fields.append(Field(self._span_from(start), names, constraint))
            if not self.at("]"):
                self.expect(",")
        self.expect("]")
        if not fields:
            raise self.error("empty type parameter list")
        return fields

    def parse_parameters(self) -> list[Field]:
        """Parse `( ParameterList )`, resolving named vs. unnamed entries."""
        self.expect("(")
        items: list[tuple[str | None, Expr, Token]] = []
        while not self.at(")"):
            start = self.current()
            if self.at_ident() and self._param_has_name():
                name = self.advance().value
                items.append((name, self.parse_param_type(), start))
            else:
                items.append((None, self.parse_param_type(), start))
            if not self.at(")"):
                self.expect(",")
        self.expect(")")
        named = False
        for name, _, _ in items:
            if name is not None:
                named = True
        fields: list[Field] = []
        if not named:
            for _, typ, start in items:
                fields.append(Field(typ.span, [], typ))
            return fields
        pending: list[str] = []
        pending_start: Token | None = None
        for name, typ, start in items:
            if name is None:
                if not isinstance(typ, Ident):
                    raise ParseError("mixed named and unnamed parameters", start.line, start.col)
                if pending_start is None:
                    pending_start = start
                pending.append(typ.name)
                continue
            first = pending_start if pending_start is not None else start
            span = Span(first.start, typ.span.end if typ.span else start.end, first.line, first.col)
            fields.append(Field(span, pending + [name], typ))
            pending = []
            pending_start = None
        if pending_start is not None:
            raise ParseError(
                "mixed named and unnamed parameters", pending_start.line, pending_start.col
            )
        return fields

    def _param_has_name(self) -> bool:
        nxt = self.peek(1)
        if nxt.type == TK_IDENT:
            return True
        if nxt.type == TK_STRING:
            return False
        return nxt.value in TYPE_START or nxt.value == "..."

    def parse_param_type(self) -> Expr:
        if self.at("..."):
            start = self.advance()
            elem = self.parse_type()
            return Ellipsis(self._span_from(start), elem)
        return self.parse_type()

    def parse_results(self) -> list[Field]:
        if self.at("("):
            return self.parse_parameters()
        if self.at_type_start():
            typ = self.parse_type()
            return [Field(typ.span, [], typ)]
        return []

    # ── Types ────────────────────────────────────────────────

    def parse_type(self) -> Expr:
        start = self.current()
        if self.at_ident():
            return self.parse_type_name()
        if self.at("*"):
            self.advance()
            elem = self.parse_type()
            return Pointer(self._span_from(start), elem)
        if self.at("("):
            self.advance()
            inner = self.parse_type()
            self.expect(")")
            return ParenType(self._span_from(start), inner)
        if self.at("["):
            return self.parse_array_or_slice()
        if self.at("map"):
            self.advance()
            self.expect("[")
            key = self.parse_type()
            self.expect("]")
            value = self.parse_type()
            return MapType(self._span_from(start), key, value)
        if self.at("chan"):
            self.advance()
            direction = CHAN_BOTH
            if self.at("<-"):
                self.advance()
                direction = CHAN_SEND
            elem = self.parse_type()
            return ChanType(self._span_from(start), direction, elem)
        if self.at("<-"):
            self.advance()
            self.expect("chan")
            elem = self.parse_type()
            return ChanType(self._span_from(start), CHAN_RECV, elem)
        if self.at("func"):
            self.advance()
            params = self.parse_parameters()
            results = self.parse_results()
            return FuncType(self._span_from(start), params, results)
        if self.at("struct"):
            return self.parse_struct_type()
        if self.at("interface"):
            return self.parse_interface_type()
        raise self.error("expected type, found " + self._describe())

    def parse_type_name(self) -> Expr:
        start = self.expect_ident()
        typ: Expr = Ident(self._span_from(start), start.value)
        if self.at("."):
            self.advance()
            name = self.expect_ident()
            typ = Selector(self._span_from(start), start.value, name.value)
        if self.at("["):
            self.advance()
            args: list[Expr] = []
            while not self.at("]"):
                args.append(self.parse_type())
                if not self.at("]"):
                    self.expect(",")
            self.expect("]")
            if not args:
                raise self.error("expected type argument list")
            typ = Instance(self._span_from(start), typ, args)
        return typ

    def parse_array_or_slice(self) -> Expr:
        start = self.expect("[")
        if self.at("]"):
            self.advance()
            elem = self.parse_type()
            return SliceType(self._span_from(start), elem)
        length_start = self.current()
        stack: list[str] = ["]"]
        while True:
            tok = self.current()
            if tok.type == TK_EOF:
                raise self.error("expected ']', found EOF")
            if len(stack) == 1 and self.at("]"):
                break
            self._track_bracket(tok, stack)
            self.advance()
        length = self.source[length_start.start : self.current().start].strip()
        self.expect("]")
        elem = self.parse_type()
        return ArrayType(self._span_from(start), length, elem)

    def parse_struct_type(self) -> StructType:
        start = self.expect("struct")
        self.expect("{")
        fields: list[Field] = []
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("expected '}', found EOF")
            fields.append(self.parse_field_decl())
            if not self.at("}"):
                self.expect(";")
        self.expect("}")
        return StructType(self._span_from(start), fields)

    def parse_field_decl(self) -> Field:
        start = self.current()
        names: list[str] = []
        if self.at("*"):
            self.advance()
            base = self.parse_type_name()
            typ: Expr = Pointer(self._span_from(start), base)
        elif self.at_ident():
            nxt = self.peek(1)
            if nxt.value == "," and nxt.type != TK_STRING:
                names = self.parse_ident_list()
                typ = self.parse_type()
            elif nxt.type == TK_STRING or nxt.value in (".", ";", "}"):
                typ = self.parse_type_name()
            elif nxt.value == "[" and self._at_embedded_instance():
                typ = self.parse_type_name()
            else:
                names = [self.advance().value]
                typ = self.parse_type()
        else:
            raise self.error("expected field name or embedded type, found " + self._describe())
        tag: str | None = None
        if self.at_type(TK_STRING):
            tag = self.advance().value
        return Field(self._span_from(start), names, typ, tag)

    def _at_embedded_instance(self) -> bool:
        # `List[int]` ends the field after its `]`; `buf [4]byte` continues
        # with the element type.
        depth = 0
        i = 1
        while True:
            tok = self.peek(i)
            if tok.type == TK_EOF:
                return False
            if tok.type != TK_STRING:
                if tok.value in _OPEN:
                    depth += 1
                elif tok.value in _CLOSE:
                    depth -= 1
                    if depth == 0:
                        break
            i += 1
        after = self.peek(i + 1)
        return after.type == TK_STRING or after.value in (";", "}")

    def parse_interface_type(self) -> InterfaceType:
        start = self.expect("interface")
        self.expect("{")
        elems: list[Field] = []
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("expected '}', found EOF")
            elem_start = self.current()
            if self.at_ident() and self.peek(1).value == "(":
                name = self.advance().value
                sig_start = self.current()
                params = self.parse_parameters()
                results = self.parse_results()
                sig = FuncType(self._span_from(sig_start), params, results)
                elems.append(Field(self._span_from(elem_start), [name], sig))
            else:
                constraint = self.parse_constraint()
                elems.append(Field(self._span_from(elem_start), [], constraint))
            if not self.at("}"):
                self.expect(";")
        self.expect("}")
        return InterfaceType(self._span_from(start), elems)

    def parse_constraint(self) -> Expr:
        start = self.current()
        terms: list[Expr] = [self.parse_constraint_term()]
        while self.at("|"):
            self.advance()
            terms.append(self.parse_constraint_term())
        if len(terms) == 1:
            return terms[0]
        return Union(self._span_from(start), terms)

    def parse_constraint_term(self) -> Expr:
        if self.at("~"):
            start = self.advance()
            inner = self.parse_type()
            return Tilde(self._span_from(start), inner)
        return self.parse_type()

"""Go tokenizer — lexes source into a flat token list plus a comment list.

Semicolons are inserted automatically following the Go rules: a newline (or
end of file) after an identifier, a literal, one of the keywords `break`,
`continue`, `fallthrough`, `return`, or one of `++ -- ) ] }` ends the
statement.
"""

from __future__ import annotations

from .errors import TokenizeError


# Token type constants
TK_IDENT = "IDENT"
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_IMAG = "IMAG"
TK_CHAR = "CHAR"
TK_STRING = "STRING"
TK_OP = "OP"
TK_EOF = "EOF"

LITERAL_TYPES: set[str] = {TK_INT, TK_FLOAT, TK_IMAG, TK_CHAR, TK_STRING}

KEYWORDS: set[str] = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "<<=",
    ">>=",
    "&^=",
    "...",
    "&&",
    "||",
    "<-",
    "++",
    "--",
    "==",
    "!=",
    "<=",
    ">=",
    ":=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    ">>",
    "&^",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "~",
    "!",
    "<",
    ">",
    "=",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ";",
    ":",
    ".",
}

# Tokens after which a newline ends the statement
_SEMI_KEYWORDS: set[str] = {"break", "continue", "fallthrough", "return"}
_SEMI_OPS: set[str] = {"++", "--", ")", "]", "}"}


class Token:
    """A token with type, value, and position.

    `start` and `end` are offsets into the source string; `value` is the raw
    source text of the token. Automatically inserted semicolons have an empty
    range and `implicit` set.
    """

    def __init__(
        self, type_: str, value: str, line: int, col: int, start: int, end: int
    ):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col
        self.start: int = start
        self.end: int = end
        self.implicit: bool = False

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


class Comment:
    """A `//` or `/* */` comment, kept out of the token stream."""

    def __init__(self, text: str, line: int, end_line: int, start: int, end: int):
        self.text: str = text
        self.line: int = line
        self.end_line: int = end_line
        self.start: int = start
        self.end: int = end

    def __repr__(self) -> str:
        return "Comment(" + repr(self.text) + ", " + str(self.line) + ")"


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_letter(c: str) -> bool:
    return c == "_" or c.isalpha()


def _is_ident_char(c: str) -> bool:
    return _is_letter(c) or c.isdigit()


def _ends_statement(tok: Token) -> bool:
    if tok.type == TK_IDENT or tok.type in LITERAL_TYPES:
        return True
    if tok.type in _SEMI_KEYWORDS:
        return True
    return tok.type == TK_OP and tok.value in _SEMI_OPS


class _Lexer:
    def __init__(self, source: str):
        self.src: str = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1
        self.tokens: list[Token] = []
        self.comments: list[Comment] = []

    def error(self, msg: str, line: int, col: int) -> TokenizeError:
        return TokenizeError(msg, line, col)

    def _step(self) -> None:
        if self.src[self.pos] == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        self.pos += 1

    def _needs_semi(self) -> bool:
        return len(self.tokens) > 0 and _ends_statement(self.tokens[-1])

    def _auto_semi(self) -> None:
        tok = Token(TK_OP, ";", self.line, self.col, self.pos, self.pos)
        tok.implicit = True
        self.tokens.append(tok)

    def _emit(self, type_: str, start: int, line: int, col: int) -> None:
        value = self.src[start : self.pos]
        self.tokens.append(Token(type_, value, line, col, start, self.pos))

    # ── Main loop ────────────────────────────────────────────

    def run(self) -> tuple[list[Token], list[Comment]]:
        src = self.src
        length = len(src)
        if src.startswith("\ufeff"):
            self.pos = 1
        while self.pos < length:
            c = src[self.pos]

            # Newlines
            if c == "\n":
                if self._needs_semi():
                    self._auto_semi()
                self._step()
                continue

            # Whitespace
            if c == " " or c == "\t" or c == "\r":
                self._step()
                continue

            start = self.pos
            line = self.line
            col = self.col

            # Comments
            if c == "/" and self.pos + 1 < length and src[self.pos + 1] == "/":
                while self.pos < length and src[self.pos] != "\n":
                    self._step()
                self.comments.append(
                    Comment(src[start : self.pos], line, line, start, self.pos)
                )
                continue
            if c == "/" and self.pos + 1 < length and src[self.pos + 1] == "*":
                end = src.find("*/", self.pos + 2)
                if end < 0:
                    raise self.error("comment not terminated", line, col)
                has_newline = "\n" in src[self.pos : end]
                if has_newline and self._needs_semi():
                    self._auto_semi()
                while self.pos < end + 2:
                    self._step()
                self.comments.append(
                    Comment(src[start : self.pos], line, self.line, start, self.pos)
                )
                continue

            # Numbers, including ".5"
            if _is_digit(c) or (
                c == "." and self.pos + 1 < length and _is_digit(src[self.pos + 1])
            ):
                self._emit(self._scan_number(), start, line, col)
                continue

            # Interpreted string literal
            if c == '"':
                self._scan_quoted('"', "string literal not terminated", line, col)
                self._emit(TK_STRING, start, line, col)
                continue

            # Raw string literal
            if c == "`":
                end = src.find("`", self.pos + 1)
                if end < 0:
                    raise self.error("raw string literal not terminated", line, col)
                while self.pos <= end:
                    self._step()
                self._emit(TK_STRING, start, line, col)
                continue

            # Rune literal
            if c == "'":
                self._scan_quoted("'", "rune literal not terminated", line, col)
                if self.pos - start == 2:
                    raise self.error("empty rune literal or unescaped ' in rune literal", line, col)
                self._emit(TK_CHAR, start, line, col)
                continue

            # Identifier or keyword
            if _is_letter(c):
                while self.pos < length and _is_ident_char(src[self.pos]):
                    self._step()
                word = src[start : self.pos]
                if word in KEYWORDS:
                    self._emit(word, start, line, col)
                else:
                    self._emit(TK_IDENT, start, line, col)
                continue

            # Multi-character operators
            matched = False
            for op in MULTI_OPS:
                if src.startswith(op, self.pos):
                    for _ in op:
                        self._step()
                    self._emit(TK_OP, start, line, col)
                    matched = True
                    break
            if matched:
                continue

            # Single-character operators
            if c in SINGLE_OPS:
                self._step()
                self._emit(TK_OP, start, line, col)
                continue

            raise self.error("invalid character " + repr(c), line, col)

        if self._needs_semi():
            self._auto_semi()
        self.tokens.append(Token(TK_EOF, "", self.line, self.col, self.pos, self.pos))
        return self.tokens, self.comments

    # ── Literals ─────────────────────────────────────────────

    def _scan_quoted(self, quote: str, msg: str, line: int, col: int) -> None:
        src = self.src
        self._step()
        while True:
            if self.pos >= len(src) or src[self.pos] == "\n":
                raise self.error(msg, line, col)
            ch = src[self.pos]
            if ch == quote:
                self._step()
                return
            if ch == "\\":
                self._step()
                if self.pos >= len(src) or src[self.pos] == "\n":
                    raise self.error(msg, line, col)
            self._step()

    def _scan_digits(self, hex_digits: bool) -> None:
        src = self.src
        while self.pos < len(src):
            ch = src[self.pos]
            if ch == "_" or _is_digit(ch) or (hex_digits and _is_hex(ch)):
                self._step()
            else:
                break

    def _scan_exponent(self, markers: str) -> bool:
        src = self.src
        if self.pos < len(src) and src[self.pos] in markers:
            line = self.line
            col = self.col
            self._step()
            if self.pos < len(src) and (src[self.pos] == "+" or src[self.pos] == "-"):
                self._step()
            if self.pos >= len(src) or not _is_digit(src[self.pos]):
                raise self.error("exponent has no digits", line, col)
            self._scan_digits(False)
            return True
        return False

    def _scan_number(self) -> str:
        src = self.src
        kind = TK_INT
        hex_digits = (
            src[self.pos] == "0"
            and self.pos + 1 < len(src)
            and src[self.pos + 1] in "xX"
        )
        if hex_digits:
            self._step()
            self._step()
        elif src[self.pos] == "0" and self.pos + 1 < len(src) and src[self.pos + 1] in "bBoO":
            self._step()
            self._step()
        self._scan_digits(hex_digits)
        if self.pos < len(src) and src[self.pos] == ".":
            kind = TK_FLOAT
            self._step()
            self._scan_digits(hex_digits)
        if self._scan_exponent("pP" if hex_digits else "eE"):
            kind = TK_FLOAT
        if self.pos < len(src) and src[self.pos] == "i":
            kind = TK_IMAG
            self._step()
        if self.pos < len(src) and _is_ident_char(src[self.pos]):
            raise self.error("invalid digit " + repr(src[self.pos]) + " in number literal", self.line, self.col)
        return kind


def tokenize(source: str) -> list[Token]:
    """Tokenize Go source into a flat list ending with TK_EOF."""
    tokens, _ = _Lexer(source).run()
    return tokens


def tokenize_with_comments(source: str) -> tuple[list[Token], list[Comment]]:
    """Tokenize Go source, also returning every comment in source order."""
    return _Lexer(source).run()

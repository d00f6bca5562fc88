"""Error taxonomy shared by every stage of the rewrite pipeline."""

from __future__ import annotations


class GoconsError(Exception):
    """Base for all errors that end a gocons invocation."""


class UsageError(GoconsError):
    """Bad command line: wrong argument count or missing flag."""


class ParseError(GoconsError):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class TokenizeError(ParseError):
    """Error during tokenization."""


class DuplicateConstructorError(GoconsError):
    """A function with the constructor's name is already declared."""

    def __init__(self, name: str):
        self.name: str = name
        super().__init__("constructor already exists: " + name)


class TypeNotFoundError(GoconsError):
    """The target type is not declared in the file (strict mode only)."""

    def __init__(self, type_name: str):
        self.type_name: str = type_name
        super().__init__("type not declared: " + type_name)


class FormatError(GoconsError):
    """The mutated tree could not be rendered back to source."""


class WriteError(GoconsError):
    """The rendered source could not be written back to the file."""

    def __init__(self, path: str, reason: str):
        self.path: str = path
        self.reason: str = reason
        super().__init__("could not write program back to " + path + ": " + reason)

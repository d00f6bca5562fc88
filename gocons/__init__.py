"""gocons — generate New<Type> constructors for Go structs, in place."""

from __future__ import annotations

from .ast import SourceFile
from .emit import to_source
from .errors import (
    DuplicateConstructorError as DuplicateConstructorError,
    FormatError as FormatError,
    GoconsError as GoconsError,
    ParseError as ParseError,
    TokenizeError as TokenizeError,
    TypeNotFoundError as TypeNotFoundError,
    UsageError as UsageError,
    WriteError as WriteError,
)
from .parse import parse as parse
from .pipeline import Config as Config, generate as generate, load as load, run as run


def emit(tree: SourceFile) -> str:
    """Emit a `SourceFile` tree back to Go source."""
    return to_source(tree)

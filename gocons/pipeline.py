"""Rewrite pipeline: load → locate → synthesize → splice → emit → write."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import SourceFile
from .emit import to_source, write_source
from .errors import TypeNotFoundError
from .locate import inspect
from .parse import parse
from .synth import splice, synthesize


@dataclass
class Config:
    """One invocation: which file to rewrite and for which type."""

    path: str
    type_name: str
    strict: bool = False
    verbose: bool = False


@dataclass
class Outcome:
    """What a successful run did."""

    name: str
    index: int
    params: int
    found: bool
    text: str


def load(path: str) -> SourceFile:
    """Read and parse the Go file at `path`."""
    with open(path, encoding="utf-8", newline="") as f:
        source = f.read()
    return parse(source)


def rewrite(tree: SourceFile, type_name: str, strict: bool = False) -> Outcome:
    """Insert `New<type_name>` into `tree` and render the result.

    Raises DuplicateConstructorError before touching the tree if the
    constructor already exists, and TypeNotFoundError in strict mode when
    the type is not declared.
    """
    located = inspect(tree, type_name)
    if strict and not located.found:
        raise TypeNotFoundError(type_name)
    decl = synthesize(type_name, located.fields, located.type_params)
    index = splice(tree, type_name, decl)
    param_count = 0
    for p in decl.typ.params:
        param_count += len(p.names)
    return Outcome(decl.name, index, param_count, located.found, to_source(tree))


def generate(source: str, type_name: str, strict: bool = False) -> str:
    """Return `source` with the constructor for `type_name` inserted."""
    return rewrite(parse(source), type_name, strict).text


def run(config: Config) -> Outcome:
    """Rewrite the file named by `config` in place."""
    tree = load(config.path)
    outcome = rewrite(tree, config.type_name, config.strict)
    write_source(config.path, outcome.text)
    return outcome


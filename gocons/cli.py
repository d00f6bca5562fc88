"""gocons CLI — insert a constructor for a struct type into a Go file."""

from __future__ import annotations

import sys

from .errors import (
    DuplicateConstructorError,
    FormatError,
    ParseError,
    TypeNotFoundError,
    UsageError,
    WriteError,
)
from .pipeline import Config, run


USAGE: str = """\
gocons [OPTIONS] FILE

Insert a New<Type> constructor after the declaration of Type in FILE,
rewriting FILE in place.

Options:
  -t, --type NAME    Name of the type the constructor should return (required)
  --strict           Fail if the type is not declared in FILE
  -v, --verbose      Report what was inserted on stderr
  -h, --help         Show this help message
"""


def parse_args(args: list[str]) -> Config | None:
    """Build a Config from argv. Returns None when help was requested."""
    type_name: str = ""
    files: list[str] = []
    strict = False
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            return None
        elif arg == "--type" or arg == "-t":
            if i + 1 >= len(args):
                raise UsageError(arg + " requires an argument")
            type_name = args[i + 1]
            i += 2
        elif arg.startswith("--type="):
            type_name = arg[len("--type=") :]
            i += 1
        elif arg.startswith("-t") and not arg.startswith("--"):
            type_name = arg[2:]
            i += 1
        elif arg == "--strict":
            strict = True
            i += 1
        elif arg == "--verbose" or arg == "-v":
            verbose = True
            i += 1
        elif arg == "--":
            files.extend(args[i + 1 :])
            break
        elif arg.startswith("-") and arg != "-":
            raise UsageError("unknown flag '" + arg + "'")
        else:
            files.append(arg)
            i += 1
    if len(files) == 0:
        raise UsageError("no argument provided")
    if len(files) > 1:
        raise UsageError("unexpected argument '" + files[1] + "'")
    if type_name == "":
        raise UsageError("no type name provided")
    return Config(files[0], type_name, strict, verbose)


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    try:
        config = parse_args(args)
    except UsageError as e:
        print("gocons: " + str(e), file=sys.stderr)
        print(USAGE, end="", file=sys.stderr)
        return 2
    if config is None:
        print(USAGE, end="")
        return 0

    try:
        outcome = run(config)
    except FileNotFoundError:
        print("gocons: " + config.path + ": No such file or directory", file=sys.stderr)
        return 1
    except UnicodeDecodeError:
        print("gocons: " + config.path + ": invalid utf-8", file=sys.stderr)
        return 1
    except OSError as e:
        print("gocons: " + config.path + ": " + str(e.strerror or e), file=sys.stderr)
        return 1
    except ParseError as e:
        print(
            "gocons: " + config.path + ":" + str(e.line) + ":" + str(e.col) + ": " + e.msg,
            file=sys.stderr,
        )
        return 1
    except DuplicateConstructorError as e:
        print("gocons: " + str(e), file=sys.stderr)
        return 1
    except TypeNotFoundError as e:
        print("gocons: " + str(e), file=sys.stderr)
        return 1
    except (FormatError, WriteError) as e:
        print("gocons: " + str(e), file=sys.stderr)
        return 1

    if config.verbose:
        if not outcome.found:
            print(
                "gocons: warning: type " + config.type_name + " not declared, constructor has no fields",
                file=sys.stderr,
            )
        print(
            "gocons: inserted "
            + outcome.name
            + " ("
            + str(outcome.params)
            + " params) at declaration "
            + str(outcome.index)
            + " of "
            + config.path,
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())

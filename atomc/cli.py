"""Command-line entry point: tokenize and analyze an AtomC file."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from .ad import SymbolTable, show_domain
from .lexer import show_tokens, tokenize
from .parser import ParseError, parse
from .utils import AtomCError, load_file


def main(argv: Sequence[str] | None = None) -> int:
    """Show the tokens and global symbols of the given file."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        if len(args) != 1:
            raise AtomCError("argument invalid")
        source = load_file(args[0])
        tokens = tokenize(source)
        show_tokens(tokens)
        print()
        sys.stdout.flush()

        table = SymbolTable()
        table.push_domain()
        parse(tokens, table)
        show_domain(table.current, "global")
        table.drop_domain()
    except ParseError as exc:
        print(exc, file=sys.stderr)
        return 1
    except AtomCError as exc:
        print(f"eroare: {exc}", file=sys.stderr)
        return 1
    print("Parsare OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
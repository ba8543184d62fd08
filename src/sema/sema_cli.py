"""
SEMA CLI Entrypoint.

Checks a SEMA program: tokenize, parse, verify. A valid program produces no
output and exits with status 0; the first fault is reported on stderr and the
exit status is 1. A source file that cannot be read, or is not valid UTF-8,
exits with status 2.

Example usage:
    sema program.sema
    sema -s "print(x: 2);"
    sema program.sema --ast
    sema program.sema --tokens --verbose

Functions:
    check_source(text: str) -> Start:
        Runs the full pipeline and raises the first `SemaError`.

    run_sema(source: str, is_string: bool = False, show_tokens: bool = False,
             show_ast: bool = False, verbose: bool = False) -> int:
        Runs the pipeline for the CLI and returns the exit status.

    main() -> None:
        Parses CLI arguments and exits with the status from `run_sema`.
"""

import argparse
import json
import sys

from sema.sema_ast import Start
from sema.sema_errors import SemaError
from sema.sema_lexer import tokenize
from sema.sema_parser import Parser
from sema.sema_verifier import verify_program


def check_source(text: str) -> Start:
    """Tokenize, parse and verify `text`; return the verified tree."""
    start = Parser(tokenize(text)).parse()
    verify_program(start)
    return start


def run_sema(
    source: str,
    is_string: bool = False,
    show_tokens: bool = False,
    show_ast: bool = False,
    verbose: bool = False,
) -> int:
    """
    Run the SEMA checker on a file or a source string.

    Args:
        source (str): Path to a source file, or source text with `is_string`.
        is_string (bool): Treat `source` as the program text. Defaults to False.
        show_tokens (bool): Print the token list before parsing.
        show_ast (bool): Print the tree as JSON after parsing.
        verbose (bool): Print one progress line per stage.

    Returns:
        int: 0 when the program verifies, 1 on the first fault, 2 when the
        file cannot be read or decoded.
    """
    # 1. Read source
    if not is_string:
        try:
            with open(source, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            print(f"[error] >>> Cannot read {source}: {e.strerror}", file=sys.stderr)
            return 2
        except UnicodeDecodeError as e:
            print(f"[error] >>> Cannot decode {source} as UTF-8: {e.reason}", file=sys.stderr)
            return 2
    else:
        text = source

    try:
        # 2. Lexing
        tokens = tokenize(text)
        if verbose:
            print(f"[ok] >>> {len(tokens)} tokens")
        if show_tokens:
            for tok in tokens:
                print(tok)

        # 3. Parsing
        start = Parser(tokens).parse()
        if verbose:
            print(f"[ok] >>> {len(start.statements)} top-level statements")
        if show_ast:
            print(json.dumps(start.to_dict(), indent=2))

        # 4. Verifying
        ctx = verify_program(start)
        if verbose:
            names = sum(len(scope) for scope in ctx.scopes.scopes)
            print(f"[ok] >>> verified ({names} global names)")
    except SemaError as e:
        print(f"[error] >>> {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """
    Entry point for the SEMA CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print tokens as `(category, lexeme)` lines.
        - `--ast`: Print the parsed tree as JSON.
        - `--verbose`: Print progress for each stage.
    """
    parser = argparse.ArgumentParser(prog="sema")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token stream"
    )
    parser.add_argument("--ast", action="store_true", help="Print the AST as JSON")
    parser.add_argument(
        "--verbose", action="store_true", help="Print progress for each stage"
    )

    args = parser.parse_args()
    sys.exit(
        run_sema(
            source=args.source,
            is_string=args.string,
            show_tokens=args.tokens,
            show_ast=args.ast,
            verbose=args.verbose,
        )
    )


if __name__ == "__main__":
    main()

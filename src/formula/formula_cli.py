"""
Formula CLI Entrypoint.

This module provides the command-line interface for inspecting formula source
code. It lexes and parses a formula and prints the result as JSON.

Features:
    - Read source from `.formula` files or inline strings.
    - Print the parsed AST, or the token stream with `--tokens`.
    - Output to console or file.
    - Render errors with the offending line underlined.
    - Launch an interactive REPL.

Example usage:
    formula hello.formula
    formula -s "let a = 1 + 2" -p
    formula -s "a.=b" --tokens --trivia
    formula myfile.formula -o myfile.json
    formula --repl

Functions:
    run_formula(source: str, is_string: bool = False, tokens: bool = False, trivia: bool = False,
                out: Optional[str] = None, pretty: bool = False) -> int:
        Executes the formula pipeline (lex → parse → JSON output) and returns an exit status.

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import logging
import sys
from typing import Any

from formula.formula_errors import FormulaError
from formula.formula_lexer import Lexer
from formula.formula_parser import Parser
from formula.formula_token import TRIVIA, LiteralToken, Token

logger = logging.getLogger(__name__)


def token_to_dict(token: Token, source: str) -> dict[str, Any]:
    """Plain-data view of a token: kind, source text, span and literal data."""
    out: dict[str, Any] = {
        "kind": token.kind.name,
        "text": token.text(source),
        "span": {"start": token.start, "end": token.end},
    }
    if isinstance(token, LiteralToken):
        out["data"] = token.data
    return out


def render_json(data: Any, pretty: bool = False) -> str:
    return json.dumps(data, indent=2 if pretty else None, ensure_ascii=False)


def run_formula(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    trivia: bool = False,
    out: str | None = None,
    pretty: bool = False,
) -> int:
    """
    Run the formula toolchain: lex, parse, and print or write the JSON result.

    Args:
        source (str): The formula source code or path to a `.formula` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path. Defaults to False.
        tokens (bool): If True, outputs the token stream instead of the AST. Defaults to False.
        trivia (bool): With `tokens`, also include whitespace, newline and comment tokens. Defaults to False.
        out (str | None): Optional path to write the JSON output. If None, prints to stdout.
        pretty (bool): If True, indents the JSON output. Defaults to False.

    Returns:
        int: 0 on success, 1 when the source has a syntax or parse error.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.formula'.

    Side Effects:
        - May write JSON output to a file.
        - Prints results to stdout and rendered errors to stderr.
    """
    if not is_string and not source.endswith(".formula"):
        raise ValueError("Only .formula files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing / parsing
    try:
        if tokens:
            lexer = Lexer(source, ignore=() if trivia else TRIVIA)
            data: Any = [token_to_dict(tok, source) for tok in lexer]
        else:
            data = Parser(Lexer(source)).parse().to_dict()
    except FormulaError as err:
        logger.debug("Formula failed with %s", err.code)
        print(err.render(source), file=sys.stderr)
        return 1

    # 3. Output result
    text = render_json(data, pretty)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        if pretty:
            print(f"(wrote to {out})")
    else:
        print(text)
    return 0


def main() -> None:
    """
    Entry point for the formula CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, parses the source and prints the JSON result.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token stream instead of the AST.
        - `--trivia`: Keep whitespace, newline and comment tokens (with `--tokens`).
        - `-o`, `--out`: Write JSON output to a file.
        - `-p`, `--pretty`: Indent the JSON output.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable debug logging.

    Exits with the status returned by `run_formula`.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from formula.formula_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="formula")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print tokens instead of the AST"
    )
    parser.add_argument(
        "--trivia",
        action="store_true",
        help="Include whitespace, newline and comment tokens (with --tokens)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Indent the JSON output"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.repl or args.source is None:
        from formula.formula_repl import start_repl

        start_repl(show_tokens=args.tokens)
    else:
        status = run_formula(
            source=args.source,
            is_string=args.string,
            tokens=args.tokens,
            trivia=args.trivia,
            out=args.out,
            pretty=args.pretty,
        )
        if status:
            sys.exit(status)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()

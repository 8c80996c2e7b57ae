"""
MicroML CLI Entrypoint.

This module provides the command-line interface for parsing MicroML source code.
It supports one-shot parsing of files or inline strings and an interactive REPL.

Features:
    - Read source from `.ml` files or inline strings.
    - Lex and parse code into a MicroML AST.
    - Print the tree as JSON, as a text tree, or as canonical source.
    - Print the raw token stream instead of the tree.
    - Output to console or file.
    - Launch an interactive REPL.

Example usage:
    microml program.ml
    microml -s "let x = 5 in x + 3" -f tree
    microml program.ml -o program.json --indent 4
    microml --repl

Functions:
    run_microml(source: str, is_string: bool = False, fmt: str = "json", out: str | None = None,
                indent: int | None = 2, strict: bool = False, tokens: bool = False) -> str:
        Executes the MicroML pipeline (lex → parse → render → output).

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import logging
import sys

from microml.microml_errors import MicroMLError
from microml.microml_lexer import CharacterStream, Lexer
from microml.microml_parser import Parser
from microml.microml_render import FORMATS, render

logger = logging.getLogger(__name__)


def run_microml(
    source: str,
    is_string: bool = False,
    fmt: str = "json",
    out: str | None = None,
    indent: int | None = 2,
    strict: bool = False,
    tokens: bool = False,
) -> str:
    """
    Run the MicroML toolchain: lex, parse, render, and print or write the result.

    Args:
        source (str): The MicroML source code or path to a `.ml` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path. Defaults to False.
        fmt (str): Output format ('json', 'tree' or 'source'). Defaults to 'json'.
        out (str | None): Optional path to write the output. If None, prints to stdout.
        indent (int | None): JSON indentation. Defaults to 2.
        strict (bool): Reject tokens left over after the expression. Defaults to False.
        tokens (bool): Output the token stream instead of the tree. Defaults to False.

    Returns:
        str: The rendered output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.ml',
            or if `fmt` is unknown.
        LexError, ParseError: If the source is not a valid MicroML expression.
    """
    if not is_string and not source.endswith(".ml"):
        raise ValueError("Only .ml files are supported.")
    # 1. Read source
    if not is_string:
        logger.debug("reading source from %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing
    token_list = Lexer(CharacterStream(source)).tokens()
    logger.debug("lexed %d tokens", len(token_list))

    # 3. Parsing (skipped when only the tokens are wanted)
    if tokens:
        result = "\n".join(
            f"{tok.line}:{tok.col}\t{tok.type}\t{tok.value}" for tok in token_list
        )
    else:
        ast = Parser(token_list, strict=strict).parse()
        logger.debug("parsed %s root", ast.node_type)
        # 4. Rendering
        result = render(ast, fmt=fmt, indent=indent)

    # 5. Output result
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(result + "\n")
        print(f"(wrote to {out})")
    else:
        print(result)
    return result


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the MicroML CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, runs the MicroML toolchain (lex → parse → render → output).

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-f`, `--format`: Output format ('json', 'tree' or 'source'), default is 'json'.
        - `-o`, `--out`: Write output to a file.
        - `--indent`: JSON indentation width (0 for a single line).
        - `--strict`: Treat tokens after the expression as an error.
        - `--tokens`: Print the token stream instead of the tree.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable debug logging (and token echo in the REPL).

    Returns:
        int: Process exit status; 1 when the source fails to lex or parse.
    """
    args_list = sys.argv[1:] if argv is None else argv
    if not args_list:
        # No args passed: open REPL instead
        from microml.microml_repl import start_repl

        start_repl()
        return 0
    parser = argparse.ArgumentParser(prog="microml")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="json",
        help="Output format (default: json)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation; 0 prints a single line (default: 2)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject tokens left over after the expression",
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token stream instead of the AST"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging; token echo in the REPL"
    )

    args = parser.parse_args(args_list)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.repl or args.source is None:
        from microml.microml_repl import start_repl

        start_repl(fmt=args.fmt, strict=args.strict, verbose=args.verbose)
        return 0

    try:
        run_microml(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            indent=args.indent or None,
            strict=args.strict,
            tokens=args.tokens,
        )
    except MicroMLError as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())

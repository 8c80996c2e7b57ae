"""
Interactive read-parse-print loop for MicroML.

Each entry is lexed and parsed, and the resulting tree is printed in the
current output format. Input continues on `... ` prompts while parentheses
are unbalanced.

Commands:
    exit, quit       Leave the REPL (EOF and Ctrl-C also leave).
    :json            Print trees as JSON.
    :tree            Print trees as a labelled text tree.
    :source          Print trees as canonical MicroML source.
    :strict          Toggle rejection of tokens after the expression.
    verbose-mode     Toggle echoing of the token stream before parsing.
"""

import io
import traceback

from microml.microml_errors import MicroMLError
from microml.microml_lexer import CharacterStream, Lexer, Token
from microml.microml_parser import Parser
from microml.microml_render import FORMATS, render


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def paren_balance(line: str) -> int:
    return line.count("(") - line.count(")")


def handle_command(src: str, state: dict[str, object]) -> bool:
    """Applies a REPL command to `state`; returns False if `src` is not a command."""
    command = src.strip()
    if command.startswith(":") and command[1:] in FORMATS:
        state["fmt"] = command[1:]
        print(f"[mode] >>> Output format {command[1:]}")
        return True
    if command == ":strict":
        state["strict"] = not state["strict"]
        print(f"[mode] >>> Strict mode {'ON' if state['strict'] else 'OFF'}")
        return True
    if command == "verbose-mode":
        state["verbose"] = not state["verbose"]
        print(f"[mode] >>> Verbose mode {'ON' if state['verbose'] else 'OFF'}")
        return True
    return False


def evaluate(src: str, state: dict[str, object]) -> None:
    """Lexes, parses and prints one entry; syntax errors are reported, not raised."""
    try:
        tokens: list[Token] = Lexer(CharacterStream(src)).tokens()
        if state["verbose"]:
            print(f"[tokens] >>> {tokens}")
        ast = Parser(tokens, strict=bool(state["strict"])).parse()
        print(render(ast, fmt=str(state["fmt"])))
    except MicroMLError as e:
        print("[error] >>>")
        print(e)
    except Exception:
        print_traceback()


def start_repl(fmt: str = "tree", strict: bool = False, verbose: bool = False) -> None:
    print(f"MicroML REPL [format={fmt}]. Type 'exit' or 'quit' to leave.")
    state: dict[str, object] = {"fmt": fmt, "strict": strict, "verbose": verbose}

    while True:
        try:
            src_lines: list[str] = []
            balance = 0
            while True:
                prompt = ">>> " if not src_lines else "... "
                line = input(prompt)
                if line.strip() in ("exit", "quit") and not src_lines:
                    print("Exiting MicroML REPL.")
                    return
                src_lines.append(line)
                balance += paren_balance(line)
                if balance <= 0:
                    break
            src = "\n".join(src_lines).strip()
            if not src:
                continue
            if handle_command(src, state):
                continue
            evaluate(src, state)
        except (KeyboardInterrupt, EOFError):
            print("\nExiting MicroML REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()

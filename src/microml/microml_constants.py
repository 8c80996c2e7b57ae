"""
Token vocabulary shared by the MicroML lexer and parser.

Exports:
    - Token kind names (`NUMBER`, `IDENT`, `LET`, ...)
    - keyword_hashmap: identifier text → keyword kind
    - token_hashmap: operator/punctuation text → token kind
    - Operator groups per precedence level
    - END_OF_INPUT: marker used in error reports when the tokens run out
    - MAX_NESTING_DEPTH, MAX_TREE_DEPTH: limits past which the parser refuses input
"""

NUMBER = "NUMBER"
IDENT = "IDENT"
LET = "LET"
IN = "IN"
IF = "IF"
THEN = "THEN"
ELSE = "ELSE"
LAMBDA = "LAMBDA"
ARROW = "ARROW"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
OPERATOR = "OPERATOR"
SEMICOLON = "SEMICOLON"

# Sentinel kind produced by Lexer.next_token() and Parser.current(); never
# part of a tokenize() result.
EOF = "EOF"

TOKEN_KINDS: frozenset[str] = frozenset(
    {
        NUMBER,
        IDENT,
        LET,
        IN,
        IF,
        THEN,
        ELSE,
        LAMBDA,
        ARROW,
        LPAREN,
        RPAREN,
        OPERATOR,
        SEMICOLON,
    }
)

keyword_hashmap: dict[str, str] = {
    "let": LET,
    "in": IN,
    "if": IF,
    "then": THEN,
    "else": ELSE,
    "lambda": LAMBDA,
    "fun": LAMBDA,
}

token_hashmap: dict[str, str] = {
    "(": LPAREN,
    ")": RPAREN,
    ";": SEMICOLON,
    "->": ARROW,
    "==": OPERATOR,
    "!=": OPERATOR,
    "<=": OPERATOR,
    ">=": OPERATOR,
    "+": OPERATOR,
    "-": OPERATOR,
    "*": OPERATOR,
    "/": OPERATOR,
    "=": OPERATOR,
    "<": OPERATOR,
    ">": OPERATOR,
}

MAX_OPERATOR_LENGTH = max(len(k) for k in token_hashmap)

IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
IDENT_CHARS = IDENT_START | frozenset("0123456789")
DIGITS = frozenset("0123456789")

comparison_ops: tuple[str, ...] = ("==", "!=", "<", ">", "<=", ">=")
additive_ops: tuple[str, ...] = ("+", "-")
multiplicative_ops: tuple[str, ...] = ("*", "/")

# Tokens that may begin an atom; drives left-associative application.
atom_start_tokens: frozenset[str] = frozenset({NUMBER, IDENT, LPAREN, LAMBDA})

END_OF_INPUT = "end of input"

# Parser limits: source nesting of expressions and height of the built tree.
# Input past either raises ParseError(expected=TOO_DEEP).
MAX_NESTING_DEPTH = 64
MAX_TREE_DEPTH = 256
TOO_DEEP = "shallower nesting"

__all__ = [
    "NUMBER",
    "IDENT",
    "LET",
    "IN",
    "IF",
    "THEN",
    "ELSE",
    "LAMBDA",
    "ARROW",
    "LPAREN",
    "RPAREN",
    "OPERATOR",
    "SEMICOLON",
    "EOF",
    "TOKEN_KINDS",
    "keyword_hashmap",
    "token_hashmap",
    "MAX_OPERATOR_LENGTH",
    "IDENT_START",
    "IDENT_CHARS",
    "DIGITS",
    "comparison_ops",
    "additive_ops",
    "multiplicative_ops",
    "atom_start_tokens",
    "END_OF_INPUT",
    "MAX_NESTING_DEPTH",
    "MAX_TREE_DEPTH",
    "TOO_DEEP",
]

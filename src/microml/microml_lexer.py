"""
Lexical analyzer for the MicroML expression language.

This module provides core components for converting raw source code into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Immutable token with kind, text, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Functions:
    tokenize(source): Lex a whole string into a list of tokens (no EOF sentinel).

Features:
    - Skips whitespace
    - Recognizes, in order:
        * Parentheses
        * Identifiers, reclassified into keywords (`let`, `in`, `if`, `then`,
          `else`, `lambda`/`fun`) by table lookup
        * Numbers (`123`, `1.5`; a dot needs a digit after it)
        * Operators, longest match first (`==` before `=`, `->` before `-`)
        * Semicolons

Raises:
    LexError: On any character that starts none of the patterns above.

Example:
    >>> tokenize("let x = 5 in x")
    [Token(LET, let), Token(IDENT, x), Token(OPERATOR, =), Token(NUMBER, 5), Token(IN, in), Token(IDENT, x)]

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

from typing import NamedTuple

from microml.microml_constants import (
    DIGITS,
    EOF,
    IDENT,
    IDENT_CHARS,
    IDENT_START,
    MAX_OPERATOR_LENGTH,
    NUMBER,
    keyword_hashmap,
    token_hashmap,
)
from microml.microml_errors import LexError


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead without advancing, or "" out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token(NamedTuple):
    """Represents a single lexical token.

    Attributes:
        type (str): The token kind (e.g. 'IDENT', 'NUMBER', 'LET', 'EOF').
        value (str): The matched source text.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    type: str
    value: str
    line: int = 0
    col: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def describe(self) -> str:
        """Short human-readable form used in error messages, e.g. ``IDENT 'x'``."""
        return f"{self.type} {self.value!r}"


class Lexer:
    """Lexical analyzer for MicroML.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek().isspace():
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or punctuation at the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(MAX_OPERATOR_LENGTH):
            ch = self.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_identifier(self) -> Token:
        line, col = self.stream.line, self.stream.column
        ident = ""
        while not self.stream.end_of_file() and self.peek() in IDENT_CHARS:
            ident += self.advance()
        return Token(keyword_hashmap.get(ident, IDENT), ident, line, col)

    def read_number(self) -> Token:
        line, col = self.stream.line, self.stream.column
        num = ""
        while not self.stream.end_of_file() and self.peek() in DIGITS:
            num += self.advance()
        # Fraction only when a digit follows the dot; "1." leaves the dot behind.
        if self.peek() == "." and self.peek(1) in DIGITS:
            num += self.advance()
            while not self.stream.end_of_file() and self.peek() in DIGITS:
                num += self.advance()
        return Token(NUMBER, num, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token, or an EOF token once the input is exhausted.

        Raises:
            LexError: If the current character starts no known token.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token(EOF, EOF, self.stream.line, self.stream.column)

        ch = self.peek()

        if ch in IDENT_START:
            return self.read_identifier()

        if ch in DIGITS:
            return self.read_number()

        token = self.match_operator()
        if token:
            return token

        raise LexError(
            f"Unexpected character {ch!r} at line {self.stream.line}, col {self.stream.column}",
            position=self.stream.position,
            line=self.stream.line,
            col=self.stream.column,
            text=ch,
        )

    def tokens(self) -> list[Token]:
        """Drains the stream into a list of tokens, excluding the EOF sentinel."""
        result: list[Token] = []
        while True:
            tok = self.next_token()
            if tok.type == EOF:
                return result
            result.append(tok)


def tokenize(source: str) -> list[Token]:
    """Lex `source` into its ordered token list, whitespace discarded."""
    return Lexer(CharacterStream(source)).tokens()


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]

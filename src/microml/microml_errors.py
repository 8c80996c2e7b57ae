"""
Error types raised by the MicroML lexer and parser.

Classes:
    MicroMLError: Common base; a `SyntaxError` so callers may catch either.
    LexError: Raised when the source holds a character no token pattern accepts.
    ParseError: Raised when a grammar rule does not find the token it requires.

Both errors abort the current call immediately; no partial token list or
partial AST is ever returned alongside them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from microml.microml_constants import END_OF_INPUT

if TYPE_CHECKING:  # pragma: no cover
    from microml.microml_lexer import Token


class MicroMLError(SyntaxError):
    """Base class for all MicroML front-end errors."""


class LexError(MicroMLError):
    """Unrecognized character in the source text.

    Attributes:
        position (int): 0-based character offset of the offending character.
        line (int): 1-based line of the offending character.
        col (int): 1-based column of the offending character.
        text (str): The character that matched no token pattern.
    """

    def __init__(self, message: str, position: int, line: int, col: int, text: str):
        super().__init__(message)
        self.position = position
        self.line = line
        self.col = col
        self.text = text

    def __str__(self) -> str:
        return str(self.msg)


class ParseError(MicroMLError):
    """A grammar rule required a token the cursor did not hold.

    Attributes:
        expected (str): Description of what the rule required, e.g. ``"IN"``,
            ``"'='"`` or ``"expression"``.
        found (str): Description of the token actually found, or
            ``END_OF_INPUT`` when the tokens ran out.
        position (int): Index of the offending token in the token sequence
            (``len(tokens)`` at end of input).
        token (Token | None): The offending token, ``None`` at end of input.
    """

    def __init__(
        self,
        expected: str,
        found: str,
        position: int,
        token: Token | None = None,
    ):
        self.expected = expected
        self.found = found
        self.position = position
        self.token = token
        message = f"Expected {expected}, found {found} at token {position}"
        if token is not None:
            message += f" (line {token.line}, col {token.col})"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.msg)

    @property
    def at_end(self) -> bool:
        return self.found == END_OF_INPUT


__all__ = ["MicroMLError", "LexError", "ParseError"]

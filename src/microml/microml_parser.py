"""
MicroML Language Parser

Parses MicroML tokens into a single abstract syntax tree (AST).

This module implements a recursive-descent parser with one method per grammar
rule. Binary operators are parsed by precedence climbing with left-associative
folding; `let`, `if` and lambda bodies extend as far to the right as possible.

Grammar
-------
    expression         → letExpr
    letExpr            → "let" IDENT "=" expression "in" expression | ifExpr
    ifExpr             → "if" expression "then" expression "else" expression
                       | comparisonExpr
    comparisonExpr     → additiveExpr (("==" | "!=" | "<" | ">" | "<=" | ">=") additiveExpr)*
    additiveExpr       → multiplicativeExpr (("+" | "-") multiplicativeExpr)*
    multiplicativeExpr → applicationExpr (("*" | "/") applicationExpr)*
    applicationExpr    → atom (atom)*
    atom               → NUMBER | IDENT | "(" expression ")" | lambdaExpr
    lambdaExpr         → ("lambda" | "fun") IDENT "->" expression

Parser Behavior
---------------
- Fails fast: the first missing or unexpected token raises `ParseError`.
  Once a keyword commits the parser to a rule there is no backtracking.
- Trailing tokens after the top-level expression are ignored unless the
  parser runs in strict mode.
- A `Parser` instance owns its cursor and is meant for a single parse call.
- Expressions nested more than `MAX_NESTING_DEPTH` deep, or trees taller than
  `MAX_TREE_DEPTH`, raise `ParseError(expected="shallower nesting")`.
  Numeric literals too large for a float raise `ParseError(expected="finite number")`.

Entry Points
------------
- `Parser(tokens).parse()`: Parse a token list into one AST root.
- `parse(source)`: Tokenize and parse a source string in one call.

Raises
------
LexError
    From `parse(source)` when the source holds an unrecognized character.
ParseError
    When a grammar rule does not find the token it requires.
"""

from __future__ import annotations

import logging
import math

from microml.microml_ast import (
    ApplicationNode,
    BinaryOpNode,
    FunctionNode,
    IfNode,
    LetNode,
    Node,
    NumberNode,
    VariableNode,
)
from microml.microml_constants import (
    ARROW,
    ELSE,
    END_OF_INPUT,
    EOF,
    IDENT,
    IF,
    IN,
    LAMBDA,
    LET,
    LPAREN,
    MAX_NESTING_DEPTH,
    MAX_TREE_DEPTH,
    NUMBER,
    OPERATOR,
    RPAREN,
    THEN,
    TOO_DEEP,
    additive_ops,
    atom_start_tokens,
    comparison_ops,
    multiplicative_ops,
)
from microml.microml_errors import ParseError
from microml.microml_lexer import Token, tokenize

logger = logging.getLogger(__name__)


class Parser:
    """
    MicroML Parser Class

    Transforms a list of lexical tokens into a single `Node` tree.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream to be parsed (without an EOF sentinel).
    position : int
        Current index into the token stream.
    strict : bool
        When True, tokens left over after the top-level expression are an error.
    depth : int
        Number of `parse_expression` calls currently open.
    heights : dict[int, int]
        Height of every interior node built so far, keyed by `id()`.

    Raises
    ------
    ParseError
        When an invalid construct or malformed syntax is encountered during parsing.
    """

    def __init__(self, tokens: list[Token], strict: bool = False) -> None:
        self.tokens: list[Token] = list(tokens)
        self.position: int = 0
        self.strict: bool = strict
        self.depth: int = 0
        self.heights: dict[int, int] = {}

    def current(self) -> Token:
        return (
            self.tokens[self.position]
            if self.position < len(self.tokens)
            else Token(EOF, EOF)
        )

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else Token(EOF, EOF)

    def at_end(self) -> bool:
        return self.position >= len(self.tokens)

    def advance(self) -> Token:
        tok = self.current()
        self.position += 1
        return tok

    def check(self, type_: str, *values: str) -> bool:
        tok = self.current()
        return tok.type == type_ and (not values or tok.value in values)

    def error(self, expected: str) -> ParseError:
        """Builds a ParseError describing the token under the cursor."""
        if self.at_end():
            return ParseError(expected, END_OF_INPUT, len(self.tokens))
        tok = self.current()
        return ParseError(expected, tok.describe(), self.position, tok)

    def expect(self, type_: str, value: str | None = None) -> Token:
        """Consumes the current token if it has the given kind (and text).

        Raises:
            ParseError: Naming the kind (or quoted text) that was required.
        """
        if value is None:
            if self.check(type_):
                return self.advance()
            raise self.error(type_)
        if self.check(type_, value):
            return self.advance()
        raise self.error(f"'{value}'")

    def nest(self, node: Node, start: int) -> Node:
        """Records the height of an interior node built from the token at `start`.

        Raises:
            ParseError: If the tree would grow taller than `MAX_TREE_DEPTH`.
        """
        height = 1 + max(self.heights.get(id(child), 1) for child in node.children())
        if height > MAX_TREE_DEPTH:
            tok = self.tokens[start]
            raise ParseError(TOO_DEEP, tok.describe(), start, tok)
        self.heights[id(node)] = height
        return node

    def parse(self) -> Node:
        """Parse the token stream into one AST root."""
        logger.debug("parsing %d tokens (strict=%s)", len(self.tokens), self.strict)
        node = self.parse_expression()
        if not self.at_end():
            if self.strict:
                raise self.error(END_OF_INPUT)
            logger.debug(
                "ignoring %d trailing token(s) from %r",
                len(self.tokens) - self.position,
                self.current(),
            )
        return node

    def parse_expression(self) -> Node:
        if self.depth >= MAX_NESTING_DEPTH:
            raise self.error(TOO_DEEP)
        self.depth += 1
        try:
            return self.parse_let()
        finally:
            self.depth -= 1

    def parse_let(self) -> Node:
        """Parse `let IDENT = expression in expression`, or fall through to `if`."""
        if not self.check(LET):
            return self.parse_if()
        start = self.position
        self.advance()
        name = self.expect(IDENT)
        self.expect(OPERATOR, "=")
        value = self.parse_expression()
        self.expect(IN)
        body = self.parse_expression()
        return self.nest(LetNode(name.value, value, body), start)

    def parse_if(self) -> Node:
        """Parse `if expression then expression else expression`, or a comparison."""
        if not self.check(IF):
            return self.parse_comparison()
        start = self.position
        self.advance()
        condition = self.parse_expression()
        self.expect(THEN)
        then_branch = self.parse_expression()
        self.expect(ELSE)
        else_branch = self.parse_expression()
        return self.nest(IfNode(condition, then_branch, else_branch), start)

    def parse_comparison(self) -> Node:
        left = self.parse_additive()
        while self.check(OPERATOR, *comparison_ops):
            start = self.position
            op = self.advance()
            right = self.parse_additive()
            left = self.nest(BinaryOpNode(op.value, left, right), start)
        return left

    def parse_additive(self) -> Node:
        left = self.parse_multiplicative()
        while self.check(OPERATOR, *additive_ops):
            start = self.position
            op = self.advance()
            right = self.parse_multiplicative()
            left = self.nest(BinaryOpNode(op.value, left, right), start)
        return left

    def parse_multiplicative(self) -> Node:
        left = self.parse_application()
        while self.check(OPERATOR, *multiplicative_ops):
            start = self.position
            op = self.advance()
            right = self.parse_application()
            left = self.nest(BinaryOpNode(op.value, left, right), start)
        return left

    def parse_application(self) -> Node:
        """Parse juxtaposed atoms as left-associative application: `f x y` → `(f x) y`."""
        node = self.parse_atom()
        while self.current().type in atom_start_tokens:
            start = self.position
            argument = self.parse_atom()
            node = self.nest(ApplicationNode(node, argument), start)
        return node

    def parse_atom(self) -> Node:
        tok = self.current()
        if tok.type == NUMBER:
            value = float(tok.value)
            if math.isinf(value):
                raise self.error("finite number")
            self.advance()
            return NumberNode(value)
        if tok.type == IDENT:
            self.advance()
            return VariableNode(tok.value)
        if tok.type == LPAREN:
            self.advance()
            inner = self.parse_expression()
            self.expect(RPAREN)
            return inner
        if tok.type == LAMBDA:
            return self.parse_lambda()
        raise self.error("expression")

    def parse_lambda(self) -> Node:
        """Parse `fun IDENT -> expression` (or `lambda ...`); the body is greedy."""
        start = self.position
        self.expect(LAMBDA)
        param = self.expect(IDENT)
        self.expect(ARROW)
        body = self.parse_expression()
        return self.nest(FunctionNode(param.value, body), start)


def parse(source: str, strict: bool = False) -> Node:
    """
    Tokenize and parse MicroML source text into an AST.

    Args:
        source (str): The MicroML expression to parse.
        strict (bool): Reject tokens left over after the expression. Defaults to False.

    Returns:
        Node: The root of the parsed tree.

    Raises:
        LexError: If the source contains an unrecognized character.
        ParseError: If the tokens do not form a valid expression.
    """
    tokens = tokenize(source)
    logger.debug("lexed %d tokens from %d characters", len(tokens), len(source))
    return Parser(tokens, strict=strict).parse()


__all__ = ["Parser", "parse"]

"""
Translates MicroML AST nodes back into canonical MicroML source.

This module defines the `MicroMLEmitter` class, which prints a tree as source
text that the parser reads back into an equal tree. It is used by the CLI and
REPL `source` output format.

Behavior:
    - Inserts parentheses only where precedence or associativity require them.
    - Left-associative operators parenthesize a right operand of equal precedence
      (`a - (b - c)`), and application parenthesizes a non-atomic argument.
    - `let`, `if` and lambdas extend greedily to the right, so they are wrapped
      whenever they appear as an operand or as an applied function/argument.
    - Lambdas are always printed with the `fun` keyword.
    - Integral numbers are printed without a fractional part (`5.0` → `5`).

Raises:
    - `ValueError`: For numbers no MicroML literal can express (negative, NaN, infinite),
      names that are not identifiers, or unknown operators.
    - `NotImplementedError`: If a node kind has no corresponding emitter.
"""

import math
from decimal import Decimal

from microml.microml_ast import (
    ApplicationNode,
    ASTNode,
    BinaryOpNode,
    FunctionNode,
    IfNode,
    LetNode,
    NumberNode,
    VariableNode,
)
from microml.microml_constants import (
    IDENT_CHARS,
    IDENT_START,
    additive_ops,
    comparison_ops,
    keyword_hashmap,
    multiplicative_ops,
)

# Binding strength of each construct; a child printed below its required
# level is parenthesized.
LEVEL_EXPRESSION = 0
LEVEL_COMPARISON = 1
LEVEL_ADDITIVE = 2
LEVEL_MULTIPLICATIVE = 3
LEVEL_APPLICATION = 4
LEVEL_ATOM = 5

operator_levels: dict[str, int] = {
    **{op: LEVEL_COMPARISON for op in comparison_ops},
    **{op: LEVEL_ADDITIVE for op in additive_ops},
    **{op: LEVEL_MULTIPLICATIVE for op in multiplicative_ops},
}


class MicroMLEmitter:
    """Emits MicroML source text from AST nodes.

    Methods:
        emit(node): Returns the canonical source for a whole tree.
        emit_expr(node, min_level): Emits a subtree, parenthesized if it binds
            looser than `min_level`.
    """

    def emit(self, node: ASTNode) -> str:
        return self.emit_expr(node, LEVEL_EXPRESSION)

    def emit_expr(self, node: ASTNode, min_level: int = LEVEL_EXPRESSION) -> str:
        """
        Dispatches emission on the node's `node_type`.

        Parameters
        ----------
        node : ASTNode
            The subtree to emit.
        min_level : int
            The weakest binding level allowed without parentheses.

        Returns
        -------
        str
            MicroML source for the subtree.

        Raises
        ------
        NotImplementedError
            If no emitter exists for the node kind.
        """
        method = getattr(self, f"emit_{node.node_type.lower()}", None)
        if not callable(method):
            raise NotImplementedError(
                f"No emitter for node type: {node.node_type or type(node).__name__}"
            )
        text, level = method(node)
        return f"({text})" if level < min_level else text

    def emit_number(self, node: NumberNode) -> tuple[str, int]:
        value = float(node.value)
        if math.isnan(value) or math.isinf(value) or value < 0:
            raise ValueError(f"Number {node.value!r} has no MicroML literal form")
        if value.is_integer():
            return str(int(value)), LEVEL_ATOM
        # Decimal keeps repr()'s shortest digits but never uses exponent notation.
        return format(Decimal(repr(value)), "f"), LEVEL_ATOM

    def emit_name(self, name: str) -> str:
        if (
            not name
            or name[0] not in IDENT_START
            or any(ch not in IDENT_CHARS for ch in name)
            or name in keyword_hashmap
        ):
            raise ValueError(f"{name!r} is not a valid MicroML identifier")
        return name

    def emit_variable(self, node: VariableNode) -> tuple[str, int]:
        return self.emit_name(node.name), LEVEL_ATOM

    def emit_binaryop(self, node: BinaryOpNode) -> tuple[str, int]:
        if node.operator not in operator_levels:
            raise ValueError(f"Unknown binary operator: {node.operator!r}")
        level = operator_levels[node.operator]
        left = self.emit_expr(node.left, level)
        right = self.emit_expr(node.right, level + 1)
        return f"{left} {node.operator} {right}", level

    def emit_application(self, node: ApplicationNode) -> tuple[str, int]:
        func = self.emit_expr(node.function, LEVEL_APPLICATION)
        arg = self.emit_expr(node.argument, LEVEL_ATOM)
        return f"{func} {arg}", LEVEL_APPLICATION

    def emit_function(self, node: FunctionNode) -> tuple[str, int]:
        body = self.emit_expr(node.body)
        return f"fun {self.emit_name(node.parameter_name)} -> {body}", LEVEL_EXPRESSION

    def emit_let(self, node: LetNode) -> tuple[str, int]:
        value = self.emit_expr(node.value)
        body = self.emit_expr(node.in_expression)
        name = self.emit_name(node.variable_name)
        return f"let {name} = {value} in {body}", LEVEL_EXPRESSION

    def emit_if(self, node: IfNode) -> tuple[str, int]:
        cond = self.emit_expr(node.condition)
        then = self.emit_expr(node.then_branch)
        other = self.emit_expr(node.else_branch)
        return f"if {cond} then {then} else {other}", LEVEL_EXPRESSION


__all__ = ["MicroMLEmitter"]

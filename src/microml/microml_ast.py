"""
Defines the abstract syntax tree (AST) node structure for the MicroML language.

The AST is a closed set of seven immutable node variants, all deriving from
`ASTNode`. Each variant is a frozen dataclass, so trees compare structurally
and cannot be modified once the parser has built them.

Classes:
    ASTNode: Common base carrying the `node_type` tag and serialization helpers.
    NumberNode: Numeric literal (`value`).
    VariableNode: Identifier reference (`name`).
    BinaryOpNode: Binary operator application (`operator`, `left`, `right`).
    FunctionNode: Single-parameter lambda (`parameter_name`, `body`).
    ApplicationNode: Function application (`function`, `argument`).
    LetNode: Local binding (`variable_name`, `value`, `in_expression`).
    IfNode: Conditional (`condition`, `then_branch`, `else_branch`).
    ASTDict: TypedDict describing the serialized form produced by `to_dict()`.

Serialized form:
    Every node serializes to ``{"nodeType": <tag>, ...fields}`` with field
    names in camelCase (``parameterName``, ``variableName``, ``inExpression``,
    ``thenBranch``, ``elseBranch``) and children embedded as nested dicts.
    `node_from_dict` reverses the mapping.

Example:
    >>> BinaryOpNode("+", VariableNode("x"), NumberNode(1.0)).to_dict()
    {'nodeType': 'BinaryOp', 'operator': '+', 'left': {'nodeType': 'Variable', 'name': 'x'}, 'right': {'nodeType': 'Number', 'value': 1.0}}
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, TypedDict, Union, cast

from microml.microml_constants import MAX_TREE_DEPTH


class ASTDict(TypedDict, total=False):
    """
    Serialized shape of an AST node.

    Only `nodeType` is always present; the remaining keys depend on the variant.
    `value` is a float for Number nodes and a nested ASTDict for Let nodes.
    """

    nodeType: str
    value: Any
    name: str
    operator: str
    left: ASTDict
    right: ASTDict
    parameterName: str
    body: ASTDict
    function: ASTDict
    argument: ASTDict
    variableName: str
    inExpression: ASTDict
    condition: ASTDict
    thenBranch: ASTDict
    elseBranch: ASTDict


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class ASTNode:
    """
    Base class of every MicroML AST node.

    Attributes:
        node_type (str): Variant tag, also emitted as ``nodeType`` when serialized.
        child_fields (tuple[str, ...]): Names of the fields holding child nodes,
            in source order.
    """

    node_type: ClassVar[str] = ""
    child_fields: ClassVar[tuple[str, ...]] = ()

    def children(self) -> list[ASTNode]:
        return [getattr(self, name) for name in self.child_fields]

    def is_leaf(self) -> bool:
        return not self.child_fields

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {"nodeType": self.node_type}
        for field in dataclasses.fields(self):  # type: ignore[arg-type]
            val = getattr(self, field.name)
            data[_camel(field.name)] = (
                val.to_dict() if isinstance(val, ASTNode) else val
            )
        return cast(ASTDict, data)


@dataclass(frozen=True)
class NumberNode(ASTNode):
    value: float

    node_type: ClassVar[str] = "Number"


@dataclass(frozen=True)
class VariableNode(ASTNode):
    name: str

    node_type: ClassVar[str] = "Variable"


@dataclass(frozen=True)
class BinaryOpNode(ASTNode):
    operator: str
    left: Node
    right: Node

    node_type: ClassVar[str] = "BinaryOp"
    child_fields: ClassVar[tuple[str, ...]] = ("left", "right")


@dataclass(frozen=True)
class FunctionNode(ASTNode):
    parameter_name: str
    body: Node

    node_type: ClassVar[str] = "Function"
    child_fields: ClassVar[tuple[str, ...]] = ("body",)


@dataclass(frozen=True)
class ApplicationNode(ASTNode):
    function: Node
    argument: Node

    node_type: ClassVar[str] = "Application"
    child_fields: ClassVar[tuple[str, ...]] = ("function", "argument")


@dataclass(frozen=True)
class LetNode(ASTNode):
    variable_name: str
    value: Node
    in_expression: Node

    node_type: ClassVar[str] = "Let"
    child_fields: ClassVar[tuple[str, ...]] = ("value", "in_expression")


@dataclass(frozen=True)
class IfNode(ASTNode):
    condition: Node
    then_branch: Node
    else_branch: Node

    node_type: ClassVar[str] = "If"
    child_fields: ClassVar[tuple[str, ...]] = (
        "condition",
        "then_branch",
        "else_branch",
    )


Node = Union[
    NumberNode,
    VariableNode,
    BinaryOpNode,
    FunctionNode,
    ApplicationNode,
    LetNode,
    IfNode,
]
"""Any one of the seven MicroML node variants."""

NODE_TYPES: dict[str, type[ASTNode]] = {
    cls.node_type: cls
    for cls in (
        NumberNode,
        VariableNode,
        BinaryOpNode,
        FunctionNode,
        ApplicationNode,
        LetNode,
        IfNode,
    )
}


def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yields `node` and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def node_from_dict(data: Mapping[str, Any]) -> Node:
    """
    Rebuilds an AST from the nested dict produced by `ASTNode.to_dict()`.

    Args:
        data: A serialized node, e.g. the decoded JSON body of a parse result.

    Returns:
        Node: The reconstructed tree.

    Raises:
        ValueError: If `nodeType` is missing or unknown, a field is missing,
            a field holds a value of the wrong shape, or the tree is taller
            than `MAX_TREE_DEPTH`.
    """
    return _node_from_dict(data, 1)


def _node_from_dict(data: Mapping[str, Any], height: int) -> Node:
    if height > MAX_TREE_DEPTH:
        raise ValueError(f"Serialized tree is deeper than {MAX_TREE_DEPTH} levels")
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected a serialized node, got {type(data).__name__}")
    node_type = data.get("nodeType")
    cls = NODE_TYPES.get(node_type) if isinstance(node_type, str) else None
    if cls is None:
        raise ValueError(f"Unknown nodeType: {node_type!r}")

    kwargs: dict[str, Any] = {}
    for field in dataclasses.fields(cls):  # type: ignore[arg-type]
        key = _camel(field.name)
        if key not in data:
            raise ValueError(f"{node_type} node is missing field {key!r}")
        val = data[key]
        if field.name in cls.child_fields:
            kwargs[field.name] = _node_from_dict(val, height + 1)
        elif cls is NumberNode:
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(f"Number value must be numeric, got {val!r}")
            try:
                number = float(val)
            except OverflowError:
                number = math.inf
            if not math.isfinite(number):
                raise ValueError(f"Number value must be finite, got {val!r}")
            kwargs[field.name] = number
        else:
            if not isinstance(val, str):
                raise ValueError(f"{node_type}.{key} must be a string, got {val!r}")
            kwargs[field.name] = val
    return cast(Node, cls(**kwargs))


__all__ = [
    "ASTDict",
    "ASTNode",
    "NumberNode",
    "VariableNode",
    "BinaryOpNode",
    "FunctionNode",
    "ApplicationNode",
    "LetNode",
    "IfNode",
    "Node",
    "NODE_TYPES",
    "walk",
    "node_from_dict",
]

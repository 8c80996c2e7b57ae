"""
Display helpers for MicroML syntax trees.

Functions:
    to_hierarchy(node): Converts an AST into a display hierarchy of plain dicts
        (`name`, `type`, variant details, `children`) ready for a tree layout.
    node_label(node): One-line label for a node, e.g. ``"BinaryOp (+)"``.
    render_tree(node): Draws the hierarchy as indented text with box connectors.
    render(node, fmt, indent): Produces one of the output formats in `FORMATS`.

Example:
    >>> print(render_tree(parse("let x = 5 in x + 3")))
    Let (x)
    ├── Number (5)
    └── BinaryOp (+)
        ├── Variable (x)
        └── Number (3)
"""

import json
from typing import Any, TypedDict

from microml.emitters.ml_emitter import MicroMLEmitter
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

FORMATS: tuple[str, ...] = ("json", "tree", "source")


class HierarchyDict(TypedDict, total=False):
    name: str
    type: str
    value: float
    operator: str
    param: str
    variable: str
    children: list["HierarchyDict"]


def format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def to_hierarchy(node: ASTNode) -> HierarchyDict:
    """
    Converts an AST into the display hierarchy consumed by tree layouts.

    Every entry has `name` and `type` (both the node type, except that a
    Variable's `name` is its identifier). Number adds `value`, BinaryOp adds
    `operator`, Function adds `param` and Let adds `variable`. Interior nodes
    list their children in source order.

    Raises:
        NotImplementedError: For a node outside the seven MicroML variants.
    """
    entry: HierarchyDict = {"name": node.node_type, "type": node.node_type}
    if isinstance(node, NumberNode):
        entry["value"] = node.value
    elif isinstance(node, VariableNode):
        entry["name"] = node.name
    elif isinstance(node, BinaryOpNode):
        entry["operator"] = node.operator
    elif isinstance(node, FunctionNode):
        entry["param"] = node.parameter_name
    elif isinstance(node, LetNode):
        entry["variable"] = node.variable_name
    elif not isinstance(node, (ApplicationNode, IfNode)):
        raise NotImplementedError(f"No display mapping for {type(node).__name__}")

    if not node.is_leaf():
        entry["children"] = [to_hierarchy(child) for child in node.children()]
    return entry


def _label(entry: HierarchyDict) -> str:
    kind = entry["type"]
    if kind == "Number":
        return f"{kind} ({format_number(entry['value'])})"
    detail = {
        "Variable": entry.get("name"),
        "BinaryOp": entry.get("operator"),
        "Function": entry.get("param"),
        "Let": entry.get("variable"),
    }.get(kind)
    return f"{kind} ({detail})" if detail is not None else kind


def node_label(node: ASTNode) -> str:
    return _label(to_hierarchy(node))


def render_tree(node: ASTNode) -> str:
    """Renders the tree one labelled node per line, children indented under parents."""
    lines: list[str] = []

    def draw(entry: HierarchyDict, prefix: str, connector: str, child_prefix: str) -> None:
        lines.append(f"{prefix}{connector}{_label(entry)}")
        children = entry.get("children", [])
        for i, child in enumerate(children):
            last = i == len(children) - 1
            draw(
                child,
                prefix + child_prefix,
                "└── " if last else "├── ",
                "    " if last else "│   ",
            )

    draw(to_hierarchy(node), "", "", "")
    return "\n".join(lines)


def render(node: ASTNode, fmt: str = "json", indent: int | None = 2) -> str:
    """
    Renders an AST in one of the supported output formats.

    Args:
        node (ASTNode): The tree to render.
        fmt (str): ``"json"`` (serialized dict), ``"tree"`` (text tree) or
            ``"source"`` (canonical MicroML). Defaults to ``"json"``.
        indent (int | None): JSON indentation; None for a single line.

    Raises:
        ValueError: If `fmt` is not one of `FORMATS`, or a Number holds a value
            JSON cannot represent.
    """
    fmt = fmt.lower()
    if fmt == "json":
        data: Any = node.to_dict()
        return json.dumps(data, indent=indent, allow_nan=False)
    if fmt == "tree":
        return render_tree(node)
    if fmt == "source":
        return MicroMLEmitter().emit(node)
    raise ValueError(f"Unknown output format: {fmt!r} (choose from {', '.join(FORMATS)})")


__all__ = [
    "FORMATS",
    "HierarchyDict",
    "format_number",
    "to_hierarchy",
    "node_label",
    "render_tree",
    "render",
]

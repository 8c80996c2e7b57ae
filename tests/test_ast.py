import dataclasses
import json
import math
from typing import Any

import hypothesis.strategies as st
import pytest
from hypothesis import given

from microml.microml_ast import (
    NODE_TYPES,
    ApplicationNode,
    BinaryOpNode,
    FunctionNode,
    IfNode,
    LetNode,
    NumberNode,
    VariableNode,
    node_from_dict,
    walk,
)
from microml.microml_constants import MAX_TREE_DEPTH
from microml.microml_parser import parse


def test_node_type_tags() -> None:
    assert sorted(NODE_TYPES) == [
        "Application",
        "BinaryOp",
        "Function",
        "If",
        "Let",
        "Number",
        "Variable",
    ]


def test_nodes_are_immutable() -> None:
    node = BinaryOpNode("+", NumberNode(1.0), NumberNode(2.0))
    with pytest.raises(dataclasses.FrozenInstanceError):
        node.operator = "-"  # type: ignore[misc]


def test_structural_equality() -> None:
    assert NumberNode(5.0) == NumberNode(5)
    assert VariableNode("x") == VariableNode("x")
    assert VariableNode("x") != VariableNode("y")
    assert FunctionNode("x", VariableNode("x")) != LetNode(
        "x", VariableNode("x"), VariableNode("x")
    )


def test_repr_is_readable() -> None:
    assert repr(VariableNode("x")) == "VariableNode(name='x')"


def test_children_and_leaves() -> None:
    cond, then, other = VariableNode("c"), NumberNode(1.0), NumberNode(2.0)
    node = IfNode(cond, then, other)
    assert node.children() == [cond, then, other]
    assert not node.is_leaf()
    assert cond.is_leaf()
    assert cond.children() == []


def test_walk_is_pre_order() -> None:
    tree = parse("let x = 5 in x + 3")
    assert [n.node_type for n in walk(tree)] == [
        "Let",
        "Number",
        "BinaryOp",
        "Variable",
        "Number",
    ]


def test_to_dict_let() -> None:
    assert parse("let x = 5 in x + 3").to_dict() == {
        "nodeType": "Let",
        "variableName": "x",
        "value": {"nodeType": "Number", "value": 5.0},
        "inExpression": {
            "nodeType": "BinaryOp",
            "operator": "+",
            "left": {"nodeType": "Variable", "name": "x"},
            "right": {"nodeType": "Number", "value": 3.0},
        },
    }


def test_to_dict_function_application_if() -> None:
    d = parse("if f 1 then fun y -> y else 0").to_dict()
    assert d["nodeType"] == "If"
    assert d["condition"] == {
        "nodeType": "Application",
        "function": {"nodeType": "Variable", "name": "f"},
        "argument": {"nodeType": "Number", "value": 1.0},
    }
    assert d["thenBranch"] == {
        "nodeType": "Function",
        "parameterName": "y",
        "body": {"nodeType": "Variable", "name": "y"},
    }
    assert d["elseBranch"] == {"nodeType": "Number", "value": 0.0}


def test_to_dict_is_json_serializable() -> None:
    tree = parse("let add = fun x -> fun y -> x + y in add 5 3")
    text = json.dumps(tree.to_dict())
    assert node_from_dict(json.loads(text)) == tree


def test_node_from_dict_accepts_integer_values() -> None:
    assert node_from_dict({"nodeType": "Number", "value": 5}) == NumberNode(5.0)


@pytest.mark.parametrize(
    "data,message",
    [
        ({"value": 1}, "Unknown nodeType"),
        ({"nodeType": "Tuple"}, "Unknown nodeType"),
        ({"nodeType": "Variable"}, "missing field 'name'"),
        ({"nodeType": "Number", "value": "5"}, "must be numeric"),
        ({"nodeType": "Number", "value": True}, "must be numeric"),
        ({"nodeType": "Number", "value": math.inf}, "must be finite"),
        ({"nodeType": "Number", "value": math.nan}, "must be finite"),
        ({"nodeType": "Number", "value": 10**400}, "must be finite"),
        ({"nodeType": "Variable", "name": 3}, "must be a string"),
        (
            {"nodeType": "Function", "parameterName": "x", "body": None},
            "Expected a serialized node",
        ),
        (
            {
                "nodeType": "Let",
                "variableName": "x",
                "value": {"nodeType": "Number", "value": 1},
            },
            "missing field 'inExpression'",
        ),
    ],
)
def test_node_from_dict_rejects_malformed(data: dict[str, Any], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        node_from_dict(data)


identifiers = st.from_regex(r"[a-z_][a-z0-9_]{0,5}", fullmatch=True)
leaves = st.one_of(
    st.floats(min_value=0, max_value=1e6, allow_nan=False).map(NumberNode),
    identifiers.map(VariableNode),
)
trees = st.recursive(
    leaves,
    lambda sub: st.one_of(
        st.builds(BinaryOpNode, st.sampled_from(["+", "-", "*", "/", "=="]), sub, sub),
        st.builds(FunctionNode, identifiers, sub),
        st.builds(ApplicationNode, sub, sub),
        st.builds(LetNode, identifiers, sub, sub),
        st.builds(IfNode, sub, sub, sub),
    ),
    max_leaves=12,
)


@given(trees)  # type: ignore[misc]
def test_dict_form_rebuilds_the_same_tree(tree: Any) -> None:
    assert node_from_dict(tree.to_dict()) == tree


def test_walk_handles_tall_trees() -> None:
    tree = parse(" - ".join(["x"] * MAX_TREE_DEPTH))
    nodes = list(walk(tree))
    assert len(nodes) == 2 * MAX_TREE_DEPTH - 1
    assert nodes[0] is tree


def test_node_from_dict_rejects_overly_deep_trees() -> None:
    data: dict[str, Any] = {"nodeType": "Number", "value": 1}
    for _ in range(MAX_TREE_DEPTH):
        data = {"nodeType": "Function", "parameterName": "x", "body": data}
    with pytest.raises(ValueError, match="deeper than"):
        node_from_dict(data)
    expected: Any = NumberNode(1.0)
    for _ in range(MAX_TREE_DEPTH - 1):
        expected = FunctionNode("x", expected)
    assert node_from_dict(data["body"]) == expected

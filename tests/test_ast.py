import json

from formula.formula_ast import (
    BIN_OP_PRECEDENCE,
    BinOp,
    ExprBinary,
    ExprKind,
    ExprLit,
    ExprNegateBool,
    ExprNegateNumber,
    Formula,
    Ident,
    StmtExpr,
    StmtKind,
    UnaryOp,
)
from formula.formula_span import Span


def test_node_kinds() -> None:
    assert ExprLit(1.0, Span(0, 1)).kind is ExprKind.Literal
    assert ExprNegateBool(Ident("a", Span(1, 2)), Span(0, 2)).kind is ExprKind.Unary
    assert StmtExpr(Ident("a", Span(0, 1)), Span(0, 1)).kind is StmtKind.Expr


def test_structural_equality() -> None:
    left = ExprBinary(ExprLit(2, Span(0, 1)), BinOp.Add, Ident("x", Span(4, 5)), Span(0, 5))
    right = ExprBinary(ExprLit(2.0, Span(0, 1)), BinOp.Add, Ident("x", Span(4, 5)), Span(0, 5))
    assert left == right
    assert ExprLit(True, Span(0, 1)) != ExprLit(1.0, Span(0, 1))
    assert ExprLit(False, Span(0, 1)) != ExprLit(0.0, Span(0, 1))
    assert left != ExprBinary(
        ExprLit(2, Span(0, 1)), BinOp.Sub, Ident("x", Span(4, 5)), Span(0, 5)
    )


def test_precedence_table() -> None:
    assert BinOp.Or.precedence < BinOp.And.precedence < BinOp.Eq.precedence
    assert BinOp.Lt.precedence < BinOp.Add.precedence < BinOp.Mul.precedence
    assert BinOp.Mul.precedence < BinOp.Exp.precedence
    assert set(BIN_OP_PRECEDENCE) == set(BinOp)


def test_to_dict() -> None:
    node = ExprNegateNumber(ExprLit(1.0, Span(1, 2)), Span(0, 2))
    assert node.to_dict() == {
        "kind": "Unary",
        "op": UnaryOp.Negate.value,
        "arg": {"kind": "Literal", "value": 1.0, "span": {"start": 1, "end": 2}},
        "span": {"start": 0, "end": 2},
    }


def test_formula_to_dict_is_json() -> None:
    formula = Formula((StmtExpr(Ident("a", Span(0, 1)), Span(0, 1)),), Span(0, 1))
    data = formula.to_dict()
    assert data["kind"] == "formula"
    assert data["body"][0]["expr"]["name"] == "a"
    assert json.loads(json.dumps(data)) == data

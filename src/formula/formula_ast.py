"""
Defines the abstract syntax tree (AST) for the formula language.

Every node is a frozen dataclass carrying a ``span`` into the source and a
class-level ``kind`` discriminator, so consumers can either ``match`` on the
node class or switch on ``node.kind``.

Expressions (``ExprKind``):
    ExprLit, ExprTemplateLit, Ident, ExprNegateBool, ExprNegateNumber,
    ExprBinary, ExprCondition, ExprAssign, ExprLocalAssignment, ExprCall,
    ExprMember, ExprRange, ExprList, ExprObject (of ObjProp), ExprFunction,
    ExprIf, ExprWhile, ExprForLoop

Statements (``StmtKind``):
    StmtExpr, StmtLocal, Block, StmtFn

Root:
    Formula: the ordered statement list returned by a successful parse.

Usage:
    Nodes compare structurally (``==``), so two parses of the same source are
    equal. ``to_dict()`` converts any node into plain Python data suitable for
    JSON output.

Example:
    ExprBinary(ExprLit(2.0, Span(0, 1)), BinOp.Add, Ident("x", Span(4, 5)), Span(0, 5))
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Union

from formula.formula_span import Span
from formula.formula_token import literal_type


class ExprKind(Enum):
    Literal = "Literal"
    TemplateLiteral = "TemplateLiteral"
    Ident = "Ident"
    Unary = "Unary"
    Binary = "Binary"
    Condition = "Condition"
    Assignment = "Assignment"
    LocalAssignment = "LocalAssignment"
    Call = "Call"
    MemberExpression = "MemberExpression"
    Range = "Range"
    Array = "Array"
    Object = "Object"
    Property = "Property"
    Function = "Function"
    If = "If"
    While = "While"
    ForLoop = "ForLoop"


class StmtKind(Enum):
    Expr = "Expr"
    Local = "Local"
    Block = "Block"
    Fn = "Fn"


class BinOp(Enum):
    Or = "or"
    And = "and"
    Eq = "=="
    NotEq = "!="
    Lt = "<"
    LtEq = "<="
    Gt = ">"
    GtEq = ">="
    Add = "+"
    Sub = "-"
    Mul = "*"
    Div = "/"
    Rem = "%"
    Exp = "**"

    @property
    def precedence(self) -> int:
        return BIN_OP_PRECEDENCE[self]


# Lowest binds loosest. Operators of equal precedence associate to the left.
BIN_OP_PRECEDENCE: dict[BinOp, int] = {
    BinOp.Or: 1,
    BinOp.And: 2,
    BinOp.Eq: 3,
    BinOp.NotEq: 3,
    BinOp.Lt: 4,
    BinOp.LtEq: 4,
    BinOp.Gt: 4,
    BinOp.GtEq: 4,
    BinOp.Add: 5,
    BinOp.Sub: 5,
    BinOp.Mul: 6,
    BinOp.Div: 6,
    BinOp.Rem: 6,
    BinOp.Exp: 7,
}


class UnaryOp(Enum):
    Not = "!"
    Negate = "-"


class LocalType(Enum):
    Let = "let"
    Const = "const"


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, Span):
        return {"start": value.start, "end": value.end}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    return value


class Node:
    """Mixin shared by every AST dataclass."""

    kind: ClassVar[Enum]
    span: Span

    def to_dict(self) -> dict[str, Any]:
        """Converts the node (and all descendants) into plain Python data."""
        out: dict[str, Any] = {"kind": self.kind.value}
        for f in fields(self):  # type: ignore[arg-type]
            out[f.name] = _serialize(getattr(self, f.name))
        return out


# -- Expressions


class _UnaryNode(Node):
    op: ClassVar[UnaryOp]

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["op"] = self.op.value
        return out


@dataclass(frozen=True, eq=False)
class ExprLit(Node):
    kind: ClassVar[ExprKind] = ExprKind.Literal
    value: float | str | bool
    span: Span

    def __eq__(self, other: Any) -> bool:
        # a Bool literal never equals a Number literal
        if not isinstance(other, ExprLit):
            return NotImplemented
        return (
            literal_type(self.value) is literal_type(other.value)
            and self.value == other.value
            and self.span == other.span
        )

    def __hash__(self) -> int:
        return hash((literal_type(self.value), self.value, self.span))


@dataclass(frozen=True)
class ExprTemplateLit(Node):
    kind: ClassVar[ExprKind] = ExprKind.TemplateLiteral
    value: str
    span: Span


@dataclass(frozen=True)
class Ident(Node):
    kind: ClassVar[ExprKind] = ExprKind.Ident
    name: str
    span: Span


@dataclass(frozen=True)
class ExprNegateBool(_UnaryNode):
    """``!arg``"""

    kind: ClassVar[ExprKind] = ExprKind.Unary
    op: ClassVar[UnaryOp] = UnaryOp.Not
    arg: Expr
    span: Span


@dataclass(frozen=True)
class ExprNegateNumber(_UnaryNode):
    """``-arg``"""

    kind: ClassVar[ExprKind] = ExprKind.Unary
    op: ClassVar[UnaryOp] = UnaryOp.Negate
    arg: Expr
    span: Span


@dataclass(frozen=True)
class ExprBinary(Node):
    kind: ClassVar[ExprKind] = ExprKind.Binary
    left: Expr
    op: BinOp
    right: Expr
    span: Span


@dataclass(frozen=True)
class ExprCondition(Node):
    """Ternary ``test ? consequent : alternate``."""

    kind: ClassVar[ExprKind] = ExprKind.Condition
    test: Expr
    consequent: Expr
    alternate: Expr
    span: Span


@dataclass(frozen=True)
class ExprAssign(Node):
    kind: ClassVar[ExprKind] = ExprKind.Assignment
    left: Expr
    right: Expr
    span: Span


@dataclass(frozen=True)
class ExprLocalAssignment(Node):
    """One ``name [= init]`` declarator of a ``let`` / ``const`` statement."""

    kind: ClassVar[ExprKind] = ExprKind.LocalAssignment
    name: Ident
    init: Expr | None
    span: Span


@dataclass(frozen=True)
class ExprCall(Node):
    kind: ClassVar[ExprKind] = ExprKind.Call
    callee: Expr
    args: tuple[Expr, ...]
    span: Span


@dataclass(frozen=True)
class ExprMember(Node):
    kind: ClassVar[ExprKind] = ExprKind.MemberExpression
    object: Expr
    prop: Ident
    span: Span


@dataclass(frozen=True)
class ExprRange(Node):
    """``start..end`` (exclusive) or ``start.=end`` (inclusive)."""

    kind: ClassVar[ExprKind] = ExprKind.Range
    start: Expr
    end: Expr
    inclusive: bool
    span: Span


@dataclass(frozen=True)
class ExprList(Node):
    kind: ClassVar[ExprKind] = ExprKind.Array
    elements: tuple[Expr, ...]
    span: Span


@dataclass(frozen=True)
class ObjProp(Node):
    kind: ClassVar[ExprKind] = ExprKind.Property
    key: Expr
    value: Expr
    shorthand: bool
    span: Span


@dataclass(frozen=True)
class ExprObject(Node):
    kind: ClassVar[ExprKind] = ExprKind.Object
    props: tuple[ObjProp, ...]
    span: Span


@dataclass(frozen=True)
class ExprFunction(Node):
    """Function literal ``(a, b) -> body``; ``expression`` is False for block bodies."""

    kind: ClassVar[ExprKind] = ExprKind.Function
    params: tuple[Ident, ...]
    body: Expr | Block
    expression: bool
    span: Span


@dataclass(frozen=True)
class ExprIf(Node):
    kind: ClassVar[ExprKind] = ExprKind.If
    test: Expr
    consequent: Block
    alternate: Block | ExprIf | None
    span: Span


@dataclass(frozen=True)
class ExprWhile(Node):
    kind: ClassVar[ExprKind] = ExprKind.While
    test: Expr
    body: Block
    span: Span


@dataclass(frozen=True)
class ExprForLoop(Node):
    kind: ClassVar[ExprKind] = ExprKind.ForLoop
    binding: Ident
    range: Expr
    body: Block
    span: Span


Expr = Union[
    ExprLit,
    ExprTemplateLit,
    Ident,
    ExprNegateBool,
    ExprNegateNumber,
    ExprBinary,
    ExprCondition,
    ExprAssign,
    ExprLocalAssignment,
    ExprCall,
    ExprMember,
    ExprRange,
    ExprList,
    ExprObject,
    ObjProp,
    ExprFunction,
    ExprIf,
    ExprWhile,
    ExprForLoop,
]


# -- Statements


@dataclass(frozen=True)
class StmtExpr(Node):
    kind: ClassVar[StmtKind] = StmtKind.Expr
    expr: Expr
    span: Span


@dataclass(frozen=True)
class StmtLocal(Node):
    kind: ClassVar[StmtKind] = StmtKind.Local
    declarations: tuple[ExprLocalAssignment, ...]
    type: LocalType
    span: Span


@dataclass(frozen=True)
class Block(Node):
    kind: ClassVar[StmtKind] = StmtKind.Block
    stmts: tuple[Stmt, ...]
    span: Span


@dataclass(frozen=True)
class StmtFn(Node):
    kind: ClassVar[StmtKind] = StmtKind.Fn
    name: Ident
    params: tuple[Ident, ...]
    body: Block
    span: Span


Stmt = Union[StmtExpr, StmtLocal, Block, StmtFn]


@dataclass(frozen=True)
class Formula:
    """The root of a parsed formula: an ordered statement list and its span."""

    body: tuple[Stmt, ...]
    span: Span
    kind: str = "formula"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "body": [stmt.to_dict() for stmt in self.body],
            "span": _serialize(self.span),
        }


__all__ = [
    "BIN_OP_PRECEDENCE",
    "BinOp",
    "Block",
    "Expr",
    "ExprAssign",
    "ExprBinary",
    "ExprCall",
    "ExprCondition",
    "ExprForLoop",
    "ExprFunction",
    "ExprIf",
    "ExprKind",
    "ExprList",
    "ExprLit",
    "ExprLocalAssignment",
    "ExprMember",
    "ExprNegateBool",
    "ExprNegateNumber",
    "ExprObject",
    "ExprRange",
    "ExprTemplateLit",
    "ExprWhile",
    "Formula",
    "Ident",
    "LocalType",
    "Node",
    "ObjProp",
    "Stmt",
    "StmtExpr",
    "StmtFn",
    "StmtKind",
    "StmtLocal",
    "UnaryOp",
]

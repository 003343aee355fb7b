"""
Formula Language Parser

Parses the token stream produced by ``formula_lexer.Lexer`` into a ``Formula``:
an ordered list of statements in which every node carries its source span.

Supported Constructs
--------------------
- Statements:
    * Declarations: ``let a = 1, b``, ``const c = a + b``
    * Named functions: ``fn add(a, b) { a + b }``
    * Blocks: ``{ ... }``
    * Expression statements, optionally terminated by ``;``

- Expressions:
    * Literals, template strings, names, lists ``[1, 2]`` and objects
      ``{a: 1, b}``
    * Prefix ``!`` and ``-`` (bind tighter than any binary operator)
    * Binary operators by precedence: ``or`` < ``and`` < ``== !=`` <
      ``< <= > >=`` < ``+ -`` < ``* / %`` < ``**``
    * Calls ``f(a)``, member access ``a.b``
    * Ternary ``test ? a : b``, ranges ``a..b`` / ``a.=b``, assignment
      ``a = b``
    * Function literals ``(a, b) -> a + b`` and ``(a) -> { ... }``
    * ``if`` / ``else``, ``while`` and ``for x in range`` with block bodies

Parser Behavior
---------------
- Binary expressions are parsed with an explicit operand stack and operator
  stack; adding an operator is an edit to ``BIN_OP_PRECEDENCE``.
- Trivia (whitespace, newlines and comments) is skipped between tokens, so
  statements are separated by syntactic completion rather than newlines.
- Fail-fast: the first error aborts the parse. There is no recovery mode.

Entry Points
------------
- ``parse(source)``: Parse source text into a ``Formula`` or raise.
- ``safe_parse(source)``: Same, but returns a ``ParseResult`` instead of raising.
- ``Parser(lexer).parse()`` / ``Parser(lexer).parse_expression()``.

Raises
------
FormulaSyntaxError
    Propagated from the lexer for malformed tokens.
FormulaParseError
    For malformed token sequences: missing names or expressions, trailing
    commas, unbalanced brackets, leftover input and nesting deeper than
    ``MAX_NESTING_DEPTH``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from formula.formula_ast import (
    BinOp,
    Block,
    Expr,
    ExprAssign,
    ExprBinary,
    ExprCall,
    ExprCondition,
    ExprForLoop,
    ExprFunction,
    ExprIf,
    ExprList,
    ExprLit,
    ExprLocalAssignment,
    ExprMember,
    ExprNegateBool,
    ExprNegateNumber,
    ExprObject,
    ExprRange,
    ExprTemplateLit,
    ExprWhile,
    Formula,
    Ident,
    LocalType,
    ObjProp,
    Stmt,
    StmtExpr,
    StmtFn,
    StmtLocal,
)
from formula.formula_errors import (
    FormulaError,
    FormulaParseError,
    InvariantError,
    ParseErrorCode,
)
from formula.formula_lexer import Lexer
from formula.formula_token import TRIVIA, LiteralToken, Token, TokenKind

logger = logging.getLogger(__name__)

BINARY_OPERATORS: dict[TokenKind, BinOp] = {
    TokenKind.Or: BinOp.Or,
    TokenKind.And: BinOp.And,
    TokenKind.EqEq: BinOp.Eq,
    TokenKind.NotEq: BinOp.NotEq,
    TokenKind.Lt: BinOp.Lt,
    TokenKind.LtEq: BinOp.LtEq,
    TokenKind.Gt: BinOp.Gt,
    TokenKind.GtEq: BinOp.GtEq,
    TokenKind.Plus: BinOp.Add,
    TokenKind.Minus: BinOp.Sub,
    TokenKind.Star: BinOp.Mul,
    TokenKind.Slash: BinOp.Div,
    TokenKind.Percent: BinOp.Rem,
    TokenKind.StarStar: BinOp.Exp,
}

_LITERALS = (TokenKind.Number, TokenKind.String, TokenKind.Bool)

# Deepest nesting of expressions and blocks accepted before the parse fails.
MAX_NESTING_DEPTH = 128


@dataclass(frozen=True)
class ParseResult:
    """Outcome of ``safe_parse``: exactly one of ``result`` / ``error`` is set."""

    success: bool
    result: Formula | None
    error: FormulaError | None


class Parser:
    """
    Formula Parser Class

    Keeps a two-token lookahead buffer (``tok0``, ``tok1``) over the lexer and
    builds the AST by recursive descent for statements and two-stack
    operator-precedence parsing for binary expressions.

    Attributes
    ----------
    lexer : Lexer
        The token source.
    tok0 : Token
        The current (next unconsumed) significant token.
    tok1 : Token
        The token after ``tok0``.
    """

    def __init__(self, lexer: Lexer, skip: Iterable[TokenKind] = TRIVIA) -> None:
        self.lexer = lexer
        self._skip: frozenset[TokenKind] = frozenset(skip)
        self._depth = 0
        self.tok0: Token = self._next_significant()
        self.tok1: Token = self._next_significant()

    # -- token buffer

    def _next_significant(self) -> Token:
        while True:
            tok = self.lexer.advance()
            if tok.kind not in self._skip or tok.kind is TokenKind.Eof:
                return tok

    def advance(self) -> Token:
        """Consumes ``tok0`` and returns it, shifting the lookahead buffer."""
        tok = self.tok0
        self.tok0 = self.tok1
        self.tok1 = self._next_significant()
        return tok

    def eat(self, kind: TokenKind) -> Token | None:
        """Consumes ``tok0`` if it is of ``kind``."""
        if self.tok0.kind is kind:
            return self.advance()
        return None

    def expect(
        self,
        kind: TokenKind,
        message: str,
        code: ParseErrorCode = ParseErrorCode.UnclosedDelimiter,
    ) -> Token:
        tok = self.eat(kind)
        if tok is None:
            raise FormulaParseError(code, message, self.tok0.span)
        return tok

    def is_eof(self) -> bool:
        return self.tok0.kind is TokenKind.Eof

    def _text(self, tok: Token) -> str:
        return tok.text(self.lexer.source)

    def _unexpected(self, tok: Token) -> FormulaParseError:
        if tok.kind is TokenKind.Eof:
            return FormulaParseError(
                ParseErrorCode.UnexpectedEOF, "Unexpected end of input", tok.span
            )
        return FormulaParseError(
            ParseErrorCode.UnexpectedToken,
            f"Unexpected token {self._text(tok)}",
            tok.span,
        )

    def _missing_expr(self, after: str) -> FormulaParseError:
        return FormulaParseError(
            ParseErrorCode.ExpectedExpression,
            f'Expected an expression after "{after}"',
            self.tok0.span,
        )

    @contextmanager
    def _nested(self) -> Iterator[None]:
        if self._depth >= MAX_NESTING_DEPTH:
            raise FormulaParseError(
                ParseErrorCode.TooDeeplyNested,
                "Expression nested too deeply",
                self.tok0.span,
            )
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def _name(self, message: str) -> Ident:
        tok = self.tok0
        if tok.kind is not TokenKind.Name:
            raise FormulaParseError(ParseErrorCode.ExpectedName, message, tok.span)
        self.advance()
        assert isinstance(tok, LiteralToken)  # for mypy
        return Ident(str(tok.data), tok.span)

    # -- entry points

    def parse(self) -> Formula:
        """Parse the whole token stream into a ``Formula``."""
        start = self.tok0.span
        body = self.parse_statements()
        if not self.is_eof():
            raise self._unexpected(self.tok0)
        formula = Formula(tuple(body), start.merge(self.tok0.span))
        logger.debug("Parsed formula with %d statement(s)", len(body))
        return formula

    def parse_expression(self) -> Expr:
        """Parse exactly one expression spanning the whole input."""
        expr = self.parse_expr()
        if expr is None or not self.is_eof():
            raise self._unexpected(self.tok0)
        return expr

    # -- statements

    def parse_statements(self) -> list[Stmt]:
        """Parse statements until one cannot start (end of input or a closer)."""
        stmts: list[Stmt] = []
        while True:
            while self.eat(TokenKind.Semi):
                pass
            stmt = self.parse_statement()
            if stmt is None:
                return stmts
            stmts.append(stmt)

    def parse_statement(self) -> Stmt | None:
        kind = self.tok0.kind
        if kind is TokenKind.Eof:
            return None
        if kind in (TokenKind.Let, TokenKind.Const):
            return self.parse_local()
        if kind is TokenKind.Fn:
            return self.parse_fn()
        if kind is TokenKind.LCurly:
            return self.parse_block()

        expr = self.parse_expr()
        if expr is None:
            return None
        return StmtExpr(expr, expr.span)

    def parse_local(self) -> StmtLocal:
        """Parse ``let`` / ``const`` followed by comma-separated declarators."""
        keyword = self.advance()
        local_type = LocalType.Let if keyword.kind is TokenKind.Let else LocalType.Const

        declarations: list[ExprLocalAssignment] = []
        while True:
            ident = self._name("Expected a name")
            init: Expr | None = None
            span = ident.span
            if self.eat(TokenKind.Eq):
                init = self.parse_expr()
                if init is None:
                    raise FormulaParseError(
                        ParseErrorCode.ExpectedExpression,
                        "Expected an expr after = ",
                        self.tok0.span,
                    )
                span = span.merge(init.span)
            declarations.append(ExprLocalAssignment(ident, init, span))

            if self.tok0.kind is not TokenKind.Comma:
                break
            if self.tok1.kind is not TokenKind.Name:
                raise FormulaParseError(
                    ParseErrorCode.TrailingComma,
                    "Trailing commas are not allowed",
                    self.tok0.span,
                )
            self.advance()

        return StmtLocal(
            tuple(declarations), local_type, keyword.span.merge(declarations[-1].span)
        )

    def parse_fn(self) -> StmtFn:
        """Parse ``fn name(params) { body }``."""
        fn_tok = self.advance()
        name = self._name("Expected a function name")
        self.expect(
            TokenKind.LParen,
            'Expected "(" after function name',
            ParseErrorCode.UnexpectedToken,
        )
        params: list[Ident] = []
        if self.tok0.kind is not TokenKind.RParen:
            while True:
                params.append(self._name("Expected a parameter name"))
                if not self.eat(TokenKind.Comma):
                    break
                if self.tok0.kind is TokenKind.RParen:
                    raise FormulaParseError(
                        ParseErrorCode.TrailingComma,
                        "Trailing commas are not allowed",
                        self.tok0.span,
                    )
        self.expect(TokenKind.RParen, 'Expected ")"')
        body = self.parse_block()
        return StmtFn(name, tuple(params), body, fn_tok.span.merge(body.span))

    def parse_block(self) -> Block:
        lcurly = self.expect(
            TokenKind.LCurly, 'Expected "{"', ParseErrorCode.UnexpectedToken
        )
        with self._nested():
            stmts = self.parse_statements()
        rcurly = self.expect(TokenKind.RCurly, 'Expected "}"')
        return Block(tuple(stmts), lcurly.span.merge(rcurly.span))

    # -- expressions

    def parse_expr(self) -> Expr | None:
        """
        Parse a full expression: a binary expression optionally followed by a
        range, a ternary conditional or an assignment.

        Returns None when no expression starts at ``tok0``; nothing is consumed
        in that case.
        """
        with self._nested():
            expr = self.parse_binary()
            if expr is None:
                return None
            if self.tok0.kind in (TokenKind.DotDot, TokenKind.DotEq):
                expr = self._parse_range(expr)
            if self.tok0.kind is TokenKind.Question:
                return self._parse_condition(expr)
            if self.tok0.kind is TokenKind.Eq:
                return self._parse_assign(expr)
            return expr

    def parse_binary(self) -> Expr | None:
        operands: list[Expr] = []
        operators: list[tuple[Token, int]] = []

        while True:
            unit = self.parse_expr_unit()
            if unit is None:
                if not operands:
                    return None
                raise self._missing_expr(self._text(operators[-1][0]))
            operands.append(unit)

            op_tok = self.tok0
            op = BINARY_OPERATORS.get(op_tok.kind)
            if op is None:
                break
            self.advance()
            self._push_operator(op_tok, op.precedence, operators, operands)

        while operators:
            self._reduce(operators.pop()[0], operands)
        if len(operands) != 1:
            raise InvariantError("Expression not fully reduced")
        return operands[0]

    def _push_operator(
        self,
        op_tok: Token,
        precedence: int,
        operators: list[tuple[Token, int]],
        operands: list[Expr],
    ) -> None:
        # Equal precedence reduces first: left associative.
        while operators and operators[-1][1] >= precedence:
            self._reduce(operators.pop()[0], operands)
        operators.append((op_tok, precedence))

    def _reduce(self, op_tok: Token, operands: list[Expr]) -> None:
        if len(operands) < 2:
            raise InvariantError(
                "Cant reduce expression. Required minimum of 2 expressions",
                op_tok.span,
            )
        right = operands.pop()
        left = operands.pop()
        op = BINARY_OPERATORS[op_tok.kind]
        operands.append(ExprBinary(left, op, right, left.span.merge(right.span)))

    def parse_expr_unit(self) -> Expr | None:
        """Parse one operand: a prefixed unit or a primary with its postfixes."""
        tok = self.tok0
        with self._nested():
            if tok.kind in (TokenKind.Bang, TokenKind.Minus):
                self.advance()
                arg = self.parse_expr_unit()
                if arg is None:
                    raise self._missing_expr(self._text(tok))
                span = tok.span.merge(arg.span)
                if tok.kind is TokenKind.Bang:
                    return ExprNegateBool(arg, span)
                return ExprNegateNumber(arg, span)

            primary = self._parse_primary()
            if primary is None:
                return None
            return self._parse_postfix(primary)

    def _parse_primary(self) -> Expr | None:
        tok = self.tok0
        kind = tok.kind
        if kind in _LITERALS or kind is TokenKind.TemplateString or kind is TokenKind.Name:
            self.advance()
            assert isinstance(tok, LiteralToken)  # for mypy
            if kind is TokenKind.Name:
                return Ident(str(tok.data), tok.span)
            if kind is TokenKind.TemplateString:
                return ExprTemplateLit(str(tok.data), tok.span)
            return ExprLit(tok.data, tok.span)
        if kind is TokenKind.LParen:
            return self._parse_group()
        if kind is TokenKind.LBracket:
            return self._parse_list()
        if kind is TokenKind.LCurly:
            return self._parse_object()
        if kind is TokenKind.If:
            return self._parse_if()
        if kind is TokenKind.While:
            return self._parse_while()
        if kind is TokenKind.For:
            return self._parse_for()
        return None

    def _parse_postfix(self, expr: Expr) -> Expr:
        while True:
            if self.tok0.kind is TokenKind.LParen:
                lparen = self.advance()
                args = self._parse_sequence(TokenKind.RParen, self._text(lparen))
                rparen = self.expect(TokenKind.RParen, 'Expected ")"')
                expr = ExprCall(expr, tuple(args), expr.span.merge(rparen.span))
            elif self.tok0.kind is TokenKind.Dot:
                self.advance()
                prop = self._name('Expected a property name after "."')
                expr = ExprMember(expr, prop, expr.span.merge(prop.span))
            else:
                return expr

    def _parse_sequence(self, closer: TokenKind, opener: str) -> list[Expr]:
        """Parse comma-separated expressions up to (not including) ``closer``."""
        items: list[Expr] = []
        if self.tok0.kind is closer:
            return items
        after = opener
        while True:
            item = self.parse_expr()
            if item is None:
                raise self._missing_expr(after)
            items.append(item)
            comma = self.eat(TokenKind.Comma)
            if comma is None:
                return items
            if self.tok0.kind is closer:
                raise FormulaParseError(
                    ParseErrorCode.TrailingComma,
                    "Trailing commas are not allowed",
                    comma.span,
                )
            after = ","

    def _parse_group(self) -> Expr:
        lparen = self.advance()
        items: list[Expr] = []
        if self.tok0.kind is not TokenKind.RParen:
            while True:
                item = self.parse_expr()
                if item is None:
                    raise self._missing_expr("(" if not items else ",")
                items.append(item)
                if not self.eat(TokenKind.Comma):
                    break
        rparen = self.expect(TokenKind.RParen, 'Expected ")"')

        if self.tok0.kind is TokenKind.ThinArrow and all(
            isinstance(item, Ident) for item in items
        ):
            self.advance()
            params = tuple(item for item in items if isinstance(item, Ident))
            return self._parse_function_body(lparen, params)

        if not items:
            raise FormulaParseError(
                ParseErrorCode.ExpectedExpression,
                'Expected an expression after "("',
                lparen.span.merge(rparen.span),
            )
        if len(items) > 1:
            raise FormulaParseError(
                ParseErrorCode.UnexpectedToken,
                "Sequences are not allowed",
                lparen.span.merge(rparen.span),
            )
        return items[0]

    def _parse_function_body(
        self, lparen: Token, params: tuple[Ident, ...]
    ) -> ExprFunction:
        body: Expr | Block | None
        if self.tok0.kind is TokenKind.LCurly:
            body = self.parse_block()
        else:
            body = self.parse_expr()
            if body is None:
                raise self._missing_expr("->")
        expression = not isinstance(body, Block)
        return ExprFunction(params, body, expression, lparen.span.merge(body.span))

    def _parse_list(self) -> ExprList:
        lbracket = self.advance()
        elements = self._parse_sequence(TokenKind.RBracket, "[")
        rbracket = self.expect(TokenKind.RBracket, 'Expected "]"')
        return ExprList(tuple(elements), lbracket.span.merge(rbracket.span))

    def _parse_object(self) -> ExprObject:
        lcurly = self.advance()
        props: list[ObjProp] = []
        while self.tok0.kind is not TokenKind.RCurly:
            props.append(self._parse_property())
            comma = self.eat(TokenKind.Comma)
            if comma is None:
                break
            if self.tok0.kind is TokenKind.RCurly:
                raise FormulaParseError(
                    ParseErrorCode.TrailingComma,
                    "Trailing commas are not allowed",
                    comma.span,
                )
        rcurly = self.expect(TokenKind.RCurly, 'Expected "}"')
        return ExprObject(tuple(props), lcurly.span.merge(rcurly.span))

    def _parse_property(self) -> ObjProp:
        tok = self.tok0
        key: Expr
        if tok.kind is TokenKind.Name:
            key = self._name("Expected a property name")
        elif tok.kind is TokenKind.String:
            self.advance()
            assert isinstance(tok, LiteralToken)  # for mypy
            key = ExprLit(tok.data, tok.span)
        else:
            raise FormulaParseError(
                ParseErrorCode.ExpectedName, "Expected a property name", tok.span
            )

        if self.eat(TokenKind.Colon):
            value = self.parse_expr()
            if value is None:
                raise self._missing_expr(":")
            return ObjProp(key, value, False, key.span.merge(value.span))

        if not isinstance(key, Ident):
            raise FormulaParseError(
                ParseErrorCode.UnexpectedToken,
                'Expected ":" after property key',
                self.tok0.span,
            )
        return ObjProp(key, key, True, key.span)

    def _parse_if(self) -> ExprIf:
        if_tok = self.advance()
        test = self.parse_expr()
        if test is None:
            raise self._missing_expr("if")
        consequent = self.parse_block()

        alternate: Block | ExprIf | None = None
        if self.eat(TokenKind.Else):
            if self.tok0.kind is TokenKind.If:
                with self._nested():
                    alternate = self._parse_if()
            else:
                alternate = self.parse_block()

        end = alternate if alternate is not None else consequent
        return ExprIf(test, consequent, alternate, if_tok.span.merge(end.span))

    def _parse_while(self) -> ExprWhile:
        while_tok = self.advance()
        test = self.parse_expr()
        if test is None:
            raise self._missing_expr("while")
        body = self.parse_block()
        return ExprWhile(test, body, while_tok.span.merge(body.span))

    def _parse_for(self) -> ExprForLoop:
        for_tok = self.advance()
        binding = self._name('Expected a name after "for"')
        self.expect(
            TokenKind.In, 'Expected "in" after loop binding', ParseErrorCode.UnexpectedToken
        )
        range_expr = self.parse_expr()
        if range_expr is None:
            raise self._missing_expr("in")
        body = self.parse_block()
        return ExprForLoop(binding, range_expr, body, for_tok.span.merge(body.span))

    def _parse_range(self, start: Expr) -> ExprRange:
        op_tok = self.advance()
        end = self.parse_binary()
        if end is None:
            raise self._missing_expr(self._text(op_tok))
        inclusive = op_tok.kind is TokenKind.DotEq
        return ExprRange(start, end, inclusive, start.span.merge(end.span))

    def _parse_condition(self, test: Expr) -> ExprCondition:
        self.advance()
        consequent = self.parse_expr()
        if consequent is None:
            raise FormulaParseError(
                ParseErrorCode.ExpectedExpression,
                'Expected expression after "?"',
                self.tok0.span,
            )
        self.expect(
            TokenKind.Colon,
            "Expected a colon after expression",
            ParseErrorCode.UnexpectedToken,
        )
        alternate = self.parse_expr()
        if alternate is None:
            raise FormulaParseError(
                ParseErrorCode.ExpectedExpression,
                'Expected a expression after ":"',
                self.tok0.span,
            )
        return ExprCondition(test, consequent, alternate, test.span.merge(alternate.span))

    def _parse_assign(self, left: Expr) -> ExprAssign:
        if not isinstance(left, (Ident, ExprMember)):
            raise FormulaParseError(
                ParseErrorCode.InvalidAssignment, "Invalid assignment target", left.span
            )
        self.advance()
        right = self.parse_expr()
        if right is None:
            raise self._missing_expr("=")
        return ExprAssign(left, right, left.span.merge(right.span))


def parse(source: str) -> Formula:
    """
    Parse formula source text.

    Args:
        source (str): The formula source.

    Returns:
        Formula: The parsed statement list and its span.

    Raises:
        FormulaSyntaxError: On a lexical error.
        FormulaParseError: On a grammatical error.
    """
    return Parser(Lexer(source)).parse()


def safe_parse(source: str) -> ParseResult:
    """Parse without raising; formula errors are returned in the result."""
    try:
        formula = parse(source)
    except FormulaError as err:
        logger.debug("Formula parse failed: %s", err)
        return ParseResult(success=False, result=None, error=err)
    return ParseResult(success=True, result=formula, error=None)


__all__ = ["BINARY_OPERATORS", "ParseResult", "Parser", "parse", "safe_parse"]

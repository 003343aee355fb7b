from collections.abc import Callable

import pytest

from formula.formula_ast import Expr, Formula, StmtExpr
from formula.formula_lexer import Lexer
from formula.formula_parser import parse
from formula.formula_token import Token, TokenKind


@pytest.fixture  # type: ignore[misc]
def lex() -> Callable[..., list[Token]]:
    """Lexes a whole source; whitespace is dropped unless ``keep`` is set."""

    def _lex(source: str, keep: bool = False) -> list[Token]:
        ignore = () if keep else (TokenKind.Whitespace,)
        return list(Lexer(source, ignore=ignore))

    return _lex


@pytest.fixture  # type: ignore[misc]
def parse_expr() -> Callable[[str], Expr]:
    """Parses a single-statement source and returns its expression."""

    def _parse(source: str) -> Expr:
        formula: Formula = parse(source)
        assert len(formula.body) == 1
        stmt = formula.body[0]
        assert isinstance(stmt, StmtExpr)
        return stmt.expr

    return _parse

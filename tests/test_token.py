import pytest

from formula.formula_errors import InvariantError
from formula.formula_span import Span
from formula.formula_token import (
    KEYWORDS,
    SYMBOLS,
    TRIVIA,
    LiteralToken,
    Token,
    TokenKind,
    literal_type,
)


def test_kind_categories() -> None:
    assert TokenKind.Number.is_literal
    assert TokenKind.Plus.is_symbol
    assert TokenKind.Let.is_keyword
    assert TokenKind.Comment.is_trivia
    assert all(kind.is_trivia for kind in TRIVIA)
    assert all(kind.is_keyword for kind in KEYWORDS.values())


def test_less_equal_symbol_kind() -> None:
    assert SYMBOLS["<="] is TokenKind.LtEq
    assert SYMBOLS[">="] is TokenKind.GtEq


def test_token_text_and_span() -> None:
    tok = Token(TokenKind.Let, Span(0, 3))
    assert tok.text("let a") == "let"
    assert (tok.start, tok.end) == (0, 3)


def test_token_equality() -> None:
    assert Token(TokenKind.Plus, Span(0, 1)) == Token(TokenKind.Plus, Span(0, 1))
    assert Token(TokenKind.Plus, Span(0, 1)) != Token(TokenKind.Minus, Span(0, 1))
    assert Token(TokenKind.Plus, Span(0, 1)) != Token(TokenKind.Plus, Span(1, 2))
    assert len({Token(TokenKind.Plus, Span(0, 1)), Token(TokenKind.Plus, Span(0, 1))}) == 1


def test_literal_token_accessors() -> None:
    name = LiteralToken(TokenKind.Name, Span(0, 5), "block")
    assert LiteralToken.is_(name)
    assert not LiteralToken.is_(Token(TokenKind.Eq, Span(0, 1)))
    assert name.is_name() and not name.is_number()
    assert name.data == "block"
    assert LiteralToken(TokenKind.TemplateString, Span(0, 2), "").is_string()
    assert LiteralToken(TokenKind.Bool, Span(0, 4), True).is_bool()


def test_literal_equality_includes_data() -> None:
    a = LiteralToken(TokenKind.Number, Span(0, 1), 1.0)
    b = LiteralToken(TokenKind.Number, Span(0, 1), 2.0)
    assert a != b
    assert a != Token(TokenKind.Number, Span(0, 1))


def test_literal_equality_includes_data_type() -> None:
    number = LiteralToken(TokenKind.Number, Span(0, 1), 1.0)
    flag = LiteralToken(TokenKind.Number, Span(0, 1), True)
    assert number != flag
    assert number == LiteralToken(TokenKind.Number, Span(0, 1), 1)
    assert hash(number) == hash(LiteralToken(TokenKind.Number, Span(0, 1), 1))
    assert [literal_type(d) for d in (True, 0.0, 3, "x")] == [bool, float, float, str]


@pytest.mark.parametrize("kind", [TokenKind.Plus, TokenKind.Let, TokenKind.Eof])  # type: ignore[misc]
def test_literal_token_rejects_non_literal_kinds(kind: TokenKind) -> None:
    with pytest.raises(InvariantError, match="Literal Token must be"):
        LiteralToken(kind, Span(0, 1), "x")

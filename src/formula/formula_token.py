"""
Token model for the formula language.

Classes:
    TokenKind: Closed enumeration of token kinds. Values carry a category
        prefix: ``lit:`` literals, ``sym:`` symbols, ``kwd:`` keywords and
        ``misc:`` trivia.
    Token: A token kind plus the source span it was built from.
    LiteralToken: A literal token that also carries its scalar value.

Exports:
    - KEYWORDS: keyword spelling -> TokenKind
    - SYMBOLS: symbol spelling -> TokenKind
    - TRIVIA: kinds the parser treats as insignificant
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from formula.formula_errors import InvariantError
from formula.formula_span import Span

LiteralData = float | str | bool


def literal_type(data: LiteralData) -> type:
    """Returns the literal type of ``data``, keeping ``bool`` apart from numbers."""
    if isinstance(data, bool):
        return bool
    if isinstance(data, str):
        return str
    return float



class TokenKind(Enum):
    # literals
    Name = "lit:Name"
    Number = "lit:Number"
    String = "lit:String"
    TemplateString = "lit:TemplateString"
    Bool = "lit:Bool"

    # brackets
    LParen = "sym:LParen"
    RParen = "sym:RParen"
    LBracket = "sym:LBracket"
    RBracket = "sym:RBracket"
    LCurly = "sym:LCurly"
    RCurly = "sym:RCurly"

    # operators
    Plus = "sym:Plus"
    Minus = "sym:Minus"
    Star = "sym:Star"
    StarStar = "sym:StarStar"
    Slash = "sym:Slash"
    Percent = "sym:Percent"
    Lt = "sym:Lt"
    Gt = "sym:Gt"
    LtEq = "sym:LtEq"
    GtEq = "sym:GtEq"
    EqEq = "sym:EqEq"
    NotEq = "sym:NotEq"
    Eq = "sym:Eq"
    Bang = "sym:Bang"
    Caret = "sym:Caret"
    BitwiseOr = "sym:BitwiseOr"
    BitwiseAnd = "sym:BitwiseAnd"

    # punctuation
    Question = "sym:Question"
    Colon = "sym:Colon"
    Semi = "sym:Semi"
    Comma = "sym:Comma"
    Hash = "sym:Hash"
    ThinArrow = "sym:ThinArrow"
    FatArrow = "sym:FatArrow"
    Dot = "sym:Dot"
    DotEq = "sym:DotEq"
    DotDot = "sym:DotDot"
    DotDotDot = "sym:DotDotDot"
    Eof = "sym:Eof"

    # trivia
    Whitespace = "misc:Whitespace"
    NewLine = "misc:NewLine"
    Comment = "misc:Comment"

    # keywords
    Let = "kwd:Let"
    Const = "kwd:Const"
    Fn = "kwd:Fn"
    If = "kwd:If"
    Else = "kwd:Else"
    While = "kwd:While"
    For = "kwd:For"
    In = "kwd:In"
    Return = "kwd:Return"
    Match = "kwd:Match"
    And = "kwd:And"
    Or = "kwd:Or"

    @property
    def is_literal(self) -> bool:
        return self.value.startswith("lit:")

    @property
    def is_symbol(self) -> bool:
        return self.value.startswith("sym:")

    @property
    def is_keyword(self) -> bool:
        return self.value.startswith("kwd:")

    @property
    def is_trivia(self) -> bool:
        return self.value.startswith("misc:")


KEYWORDS: dict[str, TokenKind] = {
    "let": TokenKind.Let,
    "const": TokenKind.Const,
    "fn": TokenKind.Fn,
    "if": TokenKind.If,
    "else": TokenKind.Else,
    "while": TokenKind.While,
    "for": TokenKind.For,
    "in": TokenKind.In,
    "return": TokenKind.Return,
    "match": TokenKind.Match,
    "and": TokenKind.And,
    "or": TokenKind.Or,
}

SYMBOLS: dict[str, TokenKind] = {
    "!": TokenKind.Bang,
    "%": TokenKind.Percent,
    "^": TokenKind.Caret,
    ",": TokenKind.Comma,
    "&": TokenKind.BitwiseAnd,
    "|": TokenKind.BitwiseOr,
    "#": TokenKind.Hash,
    "(": TokenKind.LParen,
    ")": TokenKind.RParen,
    "[": TokenKind.LBracket,
    "]": TokenKind.RBracket,
    "{": TokenKind.LCurly,
    "}": TokenKind.RCurly,
    "+": TokenKind.Plus,
    "-": TokenKind.Minus,
    "*": TokenKind.Star,
    "**": TokenKind.StarStar,
    "/": TokenKind.Slash,
    "=": TokenKind.Eq,
    "<": TokenKind.Lt,
    ">": TokenKind.Gt,
    "<=": TokenKind.LtEq,
    ">=": TokenKind.GtEq,
    "==": TokenKind.EqEq,
    "!=": TokenKind.NotEq,
    ":": TokenKind.Colon,
    "?": TokenKind.Question,
    ";": TokenKind.Semi,
    "->": TokenKind.ThinArrow,
    "=>": TokenKind.FatArrow,
    ".": TokenKind.Dot,
    ".=": TokenKind.DotEq,
    "..": TokenKind.DotDot,
    "...": TokenKind.DotDotDot,
}

TRIVIA: frozenset[TokenKind] = frozenset(
    {TokenKind.Whitespace, TokenKind.NewLine, TokenKind.Comment}
)


class Token:
    """A single lexical token.

    Attributes:
        kind (TokenKind): The token kind.
        span (Span): The exact source range the token was built from.
    """

    __slots__ = ("_kind", "_span")

    def __init__(self, kind: TokenKind, span: Span) -> None:
        self._kind = kind
        self._span = span

    @property
    def kind(self) -> TokenKind:
        return self._kind

    @property
    def span(self) -> Span:
        return self._span

    @property
    def start(self) -> int:
        return self._span.start

    @property
    def end(self) -> int:
        return self._span.end

    def text(self, source: str) -> str:
        """Returns the source text this token was lexed from."""
        return self._span.source_text(source)

    def __repr__(self) -> str:
        return f"Token({self._kind.name}, {self._span.start}..{self._span.end})"

    def __eq__(self, other: Any) -> bool:
        return (
            type(other) is type(self)
            and self._kind == other._kind
            and self._span == other._span
        )

    def __hash__(self) -> int:
        return hash((self._kind, self._span))


class LiteralToken(Token):
    """A literal token (name, number, string, template string or bool).

    Attributes:
        data (float | str | bool): The decoded literal value. Names carry
            their spelling as a string.

    Raises:
        InvariantError: If constructed with a non-literal kind.
    """

    __slots__ = ("_data",)

    def __init__(self, kind: TokenKind, span: Span, data: LiteralData) -> None:
        if not kind.is_literal:
            raise InvariantError(
                f"Literal Token must be of type number | string | bool, got {kind.name}",
                span,
            )
        super().__init__(kind, span)
        self._data = data

    @property
    def data(self) -> LiteralData:
        return self._data

    def is_name(self) -> bool:
        return self._kind is TokenKind.Name

    def is_number(self) -> bool:
        return self._kind is TokenKind.Number

    def is_string(self) -> bool:
        return self._kind in (TokenKind.String, TokenKind.TemplateString)

    def is_bool(self) -> bool:
        return self._kind is TokenKind.Bool

    @staticmethod
    def is_(token: Token) -> bool:
        return isinstance(token, LiteralToken)

    def __repr__(self) -> str:
        return (
            f"LiteralToken({self._kind.name}, {self._data!r}, "
            f"{self._span.start}..{self._span.end})"
        )

    def __eq__(self, other: Any) -> bool:
        return (
            super().__eq__(other)
            and literal_type(self._data) is literal_type(other._data)
            and self._data == other._data
        )

    def __hash__(self) -> int:
        return hash((self._kind, self._span, literal_type(self._data), self._data))


__all__ = [
    "KEYWORDS",
    "SYMBOLS",
    "TRIVIA",
    "LiteralToken",
    "Token",
    "TokenKind",
    "literal_type",
]

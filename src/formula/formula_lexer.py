"""
Lexical analyzer for the formula language.

This module converts formula source text into a stream of tokens:

Classes:
    Lexer: Consumes a SourceCursor and produces Token / LiteralToken values.

Features:
    - Emits trivia as real tokens (``Whitespace``, ``NewLine``, ``Comment``)
      so that every character of the source belongs to exactly one token
    - Optional caller-level filter of token kinds (``ignore``)
    - Names, keywords and ``true`` / ``false`` literals
    - Decimal numbers with ``_`` separators, fractions and exponents, plus
      ``0x`` / ``0o`` / ``0b`` prefixed integers
    - Quoted strings with escapes and multi-line template strings
    - Greedy compound symbols (``==``, ``!=``, ``<=``, ``>=``, ``->``, ``=>``,
      ``**``, ``.=``, ``..``, ``...``)

Raises:
    FormulaSyntaxError: On malformed numbers, unterminated strings or block
        comments, and unknown characters or symbols.

Example:
    >>> lexer = Lexer("let a = 1", ignore=[TokenKind.Whitespace])
    >>> [t.kind.name for t in lexer]
    ['Let', 'Name', 'Eq', 'Number']

Exports:
    - Lexer
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from formula.formula_constants import (
    ESCAPE_CHARACTER_MAP,
    EOF_CHAR,
    INLINE_WHITESPACE,
    QUOTES,
    is_binary_digit,
    is_digit,
    is_hex_digit,
    is_name_continuation,
    is_name_start,
    is_number_continuation,
    is_octal_digit,
)
from formula.formula_cursor import SourceCursor
from formula.formula_errors import FormulaError, SyntaxErrorCode
from formula.formula_span import Span
from formula.formula_token import (
    KEYWORDS,
    SYMBOLS,
    LiteralData,
    LiteralToken,
    Token,
    TokenKind,
)

_RADIX_PREFIXES: dict[str, tuple[int, Callable[[str], bool], str]] = {
    "x": (16, is_hex_digit, "Invalid Hex Digit"),
    "o": (8, is_octal_digit, "Invalid Octal Digit"),
    "b": (2, is_binary_digit, "Invalid Binary Digit"),
}

_SINGLE_SYMBOLS: frozenset[str] = frozenset(":?;&|%^()[]{}+,#@")


class Lexer:
    """Lexical analyzer for formula source text.

    The lexer produces one token per ``advance()`` call and returns ``Eof``
    forever once the source is exhausted. Iterating a lexer never touches its
    own position: ``iter(lexer)`` lexes a fresh copy from the beginning.

    Attributes:
        source (str): The source text. It is not normalised, so token spans
            always index the caller's string.
    """

    def __init__(self, source: str, ignore: Iterable[TokenKind] = ()) -> None:
        """Initializes the Lexer.

        Args:
            source (str): The formula source text.
            ignore (Iterable[TokenKind], optional): Token kinds that
                ``advance()`` and iteration silently drop.
        """
        self.source = source
        self._chars = SourceCursor(source)
        self._location: int = 0
        self._ignored: set[TokenKind] = set(ignore)

    # -- public API

    def ignore(self, *kinds: TokenKind) -> Lexer:
        """Adds token kinds to the caller-level filter and returns self."""
        self._ignored.update(kinds)
        return self

    @property
    def ignored(self) -> frozenset[TokenKind]:
        return frozenset(self._ignored)

    def advance(self) -> Token:
        """Lexes and returns the next token not filtered out by ``ignore``."""
        while True:
            token = self._lex()
            if token.kind is TokenKind.Eof or token.kind not in self._ignored:
                return token

    next = advance

    def is_eof(self) -> bool:
        """True once every character of the source has been consumed."""
        return self._chars.is_eof()

    def clone(self) -> Lexer:
        """Returns an independent lexer at the same position."""
        clone = Lexer.__new__(Lexer)
        clone.source = self.source
        clone._chars = self._chars.clone()
        clone._location = self._location
        clone._ignored = set(self._ignored)
        return clone

    def reset(self) -> Lexer:
        """Rewinds the lexer to the start of the source and returns self."""
        self._chars = SourceCursor(self.source)
        self._location = 0
        return self

    def tokens(self) -> list[Token]:
        """Lexes the whole source from the start, excluding ``Eof``."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        fresh = Lexer(self.source, self._ignored)
        while True:
            token = fresh.advance()
            if token.kind is TokenKind.Eof:
                return
            yield token

    def __repr__(self) -> str:
        return f"Lexer(position={self._chars.position}, eof={self.is_eof()})"

    # -- internals

    def _begin_range(self) -> None:
        self._location += self._chars.range
        self._chars.reset_range()

    @property
    def _span(self) -> Span:
        return Span(self._location, self._location + self._chars.range)

    def _token(self, kind: TokenKind) -> Token:
        return Token(kind, self._span)

    def _literal(self, kind: TokenKind, data: LiteralData) -> LiteralToken:
        return LiteralToken(kind, self._span, data)

    def _peek(self, k: int = 1) -> str:
        return self._chars.peek(k)

    def _error(self, code: SyntaxErrorCode, message: str) -> FormulaError:
        return FormulaError.syntax_error(code, message, self._span)

    def _lex(self) -> Token:
        self._begin_range()
        if self._chars.is_eof():
            return self._token(TokenKind.Eof)

        c = self._chars.advance()

        if c in QUOTES:
            return self._lex_string(c)
        if c in INLINE_WHITESPACE:
            self._chars.eat_while(lambda ch: ch in INLINE_WHITESPACE)
            return self._token(TokenKind.Whitespace)
        if c == "\n":
            return self._token(TokenKind.NewLine)
        if c == "\r":
            if self._peek() == "\n":
                self._chars.advance()
                return self._token(TokenKind.NewLine)
            return self._token(TokenKind.Whitespace)
        if c == "/" and self._peek() in ("/", "*"):
            return self._lex_comment(self._chars.advance())
        if is_digit(c):
            return self._lex_number(c)
        if is_name_start(c):
            return self._lex_name(c)
        return self._lex_symbol(c)

    def _lex_symbol(self, c: str) -> Token:
        nxt = self._peek()
        if c == "!" and nxt == "=":
            return self._symbol(c + self._chars.advance())
        if c == "=" and nxt in ("=", ">"):
            return self._symbol(c + self._chars.advance())
        if c in ("<", ">") and nxt == "=":
            return self._symbol(c + self._chars.advance())
        if c == "-" and nxt == ">":
            return self._symbol(c + self._chars.advance())
        if c == "*" and nxt == "*":
            return self._symbol(c + self._chars.advance())
        if c == ".":
            if nxt == "=":
                return self._symbol(c + self._chars.advance())
            dots = c + self._chars.eat_while(_DotCounter())
            return self._symbol(dots)
        if c in ("!", "=", "<", ">", "-", "*", "/") or c in _SINGLE_SYMBOLS:
            return self._symbol(c)
        raise self._error(SyntaxErrorCode.UnexpectedToken, f"Unexpected token {c}")

    def _symbol(self, symbol: str) -> Token:
        kind = SYMBOLS.get(symbol)
        if kind is None:
            raise self._error(
                SyntaxErrorCode.UnexpectedToken, f"Unexpected symbol {symbol}"
            )
        return self._token(kind)

    def _lex_name(self, first: str) -> Token:
        name = first + self._chars.eat_while(is_name_continuation)
        keyword = KEYWORDS.get(name)
        if keyword is not None:
            return self._token(keyword)
        if name in ("true", "false"):
            return self._literal(TokenKind.Bool, name == "true")
        return self._literal(TokenKind.Name, name)

    def _lex_comment(self, mode: str) -> Token:
        if mode == "/":
            while not self._chars.is_eof():
                nxt = self._peek()
                if nxt == "\n" or (nxt == "\r" and self._peek(2) == "\n"):
                    break
                self._chars.advance()
            return self._token(TokenKind.Comment)

        while True:
            if self._chars.is_eof():
                raise self._error(SyntaxErrorCode.UnexpectedToken, "Expected */")
            if self._peek() == "*" and self._peek(2) == "/":
                self._chars.advance()
                self._chars.advance()
                return self._token(TokenKind.Comment)
            self._chars.advance()

    # numbers

    def _lex_number(self, first: str) -> Token:
        if first == "0":
            prefix = self._peek().lower()
            if prefix in _RADIX_PREFIXES:
                self._chars.advance()
                return self._lex_radix(*_RADIX_PREFIXES[prefix])
            if self._peek() == "0":
                self._chars.advance()
                raise self._error(
                    SyntaxErrorCode.BadNumberLiteral,
                    "Bad number literal. Did you mean 0o<value> for octal?",
                )
        return self._lex_decimal(first)

    def _lex_radix(
        self, radix: int, is_valid: Callable[[str], bool], message: str
    ) -> Token:
        digits = self._chars.eat_while(is_name_continuation).replace("_", "")
        if not digits or not all(is_valid(d) for d in digits):
            raise self._error(SyntaxErrorCode.BadNumberLiteral, message)
        return self._literal(TokenKind.Number, float(int(digits, radix)))

    def _lex_decimal(self, first: str) -> Token:
        text = self._digit_run(first)

        # ".." and ".=" belong to the range operators
        if self._peek() == "." and self._peek(2) not in (".", "="):
            text += self._chars.advance()
            text += self._expect_digits(".")

        if self._peek() in ("e", "E"):
            marker = self._chars.advance()
            text += marker
            sign = self._peek()
            if sign in ("+", "-"):
                self._chars.advance()
                if not is_digit(self._peek()):
                    raise self._error(
                        SyntaxErrorCode.BadNumberLiteral,
                        f'Signed exponents should follow a value or remove the "{sign}"',
                    )
                text += sign
            text += self._expect_digits(marker)

        try:
            value = float(text.replace("_", ""))
        except ValueError:
            raise self._error(
                SyntaxErrorCode.BadNumberLiteral, "Bad number literal"
            ) from None
        return self._literal(TokenKind.Number, value)

    def _expect_digits(self, after: str) -> str:
        nxt = self._peek()
        if not is_digit(nxt):
            raise self._error(
                SyntaxErrorCode.BadNumberLiteral,
                f'Expected a valid digit after "{after}" but got "{nxt}"',
            )
        return self._digit_run("")

    def _digit_run(self, first: str) -> str:
        # every "_" sits between two digits
        run = first + self._chars.eat_while(is_number_continuation)
        if run.endswith("_") or "__" in run:
            raise self._error(
                SyntaxErrorCode.BadNumberLiteral,
                "Numeric separators must be followed by a digit",
            )
        return run

    # strings

    def _lex_string(self, quote: str) -> Token:
        template = quote == "`"
        content: list[str] = []
        while True:
            if self._chars.is_eof() or (not template and self._peek() == "\n"):
                raise self._error(
                    SyntaxErrorCode.UnterminatedLiteral, "Bad termination of string"
                )
            c = self._chars.advance()
            if c == quote:
                break
            if c == "\\":
                escape = ESCAPE_CHARACTER_MAP.get(self._peek())
                if escape is not None:
                    self._chars.advance()
                    content.append(escape)
                else:
                    content.append(c)
                continue
            content.append(c)

        kind = TokenKind.TemplateString if template else TokenKind.String
        return self._literal(kind, "".join(content))


class _DotCounter:
    """``eat_while`` predicate accepting at most two more dots."""

    def __init__(self) -> None:
        self.count = 1

    def __call__(self, c: str) -> bool:
        if c == "." and self.count < 3:
            self.count += 1
            return True
        return False


__all__ = ["Lexer"]

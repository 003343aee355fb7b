"""
Error types raised while lexing and parsing formulas.

Classes:
    ErrorType: The error category (syntax, parse or runtime).
    SyntaxErrorCode / ParseErrorCode / RuntimeErrorCode: Numeric error codes.
    FormulaError: Base class carrying category, code, cause and source span.
    FormulaSyntaxError: Malformed token-level input (raised by the lexer).
    FormulaParseError: Malformed token sequence (raised by the parser).
    FormulaRuntimeError: Reserved for evaluators built on top of the AST.
    InvariantError: Internal consistency violation; never caused by user input.

Every error aborts the current parse. ``str(error)`` reads
``"( SyntaxError ) -> Bad termination of string"`` and ``render(source)``
adds the offending source line with the span underlined.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from formula.formula_span import Span


class ErrorType(Enum):
    SyntaxError = "SyntaxError"
    ParseError = "ParseError"
    RuntimeError = "RuntimeError"


class SyntaxErrorCode(IntEnum):
    Unknown = 0
    UnexpectedToken = 1
    UnterminatedLiteral = 2
    BadNumberLiteral = 3
    UnexpectedEOF = 4


class ParseErrorCode(IntEnum):
    Unknown = 0
    UnexpectedToken = 1
    UnexpectedEOF = 2
    ExpectedName = 3
    ExpectedExpression = 4
    TrailingComma = 5
    UnclosedDelimiter = 6
    InvalidAssignment = 7
    TooDeeplyNested = 8


class RuntimeErrorCode(IntEnum):
    Unknown = 0


ErrorCode = SyntaxErrorCode | ParseErrorCode | RuntimeErrorCode


class FormulaError(Exception):
    """Base class for all formula errors.

    Attributes:
        type: The error category.
        code: Category-specific numeric code.
        cause: Human-readable description of the failure.
        span: Offending source range, when known.
    """

    def __init__(
        self,
        type_: ErrorType,
        code: ErrorCode,
        cause: str,
        span: Span | None = None,
    ) -> None:
        self.type = type_
        self.code = code
        self.cause = cause
        self.span = span
        super().__init__(f"( {type_.value} ) -> {cause}")

    @classmethod
    def syntax_error(
        cls, code: SyntaxErrorCode, cause: str, span: Span | None = None
    ) -> FormulaSyntaxError:
        return FormulaSyntaxError(code, cause, span)

    @classmethod
    def parse_error(
        cls, code: ParseErrorCode, cause: str, span: Span | None = None
    ) -> FormulaParseError:
        return FormulaParseError(code, cause, span)

    @classmethod
    def runtime_error(
        cls, code: RuntimeErrorCode, cause: str, span: Span | None = None
    ) -> FormulaRuntimeError:
        return FormulaRuntimeError(code, cause, span)

    def render(self, source: str) -> str:
        """
        Formats the error for display, underlining the span in ``source``.

        Args:
            source (str): The formula source the error was raised for.

        Returns:
            str: The message, followed by the offending line and a caret
            underline when the error has a span.
        """
        message = str(self)
        if self.span is None:
            return message

        start = min(self.span.start, len(source))
        line_start = source.rfind("\n", 0, start) + 1
        line_end = source.find("\n", start)
        if line_end == -1:
            line_end = len(source)
        line_no = source.count("\n", 0, start) + 1

        text = source[line_start:line_end].rstrip("\r")
        column = start - line_start
        width = max(1, min(self.span.end, line_end) - start)
        gutter = f"{line_no:>3} | "
        underline = " " * len(gutter) + " " * column + "^" + "~" * (width - 1)
        return f"{message}\n{gutter}{text}\n{underline}"


class FormulaSyntaxError(FormulaError):
    def __init__(
        self, code: SyntaxErrorCode, cause: str, span: Span | None = None
    ) -> None:
        super().__init__(ErrorType.SyntaxError, code, cause, span)


class FormulaParseError(FormulaError):
    def __init__(
        self, code: ParseErrorCode, cause: str, span: Span | None = None
    ) -> None:
        super().__init__(ErrorType.ParseError, code, cause, span)


class FormulaRuntimeError(FormulaError):
    def __init__(
        self, code: RuntimeErrorCode, cause: str, span: Span | None = None
    ) -> None:
        super().__init__(ErrorType.RuntimeError, code, cause, span)


class InvariantError(FormulaError):
    """Raised when an internal invariant is broken (a bug, not bad input)."""

    def __init__(self, cause: str, span: Span | None = None) -> None:
        super().__init__(ErrorType.ParseError, ParseErrorCode.Unknown, cause, span)


__all__ = [
    "ErrorCode",
    "ErrorType",
    "FormulaError",
    "FormulaParseError",
    "FormulaRuntimeError",
    "FormulaSyntaxError",
    "InvariantError",
    "ParseErrorCode",
    "RuntimeErrorCode",
    "SyntaxErrorCode",
]

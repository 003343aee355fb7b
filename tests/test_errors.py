import pytest

from formula.formula_errors import (
    ErrorType,
    FormulaError,
    FormulaParseError,
    FormulaRuntimeError,
    FormulaSyntaxError,
    InvariantError,
    ParseErrorCode,
    RuntimeErrorCode,
    SyntaxErrorCode,
)
from formula.formula_span import Span


def test_message_format() -> None:
    err = FormulaError.syntax_error(SyntaxErrorCode.UnexpectedToken, "Expected */")
    assert isinstance(err, FormulaSyntaxError)
    assert str(err) == "( SyntaxError ) -> Expected */"
    assert err.cause == "Expected */"
    assert err.span is None


@pytest.mark.parametrize(  # type: ignore[misc]
    "err,type_",
    [
        (FormulaParseError(ParseErrorCode.ExpectedName, "x"), ErrorType.ParseError),
        (FormulaRuntimeError(RuntimeErrorCode.Unknown, "x"), ErrorType.RuntimeError),
        (FormulaSyntaxError(SyntaxErrorCode.Unknown, "x"), ErrorType.SyntaxError),
        (InvariantError("x"), ErrorType.ParseError),
    ],
)
def test_error_types(err: FormulaError, type_: ErrorType) -> None:
    assert err.type is type_
    assert str(err) == f"( {type_.value} ) -> x"


def test_factories_build_subclasses() -> None:
    parse_err = FormulaError.parse_error(ParseErrorCode.TrailingComma, "t", Span(1, 2))
    assert isinstance(parse_err, FormulaParseError)
    assert parse_err.code is ParseErrorCode.TrailingComma
    runtime_err = FormulaError.runtime_error(RuntimeErrorCode.Unknown, "r")
    assert isinstance(runtime_err, FormulaRuntimeError)


def test_render_underlines_span() -> None:
    source = "let a = 1\nlet = 2"
    err = FormulaParseError(ParseErrorCode.ExpectedName, "Expected a name", Span(14, 15))
    lines = err.render(source).splitlines()
    assert lines[0] == "( ParseError ) -> Expected a name"
    assert lines[1] == "  2 | let = 2"
    assert lines[2] == "      " + " " * 4 + "^"


def test_render_without_span_is_message() -> None:
    err = FormulaParseError(ParseErrorCode.Unknown, "oops")
    assert err.render("anything") == "( ParseError ) -> oops"


def test_errors_are_catchable_as_exceptions() -> None:
    with pytest.raises(FormulaError):
        raise InvariantError("broken")

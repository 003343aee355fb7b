import pytest
from hypothesis import given
from hypothesis import strategies as st

from formula.formula_constants import EOF_CHAR
from formula.formula_cursor import SourceCursor
from formula.formula_span import Span

SRC = """
    let x = 10
    return x + 1
    """


def test_peeking() -> None:
    cur = SourceCursor(SRC.strip())
    assert [cur.peek(), cur.peek(2), cur.peek(3)] == ["l", "e", "t"]
    assert cur.position == 0


def test_peek_rejects_zero_lookahead() -> None:
    with pytest.raises(ValueError):
        SourceCursor("abc").peek(0)


def test_peek_past_end_returns_eof_char() -> None:
    cur = SourceCursor("ab")
    assert cur.peek(3) == EOF_CHAR
    cur.advance()
    cur.advance()
    assert cur.is_eof()
    assert cur.peek() == EOF_CHAR
    assert cur.advance() == EOF_CHAR


def test_traverse_to_the_end() -> None:
    cur = SourceCursor(SRC)
    acc = ""
    while not cur.is_eof():
        acc += cur.advance()
    assert acc == SRC


def test_eat_while() -> None:
    cur = SourceCursor('"BlockSuite"')
    cur.advance()
    assert cur.eat_while(lambda c: c != '"') == "BlockSuite"
    assert cur.peek() == '"'


def test_range_tracks_consumed_characters() -> None:
    source = "Block Suite"
    cur = SourceCursor(source)
    location = 0
    spans = []

    for _ in range(len("Block")):
        cur.advance()
    spans.append(Span(location, location + cur.range))

    cur.advance()  # space
    location += cur.range
    cur.reset_range()

    for _ in range(len("Suite")):
        cur.advance()
    spans.append(Span(location, location + cur.range))

    assert [s.source_text(source) for s in spans] == ["Block", "Suite"]
    assert cur.position == len(source)


def test_clone_is_independent() -> None:
    cur = SourceCursor("let")
    clone = cur.clone()
    cur.advance()
    assert clone.peek() == "l"
    assert cur.peek() == "e"
    assert str(cur) == "et"
    assert str(clone) == "let"


@given(st.text())  # type: ignore[misc]
def test_str_is_remaining_text(text: str) -> None:
    cur = SourceCursor(text)
    half = len(text) // 2
    for _ in range(half):
        cur.advance()
    assert str(cur) == text[half:]
    assert cur.remaining == len(text) - half

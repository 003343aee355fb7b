from hypothesis import given
from hypothesis import strategies as st

from formula.formula_peekable import Peekable

VALUES = [1, 2, 3, 4, 5, 6, 7]


def test_peek_does_not_advance() -> None:
    it = Peekable(VALUES)
    assert it.peek() == 1
    assert it.next() == 1
    assert it.peek() == 2


def test_iterate_till_end() -> None:
    it = Peekable(VALUES)
    res = []
    while not it.done():
        res.append(it.next())
    assert res == VALUES
    assert it.peek() is None
    assert it.next() is None


def test_done() -> None:
    it = Peekable([1, 2])
    assert not it.done()
    it.next()
    it.next()
    assert it.done()


def test_remaining_never_negative() -> None:
    it = Peekable(VALUES)
    assert it.remaining == len(VALUES)
    for _ in range(len(VALUES) + 2):
        it.next()
    assert it.remaining == 0
    assert len(it) == 0


def test_skip_is_chainable_and_bounded() -> None:
    it = Peekable(VALUES)
    assert it.skip(2).peek() == 3
    assert it.skip(100).done()


def test_clone_is_independent() -> None:
    it = Peekable([1, 2, 3, 4])
    clone = it.clone()
    it.next()
    it.next()
    clone.next()
    assert it.peek() == 3
    assert clone.peek() == 2


def test_to_list_returns_remaining_items() -> None:
    it = Peekable(VALUES)
    assert it.to_list() == VALUES
    it.next()
    assert it.to_list() == VALUES[1:]


def test_map_does_not_advance() -> None:
    fruits = ["Apple", "Banana", "Orange"]
    it = Peekable(fruits)
    mapped = it.map(lambda fruit, i: f"{i + 1}. {fruit}")
    assert mapped.to_list() == ["1. Apple", "2. Banana", "3. Orange"]
    assert it.remaining == len(fruits)


def test_filter_does_not_advance() -> None:
    it = Peekable(VALUES)
    evens = it.filter(lambda n, _: n % 2 == 0)
    assert evens.to_list() == [2, 4, 6]
    assert it.remaining == len(VALUES)


def test_fold() -> None:
    assert Peekable(VALUES).fold(lambda acc, n: acc + n, 0) == sum(VALUES)
    assert Peekable("abc").fold(lambda acc, c: c + acc, "") == "cba"


def test_iter_leaves_position_untouched() -> None:
    it = Peekable(VALUES)
    it.next()
    assert list(it) == VALUES[1:]
    assert it.peek() == 2


@given(st.lists(st.integers()), st.integers(min_value=0, max_value=20))  # type: ignore[misc]
def test_skip_matches_slicing(items: list[int], n: int) -> None:
    it = Peekable(items)
    clone = it.clone()
    it.skip(n)
    assert it.to_list() == items[n:]
    assert clone.to_list() == items

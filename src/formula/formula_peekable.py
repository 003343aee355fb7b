"""
Peekable iterator with cheap, independent clones.

The iterable is materialised once into an immutable tuple; a ``Peekable`` is
only an index into it. Cloning therefore copies a single integer and the clone
never shares position state with the original.

Example:
    >>> it = Peekable([1, 2, 3])
    >>> it.peek()
    1
    >>> clone = it.clone()
    >>> it.next(), clone.peek()
    (1, 1)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")
F = TypeVar("F")


class Peekable(Generic[T]):
    """An iterator with ``peek()`` that returns the next item without advancing.

    Attributes:
        remaining (int): Number of items not yet consumed. Never negative.
    """

    def __init__(self, iterable: Iterable[T]) -> None:
        self._items: tuple[T, ...] = tuple(iterable)
        self._index: int = 0

    @classmethod
    def _view(cls, items: tuple[T, ...], index: int) -> Peekable[T]:
        view: Peekable[T] = cls.__new__(cls)
        view._items = items
        view._index = index
        return view

    def peek(self) -> T | None:
        """Returns the next item without consuming it, or None when done."""
        if self._index >= len(self._items):
            return None
        return self._items[self._index]

    def next(self) -> T | None:
        """Consumes and returns the next item, or None when done."""
        if self._index >= len(self._items):
            return None
        item = self._items[self._index]
        self._index += 1
        return item

    def skip(self, n: int) -> Peekable[T]:
        """Skips up to ``n`` items and returns self for chaining."""
        while n > 0 and not self.done():
            self.next()
            n -= 1
        return self

    def done(self) -> bool:
        return self._index >= len(self._items)

    @property
    def remaining(self) -> int:
        return len(self._items) - self._index

    def clone(self) -> Peekable[T]:
        """Returns an independent Peekable positioned at the same item."""
        return self._view(self._items, self._index)

    def map(self, fn: Callable[[T, int], R]) -> Peekable[R]:
        """Maps the remaining items into a new Peekable without advancing self."""
        return Peekable(fn(item, i) for i, item in enumerate(self.to_list()))

    def filter(self, fn: Callable[[T, int], bool]) -> Peekable[T]:
        """Keeps the remaining items matching ``fn`` without advancing self."""
        return Peekable(item for i, item in enumerate(self.to_list()) if fn(item, i))

    def fold(self, fn: Callable[[F, T], F], init: F) -> F:
        acc = init
        for item in self.to_list():
            acc = fn(acc, item)
        return acc

    def to_list(self) -> list[T]:
        """Returns the remaining items as a list."""
        return list(self._items[self._index :])

    def __iter__(self) -> Iterator[T]:
        clone = self.clone()
        while not clone.done():
            yield clone._items[clone._index]
            clone._index += 1

    def __len__(self) -> int:
        return self.remaining

    def __repr__(self) -> str:
        return f"Peekable(remaining={self.remaining})"


__all__ = ["Peekable"]

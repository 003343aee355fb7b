"""
Source cursor used by the formula lexer.

Classes:
    SourceCursor: Forward-only character cursor with 1-3 character lookahead,
        consumed-range tracking and cheap cloning.

Lookahead beyond the next character is answered by cloning the underlying
``Peekable`` and advancing the clone, so peeking never mutates the cursor.

Example:
    >>> cur = SourceCursor("let x")
    >>> cur.peek(), cur.peek(2), cur.peek(3)
    ('l', 'e', 't')
    >>> cur.eat_while(str.isalpha)
    'let'
    >>> cur.range
    3
"""

from __future__ import annotations

from collections.abc import Callable

from formula.formula_constants import EOF_CHAR
from formula.formula_peekable import Peekable


class SourceCursor:
    """
    A restartable, clonable cursor over the characters of a source string.

    Attributes:
        source (str): The full source text.
        range (int): Characters consumed since the last ``reset_range()``.
        position (int): Characters consumed since the start of the source.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._chars: Peekable[str] = Peekable(source)
        self._mark: int = self._chars.remaining

    @property
    def range(self) -> int:
        return self._mark - self._chars.remaining

    def reset_range(self) -> None:
        """Starts a new range at the current position."""
        self._mark = self._chars.remaining

    @property
    def position(self) -> int:
        return len(self.source) - self._chars.remaining

    @property
    def remaining(self) -> int:
        return self._chars.remaining

    def peek(self, k: int = 1) -> str:
        """
        Returns the k-th upcoming character without consuming anything.

        Args:
            k (int, optional): 1 for the next character, 2 and 3 for further
                lookahead. Defaults to 1.

        Returns:
            str: The character, or ``EOF_CHAR`` past the end of the source.
        """
        if k < 1:
            raise ValueError(f"Lookahead must be at least 1, got {k}")
        if k == 1:
            item = self._chars.peek()
        else:
            item = self._chars.clone().skip(k - 1).peek()
        return EOF_CHAR if item is None else item

    def advance(self) -> str:
        """Consumes and returns the next character (``EOF_CHAR`` at the end)."""
        item = self._chars.next()
        return EOF_CHAR if item is None else item

    def eat_while(self, predicate: Callable[[str], bool]) -> str:
        """Consumes characters while ``predicate`` holds and returns them."""
        eaten: list[str] = []
        while not self.is_eof() and predicate(self.peek()):
            eaten.append(self.advance())
        return "".join(eaten)

    def is_eof(self) -> bool:
        return self._chars.done()

    def clone(self) -> SourceCursor:
        """Returns an independent cursor at the same position and range mark."""
        clone = SourceCursor.__new__(SourceCursor)
        clone.source = self.source
        clone._chars = self._chars.clone()
        clone._mark = self._mark
        return clone

    def __str__(self) -> str:
        return self._chars.fold(lambda acc, c: acc + c, "")

    def __repr__(self) -> str:
        return f"SourceCursor(position={self.position}, range={self.range})"


__all__ = ["SourceCursor"]

"""
Source spans for tokens and AST nodes.

A ``Span`` is a half-open ``[start, end)`` pair of character offsets into the
original formula source. Spans are immutable values; ``merge`` returns a new
span covering both operands.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from formula.formula_errors import InvariantError


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise InvariantError(f"Invalid span range [{self.start}, {self.end})")

    def merge(self, other: Span) -> Span:
        """Returns the smallest span covering both ``self`` and ``other``."""
        return Span(min(self.start, other.start), max(self.end, other.end))

    def clone(self) -> Span:
        return replace(self)

    def contains(self, index: int) -> bool:
        return self.start <= index <= self.end

    def source_text(self, source: str) -> str:
        """Returns the slice of ``source`` covered by this span."""
        return source[self.start : self.end]

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return f"[[ Start: {self.start} , End: {self.end} ]]"


__all__ = ["Span"]

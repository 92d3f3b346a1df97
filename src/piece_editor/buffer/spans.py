"""Span values describing contiguous slices of the two backing buffers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


class SpanSource(Enum):
    ORIGINAL = "original"
    CHANGES = "changes"


@dataclass(frozen=True, slots=True)
class Span:
    """Reference to ``length`` bytes starting at ``start`` in one buffer."""

    source: SpanSource
    start: int
    length: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError("span start cannot be negative")
        if self.length < 0:
            raise ValueError("span length cannot be negative")

    @property
    def end(self) -> int:
        return self.start + self.length

    def split(self, offset: int) -> Tuple["Span", "Span"]:
        """Cut the span ``offset`` bytes in; either half may be empty."""

        if offset < 0 or offset > self.length:
            raise ValueError(f"split offset {offset} outside span of {self.length}")
        left = replace(self, length=offset)
        right = replace(self, start=self.start + offset, length=self.length - offset)
        return left, right

    def trim_front(self) -> "Span":
        return replace(self, start=self.start + 1, length=self.length - 1)

    def trim_back(self) -> "Span":
        return replace(self, length=self.length - 1)


__all__ = ["Span", "SpanSource"]

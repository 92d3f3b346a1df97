"""Error types and bounds helpers shared across buffer services."""

from __future__ import annotations

from typing import Optional


class PieceTableError(RuntimeError):
    """Base class for recoverable buffer failures."""


class IndexOutOfRange(PieceTableError, IndexError):
    """Raised when an offset or line number exceeds the document bounds."""

    def __init__(
        self, message: str, *, index: Optional[int] = None, limit: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.index = index
        self.limit = limit


class BufferReleasedError(PieceTableError):
    """Raised when a released piece table is used again."""


def ensure_insert_index(index: int, length: int) -> int:
    # Insertion points include the end of the document.
    if index < 0 or index > length:
        raise IndexOutOfRange(
            f"Insert index {index} outside [0, {length}]", index=index, limit=length
        )
    return index


def ensure_byte_index(index: int, length: int) -> int:
    if index < 0 or index >= length:
        raise IndexOutOfRange(
            f"Byte index {index} outside [0, {length})", index=index, limit=length
        )
    return index


def ensure_line(line: int) -> int:
    if line < 0:
        raise IndexOutOfRange(f"Line {line} is negative", index=line)
    return line


__all__ = [
    "PieceTableError",
    "BufferReleasedError",
    "IndexOutOfRange",
    "ensure_byte_index",
    "ensure_insert_index",
    "ensure_line",
]

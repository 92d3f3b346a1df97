"""Piece-table buffer: dual buffer store, span sequence, positional queries."""

from .changes import ChangesBuffer
from .piece_table import PieceTable, TextLike
from .spans import Span, SpanSource
from .validation import (
    BufferReleasedError,
    IndexOutOfRange,
    PieceTableError,
    ensure_byte_index,
    ensure_insert_index,
    ensure_line,
)

__all__ = [
    "ChangesBuffer",
    "PieceTable",
    "TextLike",
    "Span",
    "SpanSource",
    "PieceTableError",
    "BufferReleasedError",
    "IndexOutOfRange",
    "ensure_byte_index",
    "ensure_insert_index",
    "ensure_line",
]

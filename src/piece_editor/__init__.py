"""Piece-table text buffer engine for a line-oriented terminal editor."""

__all__ = [
    "adapters",
    "buffer",
    "editor",
    "runtime",
    "terminal",
]

__version__ = "0.1.0"

"""Piece-table document: an immutable original, an append-only changes
buffer, and the ordered span sequence stitching them into the text.

Offsets are byte offsets. ``str`` input is encoded as UTF-8 before it
reaches either buffer.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple, Union

from piece_editor.runtime import telemetry
from piece_editor.runtime.config import DEFAULT_CHANGES_CAPACITY

from .changes import ChangesBuffer
from .spans import Span, SpanSource
from .validation import (
    BufferReleasedError,
    IndexOutOfRange,
    ensure_byte_index,
    ensure_insert_index,
    ensure_line,
)

TextLike = Union[bytes, bytearray, memoryview, str]

NEWLINE = b"\n"


def _as_bytes(data: TextLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"expected bytes or str, got {type(data).__name__}")


class PieceTable:
    """Editable document backed by two buffers and a span sequence.

    The span sequence never holds zero-length spans: an empty document has
    no spans at all, and edits drop any remainder that would be empty.
    """

    def __init__(
        self,
        initial_text: TextLike = b"",
        *,
        changes_capacity: int = DEFAULT_CHANGES_CAPACITY,
        name: str = "document",
    ) -> None:
        original = _as_bytes(initial_text)
        self.name = name
        self._original: Optional[bytes] = original
        self._changes = ChangesBuffer(changes_capacity)
        self._spans: Optional[List[Span]] = []
        if original:
            self._spans.append(Span(SpanSource.ORIGINAL, 0, len(original)))

    @classmethod
    def init(cls, initial_text: TextLike = b"", **kwargs) -> "PieceTable":
        return cls(initial_text, **kwargs)

    def __enter__(self) -> "PieceTable":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False

    def __len__(self) -> int:
        return self.length()

    def __repr__(self) -> str:
        if self._spans is None:
            return f"PieceTable(name={self.name!r}, released)"
        return (
            f"PieceTable(name={self.name!r}, length={self.length()}, "
            f"spans={len(self._spans)})"
        )

    # -- queries -----------------------------------------------------------

    def length(self) -> int:
        return sum(span.length for span in self._require_spans())

    def text(self) -> bytes:
        """Materialize the document as an independent ``bytes`` snapshot."""

        return b"".join(self._span_bytes(span) for span in self._require_spans())

    def spans(self) -> Tuple[Span, ...]:
        return tuple(self._require_spans())

    def line_start(self, line: int) -> int:
        """Return the offset of the first byte of ``line`` (0-based).

        Raises ``IndexOutOfRange`` when the document has fewer than ``line``
        newlines.
        """

        ensure_line(line)
        self._require_spans()
        if line == 0:
            return 0
        for seen, offset in enumerate(self._iter_newlines(), start=1):
            if seen == line:
                return offset + 1
        raise IndexOutOfRange(f"Line {line} does not exist", index=line)

    def line_length(self, line: int) -> int:
        """Return the byte count of ``line`` excluding its newline."""

        start = self.line_start(line)
        for offset in self._iter_newlines():
            if offset >= start:
                return offset - start
        return self.length() - start

    def line_count(self) -> int:
        return sum(1 for _ in self._iter_newlines()) + 1

    # -- mutation ----------------------------------------------------------

    def append_changes(self, data: bytes) -> int:
        self._require_spans()
        return self._changes.append(data)

    def insert(self, index: int, data: TextLike) -> None:
        """Splice ``data`` into the document before byte ``index``.

        ``index`` may equal ``length()`` to append. The bounds check runs
        before anything is written, so a failed insert leaves no trace.
        """

        spans = self._require_spans()
        payload = _as_bytes(data)
        ensure_insert_index(index, self.length())
        if not payload:
            return

        with telemetry.span(
            "piece_table::insert",
            component="piece_table",
            metadata={"document": self.name, "index": index, "size": len(payload)},
        ):
            start = self.append_changes(payload)
            new_span = Span(SpanSource.CHANGES, start, len(payload))
            target, offset = self._locate(index)
            if target == len(spans):
                spans.append(new_span)
                return
            left, right = spans[target].split(offset)
            spans[target : target + 1] = [
                span for span in (left, new_span, right) if span.length
            ]

    def remove(self, index: int, count: int) -> None:
        """Remove ``count`` bytes starting at ``index``.

        ``index`` itself is checked up front. Beyond that this is ``count``
        repetitions of ``remove_one(index)`` and is not atomic: if the
        range runs past the end of the document, the bytes
        up to the end are removed before ``IndexOutOfRange`` is raised.
        Callers that need all-or-nothing behaviour must check
        ``index + count <= length()`` first.
        """

        self._require_spans()
        if count < 0:
            raise ValueError("count cannot be negative")
        if count == 0:
            return
        ensure_byte_index(index, self.length())

        with telemetry.span(
            "piece_table::remove",
            component="piece_table",
            metadata={"document": self.name, "index": index, "count": count},
        ):
            for _ in range(count):
                self.remove_one(index)

    def remove_one(self, index: int) -> None:
        spans = self._require_spans()
        ensure_byte_index(index, self.length())
        target, offset = self._locate(index)
        span = spans[target]

        if offset == span.length - 1:
            shrunk = span.trim_back()
        elif offset == 0:
            shrunk = span.trim_front()
        else:
            left, right = span.split(offset)
            spans[target : target + 1] = [left, right.trim_front()]
            return

        if shrunk.length:
            spans[target] = shrunk
        else:
            del spans[target]

    def release(self) -> None:
        """Free both buffers and the span sequence; the table is unusable after."""

        if self._spans is None:
            return
        self._spans = None
        self._original = None
        self._changes.release()
        telemetry.record_event(
            "piece_table.release", level="debug", data={"document": self.name}
        )

    @property
    def released(self) -> bool:
        return self._spans is None

    # -- internals ---------------------------------------------------------

    def _locate(self, index: int) -> Tuple[int, int]:
        """Return ``(span_index, offset_in_span)`` for document byte ``index``.

        ``index == length()`` maps to ``(len(spans), 0)``.
        """

        running = 0
        spans = self._require_spans()
        for position, span in enumerate(spans):
            if running + span.length > index:
                return position, index - running
            running += span.length
        return len(spans), 0

    def _span_bytes(self, span: Span) -> memoryview:
        if span.source is SpanSource.ORIGINAL:
            assert self._original is not None
            return memoryview(self._original)[span.start : span.end]
        return self._changes.view(span.start, span.length)

    def _iter_newlines(self) -> Iterator[int]:
        base = 0
        for span in self._require_spans():
            chunk = bytes(self._span_bytes(span))
            found = chunk.find(NEWLINE)
            while found != -1:
                yield base + found
                found = chunk.find(NEWLINE, found + 1)
            base += span.length

    def _require_spans(self) -> List[Span]:
        if self._spans is None:
            raise BufferReleasedError(f"piece table {self.name!r} has been released")
        return self._spans


__all__ = ["PieceTable", "TextLike"]

"""Append-only growable store holding every inserted byte."""

from __future__ import annotations

from piece_editor.runtime import telemetry
from piece_editor.runtime.config import DEFAULT_CHANGES_CAPACITY

from .validation import BufferReleasedError, IndexOutOfRange


class ChangesBuffer:
    """Owned byte container whose used region is never rewritten.

    ``capacity`` is the allocated size and ``used`` the written prefix.
    Growth copies the used prefix into fresh storage before the new storage
    replaces the old one, so offsets handed out by ``append`` stay valid for
    the life of the buffer.
    """

    def __init__(self, capacity: int = DEFAULT_CHANGES_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._storage: bytearray | None = bytearray(capacity)
        self._used = 0

    @property
    def capacity(self) -> int:
        return len(self._require_storage())

    @property
    def used(self) -> int:
        return self._used

    def append(self, data: bytes) -> int:
        """Copy ``data`` after the used region and return where it starts."""

        storage = self._require_storage()
        start = self._used
        required = start + len(data)
        if required > len(storage):
            storage = self._grow(storage, required)
        storage[start:required] = data
        self._used = required
        return start

    def view(self, start: int, length: int) -> memoryview:
        storage = self._require_storage()
        if start < 0 or length < 0 or start + length > self._used:
            raise IndexOutOfRange(
                f"Range [{start}, {start + length}) outside used changes",
                index=start,
                limit=self._used,
            )
        return memoryview(storage)[start : start + length].toreadonly()

    def release(self) -> None:
        self._storage = None
        self._used = 0

    @property
    def released(self) -> bool:
        return self._storage is None

    def _grow(self, storage: bytearray, required: int) -> bytearray:
        new_capacity = max(required, 2 * len(storage))
        grown = bytearray(new_capacity)
        grown[: self._used] = storage[: self._used]
        self._storage = grown
        telemetry.record_event(
            "changes.grow",
            level="debug",
            data={"from": len(storage), "to": new_capacity, "used": self._used},
        )
        return grown

    def _require_storage(self) -> bytearray:
        if self._storage is None:
            raise BufferReleasedError("changes buffer has been released")
        return self._storage


__all__ = ["ChangesBuffer"]

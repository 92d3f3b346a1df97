"""Decode raw terminal input bytes into key strokes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Optional

ESC = 0x1B
DEL = 0x7F

# Escape sequences recognised after the leading ESC byte.
ESCAPE_SEQUENCES = {
    b"[3~": "DELETE",
    b"[A": "ARROW_UP",
    b"[B": "ARROW_DOWN",
    b"[C": "ARROW_RIGHT",
    b"[D": "ARROW_LEFT",
    b"[H": "HOME",
    b"[F": "END",
    b"[1~": "HOME",
    b"[4~": "END",
}


class SpecialKey(IntEnum):
    CTRL_A = 1
    CTRL_B = 2
    CTRL_C = 3
    CTRL_D = 4
    CTRL_E = 5
    CTRL_F = 6
    CTRL_G = 7
    CTRL_H = 8
    TAB = 9
    CTRL_J = 10
    CTRL_K = 11
    CTRL_L = 12
    ENTER = 13
    CTRL_N = 14
    CTRL_O = 15
    CTRL_P = 16
    CTRL_Q = 17
    CTRL_R = 18
    CTRL_S = 19
    CTRL_T = 20
    CTRL_U = 21
    CTRL_V = 22
    CTRL_W = 23
    CTRL_X = 24
    CTRL_Y = 25
    CTRL_Z = 26
    ESCAPE = 27
    BACKSPACE = 127
    # Keys below only arrive as escape sequences.
    DELETE = 1000
    ARROW_UP = 1001
    ARROW_DOWN = 1002
    ARROW_LEFT = 1003
    ARROW_RIGHT = 1004
    HOME = 1005
    END = 1006


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """Single decoded key press."""

    kind: str
    data: bytes = b""
    special: Optional[SpecialKey] = None

    def __post_init__(self) -> None:
        if self.kind not in {"printable", "special", "invalid"}:
            raise ValueError(f"unknown key kind '{self.kind}'")
        if self.kind == "special" and self.special is None:
            raise ValueError("special key strokes require a SpecialKey")

    @classmethod
    def printable(cls, data: bytes) -> "KeyStroke":
        return cls("printable", data=bytes(data))

    @classmethod
    def of(cls, special: SpecialKey) -> "KeyStroke":
        return cls("special", special=special)

    @classmethod
    def invalid(cls, data: bytes = b"") -> "KeyStroke":
        return cls("invalid", data=bytes(data))

    @property
    def token(self) -> str:
        if self.special is not None:
            return self.special.name
        if self.kind == "printable":
            return self.data.decode("utf-8", errors="replace")
        return "<invalid>"


class KeyDecoder:
    """Buffers raw input and yields ``KeyStroke`` values in arrival order.

    A trailing ESC that may still be the start of an escape sequence is held
    back until more bytes arrive, unless ``flush`` is requested.
    """

    def __init__(self) -> None:
        self._pending = bytearray()

    def feed(self, data: bytes) -> None:
        self._pending.extend(data)

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)

    def decode(self, *, flush: bool = False) -> List[KeyStroke]:
        return list(self._drain(flush))

    def __iter__(self) -> Iterator[KeyStroke]:
        return self._drain(False)

    def _drain(self, flush: bool) -> Iterator[KeyStroke]:
        while self._pending:
            stroke = self._next(flush)
            if stroke is None:
                return
            yield stroke

    def _next(self, flush: bool) -> Optional[KeyStroke]:
        first = self._pending[0]
        if first != ESC:
            self._consume(1)
            if 1 <= first <= 26:
                return KeyStroke.of(SpecialKey(first))
            if first == DEL:
                return KeyStroke.of(SpecialKey.BACKSPACE)
            return KeyStroke.printable(bytes([first]))

        tail = bytes(self._pending[1:])
        if not tail:
            if not flush:
                return None
            self._consume(1)
            return KeyStroke.of(SpecialKey.ESCAPE)

        for sequence, name in ESCAPE_SEQUENCES.items():
            if tail.startswith(sequence):
                self._consume(1 + len(sequence))
                return KeyStroke.of(SpecialKey[name])

        if not flush and any(seq.startswith(tail) for seq in ESCAPE_SEQUENCES):
            return None

        self._consume(1)
        return KeyStroke.invalid(bytes([ESC]))

    def _consume(self, count: int) -> None:
        del self._pending[:count]


__all__ = ["KeyDecoder", "KeyStroke", "SpecialKey"]

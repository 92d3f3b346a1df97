"""Scoped raw-mode terminal session."""

from __future__ import annotations

import atexit
import os
import select
import shutil
import sys
import termios
from contextlib import AbstractContextManager
from typing import Any, List, Optional, Tuple

from piece_editor.runtime import telemetry


class RawModeError(RuntimeError):
    """Raised when terminal attributes cannot be read or applied."""


def raw_attributes(attrs: List[Any]) -> List[Any]:
    """Return a copy of ``termios`` attributes with raw mode applied."""

    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
    iflag &= ~(
        termios.IXON | termios.ICRNL | termios.BRKINT | termios.INPCK | termios.ISTRIP
    )
    oflag &= ~termios.OPOST
    cflag |= termios.CS8
    lflag &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    cc = list(cc)
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    return [iflag, oflag, cflag, lflag, ispeed, ospeed, cc]


class TerminalSession(AbstractContextManager["TerminalSession"]):
    """Owns the saved terminal attributes for the lifetime of the editor.

    Entering switches ``fd`` to raw mode; leaving restores the saved state
    on every exit path. An ``atexit`` hook covers interpreter shutdown that
    bypasses ``__exit__``.
    """

    def __init__(
        self, fd: Optional[int] = None, *, out_fd: Optional[int] = None
    ) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.out_fd = sys.stdout.fileno() if out_fd is None else out_fd
        self._saved: Optional[List[Any]] = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def __enter__(self) -> "TerminalSession":
        if self._saved is not None:
            return self
        try:
            saved = termios.tcgetattr(self.fd)
        except termios.error as exc:
            raise RawModeError(f"tcgetattr failed: {exc}") from exc
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw_attributes(saved))
        except termios.error as exc:
            raise RawModeError(f"tcsetattr failed: {exc}") from exc
        self._saved = saved
        atexit.register(self.restore)
        telemetry.record_event("terminal.raw", level="debug", data={"fd": self.fd})
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.restore()
        return False

    def restore(self) -> None:
        if self._saved is None:
            return
        saved, self._saved = self._saved, None
        atexit.unregister(self.restore)
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, saved)
        except termios.error as exc:
            raise RawModeError(f"tcsetattr failed: {exc}") from exc
        telemetry.record_event("terminal.restore", level="debug", data={"fd": self.fd})

    def read(self, size: int = 64) -> bytes:
        return os.read(self.fd, size)

    def poll(self, timeout: float) -> bool:
        """Return True once input is readable on ``fd`` within ``timeout`` seconds."""

        readable, _, _ = select.select([self.fd], [], [], timeout)
        return bool(readable)

    def write(self, data: bytes) -> None:
        view = memoryview(data)
        while view:
            written = os.write(self.out_fd, view)
            view = view[written:]

    def size(self) -> Tuple[int, int]:
        """Return ``(rows, columns)`` of the controlling terminal."""

        columns, rows = shutil.get_terminal_size()
        return rows, columns


__all__ = ["RawModeError", "TerminalSession", "raw_attributes"]

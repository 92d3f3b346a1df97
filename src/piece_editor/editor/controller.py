"""Editor controller: turns decoded key strokes into piece-table edits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from piece_editor.buffer import IndexOutOfRange, PieceTable, ensure_byte_index
from piece_editor.runtime import telemetry
from piece_editor.terminal.keys import KeyStroke, SpecialKey

Cursor = Tuple[int, int]  # (row, column) in bytes


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class EditorView:
    """Snapshot handed to hosts for rendering."""

    text: bytes
    offset: int
    cursor: Cursor
    status: str = ""


@dataclass(slots=True)
class EditResult:
    """Outcome of ``EditorController.handle_key``."""

    consumed: bool
    status: str = "ok"
    message: Optional[str] = None
    quit: bool = False


@dataclass(slots=True)
class EditorHooks:
    """Callbacks a host registers to follow the editor state."""

    update_buffer: Callable[[EditorView], None] = _noop
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


MOVEMENT_KEYS = {
    SpecialKey.ARROW_LEFT,
    SpecialKey.ARROW_RIGHT,
    SpecialKey.ARROW_UP,
    SpecialKey.ARROW_DOWN,
    SpecialKey.HOME,
    SpecialKey.END,
}


class EditorController:
    """Single-cursor editing session over a ``PieceTable``.

    The cursor is a byte offset into the document. Out-of-range edits such
    as backspace at offset 0 are reported through the status hook and leave
    the document untouched.
    """

    def __init__(self, table: PieceTable, hooks: Optional[EditorHooks] = None) -> None:
        self.table = table
        self.hooks = hooks or EditorHooks()
        self.offset = 0
        self.status = ""

    def handle_key(self, stroke: KeyStroke) -> EditResult:
        self._log_state("key ->", key=stroke.token)
        result = self._dispatch(stroke)
        self._after_result(result)
        self._log_state("result <-", status=result.status, message=result.message)
        return result

    def view(self) -> EditorView:
        return EditorView(
            text=self.table.text(),
            offset=self.offset,
            cursor=self.cursor_position(),
            status=self.status,
        )

    def cursor_position(self) -> Cursor:
        row = self.table.text()[: self.offset].count(b"\n")
        return row, self.offset - self.table.line_start(row)

    def move_to(self, row: int, col: int) -> None:
        """Place the cursor at ``(row, col)``, clamping the column to the line."""

        start = self.table.line_start(row)
        self.offset = start + max(0, min(col, self.table.line_length(row)))

    # -- dispatch ----------------------------------------------------------

    def _dispatch(self, stroke: KeyStroke) -> EditResult:
        if stroke.kind == "printable":
            return self._insert(stroke.data)
        if stroke.kind == "invalid" or stroke.special is None:
            return EditResult(consumed=False, status="ignored")

        key = stroke.special
        if key is SpecialKey.CTRL_Q:
            return EditResult(consumed=True, status="quit", quit=True)
        if key in (SpecialKey.ENTER, SpecialKey.CTRL_J):
            return self._insert(b"\n")
        if key is SpecialKey.TAB:
            return self._insert(b"\t")
        if key in (SpecialKey.BACKSPACE, SpecialKey.CTRL_H):
            return self._remove(self.offset - 1, move_back=True)
        if key is SpecialKey.DELETE:
            return self._remove(self.offset, move_back=False)
        if key in MOVEMENT_KEYS:
            self._move(key)
            return EditResult(consumed=True, status="moved")
        return EditResult(consumed=False, status="ignored")

    def _insert(self, data: bytes) -> EditResult:
        self.table.insert(self.offset, data)
        self.offset += len(data)
        return EditResult(consumed=True, status="inserted")

    def _remove(self, index: int, *, move_back: bool) -> EditResult:
        try:
            ensure_byte_index(index, self.table.length())
        except IndexOutOfRange as exc:
            telemetry.record_event(
                "editor.out_of_range",
                level="debug",
                data={"index": index, "length": exc.limit},
            )
            return EditResult(consumed=True, status="out_of_range", message=str(exc))
        self.table.remove(index, 1)
        if move_back:
            self.offset = index
        return EditResult(consumed=True, status="removed")

    def _move(self, key: SpecialKey) -> None:
        row, col = self.cursor_position()
        if key is SpecialKey.ARROW_LEFT:
            self.offset = max(0, self.offset - 1)
        elif key is SpecialKey.ARROW_RIGHT:
            self.offset = min(self.table.length(), self.offset + 1)
        elif key is SpecialKey.HOME:
            self.offset = self.table.line_start(row)
        elif key is SpecialKey.END:
            self.move_to(row, self.table.line_length(row))
        elif key is SpecialKey.ARROW_UP:
            if row > 0:
                self.move_to(row - 1, col)
        elif key is SpecialKey.ARROW_DOWN:
            if row + 1 < self.table.line_count():
                self.move_to(row + 1, col)

    # -- hooks -------------------------------------------------------------

    def _after_result(self, result: EditResult) -> None:
        self.status = result.message or ""
        if result.message:
            self.hooks.update_status(result.message)
        if result.consumed:
            self.hooks.update_buffer(self.view())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        return {
            "document": self.table.name,
            "offset": self.offset,
            "length": self.table.length(),
        }


__all__ = ["EditorController", "EditorHooks", "EditorView", "EditResult", "Cursor"]

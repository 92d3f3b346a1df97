"""Read/decode/dispatch/redraw loop for the raw terminal front end."""

from __future__ import annotations

from typing import Optional

from piece_editor.runtime import telemetry
from piece_editor.terminal.keys import KeyDecoder
from piece_editor.terminal.session import TerminalSession

from .controller import EditorController, EditorView

CLEAR_SCREEN = b"\x1b[2J"
CURSOR_HOME = b"\x1b[H"
CLEAR_LINE = b"\x1b[K"
REVERSE_VIDEO = b"\x1b[7m"
RESET_STYLE = b"\x1b[m"
# Seconds to wait for the rest of an escape sequence before treating ESC as a key.
ESCAPE_TIMEOUT = 0.05


def render_frame(view: EditorView, rows: int, columns: int) -> bytes:
    """Build one full-screen frame: document lines, status bar, cursor.

    The bottom row is reserved for the status bar. The document scrolls so
    the cursor row stays visible.
    """

    body_rows = max(1, rows - 1)
    row, col = view.cursor
    top = max(0, row - body_rows + 1)
    lines = view.text.split(b"\n")[top : top + body_rows]

    out = bytearray(CURSOR_HOME)
    for line in lines:
        out += line[:columns] + CLEAR_LINE + b"\r\n"
    for _ in range(body_rows - len(lines)):
        out += b"~" + CLEAR_LINE + b"\r\n"

    status = view.status or f"{row + 1}:{col + 1}  ^Q quit"
    out += REVERSE_VIDEO + status.encode("utf-8")[:columns] + CLEAR_LINE + RESET_STYLE
    out += f"\x1b[{row - top + 1};{min(col, columns - 1) + 1}H".encode("ascii")
    return bytes(out)


def run_terminal(
    controller: EditorController,
    session: TerminalSession,
    *,
    decoder: Optional[KeyDecoder] = None,
    chunk_size: int = 64,
    escape_timeout: float = ESCAPE_TIMEOUT,
) -> None:
    """Drive ``controller`` from ``session`` until quit or end of input.

    ``session`` must already be in raw mode. An escape sequence split across
    reads is held by the decoder while ``session.poll`` reports more input;
    a lone ESC is only emitted once ``escape_timeout`` passes quietly.
    """

    decoder = decoder or KeyDecoder()
    session.write(CLEAR_SCREEN)
    _redraw(controller, session)
    with telemetry.span("editor::loop", component="editor"):
        while True:
            data = session.read(chunk_size)
            if not data:
                strokes = decoder.decode(flush=True)
            else:
                decoder.feed(data)
                strokes = decoder.decode()
                if decoder.pending and not session.poll(escape_timeout):
                    strokes.extend(decoder.decode(flush=True))
            for stroke in strokes:
                if controller.handle_key(stroke).quit:
                    session.write(CLEAR_SCREEN + CURSOR_HOME)
                    return
            if not data:
                break
            _redraw(controller, session)


def _redraw(controller: EditorController, session: TerminalSession) -> None:
    rows, columns = session.size()
    session.write(render_frame(controller.view(), rows, columns))


__all__ = ["render_frame", "run_terminal"]

"""Textual host for the piece-table editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

try:  # pragma: no cover - imported only when the Textual UI is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use piece_editor.adapters.textual.app"
    ) from exc

from piece_editor.editor import EditorController, EditorHooks, EditorView

from .controller import TextualEditorAdapter

CURSOR_MARK = "│"


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""


def _render_with_cursor(view: EditorView) -> str:
    before = view.text[: view.offset].decode("utf-8", errors="replace")
    after = view.text[view.offset :].decode("utf-8", errors="replace")
    return before + CURSOR_MARK + after


class PieceEditorApp(App[None]):
    """Minimal Textual UI hosting one editing session."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, controller: EditorController) -> None:
        super().__init__()
        self._state = UIState()
        self.controller = controller
        self.adapter: TextualEditorAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="buffer-area"):
            self._buffer_widget = Static("", id="buffer-view", markup=False)
            yield self._buffer_widget
        self._status_widget = Static("", id="status-line", markup=False)
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        self.controller.hooks = EditorHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
        )
        self.adapter = TextualEditorAdapter(self.controller)

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key in {"ctrl+c", "ctrl+q"}:
            return
        result = self.adapter.handle_textual_key(event.key, character=event.character)
        if result.consumed:
            event.stop()

    def _update_buffer(self, view: EditorView) -> None:
        self._state.buffer_text = _render_with_cursor(view)
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)
        row, col = view.cursor
        self._update_status(view.status or f"{row + 1}:{col + 1}")

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)


def run_textual(controller: EditorController, *, title: Optional[str] = None) -> None:
    app = PieceEditorApp(controller)
    if title:
        app.title = title
    app.run()


__all__ = ["PieceEditorApp", "run_textual"]

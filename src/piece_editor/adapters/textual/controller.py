"""Bridges Textual key events to the editor controller."""

from __future__ import annotations

from typing import Dict, Optional

from piece_editor.editor import EditorController, EditResult
from piece_editor.terminal.keys import KeyStroke, SpecialKey

TEXTUAL_KEYS: Dict[str, SpecialKey] = {
    "enter": SpecialKey.ENTER,
    "tab": SpecialKey.TAB,
    "backspace": SpecialKey.BACKSPACE,
    "ctrl+h": SpecialKey.BACKSPACE,
    "delete": SpecialKey.DELETE,
    "escape": SpecialKey.ESCAPE,
    "up": SpecialKey.ARROW_UP,
    "down": SpecialKey.ARROW_DOWN,
    "left": SpecialKey.ARROW_LEFT,
    "right": SpecialKey.ARROW_RIGHT,
    "home": SpecialKey.HOME,
    "end": SpecialKey.END,
    "ctrl+q": SpecialKey.CTRL_Q,
}


def stroke_from_textual(key: str, character: Optional[str] = None) -> KeyStroke:
    """Translate a Textual ``Key`` event's ``key``/``character`` pair."""

    special = TEXTUAL_KEYS.get(key)
    if special is not None:
        return KeyStroke.of(special)
    if character and character.isprintable():
        return KeyStroke.printable(character.encode("utf-8"))
    return KeyStroke.invalid(key.encode("utf-8"))


class TextualEditorAdapter:
    """Feeds Textual key events into an ``EditorController``."""

    def __init__(self, controller: EditorController) -> None:
        self.controller = controller
        self.controller.hooks.update_buffer(self.controller.view())

    def handle_textual_key(
        self, key: str, *, character: Optional[str] = None
    ) -> EditResult:
        return self.controller.handle_key(stroke_from_textual(key, character))


__all__ = ["TEXTUAL_KEYS", "TextualEditorAdapter", "stroke_from_textual"]

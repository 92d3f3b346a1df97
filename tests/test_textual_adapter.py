from __future__ import annotations

from typing import List

import pytest

from piece_editor.adapters.textual import TextualEditorAdapter, stroke_from_textual
from piece_editor.buffer import PieceTable
from piece_editor.editor import EditorController, EditorHooks, EditorView
from piece_editor.terminal import KeyStroke, SpecialKey


def make_adapter(text: bytes = b"") -> tuple[TextualEditorAdapter, List[EditorView]]:
    views: List[EditorView] = []
    controller = EditorController(
        PieceTable(text), EditorHooks(update_buffer=views.append)
    )
    return TextualEditorAdapter(controller), views


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("enter", SpecialKey.ENTER),
        ("backspace", SpecialKey.BACKSPACE),
        ("delete", SpecialKey.DELETE),
        ("left", SpecialKey.ARROW_LEFT),
        ("home", SpecialKey.HOME),
        ("ctrl+q", SpecialKey.CTRL_Q),
    ],
)
def test_named_keys_translate_to_special_strokes(
    key: str, expected: SpecialKey
) -> None:
    assert stroke_from_textual(key) == KeyStroke.of(expected)


def test_characters_translate_to_utf8_bytes() -> None:
    assert stroke_from_textual("a", "a") == KeyStroke.printable(b"a")
    assert stroke_from_textual("eacute", "é") == KeyStroke.printable(
        "é".encode("utf-8")
    )
    assert stroke_from_textual("f1").kind == "invalid"


def test_adapter_pushes_initial_view() -> None:
    _, views = make_adapter(b"seed")

    assert views[0].text == b"seed"


def test_adapter_edits_document() -> None:
    adapter, views = make_adapter()

    for character in "hi":
        adapter.handle_textual_key(character, character=character)
    adapter.handle_textual_key("enter")
    adapter.handle_textual_key("backspace")
    result = adapter.handle_textual_key("left")

    assert result.status == "moved"
    assert adapter.controller.table.text() == b"hi"
    assert views[-1].cursor == (0, 1)

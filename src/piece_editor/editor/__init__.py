"""Editor controller built on the piece table.

The raw-terminal front end lives in ``piece_editor.editor.loop``.
"""

from .controller import EditorController, EditorHooks, EditorView, EditResult

__all__ = [
    "EditorController",
    "EditorHooks",
    "EditorView",
    "EditResult",
]

"""Textual host; the app module needs the optional ``textual`` dependency."""

from .controller import TEXTUAL_KEYS, TextualEditorAdapter, stroke_from_textual

__all__ = ["TEXTUAL_KEYS", "TextualEditorAdapter", "stroke_from_textual"]

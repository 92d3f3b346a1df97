"""Raw terminal session and keystroke decoding.

Only the decoder is exported here. ``piece_editor.terminal.session`` needs
``termios`` and is imported explicitly by the terminal front end.
"""

from .keys import KeyDecoder, KeyStroke, SpecialKey

__all__ = [
    "KeyDecoder",
    "KeyStroke",
    "SpecialKey",
]

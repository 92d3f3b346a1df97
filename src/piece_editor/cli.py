"""Command-line entry point for the piece-table editor."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from piece_editor.buffer import PieceTable
from piece_editor.editor import EditorController
from piece_editor.runtime import telemetry
from piece_editor.runtime.config import DEFAULT_CHANGES_CAPACITY, EditorSettings

UI_CHOICES = ("terminal", "textual")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {number}")
    return number


def _parse_args(
    argv: Optional[Sequence[str]], settings: EditorSettings
) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="piece-editor", description="Edit text on a piece-table buffer."
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="File whose contents seed the buffer (nothing is written back)",
    )
    parser.add_argument(
        "--ui",
        choices=UI_CHOICES,
        default=settings.ui if settings.ui in UI_CHOICES else "terminal",
        help="Front end to run (default: terminal)",
    )
    parser.add_argument(
        "--log-preset",
        choices=telemetry.PRESETS,
        default=(
            settings.log_preset if settings.log_preset in telemetry.PRESETS else None
        ),
        help="telelog preset (default: headless for the terminal front end)",
    )
    parser.add_argument(
        "--changes-capacity",
        type=_positive_int,
        default=settings.changes_capacity,
        help="Starting capacity of the changes buffer in bytes",
    )
    args = parser.parse_args(argv)
    if args.path is not None and args.path.exists() and not args.path.is_file():
        parser.error(f"not a regular file: {args.path}")
    return args


def build_controller(
    initial: bytes,
    *,
    name: str = "document",
    changes_capacity: int = DEFAULT_CHANGES_CAPACITY,
) -> EditorController:
    table = PieceTable(initial, changes_capacity=changes_capacity, name=name)
    return EditorController(table)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv, EditorSettings.from_env())
    if args.log_preset:
        telemetry.configure(preset=args.log_preset)
    elif args.ui == "terminal":
        telemetry.configure(preset="headless")

    initial = args.path.read_bytes() if args.path and args.path.is_file() else b""
    name = args.path.name if args.path else "untitled"
    controller = build_controller(
        initial, name=name, changes_capacity=args.changes_capacity
    )

    with controller.table:
        if args.ui == "textual":
            from piece_editor.adapters.textual.app import run_textual

            run_textual(controller, title=name)
        else:
            from piece_editor.editor.loop import run_terminal
            from piece_editor.terminal.session import TerminalSession

            with TerminalSession() as session:
                run_terminal(controller, session)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry
    raise SystemExit(main())

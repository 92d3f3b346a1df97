"""telelog facade for the editor.

Events in use: ``changes.grow`` and ``piece_table.release`` from the buffer,
``terminal.raw`` and ``terminal.restore`` from the session, and
``editor.out_of_range`` from the controller. Piece-table edits and the
terminal loop run inside ``span``.
"""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, MutableMapping, Optional, cast

import telelog  # type: ignore[import]

from .config import env, env_flag, env_int

tl = cast(Any, telelog)

LOGGER_NAME = env("LOGGER", "piece_editor") or "piece_editor"
PRESETS = ("development", "production", "headless")

_LOGGERS: MutableMapping[str, Any] = {}
_CONFIG: Optional[Any] = None


@dataclass(frozen=True)
class LogProfile:
    """Output settings that become one ``telelog.Config``."""

    level: str = "WARNING"
    console: bool = True
    color: bool = True
    json: bool = False
    file: Optional[str] = None
    buffered: bool = False
    buffer_size: int = 2048
    profiling: bool = True

    def to_config(self) -> Any:
        config = tl.Config()
        config.with_min_level(self.level)
        config.with_console_output(self.console)
        if self.console:
            config.with_colored_output(self.color)
        if self.json:
            config.with_json_format(True)
        if self.file:
            config.with_file_output(self.file)
        if self.buffered:
            config.with_buffering(True)
            config.with_buffer_size(self.buffer_size)
        config.with_profiling(self.profiling)
        return config


def env_profile() -> LogProfile:
    """Profile described by the ``PIECE_EDITOR_LOG_*`` variables."""

    return LogProfile(
        level=(env("LOG_LEVEL") or "WARNING").upper(),
        console=not env_flag("DISABLE_CONSOLE", False),
        color=not env_flag("NO_COLOR", False),
        json=env_flag("LOG_JSON", False),
        file=env("LOG_FILE") or None,
        buffered=env_flag("LOG_BUFFERED", False),
        buffer_size=env_int("LOG_BUFFER_SIZE", 2048),
        profiling=env_flag("PROFILE", True),
    )


def preset_profile(preset: str) -> LogProfile:
    base = env_profile()
    key = preset.lower()
    if key == "development":
        return replace(base, level="DEBUG", console=True, json=False)
    if key == "production":
        return replace(
            base,
            level="INFO",
            console=False,
            file=base.file or "piece_editor.log",
            buffered=True,
        )
    if key == "headless":
        # The raw terminal owns stdout.
        return replace(base, console=False)
    raise ValueError(f"Unknown preset '{preset}'.")


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active telelog configuration and drop cached loggers.

    ``config`` is adopted as given; ``preset`` names one of ``PRESETS``.
    With neither, the configuration is rebuilt from the environment.
    """

    global _CONFIG
    if config is not None and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")
    if config is None:
        profile = preset_profile(preset) if preset else env_profile()
        config = profile.to_config()
    _CONFIG = config
    _LOGGERS.clear()


def get_logger(name: Optional[str] = None) -> Any:
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = env_profile().to_config()
    key = name or LOGGER_NAME
    if key not in _LOGGERS:
        _LOGGERS[key] = tl.Logger.with_config(key, _CONFIG)
    return _LOGGERS[key]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return repr(bytes(value))
    return str(value)


def _emit(log: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    with_data = getattr(log, f"{level}_with", None)
    if with_data is not None:
        with_data(message, [(str(key), _text(value)) for key, value in payload.items()])
        return
    plain = getattr(log, level, None)
    if plain is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    plain(f"{message} {payload}")


def record_event(
    name: str, *, level: str = "info", data: Optional[Dict[str, Any]] = None
) -> None:
    """Log ``event::<name>`` with ``data`` as key/value pairs."""

    payload = {"event": name, **(data or {})}
    _emit(get_logger(), level.lower(), f"event::{name}", payload)


@contextmanager
def span(
    name: str,
    *,
    component: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[Any]:
    """Profile the block as ``name``, tracked under ``component`` if given.

    ``metadata`` is attached as logger context for the duration of the block.
    An exception escaping the block is logged as ``span::fail`` at error
    level and re-raised.
    """

    log = get_logger()
    context = {key: _text(value) for key, value in (metadata or {}).items()}
    with ExitStack() as stack:
        if component:
            stack.enter_context(log.track_component(component))
        stack.enter_context(log.profile(name))
        for key, value in context.items():
            log.add_context(key, value)
        try:
            yield log
        except Exception as exc:
            failure = {"span": name, **context, "reason": str(exc)}
            if component:
                failure["component"] = component
            _emit(log, "error", "span::fail", failure)
            raise
        finally:
            for key in context:
                log.remove_context(key)


__all__ = [
    "LogProfile",
    "PRESETS",
    "configure",
    "env_profile",
    "get_logger",
    "preset_profile",
    "record_event",
    "span",
]

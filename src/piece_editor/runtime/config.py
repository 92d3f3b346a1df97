"""Environment-driven settings shared by the runtime and the editor."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

ENV_PREFIX = "PIECE_EDITOR_"

DEFAULT_CHANGES_CAPACITY = 1024


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def env_flag(name: str, default: bool) -> bool:
    raw = env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def env_int(name: str, fallback: int) -> int:
    value = env(name)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


@dataclass(frozen=True, slots=True)
class EditorSettings:
    """Knobs read once at startup; CLI flags override the environment."""

    changes_capacity: int = DEFAULT_CHANGES_CAPACITY
    ui: str = "terminal"
    log_preset: Optional[str] = None

    @classmethod
    def from_env(cls) -> "EditorSettings":
        capacity = env_int("CHANGES_CAPACITY", DEFAULT_CHANGES_CAPACITY)
        if capacity <= 0:
            capacity = DEFAULT_CHANGES_CAPACITY
        return cls(
            changes_capacity=capacity,
            ui=(env("UI") or "terminal").lower(),
            log_preset=env("LOG_PRESET") or None,
        )


__all__ = [
    "DEFAULT_CHANGES_CAPACITY",
    "ENV_PREFIX",
    "EditorSettings",
    "env",
    "env_flag",
    "env_int",
]

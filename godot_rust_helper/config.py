"""Runtime settings read from the environment."""

import logging
import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_CARGO = "cargo"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_TARGETS = "windows"


@dataclass
class Settings:
    """Resolved settings for one CLI invocation."""
    cargo: str = DEFAULT_CARGO
    log_level: str = DEFAULT_LOG_LEVEL
    default_targets: List[str] = field(default_factory=lambda: [DEFAULT_TARGETS])


def resolve_log_level(name: str) -> int:
    """Map a level name such as `debug` to its number, else WARNING."""
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.WARNING


def _split_csv(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_settings() -> Settings:
    """Build `Settings` from `GODOT_RUST_HELPER_*` environment variables.

    - `GODOT_RUST_HELPER_CARGO`: cargo executable used by `build`.
    - `GODOT_RUST_HELPER_LOG_LEVEL`: logging level name for the CLI.
    - `GODOT_RUST_HELPER_DEFAULT_TARGETS`: comma-separated targets used by
      `new` when none are passed.
    """
    cargo = os.getenv("GODOT_RUST_HELPER_CARGO") or DEFAULT_CARGO
    log_level = (os.getenv("GODOT_RUST_HELPER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    targets = _split_csv(os.getenv("GODOT_RUST_HELPER_DEFAULT_TARGETS", DEFAULT_TARGETS))
    return Settings(cargo=cargo, log_level=log_level, default_targets=targets or [DEFAULT_TARGETS])

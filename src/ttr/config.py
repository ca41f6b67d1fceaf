"""Configuration defaults, reserved keys and discovery locations for TTR."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import click


VERSION = "0.4.0"

APP_NAME = "ttr"
CONFIG_FILE_NAME = ".ttr.yaml"

# Menu keys that never reach a task binding
QUIT_KEYS: frozenset[str] = frozenset({"q", "\x03"})  # q, Ctrl-C
BACK_KEYS: frozenset[str] = frozenset({"\x1b", "\x7f", "\x08"})  # Esc, Backspace (DEL / ^H)
REPEAT_KEY = "r"
SELECT_KEY = "s"

# Menu layout
ITEM_NAME_WIDTH = 12
ITEM_CELL_WIDTH = 20
SCREEN_PADDING = 4


@dataclass
class Config:
    """Runtime configuration resolved from the process environment.

    Every location is overridable so discovery can run against a sandboxed
    directory tree in tests.
    """

    cwd: Path | None = None
    home: Path | None = None
    config_dir: Path | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.cwd is None:
            self.cwd = Path.cwd()
        if self.home is None:
            self.home = resolve_home_dir()
        if self.config_dir is None:
            self.config_dir = resolve_user_config_dir()


def resolve_home_dir() -> Path | None:
    """Return the user's home directory, or ``None`` when it cannot be determined."""
    try:
        return Path.home()
    except RuntimeError:
        return None


def resolve_user_config_dir() -> Path:
    """Return the per-user config directory (``$XDG_CONFIG_HOME/ttr`` on Linux)."""
    return Path(click.get_app_dir(APP_NAME))


def is_windows() -> bool:
    return sys.platform == "win32"


def is_linux() -> bool:
    return sys.platform.startswith("linux")

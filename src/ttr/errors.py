"""Exceptions raised by TTR.

Child process results (non-zero exit, signal, spawn failure) are not
exceptions; see :class:`ttr.executor.OutcomeKind`.
"""

from __future__ import annotations

from pathlib import Path


class TtrError(Exception):
    """Base class for fatal TTR errors."""


class ConfigError(TtrError):
    """A config source is malformed or binds one key twice at one level."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class TerminalModeError(TtrError):
    """The terminal could not be switched into or out of single-keystroke mode."""

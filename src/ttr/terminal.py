"""Single-keystroke terminal input.

Raw mode is held only while one key is being read, so spawned tasks always
see the terminal in its normal (cooked) mode.
"""

from __future__ import annotations

import os
import signal
import sys
from contextlib import contextmanager
from typing import Iterator

from rich.console import Console

from ttr import log
from ttr.config import is_windows
from ttr.errors import TerminalModeError

# Bytes arriving this soon after Esc belong to the same key (arrows, F-keys)
_ESCAPE_SEQUENCE_WAIT = 0.02

_EXIT_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if sig is not None
)


def _exit_on_signal(signum: int, _frame: object) -> None:
    raise SystemExit(128 + signum)


@contextmanager
def _exit_signals_unwind() -> Iterator[None]:
    """Turn termination signals into ``SystemExit`` so ``finally`` blocks run."""
    previous = {}
    try:
        for sig in _EXIT_SIGNALS:
            previous[sig] = signal.signal(sig, _exit_on_signal)
    except ValueError:
        # Not the main thread
        pass
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def raw_mode(fd: int) -> Iterator[None]:
    """Put *fd* in raw mode and always restore its previous settings."""
    import termios
    import tty

    try:
        saved = termios.tcgetattr(fd)
    except termios.error as exc:
        raise TerminalModeError(f"cannot read terminal settings: {exc}") from exc

    with _exit_signals_unwind():
        try:
            tty.setraw(fd, termios.TCSADRAIN)
        except termios.error as exc:
            _restore(fd, saved)
            raise TerminalModeError(f"cannot enter raw mode: {exc}") from exc
        try:
            yield
        finally:
            _restore(fd, saved)


def _restore(fd: int, saved: list) -> None:  # type: ignore[type-arg]
    import termios

    try:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
    except termios.error as exc:
        raise TerminalModeError(f"cannot restore terminal settings: {exc}") from exc


def _utf8_length(first: int) -> int:
    if first >= 0xF0:
        return 4
    if first >= 0xE0:
        return 3
    if first >= 0xC0:
        return 2
    return 1


def _read_key_posix(fd: int) -> str:
    import select

    with raw_mode(fd):
        data = os.read(fd, 1)
        if not data:
            raise TerminalModeError("stdin closed")
        if data == b"\x1b":
            while select.select([fd], [], [], _ESCAPE_SEQUENCE_WAIT)[0]:
                chunk = os.read(fd, 16)
                if not chunk:
                    break
                data += chunk
        else:
            missing = _utf8_length(data[0]) - 1
            while missing > 0:
                chunk = os.read(fd, missing)
                if not chunk:
                    break
                data += chunk
                missing -= len(chunk)
    return data.decode("utf-8", errors="replace")


def _read_key_windows() -> str:
    import msvcrt

    ch = msvcrt.getwch()
    if ch in ("\x00", "\xe0"):
        # Function and arrow keys arrive as a two-character sequence
        return ch + msvcrt.getwch()
    return ch


class Terminal:
    """Keyboard and screen of the controlling terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or log.console

    def read_key(self) -> str:
        """Block until one key is pressed and return it.

        Escape sequences (arrow keys and the like) come back as one string
        longer than a single character.
        """
        if is_windows():
            return _read_key_windows()
        try:
            fd = sys.stdin.fileno()
        except (AttributeError, ValueError, OSError) as exc:
            raise TerminalModeError("stdin has no file descriptor") from exc
        if not os.isatty(fd):
            raise TerminalModeError("stdin is not a terminal")
        return _read_key_posix(fd)

    def clear(self) -> None:
        self.console.clear()

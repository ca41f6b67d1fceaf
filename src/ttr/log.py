"""Console output and leveled messages via Rich.

The menu, status lines and log messages share one ``console`` so screen
clears and prints never interleave across two writers.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
_err_console = Console(highlight=False, stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def warn(msg: str) -> None:
    _err_console.print(f"[yellow]\\[WARN][/yellow] {escape(msg)}")


def error(msg: str, hint: str = "") -> None:
    _err_console.print(f"[red]\\[ERROR][/red] {escape(msg)}")
    if hint:
        _err_console.print(f"        {escape(hint)}", style="dim")


def debug(msg: str) -> None:
    if _verbose:
        _err_console.print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")

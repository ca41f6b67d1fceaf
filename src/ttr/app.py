"""Dispatcher: drives the menu state machine against a terminal and the executor."""

from __future__ import annotations

from typing import Callable, Protocol

from rich.console import Console

from ttr import log
from ttr.executor import TaskOutcome, run_task
from ttr.menu import (
    AwaitingConfirmation,
    Browsing,
    Completed,
    Executing,
    Exited,
    KeyPress,
    RunReport,
    State,
    initial_state,
    task_at,
    transition,
)
from ttr.render import format_status, render_confirmation, render_menu
from ttr.tasks.model import Group, Task


class KeySource(Protocol):
    console: Console

    def read_key(self) -> str: ...

    def clear(self) -> None: ...


TaskRunner = Callable[..., TaskOutcome]


class Dispatcher:
    """Runs one interactive session over an immutable task tree.

    *on_state* is called with every state the session passes through.

    Usage::

        code = Dispatcher(tree, terminal=Terminal()).run()
    """

    def __init__(
        self,
        tree: Group,
        *,
        terminal: KeySource,
        runner: TaskRunner = run_task,
        on_state: Callable[[State], None] | None = None,
    ) -> None:
        self.tree = tree
        self.terminal = terminal
        self.runner = runner
        self.console = terminal.console
        self.on_state = on_state

    def run(self) -> int:
        """Loop until the session exits; return the process exit code."""
        state: State = initial_state()
        try:
            while True:
                if self.on_state is not None:
                    self.on_state(state)
                match state:
                    case Exited(code=code):
                        log.debug(f"Session finished with exit code {code}")
                        return code
                    case Browsing():
                        state = self._browse(state)
                    case Executing(path=path):
                        state = self._execute(state, task_at(self.tree, path))
                    case AwaitingConfirmation(path=path, outcome=outcome):
                        state = self._confirm(state, task_at(self.tree, path), outcome)
        finally:
            self._leave_menu_screen()

    # ── per-state steps ──────────────────────────────────────────

    def _browse(self, state: Browsing) -> State:
        self._enter_menu_screen()
        render_menu(self.console, self.tree, state)
        key = self.terminal.read_key()
        return transition(self.tree, state, KeyPress(key))

    def _execute(self, state: Executing, task: Task) -> State:
        self._leave_menu_screen()
        log.debug(f"Running task {task.name!r} ({task.key})")
        outcome = self.runner(task, clear_screen=self.terminal.clear)
        if not outcome.success and not task.confirm and not task.loop:
            self.console.print(f"  {format_status(RunReport(task.name, outcome))}")
        return transition(self.tree, state, Completed(outcome))

    def _confirm(self, state: AwaitingConfirmation, task: Task, outcome: TaskOutcome) -> State:
        render_confirmation(self.console, task, outcome)
        key = self.terminal.read_key()
        return transition(self.tree, state, KeyPress(key))

    # ── alternate screen ─────────────────────────────────────────

    def _enter_menu_screen(self) -> None:
        if self.console.is_terminal and not self.console.is_alt_screen:
            self.console.set_alt_screen(True)
            self.console.show_cursor(False)

    def _leave_menu_screen(self) -> None:
        if self.console.is_alt_screen:
            self.console.show_cursor(True)
            self.console.set_alt_screen(False)

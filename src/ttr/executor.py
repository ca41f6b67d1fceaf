"""Run a selected task as a child process and classify how it ended."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator

from ttr import log
from ttr.config import is_windows
from ttr.tasks.model import Task

# Shell exit statuses for "found but not executable" and "not found"
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


class OutcomeKind(str, Enum):
    EXITED = "exited"
    SIGNALED = "signaled"
    SPAWN_FAILED = "spawn_failed"


@dataclass(frozen=True)
class TaskOutcome:
    """How a task run ended. Failures to start are outcomes too, not errors."""

    kind: OutcomeKind
    code: int = 0  # exit status, signal number, or 126/127 for spawn failures
    reason: str = ""

    @classmethod
    def exited(cls, code: int) -> TaskOutcome:
        return cls(OutcomeKind.EXITED, code)

    @classmethod
    def signaled(cls, signum: int) -> TaskOutcome:
        return cls(OutcomeKind.SIGNALED, signum)

    @classmethod
    def spawn_failed(cls, reason: str, code: int = EXIT_NOT_FOUND) -> TaskOutcome:
        return cls(OutcomeKind.SPAWN_FAILED, code, reason)

    @property
    def success(self) -> bool:
        return self.kind == OutcomeKind.EXITED and self.code == 0

    @property
    def exit_code(self) -> int:
        """Process exit code to propagate when the program ends after this run.

        A child killed by a signal has no exit code of its own; the program
        then exits with 0.
        """
        if self.kind == OutcomeKind.SIGNALED:
            return 0
        return self.code

    def describe(self) -> str:
        match self.kind:
            case OutcomeKind.EXITED:
                return f"exit code {self.code}"
            case OutcomeKind.SIGNALED:
                return f"terminated by {_signal_name(self.code)}"
            case OutcomeKind.SPAWN_FAILED:
                return f"could not start: {self.reason}"
        return self.kind.value


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


# ── process setup ────────────────────────────────────────────────


def resolve_working_dir(task: Task) -> Path:
    """Relative paths are anchored at the config file that defined the task."""
    if task.working_dir is None:
        return Path.cwd()
    if task.working_dir.is_absolute() or task.base_dir is None:
        return task.working_dir
    return task.base_dir / task.working_dir


def build_env(task: Task, base: dict[str, str] | None = None) -> dict[str, str]:
    """Inherited environment (unless ``clear_env``) overlaid with the task's ``env``."""
    env = {} if task.clear_env else dict(os.environ if base is None else base)
    env.update(task.env)
    return env


def build_argv(task: Task) -> list[str] | str:
    """Command for Popen: argv for list commands, a shell line for string commands."""
    if isinstance(task.cmd, tuple):
        return [*task.cmd, *task.args]

    line = task.cmd
    if task.args:
        line = f"{line} {shlex.join(task.args)}"
    if is_windows():
        return line
    return ["sh", "-c", line]


def uses_shell(task: Task) -> bool:
    return isinstance(task.cmd, str)


def spawn_task(task: Task, *, inherit_stdio: bool = True) -> subprocess.Popen:  # type: ignore[type-arg]
    """Start the task's child process. Raises ``OSError`` when it cannot start."""
    argv = build_argv(task)
    stdio = None if inherit_stdio else subprocess.PIPE
    log.debug(f"Spawning {argv!r} in {resolve_working_dir(task)}")
    return subprocess.Popen(
        argv,
        cwd=resolve_working_dir(task),
        env=build_env(task),
        shell=isinstance(argv, str),
        stdin=stdio,
        stdout=stdio,
        stderr=stdio,
    )


@contextmanager
def _sigint_ignored() -> Iterator[None]:
    """Leave Ctrl-C to the foreground child while the parent waits on it."""
    try:
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    except ValueError:
        # Not the main thread; signal dispositions cannot be changed here
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def classify_returncode(task: Task, returncode: int) -> TaskOutcome:
    if returncode < 0:
        return TaskOutcome.signaled(-returncode)
    if uses_shell(task) and not is_windows():
        if returncode == EXIT_NOT_FOUND:
            return TaskOutcome.spawn_failed("command not found", EXIT_NOT_FOUND)
        if returncode == EXIT_NOT_EXECUTABLE:
            return TaskOutcome.spawn_failed("permission denied", EXIT_NOT_EXECUTABLE)
    return TaskOutcome.exited(returncode)


def classify_spawn_error(exc: OSError) -> TaskOutcome:
    suffix = f": {exc.filename}" if exc.filename else ""
    if isinstance(exc, PermissionError):
        return TaskOutcome.spawn_failed(f"permission denied{suffix}", EXIT_NOT_EXECUTABLE)
    if isinstance(exc, FileNotFoundError):
        return TaskOutcome.spawn_failed(f"command not found{suffix}", EXIT_NOT_FOUND)
    return TaskOutcome.spawn_failed(exc.strerror or str(exc), EXIT_NOT_EXECUTABLE)


# ── entry point ──────────────────────────────────────────────────


def run_task(task: Task, *, clear_screen: Callable[[], None] | None = None) -> TaskOutcome:
    """Clear (if asked), spawn, and wait for *task*; never raises on child failure."""
    if task.clear:
        (clear_screen or log.console.clear)()

    working_dir = resolve_working_dir(task)
    if not working_dir.is_dir():
        outcome = TaskOutcome.spawn_failed(f"working directory not found: {working_dir}")
        log.debug(f"Task {task.name!r}: {outcome.describe()}")
        return outcome

    try:
        proc = spawn_task(task)
    except OSError as exc:
        outcome = classify_spawn_error(exc)
        log.debug(f"Task {task.name!r}: {outcome.describe()}")
        return outcome

    with _sigint_ignored():
        returncode = proc.wait()

    outcome = classify_returncode(task, returncode)
    log.debug(f"Task {task.name!r}: {outcome.kind.value} ({outcome.describe()})")
    return outcome

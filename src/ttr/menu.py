"""Menu state machine: a pure transition function over the task tree.

States and events are small frozen dataclasses. ``transition`` never touches
the terminal or spawns anything, so whole sessions can be replayed in tests
from a list of events.

Usage::

    state = initial_state()
    state = transition(tree, state, KeyPress("g"))       # enter group g
    state = transition(tree, state, KeyPress("d"))       # -> Executing
    state = transition(tree, state, Completed(outcome))  # -> Exited / Browsing
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ttr.config import BACK_KEYS, QUIT_KEYS, REPEAT_KEY, SELECT_KEY
from ttr.executor import TaskOutcome
from ttr.tasks.model import Group, Task, group_at, node_at


@dataclass(frozen=True)
class RunReport:
    """Result of the last task run, shown above the menu in loop mode."""

    task_name: str
    outcome: TaskOutcome


# ── states ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Browsing:
    path: tuple[int, ...] = ()  # child indices from the root; ancestors are its prefixes
    report: RunReport | None = None
    notice: str = ""


@dataclass(frozen=True)
class Executing:
    path: tuple[int, ...]


@dataclass(frozen=True)
class AwaitingConfirmation:
    path: tuple[int, ...]
    outcome: TaskOutcome


@dataclass(frozen=True)
class Exited:
    code: int


State = Union[Browsing, Executing, AwaitingConfirmation, Exited]


# ── events ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeyPress:
    key: str


@dataclass(frozen=True)
class Completed:
    outcome: TaskOutcome


Event = Union[KeyPress, Completed]


def initial_state() -> Browsing:
    return Browsing()


def task_at(tree: Group, path: tuple[int, ...]) -> Task:
    node = node_at(tree, path)
    if not isinstance(node, Task):
        raise IndexError(f"path {path} points at group {node.name!r}, not a task")
    return node


def transition(tree: Group, state: State, event: Event) -> State:
    """Return the state that follows *state* after *event*.

    Events that make no sense in a state (a completion while browsing, a key
    while executing) leave the state unchanged.
    """
    match state, event:
        case Browsing(), KeyPress(key=key):
            return _browse(tree, state, key)
        case Executing(path=path), Completed(outcome=outcome):
            return _after_run(tree, path, outcome)
        case AwaitingConfirmation(path=path, outcome=outcome), KeyPress(key=key):
            return _confirm(tree, path, outcome, key)
    return state


def _browse(tree: Group, state: Browsing, key: str) -> State:
    if key in QUIT_KEYS:
        return Exited(0)
    if key in BACK_KEYS:
        if not state.path:
            return Exited(0)
        return Browsing(path=state.path[:-1], report=state.report)
    if key == " ":
        return Browsing(path=state.path, report=state.report, notice="Whitespace is not allowed")
    if len(key) != 1 or not key.isprintable():
        return Browsing(path=state.path, report=state.report, notice="Please enter a character key")

    found = group_at(tree, state.path).find(key)
    if found is None:
        return Browsing(path=state.path, report=state.report, notice=f"No task for key: {key}")

    idx, child = found
    match child:
        case Task():
            return Executing(path=(*state.path, idx))
        case Group():
            return Browsing(path=(*state.path, idx), report=state.report)
    return state


def _after_run(tree: Group, path: tuple[int, ...], outcome: TaskOutcome) -> State:
    task = task_at(tree, path)
    if task.confirm:
        return AwaitingConfirmation(path=path, outcome=outcome)
    return _finish(task, path, outcome)


def _finish(task: Task, path: tuple[int, ...], outcome: TaskOutcome) -> State:
    if task.loop:
        return Browsing(path=path[:-1], report=RunReport(task.name, outcome))
    return Exited(outcome.exit_code)


def _confirm(tree: Group, path: tuple[int, ...], outcome: TaskOutcome, key: str) -> State:
    task = task_at(tree, path)
    if key == REPEAT_KEY:
        return Executing(path=path)
    if key == SELECT_KEY:
        return Browsing(path=path[:-1], report=RunReport(task.name, outcome))
    if key in QUIT_KEYS or key in BACK_KEYS:
        return Exited(outcome.exit_code)
    # Enter or any other key continues as if no confirmation had been asked
    return _finish(task, path, outcome)

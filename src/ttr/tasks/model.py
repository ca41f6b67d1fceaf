"""Task and Group tree nodes shared by loading, merging, the menu and execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class Task:
    name: str
    key: str
    cmd: str | tuple[str, ...]
    args: tuple[str, ...] = ()
    working_dir: Path | None = None
    env: dict[str, str] = field(default_factory=dict, hash=False)
    confirm: bool = False
    clear: bool = False
    loop: bool = False
    clear_env: bool = False
    base_dir: Path | None = None  # directory of the defining config source


@dataclass(frozen=True)
class Group:
    name: str
    key: str
    children: tuple[Node, ...] = ()

    def is_empty(self) -> bool:
        return not self.children

    def find(self, key: str) -> tuple[int, Node] | None:
        """Return ``(index, child)`` for the child bound to *key*, if any."""
        for idx, child in enumerate(self.children):
            if child.key == key:
                return idx, child
        return None


Node = Union[Task, Group]

ROOT_NAME = ""
ROOT_KEY = ""


def root_group(children: tuple[Node, ...] = ()) -> Group:
    """Build the implicit, unnamed root of a task tree."""
    return Group(name=ROOT_NAME, key=ROOT_KEY, children=children)


def node_at(root: Group, path: tuple[int, ...]) -> Node:
    """Follow a path of child indices from *root*; ``()`` is the root itself."""
    node: Node = root
    for idx in path:
        match node:
            case Group(children=children):
                node = children[idx]
            case Task():
                raise IndexError(f"path {path} descends into task {node.name!r}")
    return node


def group_at(root: Group, path: tuple[int, ...]) -> Group:
    node = node_at(root, path)
    if not isinstance(node, Group):
        raise IndexError(f"path {path} points at task {node.name!r}, not a group")
    return node


def breadcrumb(root: Group, path: tuple[int, ...]) -> list[str]:
    """Names of the groups entered along *path*, excluding the root."""
    return [node_at(root, path[: depth + 1]).name for depth in range(len(path))]


def iter_tasks(group: Group):
    """Yield every task below *group*, depth first, in display order."""
    for child in group.children:
        match child:
            case Task():
                yield child
            case Group():
                yield from iter_tasks(child)

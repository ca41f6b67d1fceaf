"""Contract tests for the task tree model used across loading, merging and the menu."""

from __future__ import annotations

from dataclasses import FrozenInstanceError, fields

import pytest

from ttr.tasks.model import Group, Task, breadcrumb, group_at, iter_tasks, node_at, root_group


def test_task_fields_and_defaults() -> None:
    names = {f.name for f in fields(Task)}
    assert {"name", "key", "cmd", "args", "working_dir", "env", "confirm", "clear", "loop", "base_dir"} <= names
    task = Task(name="date", key="d", cmd="date")
    assert (task.confirm, task.clear, task.loop, task.clear_env) == (False, False, False, False)
    assert task.args == () and task.env == {} and task.working_dir is None


def test_nodes_are_immutable() -> None:
    with pytest.raises(FrozenInstanceError):
        Task(name="a", key="a", cmd="a").key = "b"  # type: ignore[misc]
    with pytest.raises(FrozenInstanceError):
        root_group().children = ()  # type: ignore[misc]


def test_tasks_with_env_are_hashable() -> None:
    assert isinstance(hash(Task(name="a", key="a", cmd="a", env={"X": "1"})), int)


def test_paths(make_task, make_group, make_tree) -> None:
    leaf = make_task("x")
    tree = make_tree([make_task("a"), make_group("g", [make_group("h", [leaf], name="inner")], name="outer")])
    assert node_at(tree, ()) is tree
    assert node_at(tree, (1, 0, 0)) is leaf
    assert group_at(tree, (1, 0)).name == "inner"
    assert breadcrumb(tree, (1, 0)) == ["outer", "inner"]
    assert breadcrumb(tree, ()) == []


def test_bad_paths(make_task, make_tree) -> None:
    tree = make_tree([make_task("a")])
    with pytest.raises(IndexError):
        group_at(tree, (0,))
    with pytest.raises(IndexError):
        node_at(tree, (0, 0))


def test_find(make_task, make_group) -> None:
    group = make_group("g", [make_task("a"), make_task("b")])
    assert group.find("b") == (1, group.children[1])
    assert group.find("z") is None


def test_iter_tasks_depth_first(make_task, make_group, make_tree) -> None:
    tree = make_tree([make_group("g", [make_task("a"), make_task("b")]), make_task("c")])
    assert [t.key for t in iter_tasks(tree)] == ["a", "b", "c"]

"""Shared fixtures for ttr tests.

File handling in tests:
- Use tmp_path for any directory or config file so tests stay isolated.
- Build trees with the make_task / make_group factories instead of YAML when
  the parser is not under test.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ttr.config import CONFIG_FILE_NAME, Config
from ttr.tasks.model import Group, Node, Task, root_group


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register opt-in switch for tests that launch ttr in a subprocess."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end tests marked with 'e2e'.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip e2e tests unless explicitly enabled."""
    if config.getoption("--run-e2e"):
        return

    skip_e2e = pytest.mark.skip(
        reason="E2E tests are skipped by default. Use --run-e2e to include them.",
    )
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def _make_task(key: str, cmd: str | tuple[str, ...] = "true", name: str = "", **kwargs) -> Task:
    return Task(name=name or f"task {key}", key=key, cmd=cmd, **kwargs)


def _make_group(key: str, children: list[Node] | None = None, name: str = "") -> Group:
    return Group(name=name or f"group {key}", key=key, children=tuple(children or []))


def _make_tree(children: list[Node]) -> Group:
    return root_group(tuple(children))


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances."""
    return _make_task


@pytest.fixture
def make_group():
    """Factory fixture that creates Group instances."""
    return _make_group


@pytest.fixture
def make_tree():
    """Factory fixture that wraps nodes in an implicit root group."""
    return _make_tree


@pytest.fixture
def write_config():
    """Write a .ttr.yaml into a directory (created if needed) and return its path."""

    def _write(directory: Path, text: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / CONFIG_FILE_NAME
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sandbox(tmp_path: Path) -> Config:
    """A Config whose home, project and config dir all live under tmp_path.

    Layout::

        tmp_path/home                     (home)
        tmp_path/home/work/project        (cwd)
        tmp_path/xdg/ttr                  (user config dir)
    """
    home = tmp_path / "home"
    cwd = home / "work" / "project"
    config_dir = tmp_path / "xdg" / "ttr"
    cwd.mkdir(parents=True)
    config_dir.mkdir(parents=True)
    return Config(cwd=cwd, home=home, config_dir=config_dir)

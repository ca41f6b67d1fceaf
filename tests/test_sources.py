"""Tests for ttr.sources: config discovery order and skipping rules."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from ttr.config import CONFIG_FILE_NAME, Config
from ttr.sources import ConfigSource, candidate_paths, discover_sources


def _paths(sources: list[ConfigSource]) -> list[Path]:
    return [s.path for s in sources]


class TestCandidatePaths:
    def test_walks_from_cwd_up_to_home_then_config_dir(self, sandbox):
        home = sandbox.home.resolve()
        assert candidate_paths(sandbox) == [
            home / "work" / "project" / CONFIG_FILE_NAME,
            home / "work" / CONFIG_FILE_NAME,
            home / CONFIG_FILE_NAME,
            home / CONFIG_FILE_NAME,
            sandbox.config_dir / CONFIG_FILE_NAME,
        ]

    def test_outside_home_walks_to_filesystem_root(self, tmp_path):
        cwd = tmp_path / "elsewhere"
        cwd.mkdir()
        cfg = Config(cwd=cwd, home=tmp_path / "home", config_dir=tmp_path / "xdg")
        paths = candidate_paths(cfg)
        walked = [p.parent for p in paths[:-2]]
        assert walked[0] == cwd.resolve()
        assert walked[-1] == Path(cwd.resolve().anchor)

    def test_cwd_is_home(self, tmp_path):
        home = tmp_path / "home"
        home.mkdir()
        cfg = Config(cwd=home, home=home, config_dir=tmp_path / "xdg")
        assert candidate_paths(cfg)[0] == home.resolve() / CONFIG_FILE_NAME


class TestDiscoverSources:
    def test_no_configs(self, sandbox):
        assert discover_sources(sandbox) == []

    def test_priority_order_and_ranks(self, sandbox, write_config):
        project = write_config(sandbox.cwd, "tasks: []")
        parent = write_config(sandbox.cwd.parent, "tasks: []")
        home = write_config(sandbox.home, "tasks: []")
        user = write_config(sandbox.config_dir, "tasks: []")

        sources = discover_sources(sandbox)

        assert [s.path.resolve() for s in sources] == [
            project.resolve(), parent.resolve(), home.resolve(), user.resolve(),
        ]
        assert [s.rank for s in sources] == [0, 1, 2, 3]

    def test_missing_levels_are_skipped_and_ranks_stay_dense(self, sandbox, write_config):
        write_config(sandbox.cwd, "tasks: []")
        write_config(sandbox.config_dir, "tasks: []")

        sources = discover_sources(sandbox)

        assert [s.rank for s in sources] == [0, 1]
        assert sources[1].path.parent == sandbox.config_dir

    def test_home_config_reported_once(self, sandbox, write_config):
        write_config(sandbox.home, "tasks: []")
        sources = discover_sources(sandbox)
        assert len(sources) == 1
        assert sources[0].base_dir.resolve() == sandbox.home.resolve()

    def test_config_dir_equal_to_walked_dir_is_not_duplicated(self, tmp_path, write_config):
        home = tmp_path / "home"
        cwd = home / "proj"
        cwd.mkdir(parents=True)
        write_config(cwd, "tasks: []")
        cfg = Config(cwd=cwd, home=home, config_dir=cwd)
        assert len(discover_sources(cfg)) == 1

    def test_directory_named_like_config_is_skipped(self, sandbox):
        (sandbox.cwd / CONFIG_FILE_NAME).mkdir()
        assert discover_sources(sandbox) == []

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_unreadable_file_is_skipped(self, sandbox, write_config):
        path = write_config(sandbox.cwd, "tasks: []")
        path.chmod(0)
        try:
            assert discover_sources(sandbox) == []
        finally:
            path.chmod(0o644)

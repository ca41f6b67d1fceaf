"""Discovery of ``.ttr.yaml`` config sources, highest priority first."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ttr import log
from ttr.config import CONFIG_FILE_NAME, Config


@dataclass(frozen=True)
class ConfigSource:
    path: Path
    rank: int  # 0 is the highest priority

    @property
    def base_dir(self) -> Path:
        return self.path.parent


def _is_readable_file(path: Path) -> bool:
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError:
        return False


def candidate_paths(cfg: Config) -> list[Path]:
    """Every location that may hold a config, in priority order.

    The walk goes from the working directory up to and including home. When
    the working directory lies outside home the walk ends at the filesystem
    root instead.
    """
    cwd = cfg.cwd.resolve()
    home = cfg.home.resolve() if cfg.home else None

    candidates: list[Path] = []
    for directory in (cwd, *cwd.parents):
        candidates.append(directory / CONFIG_FILE_NAME)
        if directory == home:
            break

    if home is not None:
        candidates.append(home / CONFIG_FILE_NAME)
    if cfg.config_dir is not None:
        candidates.append(cfg.config_dir / CONFIG_FILE_NAME)
    return candidates


def discover_sources(cfg: Config) -> list[ConfigSource]:
    """Return the existing, readable config files ranked by priority.

    Missing or unreadable locations are skipped. A file reachable by more
    than one route keeps its first (highest) rank.
    """
    sources: list[ConfigSource] = []
    seen: set[Path] = set()
    for path in candidate_paths(cfg):
        try:
            resolved = path.resolve()
        except OSError:
            continue
        if resolved in seen:
            continue
        seen.add(resolved)
        if not _is_readable_file(path):
            continue
        sources.append(ConfigSource(path=path, rank=len(sources)))
        log.debug(f"Config source #{len(sources) - 1}: {path}")

    if not sources:
        log.debug("No config sources found")
    return sources

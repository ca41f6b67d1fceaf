"""Load ``.ttr.yaml`` documents into task tree fragments."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ttr import log
from ttr.config import BACK_KEYS, QUIT_KEYS
from ttr.errors import ConfigError
from ttr.sources import ConfigSource
from ttr.tasks.model import Group, Node, Task, root_group

_TASK_FIELDS = {
    "name", "key", "cmd", "args", "working_dir", "env",
    "confirm", "clear", "loop", "clear_env",
}
_GROUP_FIELDS = {"name", "key", "tasks", "groups"}
_BOOL_FIELDS = ("confirm", "clear", "loop", "clear_env")

_RESERVED_KEYS = QUIT_KEYS | BACK_KEYS | {" "}


def load_source(source: ConfigSource) -> Group:
    """Read and parse one config source into a root fragment."""
    try:
        with open(source.path, encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise ConfigError(f"cannot read file: {exc.strerror or exc}", source.path) from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"not valid UTF-8: {exc.reason} at byte {exc.start}", source.path) from exc
    return parse_document(text, base_dir=source.base_dir, path=source.path)


def load_sources(sources: list[ConfigSource]) -> list[Group]:
    """Parse every source, in rank order. The first failure aborts the load."""
    fragments = [load_source(src) for src in sources]
    log.debug(f"Parsed {len(fragments)} config source(s)")
    return fragments


def parse_document(text: str, *, base_dir: Path | None = None, path: Path | None = None) -> Group:
    """Parse YAML text into a root :class:`Group`.

    Accepts a mapping with ``tasks:`` and/or ``groups:``, a bare list of
    tasks (legacy flat form), or an empty document.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", path) from exc

    parser = _Parser(base_dir=base_dir, path=path)
    if data is None:
        return root_group()
    if isinstance(data, list):
        return root_group(parser.nodes(data, where="tasks"))
    if isinstance(data, dict):
        unknown = set(data) - {"tasks", "groups"}
        if unknown:
            raise ConfigError(f"unknown top-level field(s): {', '.join(sorted(map(str, unknown)))}", path)
        children = parser.children(data, where="root")
        return root_group(children)
    raise ConfigError(f"expected a mapping or a list at top level, got {type(data).__name__}", path)


class _Parser:
    """Validates raw YAML records and builds frozen tree nodes."""

    def __init__(self, *, base_dir: Path | None, path: Path | None) -> None:
        self.base_dir = base_dir
        self.path = path

    def fail(self, msg: str) -> ConfigError:
        return ConfigError(msg, self.path)

    def children(self, raw: dict[str, Any], *, where: str) -> tuple[Node, ...]:
        """Build the children of a group from its ``groups:`` and ``tasks:`` members."""
        groups = raw.get("groups") or []
        tasks = raw.get("tasks") or []
        for member, value in (("groups", groups), ("tasks", tasks)):
            if not isinstance(value, list):
                raise self.fail(f"{where}: '{member}' must be a list")
        nodes = self.nodes(groups, where=where, groups_only=True) + self.nodes(tasks, where=where)
        self._check_unique(nodes, where)
        return nodes

    def nodes(self, items: list[Any], *, where: str, groups_only: bool = False) -> tuple[Node, ...]:
        nodes: list[Node] = []
        for idx, item in enumerate(items):
            label = f"{where}[{idx}]"
            if not isinstance(item, dict):
                raise self.fail(f"{label}: expected a mapping, got {type(item).__name__}")
            if "tasks" in item or "groups" in item or groups_only:
                nodes.append(self.group(item, label))
            else:
                nodes.append(self.task(item, label))
        result = tuple(nodes)
        self._check_unique(result, where)
        return result

    def group(self, raw: dict[str, Any], label: str) -> Group:
        self._check_fields(raw, _GROUP_FIELDS, label)
        name = self._name(raw, label)
        key = self._key(raw, label)
        return Group(name=name, key=key, children=self.children(raw, where=f"{label} ({name})"))

    def task(self, raw: dict[str, Any], label: str) -> Task:
        self._check_fields(raw, _TASK_FIELDS, label)
        name = self._name(raw, label)
        key = self._key(raw, label)
        label = f"{label} ({name})"

        cmd = raw.get("cmd")
        if isinstance(cmd, str):
            if not cmd.strip():
                raise self.fail(f"{label}: 'cmd' must not be empty")
        elif isinstance(cmd, list) and cmd and all(isinstance(c, str) for c in cmd):
            cmd = tuple(cmd)
        else:
            raise self.fail(f"{label}: 'cmd' must be a string or a non-empty list of strings")

        args = raw.get("args") or []
        if not isinstance(args, list) or not all(isinstance(a, (str, int, float)) for a in args):
            raise self.fail(f"{label}: 'args' must be a list of strings")

        env = raw.get("env") or {}
        if not isinstance(env, dict):
            raise self.fail(f"{label}: 'env' must be a mapping")
        for var, value in env.items():
            if not isinstance(var, str) or isinstance(value, (dict, list)):
                raise self.fail(f"{label}: 'env' entries must map names to scalar values")

        working_dir = raw.get("working_dir")
        if working_dir is not None and not isinstance(working_dir, str):
            raise self.fail(f"{label}: 'working_dir' must be a path string")

        flags: dict[str, bool] = {}
        for flag in _BOOL_FIELDS:
            value = raw.get(flag, False)
            if not isinstance(value, bool):
                raise self.fail(f"{label}: '{flag}' must be true or false")
            flags[flag] = value

        return Task(
            name=name,
            key=key,
            cmd=cmd,
            args=tuple(str(a) for a in args),
            working_dir=Path(working_dir) if working_dir else None,
            env={var: _env_value(value) for var, value in env.items()},
            base_dir=self.base_dir,
            **flags,
        )

    # ── field helpers ────────────────────────────────────────────

    def _check_fields(self, raw: dict[str, Any], allowed: set[str], label: str) -> None:
        unknown = set(raw) - allowed
        if unknown:
            raise self.fail(f"{label}: unknown field(s): {', '.join(sorted(map(str, unknown)))}")

    def _name(self, raw: dict[str, Any], label: str) -> str:
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise self.fail(f"{label}: 'name' must be a non-empty string")
        return name

    def _key(self, raw: dict[str, Any], label: str) -> str:
        key = raw.get("key")
        # YAML reads `key: 1` as an int; a single digit is still a single keystroke
        if isinstance(key, int) and not isinstance(key, bool):
            key = str(key)
        if not isinstance(key, str) or len(key) != 1:
            raise self.fail(f"{label}: 'key' must be exactly one character, got {key!r}")
        if key in _RESERVED_KEYS:
            log.warn(f"{self.path or '<config>'}: {label} is bound to reserved key {key!r} and cannot be selected")
        return key

    def _check_unique(self, nodes: tuple[Node, ...], where: str) -> None:
        seen: dict[str, str] = {}
        for node in nodes:
            if node.key in seen:
                raise self.fail(
                    f"{where}: key {node.key!r} is bound to both {seen[node.key]!r} and {node.name!r}"
                )
            seen[node.key] = node.name


def _env_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

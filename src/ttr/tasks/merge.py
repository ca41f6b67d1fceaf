"""Merge task tree fragments from several config sources into one tree."""

from __future__ import annotations

from ttr import log
from ttr.tasks.model import Group, Node, Task, root_group


def merge_fragments(fragments: list[Group]) -> Group:
    """Merge fragments ordered by priority (index 0 wins) into one root group.

    Groups bound to the same key are merged recursively. Any other collision
    keeps the higher-priority node whole and drops the other one.
    """
    merged = root_group()
    for fragment in fragments:
        merged = merge_groups(merged, fragment)
    return merged


def merge_groups(high: Group, low: Group) -> Group:
    """Union the children of *low* into *high*; *high* keeps precedence.

    Children of *high* keep their order; children only found in *low* are
    appended in *low*'s order.
    """
    low_by_key = {child.key: child for child in low.children}
    high_keys = {child.key for child in high.children}

    children: list[Node] = []
    for child in high.children:
        other = low_by_key.get(child.key)
        children.append(child if other is None else _resolve(child, other))
    children.extend(child for child in low.children if child.key not in high_keys)

    return Group(name=high.name, key=high.key, children=tuple(children))


def _resolve(high: Node, low: Node) -> Node:
    match high, low:
        case Group(), Group():
            return merge_groups(high, low)
        case _:
            if high != low:
                log.debug(
                    f"Key {high.key!r}: {_describe(high)} shadows {_describe(low)}"
                )
            return high


def _describe(node: Node) -> str:
    match node:
        case Task(name=name):
            return f"task {name!r}"
        case Group(name=name):
            return f"group {name!r}"
    raise TypeError(f"not a tree node: {node!r}")

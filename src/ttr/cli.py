"""TTR command line entry point.

Installed as the ``ttr`` console_script. There are no task options: what to
run is chosen interactively from the merged ``.ttr.yaml`` tree.
"""

from __future__ import annotations

import sys

import click

from ttr import __version__
from ttr.config import Config

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output (config discovery, merging, spawning)")
@click.version_option(__version__, prog_name="ttr")
def main(verbose: bool) -> None:
    """TTR: terminal task runner.

    Shows the tasks defined in .ttr.yaml files and runs the one whose key you
    press. No Enter needed.

    \b
    CONFIG FILES (highest priority first):
      ./.ttr.yaml and every parent directory up to ~
      ~/.ttr.yaml
      <user config dir>/ttr/.ttr.yaml

    \b
    KEYS:
      <key>        run a task or open a group
      Esc / <BS>   go up one group (quits at the top)
      q            quit
    """
    from ttr import log

    log.set_verbose(verbose)
    cfg = Config(verbose=verbose)
    sys.exit(_run(cfg))


def _run(cfg: Config) -> int:
    """Load the task tree and run the interactive session; return the exit code."""
    from ttr import log
    from ttr.errors import ConfigError, TerminalModeError

    try:
        tree = load_task_tree(cfg)
    except ConfigError as exc:
        log.error(str(exc), hint="Fix the file above; no tasks were loaded.")
        return 1

    from ttr.app import Dispatcher
    from ttr.terminal import Terminal

    try:
        return Dispatcher(tree, terminal=Terminal()).run()
    except TerminalModeError as exc:
        log.error(f"Terminal error: {exc}")
        return 1


def load_task_tree(cfg: Config):
    """Discover, parse and merge every config source into one task tree."""
    from ttr import log
    from ttr.sources import discover_sources
    from ttr.tasks.io import load_sources
    from ttr.tasks.merge import merge_fragments
    from ttr.tasks.model import iter_tasks

    sources = discover_sources(cfg)
    tree = merge_fragments(load_sources(sources))
    log.debug(f"Loaded {sum(1 for _ in iter_tasks(tree))} task(s) from {len(sources)} source(s)")
    return tree

"""Draw the task menu and the post-run confirmation prompt."""

from __future__ import annotations

import math

from rich.console import Console
from rich.markup import escape

from ttr.config import CONFIG_FILE_NAME, ITEM_CELL_WIDTH, ITEM_NAME_WIDTH, SCREEN_PADDING
from ttr.executor import TaskOutcome
from ttr.menu import Browsing, RunReport
from ttr.tasks.model import Group, Node, Task, breadcrumb, group_at

INDENT = "   "


def truncate(name: str, width: int = ITEM_NAME_WIDTH) -> str:
    if len(name) > width:
        return name[: width - 1] + "…"
    return name


def format_item(node: Node) -> str:
    """``key → name`` with groups and tasks told apart by colour."""
    colour = "blue" if isinstance(node, Group) else "green"
    name = truncate(node.name)
    return f"[bold {colour}]{escape(node.key)}[/] → {escape(name)}{' ' * (ITEM_NAME_WIDTH - len(name))}"


def layout_columns(children: tuple[Node, ...], width: int) -> list[list[Node]]:
    """Split children into rows, filling columns top to bottom in defined order."""
    if not children:
        return []
    columns_fit = max(1, (width - SCREEN_PADDING) // ITEM_CELL_WIDTH)
    rows = math.ceil(len(children) / columns_fit)
    columns = [children[i : i + rows] for i in range(0, len(children), rows)]
    return [[col[r] for col in columns if r < len(col)] for r in range(rows)]


def format_status(report: RunReport) -> str:
    name = escape(report.task_name)
    if report.outcome.success:
        return f"Task {name} [green]completed[/green]"
    return f"Task {name} [red]failed[/red] ({escape(report.outcome.describe())})"


def render_menu(console: Console, tree: Group, state: Browsing, *, width: int | None = None) -> None:
    console.clear()
    console.print()
    if state.report is not None:
        console.print(f"  {format_status(state.report)}")
        console.print()

    group = group_at(tree, state.path)
    if group.is_empty():
        console.print(f"{INDENT} [bold]No tasks configured[/bold]")
        if not state.path:
            console.print(f"{INDENT} Create file {CONFIG_FILE_NAME} in the current directory")
    else:
        header = "  [grey50]SELECT A TASK[/grey50]"
        crumbs = breadcrumb(tree, state.path)
        if crumbs:
            header += " → " + " → ".join(escape(name) for name in crumbs)
        console.print(header)
        console.print()
        for row in layout_columns(group.children, width or console.size.width):
            console.print("  " + "".join(f" {format_item(node)}  " for node in row))

    console.print()
    console.print(f"{INDENT} [red]q[/red] → quit")
    if state.path:
        console.print(" [red]<BS>[/red] → up")

    if state.notice:
        console.print()
        console.print(f"{INDENT}[red]{escape(state.notice)}[/red]")
        console.print()


def render_confirmation(console: Console, task: Task, outcome: TaskOutcome) -> None:
    name = escape(task.name)
    console.print()
    if outcome.success:
        console.print(f"{INDENT}Task {name} [bold green]completed[/bold green]")
    else:
        console.print(f"{INDENT}Task {name} [bold red]failed[/bold red] ({escape(outcome.describe())})")
    console.print()
    console.print(
        f"{INDENT}Press [bold yellow]Enter[/bold yellow] to continue. "
        "[bold yellow]r[/bold yellow]epeat or [bold yellow]s[/bold yellow]elect another task..."
    )

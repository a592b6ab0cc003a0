"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from noderesource.models.result import ItemResult, SweepReport
    from noderesource.models.rule import ResourceRule

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "added": "#c1ff62",
        "changed": "#0e8ac8",
    }
)

# Shared console instances
console = Console(theme=THEME)
err_console = Console(theme=THEME, stderr=True)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")


def _format_status(result: ItemResult) -> str:
    """Format the status cell of a result row."""
    if result.failed:
        return "[error]FAIL[/error]"
    if not result.success:
        return "[warning]SKIP[/warning]"
    if result.is_noop:
        return "[muted]OK[/muted]"
    return "[added]DONE[/added]"


def create_results_table(results: list[ItemResult], title: str = "Sweep Results") -> Table:
    """Create a Rich table displaying item results.

    Args:
        results: Item results to display.
        title: Table title.

    Returns:
        Rich Table with one row per result.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Kind", no_wrap=True)
    table.add_column("Item", no_wrap=True)
    table.add_column("Action")
    table.add_column("Message")

    for result in results:
        message = result.error if result.error is not None else result.message or ""
        table.add_row(
            _format_status(result),
            result.kind.value,
            result.item,
            result.action.value,
            f"[muted]{message}[/muted]",
        )

    return table


def create_rules_table(rules: list[ResourceRule], matched: list[bool], title: str) -> Table:
    """Create a Rich table displaying rules and whether they match this node.

    Args:
        rules: Rules to display.
        matched: Match flag per rule, same order as ``rules``.
        title: Table title.

    Returns:
        Rich Table with one row per rule.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("Name", no_wrap=True)
    table.add_column("Selector")
    table.add_column("Type")
    table.add_column("Backing")

    for rule, is_match in zip(rules, matched, strict=True):
        icon = "[success]●[/]" if is_match else "[muted]○[/]"
        backing = rule.topology.devices or rule.topology.regions
        table.add_row(
            icon,
            rule.name,
            f"[muted]{rule.key} {rule.operator} {rule.value}[/muted]",
            rule.topology.type,
            ", ".join(backing),
        )

    return table


def print_sweep_summary(report: SweepReport) -> None:
    """Print a one-line summary of a sweep."""
    actions = len(report.actions)
    conditions = len(report.conditions)
    failures = len(report.failures)

    if report.in_sync:
        print_success("Node storage is in sync, nothing to do.")
        return

    console.print(
        f"\n[added]{actions} applied[/added], "
        f"[warning]{conditions} skipped[/warning], "
        f"[error]{failures} failed[/error]"
    )

"""CLI commands for noderesource.

This package contains all subcommand implementations.
"""

from noderesource.cli.commands import rules, run, sweep

__all__ = ["rules", "run", "sweep"]

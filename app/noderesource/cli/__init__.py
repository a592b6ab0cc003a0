"""CLI package for noderesource.

This package contains the Typer application and all subcommands.
"""

from noderesource.cli.main import app

__all__ = ["app"]

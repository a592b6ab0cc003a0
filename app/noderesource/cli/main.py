"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from noderesource import __version__
from noderesource.cli.commands import rules, run, sweep
from noderesource.core.logging import LogType, configure_logging
from noderesource.utils.formatting import print_error

# Create main Typer app
app = typer.Typer(
    name="noderesource",
    help="Node-local storage reconciliation agent.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"noderesource version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    log_type: Annotated[
        LogType,
        typer.Option(
            "--log-type",
            envvar="NRM_LOG_TYPE",
            help="Write logs to stdout, a file on the host, or both.",
            case_sensitive=False,
        ),
    ] = LogType.STDOUT,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            envvar="NRM_LOG_DIR",
            help="Directory of the rotating log file.",
        ),
    ] = None,
) -> None:
    """noderesource - Keep node storage in line with declarative rules.

    Volume groups, quota paths and persistent-memory tiers are described
    in TOML rule documents and converged on every sweep.
    """
    try:
        configure_logging(
            level=logging.DEBUG if verbose else logging.INFO,
            log_type=log_type,
            log_dir=log_dir,
        )
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.add_typer(run.app, name="run")
app.add_typer(sweep.app, name="sweep")
app.add_typer(rules.app, name="rules")


if __name__ == "__main__":
    app()

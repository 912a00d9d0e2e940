"""Main CLI entry point for check-ajp."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from check_ajp import __version__
from check_ajp.commands import check, config
from check_ajp.container import set_config_path
from check_ajp.services.check import PluginStatus

app = typer.Typer(
    name="check-ajp",
    help="check-ajp - AJP13 health check for application-server containers",
    no_args_is_help=True,
    add_completion=False,
)

app.command(name="check")(check.check)
app.command(name="ping")(check.ping)
app.add_typer(config.app, name="config")

console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit with the UNKNOWN status."""
    if value:
        print(f"check_ajp: {__version__}")
        raise typer.Exit(int(PluginStatus.UNKNOWN))


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Configuration file (YAML)",
        ),
    ] = None,
) -> None:
    """
    check-ajp - AJP13 health check for application-server containers.

    Forwards a GET or HEAD request to a servlet container over AJP13 and
    reports the result as a monitoring-plugin status line.

    Use 'check-ajp COMMAND --help' for help with specific commands.
    """
    set_config_path(config_file)


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        print(f"AJP {PluginStatus.UNKNOWN.name} - {e}")
        sys.exit(int(PluginStatus.UNKNOWN))


if __name__ == "__main__":
    cli_main()

"""Configuration management commands.

This module provides CLI commands for configuration management:
- show: Display current configuration
- init: Initialize configuration file

Config commands read the configuration directly (container.py); they do
not go through the service layer.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from check_ajp.config import GLOBAL_CONFIG_PATH, Config
from check_ajp.container import get_config

app = typer.Typer(
    name="config",
    help="Manage check-ajp configuration",
    no_args_is_help=True,
)

console = Console()


@app.command()
def show(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output in JSON format",
        ),
    ] = False,
) -> None:
    """Display current configuration.

    Configuration precedence:
    1. Environment variables (CHECK_AJP_*)
    2. Configuration file (--config, ./.check-ajp.yaml, ~/.check-ajp/config.yaml)
    3. Defaults

    Examples:
        # Show configuration as tables
        check-ajp config show

        # Show configuration as JSON
        check-ajp config show --json
    """
    try:
        config = get_config()
    except ValueError as e:
        console.print(f"[red]Error reading configuration:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(config.to_dict(), indent=2))
        return

    console.print("[bold]Current Configuration[/bold]\n")
    for section, values in config.to_dict().items():
        table = Table(title=section.capitalize(), show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in values.items():
            table.add_row(key, "Not set" if value is None else str(value))
        console.print(table)
        console.print()

    for warning in config.validate_config():
        console.print(f"[yellow]⚠[/yellow] {warning}")

    console.print("[dim]Set via environment variables:[/dim]")
    console.print("[dim]  CHECK_AJP_HOST, CHECK_AJP_PORT, CHECK_AJP_TIMEOUT,[/dim]")
    console.print("[dim]  CHECK_AJP_WARNING, CHECK_AJP_CRITICAL[/dim]")


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Option(
            "--path",
            help="Configuration file to create",
        ),
    ] = GLOBAL_CONFIG_PATH,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing configuration file",
        ),
    ] = False,
) -> None:
    """Initialize configuration file.

    Examples:
        # Create ~/.check-ajp/config.yaml
        check-ajp config init

        # Create a project file, overwriting it
        check-ajp config init --path .check-ajp.yaml --force
    """
    if path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {path}\n"
            "Use --force to overwrite."
        )
        raise typer.Exit(0)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(Config.get_template())
    except OSError as e:
        console.print(f"[red]Error creating configuration file:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Configuration file created: {path}")

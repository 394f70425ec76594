"""
CLI commands for stored options.

Usage:
    checkmate options get
    checkmate options set --theme dark
    checkmate options set --template-url https://example.com/review.yaml
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from checkmate.cli.output import console, print_cli_error, print_options
from checkmate.cli.runtime import run_with_engine
from checkmate.engine import ChecklistEngine
from checkmate.options import ExtensionOptions

app = typer.Typer(help="Read and update stored options", no_args_is_help=True)


@app.command("get")
def get_cmd(
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
):
    """Show the stored options (defaults where unset)."""
    options = run_with_engine(lambda engine: engine.get_options())

    if output_json:
        typer.echo(json.dumps(options.to_record(), indent=2))
    else:
        print_options(options)


@app.command("set")
def set_cmd(
    template_url: Optional[str] = typer.Option(
        None,
        "--template-url",
        "-u",
        help="Default template URL",
    ),
    theme: Optional[str] = typer.Option(
        None,
        "--theme",
        "-t",
        help="light, dark or auto",
    ),
):
    """Update one or more options, keeping the others."""
    if template_url is None and theme is None:
        print_cli_error("Nothing to set", hint="Pass --template-url and/or --theme")
        raise typer.Exit(1)

    async def _update(engine: ChecklistEngine) -> ExtensionOptions:
        record = (await engine.get_options()).to_record()
        if template_url is not None:
            record["defaultTemplateUrl"] = template_url
        if theme is not None:
            record["theme"] = theme
        return await engine.save_options(record)

    options = run_with_engine(_update)
    console.print("[green]✓[/green] Options saved")
    print_options(options)


def register(parent: typer.Typer):
    """Register options commands with the parent CLI app."""
    parent.add_typer(app, name="options", rich_help_panel="Settings")

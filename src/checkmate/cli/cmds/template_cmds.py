"""
CLI commands for checklist templates.

Usage:
    checkmate template show                  # Configured template
    checkmate template show ./review.md -k   # A local template, with state keys
    checkmate template validate URL          # Report why a template fails to load
"""

from __future__ import annotations

import json
from typing import Optional

import typer
from rich.markup import escape

from checkmate.cli.output import console, print_template
from checkmate.cli.runtime import run_with_engine

app = typer.Typer(help="Inspect and validate checklist templates", no_args_is_help=True)


@app.command("show")
def show_cmd(
    url: Optional[str] = typer.Argument(
        None,
        help="Template URL or path (defaults to the configured template)",
    ),
    keys: bool = typer.Option(
        False,
        "--keys",
        "-k",
        help="Show section and item state keys",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output as JSON",
    ),
):
    """Show a template as it will be rendered.

    Falls back to the built-in checklist if the template cannot be loaded.
    """
    template = run_with_engine(lambda engine: engine.load_template(url))

    if output_json:
        typer.echo(json.dumps(template.to_dict(), indent=2))
    else:
        print_template(template, show_keys=keys)


@app.command("validate")
def validate_cmd(
    url: str = typer.Argument(..., help="Template URL or path"),
):
    """Fetch and parse a template without falling back."""
    template = run_with_engine(lambda engine: engine.loader.fetch(url))
    console.print(
        f"[green]✓[/green] Valid template: "
        f"{len(template.sections)} sections, {template.item_count} items"
    )
    console.print(f"[dim]{escape(url)}[/dim]")


def register(parent: typer.Typer):
    """Register template commands with the parent CLI app."""
    parent.add_typer(app, name="template", rich_help_panel="Checklist")

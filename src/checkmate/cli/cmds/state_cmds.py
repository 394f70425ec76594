"""
CLI commands for per-review checklist state.

A review context is either a state key (``octo/repo#12``) or a GitHub
pull request or repository URL.

Usage:
    checkmate state list
    checkmate state show octo/repo#12
    checkmate state summary octo/repo#12
    checkmate state check octo/repo#12 security/check-auth
    checkmate state reset https://github.com/octo/repo/pull/12 --yes
    checkmate state prune --days 30
"""

from __future__ import annotations

import json
from typing import List, Optional

import typer
from rich.markup import escape

from checkmate.cli.output import console, print_checklist, print_cli_error
from checkmate.cli.runtime import run_with_engine
from checkmate.engine import Checklist, ChecklistEngine

app = typer.Typer(help="Inspect and modify checklist state", no_args_is_help=True)


@app.command("list")
def list_cmd(
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List review contexts that have stored state."""
    keys = run_with_engine(lambda engine: engine.states.list_state_keys())

    if output_json:
        typer.echo(json.dumps(keys, indent=2))
    elif not keys:
        console.print("[dim]No stored checklist state[/dim]")
    else:
        for key in sorted(keys):
            console.print(escape(key))


@app.command("show")
def show_cmd(
    context: str = typer.Argument(..., help="State key or GitHub URL"),
    template_url: Optional[str] = typer.Option(
        None,
        "--template",
        "-t",
        help="Template URL (defaults to the configured template)",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show the checklist and its state for a review."""
    checklist = run_with_engine(lambda engine: engine.open_checklist(context, template_url))

    if output_json:
        typer.echo(json.dumps(checklist.state.to_record(), indent=2))
    else:
        print_checklist(checklist)


@app.command("summary")
def summary_cmd(
    context: str = typer.Argument(..., help="State key or GitHub URL"),
    template_url: Optional[str] = typer.Option(
        None,
        "--template",
        "-t",
        help="Template URL (defaults to the configured template)",
    ),
):
    """Print a Markdown review summary for a review."""
    checklist = run_with_engine(lambda engine: engine.open_checklist(context, template_url))
    typer.echo(checklist.summary(), nl=False)


@app.command("check")
def check_cmd(
    context: str = typer.Argument(..., help="State key or GitHub URL"),
    item: str = typer.Argument(..., help="Item state key, e.g. security/check-auth"),
    uncheck: bool = typer.Option(False, "--uncheck", help="Clear the checkmark instead"),
    attention: Optional[bool] = typer.Option(
        None,
        "--attention/--no-attention",
        help="Flag or unflag the item as needing attention",
    ),
):
    """Check (or uncheck) an item and optionally flag it."""

    async def _check(engine: ChecklistEngine) -> Optional[Checklist]:
        checklist = await engine.open_checklist(context)
        if item not in checklist.keys.items:
            return None
        return await engine.update_item(
            checklist, item, checked=not uncheck, needs_attention=attention
        )

    checklist = run_with_engine(_check)
    if checklist is None:
        print_cli_error(
            f"No item {item!r} in the current template",
            hint="Run `checkmate template show --keys` to list item keys",
        )
        raise typer.Exit(1)
    print_checklist(checklist)


@app.command("reset")
def reset_cmd(
    context: str = typer.Argument(..., help="State key or GitHub URL"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Uncheck and unflag every item of a review."""
    if not yes:
        typer.confirm(f"Reset checklist for {context}?", abort=True)

    async def _reset(engine: ChecklistEngine) -> Checklist:
        return await engine.reset(await engine.open_checklist(context))

    checklist = run_with_engine(_reset)
    console.print(f"[green]✓[/green] Reset {escape(checklist.state_key)}")


@app.command("prune")
def prune_cmd(
    days: Optional[float] = typer.Option(
        None,
        "--days",
        "-d",
        help="Remove state not saved within this many days (defaults to CHECKMATE_RETENTION_DAYS)",
    ),
):
    """Remove stale review state."""

    async def _prune(engine: ChecklistEngine) -> Optional[List[str]]:
        max_age = days * 86400 if days is not None else engine.settings.retention_seconds
        if max_age is None:
            return None
        return await engine.states.prune(max_age)

    removed = run_with_engine(_prune)
    if removed is None:
        print_cli_error("No retention period", hint="Pass --days or set CHECKMATE_RETENTION_DAYS")
        raise typer.Exit(1)
    console.print(f"Removed {len(removed)} stale record(s)")
    for key in removed:
        console.print(f"  [dim]{escape(key)}[/dim]")


def register(parent: typer.Typer):
    """Register state commands with the parent CLI app."""
    parent.add_typer(app, name="state", rich_help_panel="Checklist")

"""Rich rendering helpers shared by the CLI commands."""

from __future__ import annotations

from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from checkmate.engine import Checklist
from checkmate.errors import ExtensionError
from checkmate.keys import iter_item_keys, section_key
from checkmate.options import ExtensionOptions
from checkmate.template.models import Template

__all__ = [
    "console",
    "print_checklist",
    "print_cli_error",
    "print_extension_error",
    "print_options",
    "print_template",
]

console = Console()
err_console = Console(stderr=True)


def print_cli_error(message: str, hint: Optional[str] = None) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    if hint:
        err_console.print(f"[dim]{escape(hint)}[/dim]")


def print_extension_error(error: ExtensionError) -> None:
    """Print a classified error with its first suggestion as the hint."""
    hint = error.suggestions[0] if error.suggestions else None
    print_cli_error(f"[{error.category.value}] {error.message}", hint=hint)


def print_template(template: Template, show_keys: bool = False) -> None:
    tree = Tree(f"[bold]{escape(template.title or 'Untitled checklist')}[/bold]")
    branches: Dict[str, Any] = {}
    for section, item, key in iter_item_keys(template):
        skey = section_key(section)
        if skey not in branches:
            label = f"[bold #6366f1]{escape(section.name)}[/bold #6366f1]"
            branches[skey] = tree.add(f"{label} [dim]({skey})[/dim]" if show_keys else label)
        label = escape(item.name)
        if item.url:
            label += f" [dim underline]{escape(item.url)}[/dim underline]"
        if show_keys:
            label += f" [dim]({key})[/dim]"
        branches[skey].add(label)
    # sections with no items still get a node
    for section in template.sections:
        if section_key(section) not in branches:
            tree.add(f"[bold #6366f1]{escape(section.name)}[/bold #6366f1] [dim](empty)[/dim]")
    console.print(tree)


def print_checklist(checklist: Checklist) -> None:
    state = checklist.state
    table = Table(title=escape(f"{checklist.template.title or 'Checklist'}: {checklist.state_key}"))
    table.add_column("", width=3)
    table.add_column("Section")
    table.add_column("Item")
    table.add_column("Key", style="dim")

    for section, item, key in iter_item_keys(checklist.template):
        entry = state.item(key)
        mark = "[green]✓[/green]" if entry.checked else "[dim]·[/dim]"
        name = escape(item.name)
        if entry.needs_attention:
            name = f"[yellow]{name} ⚑[/yellow]"
        table.add_row(mark, escape(section.name), name, key)
    console.print(table)

    summary = checklist.progress
    console.print(
        f"[bold]{summary.checked}/{summary.total}[/bold] checked "
        f"({summary.percent:.0f}%), [yellow]{summary.flagged}[/yellow] flagged"
    )


def print_options(options: ExtensionOptions) -> None:
    table = Table(show_header=False)
    table.add_column("Option", style="bold")
    table.add_column("Value")
    table.add_row("defaultTemplateUrl", escape(options.default_template_url))
    table.add_row("theme", options.theme)
    console.print(table)

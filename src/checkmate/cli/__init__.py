from __future__ import annotations

import os

import typer

from checkmate.cli.cmds import register_options, register_state, register_template
from checkmate.cli.output import console
from checkmate.config import load_settings
from checkmate.logging import configure_logging

__version__ = "0.1.0"

_TYPER_HELP = """Review checklists backed by remote templates.

**Quick start:**

* `checkmate template show` to preview the configured template
* `checkmate state show owner/repo#12` to see a review's checklist
* `checkmate options set --template-url URL` to change the template
"""

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=_TYPER_HELP,
    rich_markup_mode="markdown",
)


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"checkmate {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Log level (defaults to CHECKMATE_LOG_LEVEL or WARNING)",
    ),
):
    """checkmate: review checklists backed by remote templates."""
    settings = load_settings()
    configure_logging(
        log_level or os.environ.get("CHECKMATE_LOG_LEVEL", "WARNING"),
        settings.log_format,
    )


register_template(app)
register_state(app)
register_options(app)


def main():
    app()


if __name__ == "__main__":
    main()

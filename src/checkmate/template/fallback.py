"""Built-in templates.

:func:`fallback_template` is returned whenever a configured template cannot
be fetched, parsed or validated. :func:`load_default_template` reads the
richer template shipped with the package.
"""

from __future__ import annotations

from importlib import resources

from checkmate.errors import ExtensionError
from checkmate.template.models import Item, Section, Template
from checkmate.template.parser import parse_yaml

__all__ = ["DEFAULT_TEMPLATE_RESOURCE", "fallback_template", "load_default_template"]

DEFAULT_TEMPLATE_RESOURCE = "default-template.yaml"


def fallback_template() -> Template:
    """The fixed three-section checklist. A new instance on every call."""
    return Template(
        title="Code Review Checklist",
        sections=[
            Section(
                name="Functionality",
                items=[
                    Item(name="Code works as expected"),
                    Item(name="Edge cases are handled"),
                ],
            ),
            Section(
                name="Code Quality",
                items=[
                    Item(name="Code follows style guidelines"),
                    Item(name="Code is well documented"),
                ],
            ),
            Section(
                name="Security",
                items=[
                    Item(name="Input validation is in place"),
                    Item(name="Sensitive data is handled securely"),
                ],
            ),
        ],
    )


def load_default_template() -> Template:
    """Parse the packaged default template.

    Falls back to :func:`fallback_template` if the resource is unreadable.
    """
    try:
        text = resources.files("checkmate.template").joinpath(DEFAULT_TEMPLATE_RESOURCE).read_text(
            encoding="utf-8"
        )
        return parse_yaml(text)
    except (OSError, ExtensionError):
        return fallback_template()

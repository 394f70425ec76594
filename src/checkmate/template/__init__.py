"""Checklist templates.

Key Components:
- Template / Section / Item: canonical models
- TemplateLoader / load_template: fetch with fallback, never raises
- parse_template and the per-format parsers
- validate_template: structural checks shared by every format
- fallback_template: the built-in checklist used when loading fails

Example:
    >>> from checkmate.template import load_template
    >>>
    >>> template = await load_template("https://example.com/checklist.md")
    >>> [s.name for s in template.sections]
"""

from __future__ import annotations

from checkmate.template.fallback import fallback_template, load_default_template
from checkmate.template.loader import TemplateLoader, load_template
from checkmate.template.models import Item, Section, Template, TemplateFormat
from checkmate.template.parser import (
    detect_format,
    normalize_template,
    parse_json,
    parse_markdown,
    parse_template,
    parse_yaml,
    validate_template,
)

__all__ = [
    # Models
    "Item",
    "Section",
    "Template",
    "TemplateFormat",
    # Loading
    "TemplateLoader",
    "load_template",
    "fallback_template",
    "load_default_template",
    # Parsing
    "detect_format",
    "normalize_template",
    "parse_json",
    "parse_markdown",
    "parse_template",
    "parse_yaml",
    "validate_template",
]

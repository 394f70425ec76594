"""Parse YAML, JSON and Markdown template sources into :class:`Template`.

All three formats end in the same structural validation. Syntax errors
raise ``ExtensionError(category="yaml")``; well-formed documents with the
wrong shape raise ``ExtensionError(category="template")``.

Example:
    >>> from checkmate.template.parser import parse_template, detect_format
    >>>
    >>> fmt = detect_format("https://example.com/checklist.yml")
    >>> template = parse_template("sections:\\n  - name: Security\\n    items:\\n      - name: Check auth\\n", fmt)
    >>> template.sections[0].items[0].name
    'Check auth'
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError

from checkmate.errors import template_error, yaml_error
from checkmate.logging import get_logger, log_function
from checkmate.template.models import Template, TemplateFormat

__all__ = [
    "detect_format",
    "normalize_template",
    "parse_json",
    "parse_markdown",
    "parse_template",
    "parse_yaml",
    "validate_template",
]

logger = get_logger("template.parser")

DEFAULT_SECTION = "General"

_TASK_ITEM = re.compile(r"^[-*]\s+\[([ xX])\]\s*(.*)$")
_LINK_ONLY = re.compile(r"^\[([^\]]+)\]\(([^)\s]+)\)$")


def _excerpt(text: str, limit: int = 100) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


# =============================================================================
# Format detection
# =============================================================================


def detect_format(url: str) -> TemplateFormat:
    """Pick a format from the URL's file extension.

    ``.yaml``/``.yml`` is YAML, ``.json`` is JSON, anything else is Markdown.
    Query strings and fragments are ignored.
    """
    path = urlparse(url).path or url
    path = path.lower()
    if path.endswith((".yaml", ".yml")):
        return TemplateFormat.YAML
    if path.endswith(".json"):
        return TemplateFormat.JSON
    return TemplateFormat.MARKDOWN


# =============================================================================
# Validation
# =============================================================================


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_template(data: Any) -> List[str]:
    """Check the canonical structure and return a list of problems.

    A template is valid when ``sections`` is a non-empty list, every section
    has a non-empty ``name`` and an ``items`` list, and every item has a
    non-empty ``name`` and, if present, a string ``url``.
    """
    if not isinstance(data, dict):
        return ["Template must be a mapping with a 'sections' list"]

    sections = data.get("sections")
    if not isinstance(sections, list):
        return ["Template is missing a 'sections' list"]
    if not sections:
        return ["Template has no sections"]

    issues: List[str] = []
    for s_index, section in enumerate(sections):
        where = f"sections[{s_index}]"
        if not isinstance(section, dict):
            issues.append(f"{where} is not a mapping")
            continue
        if not _is_name(section.get("name")):
            issues.append(f"{where} has no name")
        items = section.get("items")
        if not isinstance(items, list):
            issues.append(f"{where} is missing an 'items' list")
            continue
        for i_index, item in enumerate(items):
            item_where = f"{where}.items[{i_index}]"
            if not isinstance(item, dict):
                issues.append(f"{item_where} is not a mapping")
                continue
            if not _is_name(item.get("name")):
                issues.append(f"{item_where} has no name")
            url = item.get("url")
            if url is not None and not isinstance(url, str):
                issues.append(f"{item_where} has a non-string url")

    return issues


# =============================================================================
# Normalization (YAML / JSON)
# =============================================================================


def _normalize_item(item: Any) -> Any:
    if isinstance(item, str):
        return {"name": item}
    if not isinstance(item, dict):
        return item
    normalized: Dict[str, Any] = {"name": item.get("name", item.get("text"))}
    if "url" in item:
        normalized["url"] = item["url"]
    return normalized


def _normalize_section(section: Any) -> Any:
    if not isinstance(section, dict):
        return section
    normalized: Dict[str, Any] = {"name": section.get("name", section.get("title"))}
    items = section.get("items")
    normalized["items"] = [_normalize_item(i) for i in items] if isinstance(items, list) else items
    return normalized


def normalize_template(data: Any) -> Any:
    """Map alternate field names onto the canonical schema.

    Sections accept ``title`` for ``name``; items accept ``text`` for
    ``name`` and may be bare strings. Anything that is not a mapping is
    returned unchanged so validation can reject it.
    """
    if not isinstance(data, dict):
        return data
    normalized: Dict[str, Any] = {}
    if isinstance(data.get("title"), str):
        normalized["title"] = data["title"]
    sections = data.get("sections")
    normalized["sections"] = (
        [_normalize_section(s) for s in sections] if isinstance(sections, list) else sections
    )
    return normalized


def _build(data: Any, source: TemplateFormat, text: str) -> Template:
    normalized = normalize_template(data)
    issues = validate_template(normalized)
    if issues:
        raise template_error(
            "Invalid template structure",
            details={"format": source.value, "issues": issues, "content": _excerpt(text)},
        )
    try:
        return Template.model_validate(normalized)
    except ValidationError as e:
        raise template_error(
            "Invalid template structure",
            details={"format": source.value, "error": str(e), "content": _excerpt(text)},
        ) from e


# =============================================================================
# Parsers
# =============================================================================


def parse_yaml(text: str) -> Template:
    """Parse a YAML template document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml_error(
            "Failed to parse template YAML",
            details={"error": str(e), "content": _excerpt(text)},
        ) from e
    return _build(data, TemplateFormat.YAML, text)


def parse_json(text: str) -> Template:
    """Parse a JSON template document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise yaml_error(
            "Failed to parse template JSON",
            details={"error": str(e), "content": _excerpt(text)},
            suggestions=[
                "Check the template for missing commas, quotes or brackets",
                "Validate the file with a JSON linter",
                "Use the default template instead",
            ],
        ) from e
    return _build(data, TemplateFormat.JSON, text)


def _split_link(text: str) -> tuple[str, Optional[str]]:
    match = _LINK_ONLY.match(text)
    if match:
        return match.group(1).strip(), match.group(2)
    return text, None


def parse_markdown(text: str) -> Template:
    """Parse a Markdown checklist.

    The first ``# `` heading becomes the title, ``## `` headings start
    sections, and task-list lines (``- [ ]``, ``- [x]``, ``- [X]``) become
    items. Items before any section go into a "General" section. Check
    marks in the source are ignored.
    """
    title: Optional[str] = None
    sections: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    item_count = 0

    for raw_line in text.splitlines():
        line = raw_line.strip()

        if line.startswith("## "):
            current = {"name": line[3:].strip(), "items": []}
            sections.append(current)
            continue

        if line.startswith("# "):
            if title is None:
                title = line[2:].strip()
            continue

        match = _TASK_ITEM.match(line)
        if not match:
            continue

        item_text = match.group(2).strip()
        if not item_text:
            logger.debug("markdown_empty_item_skipped", line=raw_line)
            continue

        if current is None:
            current = {"name": DEFAULT_SECTION, "items": []}
            sections.append(current)

        name, url = _split_link(item_text)
        item: Dict[str, Any] = {"name": name}
        if url:
            item["url"] = url
        current["items"].append(item)
        item_count += 1

    if item_count == 0:
        raise template_error(
            "Markdown template contains no checklist items",
            details={"content": _excerpt(text)},
            suggestions=[
                "Add task-list items such as '- [ ] Tests pass'",
                "Group items under '## Section' headings",
                "Use the default template instead",
            ],
        )

    data: Dict[str, Any] = {"sections": sections}
    if title:
        data["title"] = title
    return _build(data, TemplateFormat.MARKDOWN, text)


_PARSERS = {
    TemplateFormat.YAML: parse_yaml,
    TemplateFormat.JSON: parse_json,
    TemplateFormat.MARKDOWN: parse_markdown,
}


@log_function(logger)
def parse_template(text: str, fmt: TemplateFormat | str) -> Template:
    """Parse ``text`` in the given format."""
    return _PARSERS[TemplateFormat(fmt)](text)

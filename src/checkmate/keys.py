"""Deterministic identifiers for template sections and items.

Keys are slugs of display names: lower-cased, with every run of characters
outside ``[a-z0-9]`` collapsed into one ``-``. They depend on the name only,
never on position or URL.

State records key items by ``"<section-key>/<item-key>"`` so identically
named items in different sections keep separate state. A state key that
repeats within a template gets an ordinal suffix (``-2``, ``-3``, ...).

Example:
    >>> from checkmate.keys import item_key, item_state_key
    >>>
    >>> item_key("Check auth")
    'check-auth'
    >>> item_state_key("Security", "Check auth")
    'security/check-auth'
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

from checkmate.template.models import Item, Section, Template

__all__ = [
    "KEY_SEPARATOR",
    "TemplateKeys",
    "item_key",
    "item_state_key",
    "iter_item_keys",
    "section_key",
    "slugify",
    "split_item_state_key",
    "template_keys",
]

KEY_SEPARATOR = "/"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lower-case ``name`` and collapse non-alphanumeric runs into ``-``."""
    return _NON_ALNUM.sub("-", name.lower())


def _name(value: Union[Section, Item, str]) -> str:
    return value if isinstance(value, str) else value.name


def section_key(section: Union[Section, str]) -> str:
    return slugify(_name(section))


def item_key(item: Union[Item, str]) -> str:
    return slugify(_name(item))


def item_state_key(section: Union[Section, str], item: Union[Item, str]) -> str:
    """Key of an item's entry in ``ChecklistState.items``."""
    return f"{section_key(section)}{KEY_SEPARATOR}{item_key(item)}"


def split_item_state_key(key: str) -> tuple[str, str]:
    """Inverse of :func:`item_state_key`; the section part may be empty."""
    section, sep, item = key.partition(KEY_SEPARATOR)
    if not sep:
        return "", key
    return section, item


def iter_item_keys(template: Template) -> Iterator[tuple[Section, Item, str]]:
    """Yield ``(section, item, state_key)`` in template order.

    The n-th occurrence of a state key (an item name repeated inside one
    section, or in two sections sharing a name) is suffixed ``-n``.
    """
    seen: dict[str, int] = {}
    for section in template.sections:
        for item in section.items:
            key = item_state_key(section, item)
            count = seen.get(key, 0) + 1
            seen[key] = count
            yield section, item, key if count == 1 else f"{key}-{count}"


@dataclass
class TemplateKeys:
    """All keys a template defines, in template order."""

    sections: list[str] = field(default_factory=list)
    items: list[str] = field(default_factory=list)

    def __contains__(self, key: str) -> bool:
        return key in self.items or key in self.sections


def template_keys(template: Template) -> TemplateKeys:
    keys = TemplateKeys()
    for section in template.sections:
        key = section_key(section)
        if key not in keys.sections:
            keys.sections.append(key)
    keys.items = [key for _, _, key in iter_item_keys(template)]
    return keys

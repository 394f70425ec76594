"""Canonical template models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TemplateFormat(str, Enum):
    """Source format of a template document."""

    YAML = "yaml"
    JSON = "json"
    MARKDOWN = "markdown"


class Item(BaseModel):
    """A single checklist entry."""

    name: str = Field(..., min_length=1, description="Display name")
    url: Optional[str] = Field(None, description="Documentation link for the item")


class Section(BaseModel):
    """An ordered group of items."""

    name: str = Field(..., min_length=1, description="Display name")
    items: List[Item] = Field(default_factory=list)


class Template(BaseModel):
    """Ordered sections of named checklist items.

    ``title`` is kept when the source provides one; it is not required.
    """

    title: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return sum(len(section.items) for section in self.sections)

    @property
    def section_names(self) -> List[str]:
        return [section.name for section in self.sections]

    def to_dict(self) -> Dict[str, Any]:
        """Canonical ``{sections: [{name, items: [{name, url?}]}]}`` form."""
        return self.model_dump(exclude_none=True)

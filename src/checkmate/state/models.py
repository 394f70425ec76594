"""Persisted checklist state models.

Python attributes are snake_case; the stored record uses the camelCase
names shared with other checkmate clients (``needsAttention``,
``lastUpdated``, ``templateUrl``).
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ItemState(BaseModel):
    """Flags for one checklist item."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    checked: bool = False
    needs_attention: bool = Field(False, alias="needsAttention")


class ChecklistState(BaseModel):
    """State of one review context.

    Attributes:
        items: Item flags keyed by item state key. Entries for items no
            longer in the template are kept.
        sections: Expanded flag keyed by section key. Missing means expanded.
        last_updated: Milliseconds since the epoch of the last save.
        template_url: Template the state was built against.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: Dict[str, ItemState] = Field(default_factory=dict)
    sections: Dict[str, bool] = Field(default_factory=dict)
    last_updated: int = Field(0, alias="lastUpdated")
    template_url: str = Field("", alias="templateUrl")

    def item(self, key: str) -> ItemState:
        """Flags for ``key``, defaulted when absent."""
        return self.items.get(key) or ItemState()

    def is_expanded(self, key: str) -> bool:
        return self.sections.get(key, True)

    def to_record(self) -> Dict[str, Any]:
        """Storage representation."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> ChecklistState:
        return cls.model_validate(data)

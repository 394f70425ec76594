"""Pure operations on :class:`ChecklistState`.

Nothing here touches storage. Every mutator returns a new state and
leaves its argument unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from checkmate.keys import iter_item_keys, section_key, template_keys
from checkmate.state.models import ChecklistState, ItemState
from checkmate.template.models import Item, Section, Template

__all__ = [
    "AttentionEntry",
    "Progress",
    "initial_state",
    "needs_attention",
    "orphaned_keys",
    "progress",
    "reconcile",
    "reset_state",
    "review_summary",
    "section_is_expanded",
    "set_item_state",
    "set_section_state",
    "toggle_attention",
    "toggle_item",
]


def initial_state(template: Optional[Template] = None, template_url: str = "") -> ChecklistState:
    """Fresh state: every item unchecked and unflagged, every section expanded."""
    state = ChecklistState(template_url=template_url)
    if template is None:
        return state
    keys = template_keys(template)
    state.items = {key: ItemState() for key in keys.items}
    state.sections = {key: True for key in keys.sections}
    return state


def reset_state(
    template: Template,
    state: Optional[ChecklistState] = None,
    template_url: Optional[str] = None,
) -> ChecklistState:
    """Defaults for every known item and section.

    Known keys are the template's plus any already present in ``state``, so
    orphaned entries are reset rather than dropped. The result is not
    persisted until saved.
    """
    url = template_url if template_url is not None else (state.template_url if state else "")
    fresh = initial_state(template, url)
    if state is not None:
        for key in state.items:
            fresh.items.setdefault(key, ItemState())
        for key in state.sections:
            fresh.sections.setdefault(key, True)
        fresh.last_updated = state.last_updated
    return fresh


def reconcile(state: ChecklistState, template: Template) -> ChecklistState:
    """Add default entries for template keys the state lacks.

    Existing entries, including orphans, are kept untouched.
    """
    keys = template_keys(template)
    updated = state.model_copy(deep=True)
    for key in keys.items:
        updated.items.setdefault(key, ItemState())
    for key in keys.sections:
        updated.sections.setdefault(key, True)
    return updated


def set_item_state(
    state: ChecklistState,
    key: str,
    checked: Optional[bool] = None,
    needs_attention: Optional[bool] = None,
) -> ChecklistState:
    """Patch one item's flags; arguments left as None keep their value."""
    updated = state.model_copy(deep=True)
    current = updated.item(key)
    updated.items[key] = ItemState(
        checked=current.checked if checked is None else checked,
        needs_attention=current.needs_attention if needs_attention is None else needs_attention,
    )
    return updated


def toggle_item(state: ChecklistState, key: str) -> ChecklistState:
    return set_item_state(state, key, checked=not state.item(key).checked)


def toggle_attention(state: ChecklistState, key: str) -> ChecklistState:
    return set_item_state(state, key, needs_attention=not state.item(key).needs_attention)


def set_section_state(state: ChecklistState, key: str, expanded: bool) -> ChecklistState:
    updated = state.model_copy(deep=True)
    updated.sections[key] = expanded
    return updated


# =============================================================================
# Projections
# =============================================================================


@dataclass
class AttentionEntry:
    """An item currently flagged as needing attention."""

    section: Section
    item: Item
    key: str


@dataclass
class Progress:
    """Checked-item counts for the current template."""

    checked: int = 0
    total: int = 0
    flagged: int = 0

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.checked / self.total * 100

    @property
    def complete(self) -> bool:
        return self.total > 0 and self.checked == self.total


def needs_attention(state: ChecklistState, template: Template) -> List[AttentionEntry]:
    """Items of ``template`` flagged in ``state``, in template order.

    Computed on demand and never stored.
    """
    return [
        AttentionEntry(section=section, item=item, key=key)
        for section, item, key in iter_item_keys(template)
        if state.item(key).needs_attention
    ]


def progress(state: ChecklistState, template: Template) -> Progress:
    result = Progress()
    for _, _, key in iter_item_keys(template):
        flags = state.item(key)
        result.total += 1
        result.checked += int(flags.checked)
        result.flagged += int(flags.needs_attention)
    return result


def orphaned_keys(state: ChecklistState, template: Template) -> List[str]:
    """Item keys present in ``state`` that ``template`` no longer defines."""
    keys = set(template_keys(template).items)
    return [key for key in state.items if key not in keys]


def section_is_expanded(state: ChecklistState, section: Section) -> bool:
    return state.is_expanded(section_key(section))


def review_summary(state: ChecklistState, template: Template) -> str:
    """Markdown review summary: one ✅ or ❌ line per item under its section.

    Flagged items are marked ``(needs attention)``. Sections without items
    are omitted.
    """
    lines = ["# Code Review Summary", ""]
    current: Optional[Section] = None
    for section, item, key in iter_item_keys(template):
        if section is not current:
            if current is not None:
                lines.append("")
            lines.extend([f"## {section.name}", ""])
            current = section
        flags = state.item(key)
        line = f"- {'✅' if flags.checked else '❌'} {item.name}"
        if flags.needs_attention:
            line += " (needs attention)"
        lines.append(line)
    return "\n".join(lines) + "\n"

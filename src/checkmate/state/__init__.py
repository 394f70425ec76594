"""Per-context checklist state.

Key Components:
- ChecklistState / ItemState: the persisted record
- StateReconciler: load, save, delete and prune through storage
- Pure operations: initial_state, reset_state, reconcile, set_item_state,
  set_section_state, toggles and the needs-attention, progress and summary projections

Example:
    >>> from checkmate.state import StateReconciler, toggle_item
    >>>
    >>> state = await reconciler.load_state("octo/repo#1", template)
    >>> state = toggle_item(state, "security/check-auth")
    >>> await reconciler.save_state("octo/repo#1", state)
"""

from __future__ import annotations

from checkmate.state.models import ChecklistState, ItemState
from checkmate.state.operations import (
    AttentionEntry,
    Progress,
    initial_state,
    needs_attention,
    orphaned_keys,
    progress,
    reconcile,
    reset_state,
    review_summary,
    section_is_expanded,
    set_item_state,
    set_section_state,
    toggle_attention,
    toggle_item,
)
from checkmate.state.reconciler import STATE_STORAGE_KEY, StateReconciler, now_ms

__all__ = [
    # Models
    "ChecklistState",
    "ItemState",
    # Persistence
    "STATE_STORAGE_KEY",
    "StateReconciler",
    "now_ms",
    # Operations
    "initial_state",
    "reconcile",
    "reset_state",
    "set_item_state",
    "set_section_state",
    "toggle_attention",
    "toggle_item",
    "section_is_expanded",
    # Projections
    "AttentionEntry",
    "Progress",
    "needs_attention",
    "orphaned_keys",
    "progress",
    "review_summary",
]

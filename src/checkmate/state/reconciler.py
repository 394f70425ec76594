"""Load and save checklist state through a :class:`StorageAdapter`.

All state records live in one storage blob (``StorageState``) mapping each
review context's state key to its :class:`ChecklistState`. The underlying
stores have no partial update, so every save reads the whole blob,
replaces one record and writes the blob back with a single ``set``.

Two contexts saving the same blob concurrently race and the later write
wins in full. Pass ``expected_last_updated`` to :meth:`save_state` to turn
that into a detected conflict instead.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from checkmate.errors import storage_error
from checkmate.logging import get_logger
from checkmate.state.models import ChecklistState
from checkmate.state.operations import initial_state
from checkmate.storage.adapter import StorageAdapter
from checkmate.template.models import Template

__all__ = ["STATE_STORAGE_KEY", "StateReconciler", "now_ms"]

logger = get_logger("state.reconciler")

STATE_STORAGE_KEY = "checkmate_checklist_state"


def now_ms() -> int:
    return int(time.time() * 1000)


class StateReconciler:
    """Persisted access to per-context checklist state.

    Args:
        storage: Adapter over the key-value store.
        storage_key: Key of the ``StorageState`` blob.
        retention: Seconds after which other contexts' records are pruned
            during a save. None keeps every record.
        clock: Returns the current time in epoch milliseconds.

    Example:
        >>> reconciler = StateReconciler(StorageAdapter(MemoryStorage()))
        >>> state = await reconciler.load_state("octo/repo#1", template)
        >>> state = set_item_state(state, "security/check-auth", checked=True)
        >>> await reconciler.save_state("octo/repo#1", state)
    """

    def __init__(
        self,
        storage: StorageAdapter,
        storage_key: str = STATE_STORAGE_KEY,
        retention: Optional[float] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.storage = storage
        self.storage_key = storage_key
        self.retention = retention
        self.clock = clock

    # ------------------------------------------------------------------
    # Blob access
    # ------------------------------------------------------------------

    async def load_storage_state(self) -> Dict[str, Any]:
        """The raw ``StorageState`` mapping; empty when nothing is stored."""
        blob = await self.storage.get(self.storage_key)
        if blob is None:
            return {}
        if not isinstance(blob, dict):
            raise storage_error(
                "Stored checklist state is corrupted",
                details={"storage_key": self.storage_key, "type": type(blob).__name__},
                suggestions=["Clear the stored checklist data and try again"],
                recoverable=False,
            )
        return blob

    async def list_state_keys(self) -> List[str]:
        return list(await self.load_storage_state())

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    async def load_state(
        self,
        state_key: str,
        template: Optional[Template] = None,
        template_url: str = "",
    ) -> ChecklistState:
        """Stored state for ``state_key``, or fresh defaults from ``template``.

        A stored record is returned as stored: entries for items the
        template no longer has are not pruned.

        Raises:
            ExtensionError: ``storage`` category if the store fails or the
                record cannot be read.
        """
        blob = await self.load_storage_state()
        record = blob.get(state_key)
        if record is None:
            logger.debug("state_initialized", state_key=state_key)
            return initial_state(template, template_url)

        try:
            state = ChecklistState.from_record(record)
        except ValidationError as e:
            raise storage_error(
                "Stored checklist state is corrupted",
                details={"state_key": state_key, "error": str(e)},
                suggestions=[
                    "Reset the checklist for this review",
                    "Clear the stored checklist data and try again",
                ],
                recoverable=False,
            ) from e

        logger.debug("state_loaded", state_key=state_key, items=len(state.items))
        return state

    async def save_state(
        self,
        state_key: str,
        state: ChecklistState,
        expected_last_updated: Optional[int] = None,
    ) -> ChecklistState:
        """Stamp ``last_updated`` and write ``state`` under ``state_key``.

        Args:
            state_key: Review context identifier.
            state: State to persist.
            expected_last_updated: When given, the save fails if the stored
                record's ``lastUpdated`` differs (or the record is missing
                while a non-zero value is expected).

        Returns:
            The state as written, with the new timestamp.

        Raises:
            ExtensionError: ``storage`` category on store failure or a
                detected conflict.
        """
        blob = await self.load_storage_state()

        if expected_last_updated is not None:
            stored = blob.get(state_key)
            stored_stamp = stored.get("lastUpdated", 0) if isinstance(stored, dict) else 0
            if stored_stamp != expected_last_updated:
                raise storage_error(
                    "Checklist state was changed elsewhere",
                    details={
                        "state_key": state_key,
                        "expected": expected_last_updated,
                        "stored": stored_stamp,
                    },
                    suggestions=[
                        "Reload the checklist to get the latest state",
                        "Apply your change again after reloading",
                    ],
                    recoverable=True,
                )

        stamped = state.model_copy(update={"last_updated": self.clock()}, deep=True)
        blob[state_key] = stamped.to_record()

        if self.retention is not None:
            self._prune_blob(blob, self.retention, keep=state_key)

        await self.storage.set(self.storage_key, blob)
        logger.debug("state_saved", state_key=state_key, items=len(stamped.items))
        return stamped

    async def delete_state(self, state_key: str) -> bool:
        """Remove one record. Returns False if there was none."""
        blob = await self.load_storage_state()
        if state_key not in blob:
            return False
        del blob[state_key]
        await self.storage.set(self.storage_key, blob)
        return True

    async def clear_states(self) -> None:
        """Remove every state record, leaving other stored keys alone."""
        await self.storage.set(self.storage_key, {})

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def _prune_blob(self, blob: Dict[str, Any], max_age: float, keep: Optional[str] = None) -> List[str]:
        cutoff = self.clock() - int(max_age * 1000)
        removed = []
        for key, record in list(blob.items()):
            if key == keep:
                continue
            stamp = record.get("lastUpdated", 0) if isinstance(record, dict) else 0
            if not isinstance(stamp, (int, float)) or stamp < cutoff:
                del blob[key]
                removed.append(key)
        if removed:
            logger.info("state_pruned", removed=len(removed), max_age_seconds=max_age)
        return removed

    async def prune(self, max_age: Optional[float] = None) -> List[str]:
        """Drop records not saved within ``max_age`` seconds.

        Defaults to the configured retention. Returns the removed keys.
        """
        max_age = self.retention if max_age is None else max_age
        if max_age is None:
            return []
        blob = await self.load_storage_state()
        removed = self._prune_blob(blob, max_age)
        if removed:
            await self.storage.set(self.storage_key, blob)
        return removed

"""In-memory storage backends.

Data is lost when the process exits. Useful for tests and for hosts that
keep the engine alive for a whole session.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable
from typing import Any

from checkmate.storage.base import CallbackStorageBackend, StorageBackend


class MemoryStorage(StorageBackend):
    """Awaitable in-memory store.

    Values are deep-copied on the way in and out, matching the
    copy-on-serialize semantics of real stores.

    Example:
        >>> storage = MemoryStorage()
        >>> await storage.set("options", {"theme": "dark"})
        >>> await storage.get("options")
        {'theme': 'dark'}
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"MemoryStorage(keys={len(self)})"


class CallbackMemoryStorage(CallbackStorageBackend):
    """Callback-style in-memory store.

    Callbacks are scheduled on the running event loop rather than called
    inline, and failures are reported through :attr:`last_error`, which is
    set only while the failing operation's callback runs.

    Use :meth:`fail_next` to make the next operation fail.

    Example:
        >>> storage = CallbackMemoryStorage()
        >>> storage.set("k", 1, lambda: print(storage.last_error))
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        super().__init__()
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._pending_errors: list[BaseException] = []

    def fail_next(self, error: BaseException | str = "Storage operation failed") -> None:
        """Make the next operation report ``error`` instead of running."""
        if isinstance(error, str):
            error = RuntimeError(error)
        self._pending_errors.append(error)

    def _dispatch(self, callback: Callable[..., None], *result: Any) -> None:
        error = self._pending_errors.pop(0) if self._pending_errors else None

        def run() -> None:
            self.last_error = error
            try:
                callback(*result)
            finally:
                self.last_error = None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            run()
        else:
            loop.call_soon(run)

    def get(self, key: str, callback: Callable[[Any], None]) -> None:
        if self._pending_errors:
            self._dispatch(callback, None)
            return
        self._dispatch(callback, copy.deepcopy(self._data.get(key)))

    def set(self, key: str, value: Any, callback: Callable[[], None]) -> None:
        if self._pending_errors:
            self._dispatch(callback)
            return
        self._data[key] = copy.deepcopy(value)
        self._dispatch(callback)

    def clear(self, callback: Callable[[], None]) -> None:
        if self._pending_errors:
            self._dispatch(callback)
            return
        self._data.clear()
        self._dispatch(callback)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"CallbackMemoryStorage(keys={len(self)})"

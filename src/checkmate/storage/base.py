"""Base classes for key-value storage backends.

Two calling conventions exist for the stores checkmate persists into:

- **Awaitable style**: ``get``/``set``/``clear`` are coroutines.
- **Callback style**: each operation takes a trailing ``callback`` and
  reports failures through a ``last_error`` attribute that must be read
  inside the callback, the way browser extension storage areas do.

:class:`~checkmate.storage.adapter.StorageAdapter` hides the difference.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

__all__ = ["CallbackStorageBackend", "StorageBackend"]


class StorageBackend(ABC):
    """Abstract awaitable key-value store.

    Values are JSON-compatible objects. Implementations must hand out
    copies so callers cannot mutate stored data in place.

    Example - Implementing a custom backend:
        >>> class DictBackend(StorageBackend):
        ...     def __init__(self):
        ...         self._data = {}
        ...
        ...     async def get(self, key):
        ...         return copy.deepcopy(self._data.get(key))
        ...
        ...     async def set(self, key, value):
        ...         self._data[key] = copy.deepcopy(value)
        ...
        ...     async def clear(self):
        ...         self._data.clear()
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under ``key`` or None."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every key."""
        pass

    async def aclose(self) -> None:
        """Release resources held by the backend."""
        return None


class CallbackStorageBackend(ABC):
    """Abstract callback-style key-value store.

    Operations never raise. On failure they set :attr:`last_error` and still
    invoke the callback; the error is only meaningful while the callback
    runs.
    """

    uses_callbacks = True

    def __init__(self) -> None:
        self.last_error: BaseException | None = None

    @abstractmethod
    def get(self, key: str, callback: Callable[[Any], None]) -> None:
        """Look up ``key`` and pass the value (or None) to ``callback``."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, callback: Callable[[], None]) -> None:
        """Store ``value`` and then invoke ``callback``."""
        pass

    @abstractmethod
    def clear(self, callback: Callable[[], None]) -> None:
        """Remove every key and then invoke ``callback``."""
        pass

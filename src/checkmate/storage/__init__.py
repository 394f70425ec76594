"""Key-value storage for checkmate.

Key Components:
- StorageAdapter: one awaitable get/set/clear interface over any store
- StorageBackend / CallbackStorageBackend: the two store conventions
- create_storage: build a backend by name

Example:
    >>> from checkmate.storage import StorageAdapter, create_storage
    >>>
    >>> adapter = StorageAdapter(create_storage("sqlite", path="./checkmate.db"))
    >>> await adapter.set("checkmate_options", {"theme": "dark"})
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from checkmate.errors import storage_error
from checkmate.storage.adapter import StorageAdapter, StorageStyle, detect_style
from checkmate.storage.base import CallbackStorageBackend, StorageBackend
from checkmate.storage.backends import CallbackMemoryStorage, JSONFileStorage, MemoryStorage

__all__ = [
    "CallbackMemoryStorage",
    "CallbackStorageBackend",
    "JSONFileStorage",
    "MemoryStorage",
    "StorageAdapter",
    "StorageBackend",
    "StorageStyle",
    "create_storage",
    "detect_style",
]

BACKENDS = ("memory", "callback", "file", "sqlite")


def create_storage(backend: str = "memory", path: str | Path | None = None, **kwargs: Any) -> Any:
    """Instantiate a storage backend by name.

    Args:
        backend: One of ``memory``, ``callback``, ``file`` or ``sqlite``.
        path: Location for ``file`` and ``sqlite`` backends.
        **kwargs: Passed to the backend constructor.

    Raises:
        ExtensionError: For an unknown backend name or a missing path.
    """
    name = backend.lower()
    if name == "memory":
        return MemoryStorage(**kwargs)
    if name == "callback":
        return CallbackMemoryStorage(**kwargs)
    if name in ("file", "sqlite"):
        if path is None:
            raise storage_error(
                f"The {name} storage backend needs a path",
                details={"backend": name},
                suggestions=["Set CHECKMATE_STORAGE_PATH or pass path="],
                recoverable=False,
            )
        if name == "file":
            return JSONFileStorage(path, **kwargs)
        from checkmate.storage.backends.sqlite import SQLiteStorage

        return SQLiteStorage(path, **kwargs)
    raise storage_error(
        f"Unknown storage backend: {backend}",
        details={"backend": backend, "available": list(BACKENDS)},
        suggestions=[f"Use one of: {', '.join(BACKENDS)}"],
        recoverable=False,
    )

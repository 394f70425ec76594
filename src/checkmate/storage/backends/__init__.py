"""Storage backend implementations.

- MemoryStorage: awaitable, in-process
- CallbackMemoryStorage: callback style with a ``last_error`` side channel
- JSONFileStorage: awaitable, one JSON document on disk
- SQLiteStorage: awaitable, SQLite via aiosqlite

Example:
    >>> from checkmate.storage.backends import MemoryStorage
    >>>
    >>> backend = MemoryStorage()
"""

from checkmate.storage.backends.file import JSONFileStorage
from checkmate.storage.backends.memory import CallbackMemoryStorage, MemoryStorage

__all__ = [
    "CallbackMemoryStorage",
    "JSONFileStorage",
    "MemoryStorage",
]

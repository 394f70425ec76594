"""JSON file storage backend.

The whole store is one JSON document. Writes go to a temporary sibling
file that then replaces the original, so a crash mid-write leaves the
previous contents intact.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from checkmate.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class JSONFileStorage(StorageBackend):
    """Awaitable store persisted to a single JSON file.

    File I/O runs in a worker thread. Operations on one instance are
    serialized so a read never observes a half-applied write from the same
    process; separate processes writing the same file still race.

    Example:
        >>> storage = JSONFileStorage("~/.checkmate/storage.json")
        >>> await storage.set("checkmate_options", {"theme": "auto"})
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not contain a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)
        logger.debug(f"Wrote key {key!r} to {self.path}")

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, {})

    def __repr__(self) -> str:
        return f"JSONFileStorage(path={str(self.path)!r})"

"""Uniform awaitable access to callback-style and awaitable-style stores."""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any

from checkmate.errors import ExtensionError, storage_error
from checkmate.logging import get_logger

__all__ = ["StorageAdapter", "StorageStyle", "detect_style"]

logger = get_logger("storage.adapter")


class StorageStyle(str, Enum):
    """Calling convention of an underlying store."""

    CALLBACK = "callback"
    AWAITABLE = "awaitable"


def detect_style(store: Any) -> StorageStyle:
    """Inspect ``store`` and decide which calling convention it uses.

    A store is callback style when it declares ``uses_callbacks`` or exposes
    a ``last_error`` side channel (directly or on ``store.runtime``).
    Anything else with ``get``/``set``/``clear`` is treated as awaitable.

    Raises:
        ExtensionError: If the store lacks one of the three operations.
    """
    missing = [name for name in ("get", "set", "clear") if not callable(getattr(store, name, None))]
    if missing:
        raise storage_error(
            "Storage backend is missing required operations",
            details={"missing": missing, "store": type(store).__name__},
            suggestions=["Provide a store with get, set and clear operations"],
            recoverable=False,
        )

    if getattr(store, "uses_callbacks", False):
        return StorageStyle.CALLBACK
    if hasattr(store, "last_error") or hasattr(getattr(store, "runtime", None), "last_error"):
        return StorageStyle.CALLBACK
    return StorageStyle.AWAITABLE


class StorageAdapter:
    """Awaitable ``get``/``set``/``clear`` over either store style.

    The style is decided once, when the adapter is built. Every failure of
    the underlying store is raised as a recoverable
    ``ExtensionError(category="storage")``; nothing is retried here.

    Example:
        >>> from checkmate.storage import StorageAdapter
        >>> from checkmate.storage.backends import CallbackMemoryStorage
        >>>
        >>> adapter = StorageAdapter(CallbackMemoryStorage())
        >>> adapter.style
        <StorageStyle.CALLBACK: 'callback'>
        >>> await adapter.set("k", {"a": 1})
        >>> await adapter.get("k")
        {'a': 1}
    """

    def __init__(self, store: Any, style: StorageStyle | str | None = None) -> None:
        self.store = store
        self.style = StorageStyle(style) if style is not None else detect_style(store)
        logger.debug("storage_adapter_created", store=type(store).__name__, style=self.style.value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        return await self._call("get", key)

    async def set(self, key: str, value: Any) -> None:
        await self._call("set", key, value)

    async def clear(self) -> None:
        await self._call("clear")

    async def aclose(self) -> None:
        closer = getattr(self.store, "aclose", None)
        if closer is not None:
            result = closer()
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _call(self, operation: str, *args: Any) -> Any:
        try:
            if self.style is StorageStyle.CALLBACK:
                return await self._call_with_callback(operation, *args)
            return await self._call_awaitable(operation, *args)
        except ExtensionError:
            raise
        except Exception as e:
            raise storage_error(
                f"Storage {operation} failed",
                details={
                    "operation": operation,
                    "key": args[0] if args else None,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                recoverable=True,
            ) from e

    async def _call_awaitable(self, operation: str, *args: Any) -> Any:
        result = getattr(self.store, operation)(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _last_error(self) -> BaseException | None:
        error = getattr(self.store, "last_error", None)
        if error is None:
            runtime = getattr(self.store, "runtime", None)
            error = getattr(runtime, "last_error", None)
        return error

    async def _call_with_callback(self, operation: str, *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()

        def callback(*result: Any) -> None:
            # last_error is only valid while the callback runs
            error = self._last_error()
            value = result[0] if result else None
            loop.call_soon_threadsafe(_settle, future, value, error)

        getattr(self.store, operation)(*args, callback)
        return await future


def _settle(future: asyncio.Future[Any], value: Any, error: BaseException | None) -> None:
    if future.done():
        return
    if error is not None:
        if not isinstance(error, BaseException):
            error = RuntimeError(str(error))
        future.set_exception(error)
    else:
        future.set_result(value)

"""Structured logging for checkmate.

Two output formats are supported:

- ``human``: single-line, colour-free text for terminals
- ``json``: one JSON object per line for log shippers

Example:
    >>> from checkmate.logging import configure_logging, get_logger
    >>>
    >>> configure_logging(level="DEBUG", format="json")
    >>> logger = get_logger("template.loader")
    >>> logger.info("template_loaded", url="https://example.com/t.yaml", sections=3)
"""

from __future__ import annotations

import functools
import json
import logging
import os
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Literal, TypeVar

__all__ = [
    "HumanFormatter",
    "JSONFormatter",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "log_async_function",
    "log_function",
]

ROOT_LOGGER = "checkmate"

F = TypeVar("F", bound=Callable[..., Any])

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.ERROR:
            data["location"] = {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            }

        data.update(_extra_fields(record))

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


class HumanFormatter(logging.Formatter):
    """Readable ``time LEVEL logger: message key=value`` lines."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{timestamp} {record.levelname:<7} {record.name}: {record.getMessage()}"

        extras = _extra_fields(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` that takes keyword context.

    Keyword arguments become ``extra`` fields on the record, which the
    JSON formatter emits as top-level keys.
    """

    def __init__(self, name: str) -> None:
        if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
            name = f"{ROOT_LOGGER}.{name}"
        self.name = name
        self._logger = logging.getLogger(name)

    def child(self, suffix: str) -> StructuredLogger:
        return StructuredLogger(f"{self.name}.{suffix}")

    def _log(self, level: int, msg: str, exc_info: Any = None, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        # LogRecord refuses extras that shadow its own attributes.
        fields = {(f"{k}_" if k in _RESERVED_ATTRS else k): v for k, v in fields.items()}
        self._logger.log(level, msg, exc_info=exc_info, extra=fields or None, stacklevel=3)

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: Any = None, **fields: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)

    def exception(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=True, **fields)

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802 - mirrors logging.Logger
        return self._logger.isEnabledFor(level)

    @property
    def logger(self) -> logging.Logger:
        """The underlying stdlib logger."""
        return self._logger


def configure_logging(
    level: str | int | None = None,
    format: Literal["human", "json"] | None = None,  # noqa: A002
) -> None:
    """Configure the ``checkmate`` logger hierarchy.

    Args:
        level: Log level name or number. Defaults to ``CHECKMATE_LOG_LEVEL``
            or ``INFO``.
        format: ``human`` or ``json``. Defaults to ``CHECKMATE_LOG_FORMAT``
            or ``human``.
    """
    level = level or os.environ.get("CHECKMATE_LOG_LEVEL", "INFO")
    format = format or os.environ.get("CHECKMATE_LOG_FORMAT", "human")  # type: ignore[assignment]

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if format == "json" else HumanFormatter())

    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def get_logger(name: str) -> StructuredLogger:
    """Return a structured logger under the ``checkmate`` namespace."""
    return StructuredLogger(name)


def log_function(logger: StructuredLogger | None = None) -> Callable[[F], F]:
    """Decorator logging entry, exit and duration of a sync function."""

    def decorator(func: F) -> F:
        log = logger or get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            log.debug("call_started", function=func.__qualname__)
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log.warning(
                    "call_failed",
                    function=func.__qualname__,
                    error_type=type(e).__name__,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise
            log.debug(
                "call_completed",
                function=func.__qualname__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def log_async_function(logger: StructuredLogger | None = None) -> Callable[[F], F]:
    """Async counterpart of :func:`log_function`."""

    def decorator(func: F) -> F:
        log = logger or get_logger(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            log.debug("call_started", function=func.__qualname__)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log.warning(
                    "call_failed",
                    function=func.__qualname__,
                    error_type=type(e).__name__,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise
            log.debug(
                "call_completed",
                function=func.__qualname__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator

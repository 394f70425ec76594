"""Error taxonomy for checkmate.

Every anticipated failure crosses the engine boundary as an
:class:`ExtensionError`: an exception that is also a plain value with a
category, a recoverable flag and a list of suggested remedies, so callers
can branch on ``error.category`` instead of exception types.

Example:
    >>> from checkmate.errors import ErrorCategory, create_error
    >>>
    >>> err = create_error(ErrorCategory.NETWORK, "Failed to fetch template")
    >>> err.recoverable
    False
    >>> err.suggestions[0]
    'Check your internet connection'
"""

from __future__ import annotations

import logging
import time
import traceback
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from checkmate.logging import StructuredLogger

__all__ = [
    "DEFAULT_SUGGESTIONS",
    "ErrorCategory",
    "ExtensionError",
    "create_error",
    "ensure_extension_error",
    "github_error",
    "log_exception",
    "network_error",
    "storage_error",
    "template_error",
    "unknown_error",
    "yaml_error",
]

_logger = logging.getLogger("checkmate.errors")


class ErrorCategory(str, Enum):
    """Where a failure originated."""

    TEMPLATE = "template"
    STORAGE = "storage"
    GITHUB = "github"
    NETWORK = "network"
    YAML = "yaml"
    UNKNOWN = "unknown"


DEFAULT_SUGGESTIONS: dict[ErrorCategory, tuple[str, ...]] = {
    ErrorCategory.TEMPLATE: (
        "Check that the template contains a sections list",
        "Make sure every section and item has a name",
        "Use the default template instead",
    ),
    ErrorCategory.STORAGE: (
        "Try again in a few moments",
        "Check that the storage location is writable",
        "If the problem persists, clear the stored checklist data",
    ),
    ErrorCategory.GITHUB: (
        "Make sure you are on a GitHub pull request page",
        "Reload the page and try again",
    ),
    ErrorCategory.NETWORK: (
        "Check your internet connection",
        "Verify that the template URL is correct and reachable",
        "Try again later",
    ),
    ErrorCategory.YAML: (
        "Check the template for indentation or syntax errors",
        "Validate the file with a YAML or JSON linter",
        "Use the default template instead",
    ),
    ErrorCategory.UNKNOWN: (
        "Try again",
        "If the problem persists, report an issue",
    ),
}


def _now_ms() -> int:
    return int(time.time() * 1000)


class ExtensionError(Exception):
    """A classified failure.

    Attributes:
        category: The :class:`ErrorCategory` of the failure.
        message: Human-readable description.
        details: Optional context (original error text, URL, status, ...).
        suggestions: Remedies a caller may show to the user.
        recoverable: Whether retrying the same operation may succeed.
        timestamp: Milliseconds since the epoch when the error was created.
    """

    def __init__(
        self,
        category: ErrorCategory | str,
        message: str,
        *,
        details: Any = None,
        suggestions: list[str] | None = None,
        recoverable: bool = False,
        timestamp: int | None = None,
    ) -> None:
        self.category = ErrorCategory(category)
        self.message = message
        self.details = details
        self.suggestions = list(suggestions) if suggestions is not None else []
        self.recoverable = recoverable
        self.timestamp = timestamp if timestamp is not None else _now_ms()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [f"[{self.category.value}] {self.message}"]
        if self.suggestions:
            parts.append("Suggestions: " + "; ".join(self.suggestions))
        return "\n".join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.category.value!r}, {self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used when handing errors to other contexts."""
        return {
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
            "suggestions": list(self.suggestions),
            "recoverable": self.recoverable,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtensionError:
        return cls(
            data.get("category", ErrorCategory.UNKNOWN),
            data.get("message", ""),
            details=data.get("details"),
            suggestions=data.get("suggestions"),
            recoverable=bool(data.get("recoverable", False)),
            timestamp=data.get("timestamp"),
        )


def create_error(
    category: ErrorCategory | str,
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = False,
) -> ExtensionError:
    """Build a fully populated :class:`ExtensionError`.

    When ``suggestions`` is None the category's default remedies are used.
    An explicit empty list is kept as-is.
    """
    category = ErrorCategory(category)
    if suggestions is None:
        suggestions = list(DEFAULT_SUGGESTIONS[category])
    return ExtensionError(
        category,
        message,
        details=details,
        suggestions=suggestions,
        recoverable=recoverable,
    )


def _handle(
    category: ErrorCategory,
    message: str,
    details: Any,
    suggestions: list[str] | None,
    recoverable: bool,
) -> ExtensionError:
    error = create_error(category, message, details, suggestions, recoverable)
    _logger.error(
        "[%s] %s",
        error.category.value,
        error.message,
        extra={"category": error.category.value, "details": details},
    )
    return error


def template_error(
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = False,
) -> ExtensionError:
    return _handle(ErrorCategory.TEMPLATE, message, details, suggestions, recoverable)


def yaml_error(
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = False,
) -> ExtensionError:
    return _handle(ErrorCategory.YAML, message, details, suggestions, recoverable)


def network_error(
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = True,
) -> ExtensionError:
    return _handle(ErrorCategory.NETWORK, message, details, suggestions, recoverable)


def storage_error(
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = True,
) -> ExtensionError:
    return _handle(ErrorCategory.STORAGE, message, details, suggestions, recoverable)


def github_error(
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = False,
) -> ExtensionError:
    return _handle(ErrorCategory.GITHUB, message, details, suggestions, recoverable)


def unknown_error(
    message: str,
    details: Any = None,
    suggestions: list[str] | None = None,
    recoverable: bool = False,
) -> ExtensionError:
    return _handle(ErrorCategory.UNKNOWN, message, details, suggestions, recoverable)


def ensure_extension_error(
    exc: BaseException,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    message: str | None = None,
) -> ExtensionError:
    """Return ``exc`` unchanged if already classified, otherwise wrap it."""
    if isinstance(exc, ExtensionError):
        return exc
    error = create_error(
        category,
        message or str(exc) or type(exc).__name__,
        details={"error": str(exc), "error_type": type(exc).__name__},
    )
    error.__cause__ = exc
    return error


def log_exception(
    logger: logging.Logger | StructuredLogger,
    message: str,
    exc: BaseException,
    level: Literal["debug", "info", "warning", "error"] = "warning",
    include_traceback: bool = True,
) -> None:
    """Log ``exc`` with its type name, optionally with the traceback."""
    text = f"{message}: {type(exc).__name__}: {exc}"
    if include_traceback and exc.__traceback__ is not None:
        text += "\n" + "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    stdlib_logger = getattr(logger, "logger", logger)
    getattr(stdlib_logger, level)(text)

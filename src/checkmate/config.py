"""Runtime configuration read from ``CHECKMATE_*`` environment variables.

A ``.env`` file in the working directory (or any parent) is loaded once when
the package is imported, so these can live there during development.

Variables:
    CHECKMATE_STORAGE_BACKEND: ``memory``, ``callback``, ``file`` or ``sqlite``
    CHECKMATE_STORAGE_PATH: file or database path for persistent backends
    CHECKMATE_TEMPLATE_URL: overrides the stored default template URL
    CHECKMATE_HTTP_TIMEOUT: template fetch timeout in seconds (unset = none)
    CHECKMATE_RETENTION_DAYS: prune state records older than this on save
    CHECKMATE_LOG_LEVEL / CHECKMATE_LOG_FORMAT: see ``checkmate.logging``
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["DEFAULT_STORAGE_PATH", "Settings", "load_settings"]

DEFAULT_STORAGE_PATH = Path.home() / ".checkmate" / "storage.json"


def _env_float(name: str) -> float | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    """Engine settings.

    Attributes:
        storage_backend: Backend name passed to ``create_storage``.
        storage_path: Location of the persistent store.
        template_url: When set, used instead of the stored option.
        http_timeout: Seconds before a template fetch is abandoned. None
            waits indefinitely.
        retention_days: State records older than this are pruned on save.
            None keeps everything.
        log_level: Level for ``configure_logging``.
        log_format: ``human`` or ``json``.
    """

    storage_backend: str = "file"
    storage_path: Path = field(default_factory=lambda: DEFAULT_STORAGE_PATH)
    template_url: str | None = None
    http_timeout: float | None = None
    retention_days: float | None = None
    log_level: str = "INFO"
    log_format: str = "human"

    @classmethod
    def from_env(cls) -> Settings:
        path = os.environ.get("CHECKMATE_STORAGE_PATH")
        return cls(
            storage_backend=os.environ.get("CHECKMATE_STORAGE_BACKEND", "file").strip().lower(),
            storage_path=Path(path).expanduser() if path else DEFAULT_STORAGE_PATH,
            template_url=os.environ.get("CHECKMATE_TEMPLATE_URL") or None,
            http_timeout=_env_float("CHECKMATE_HTTP_TIMEOUT"),
            retention_days=_env_float("CHECKMATE_RETENTION_DAYS"),
            log_level=os.environ.get("CHECKMATE_LOG_LEVEL", "INFO"),
            log_format=os.environ.get("CHECKMATE_LOG_FORMAT", "human"),
        )

    @property
    def retention_seconds(self) -> float | None:
        if self.retention_days is None:
            return None
        return self.retention_days * 86400


def load_settings() -> Settings:
    """Settings from the current environment."""
    return Settings.from_env()

"""Engine construction and async dispatch for CLI commands."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer

from checkmate.cli.output import print_extension_error
from checkmate.config import Settings, load_settings
from checkmate.engine import ChecklistEngine
from checkmate.errors import ExtensionError
from checkmate.storage import create_storage

__all__ = ["build_engine", "run_with_engine"]

T = TypeVar("T")


def build_engine(settings: Settings | None = None) -> ChecklistEngine:
    """Engine over the storage backend named in ``settings``."""
    settings = settings or load_settings()
    path = settings.storage_path if settings.storage_backend in ("file", "sqlite") else None
    return ChecklistEngine(create_storage(settings.storage_backend, path), settings=settings)


def run_with_engine(func: Callable[[ChecklistEngine], Awaitable[T]]) -> T:
    """Run ``func`` against a fresh engine; classified errors exit with code 1."""

    async def _run() -> T:
        async with build_engine() as engine:
            return await func(engine)

    try:
        return asyncio.run(_run())
    except ExtensionError as e:
        print_extension_error(e)
        raise typer.Exit(1) from e

"""
Root conftest.py for checkmate tests.

This file provides:
1. Common pytest markers for test categorization
2. Shared template fixtures (YAML, JSON, Markdown sources)
3. Storage fixtures for both store calling conventions
4. An ``httpx.MockTransport`` client factory for template fetching
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from checkmate.storage import CallbackMemoryStorage, MemoryStorage, StorageAdapter
from checkmate.template import Template, parse_yaml

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")

        if "/storage/" in norm:
            item.add_marker(pytest.mark.storage)
        if "/template/" in norm:
            item.add_marker(pytest.mark.template)
        if "/state/" in norm:
            item.add_marker(pytest.mark.state)
        if "/cli/" in norm:
            item.add_marker(pytest.mark.cli)


def pytest_configure(config):
    """Register custom markers."""
    for name, desc in [
        ("storage", "Storage adapter and backend tests"),
        ("template", "Template parsing and loading tests"),
        ("state", "Checklist state tests"),
        ("cli", "Command line tests"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# ENVIRONMENT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's CHECKMATE_* variables out of the tests."""
    for name in (
        "CHECKMATE_STORAGE_BACKEND",
        "CHECKMATE_STORAGE_PATH",
        "CHECKMATE_TEMPLATE_URL",
        "CHECKMATE_HTTP_TIMEOUT",
        "CHECKMATE_RETENTION_DAYS",
        "CHECKMATE_LOG_LEVEL",
        "CHECKMATE_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_global_state():
    """Undo ``configure_logging`` so caplog sees checkmate records again."""
    yield
    root = logging.getLogger("checkmate")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


# =============================================================================
# TEMPLATE FIXTURES
# =============================================================================

SECURITY_YAML = "sections:\n  - name: Security\n    items:\n      - name: Check auth\n"

REVIEW_YAML = """\
title: Team Review
sections:
  - name: Security
    items:
      - name: Check auth
      - name: Validate input
        url: https://owasp.org/www-project-top-ten/
  - name: Tests
    items:
      - name: Unit tests pass
"""

REVIEW_MARKDOWN = """\
# Title
## Sec
- [ ] Item A
- [x] Item B
"""


@pytest.fixture
def security_yaml() -> str:
    return SECURITY_YAML


@pytest.fixture
def review_yaml() -> str:
    return REVIEW_YAML


@pytest.fixture
def review_markdown() -> str:
    return REVIEW_MARKDOWN


@pytest.fixture
def review_template() -> Template:
    """Two sections, three items."""
    return parse_yaml(REVIEW_YAML)


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def callback_storage() -> CallbackMemoryStorage:
    return CallbackMemoryStorage()


@pytest.fixture
def adapter(memory_storage: MemoryStorage) -> StorageAdapter:
    return StorageAdapter(memory_storage)


# =============================================================================
# HTTP FIXTURES
# =============================================================================


@pytest.fixture
def mock_http() -> Callable[..., httpx.AsyncClient]:
    """Build an ``httpx.AsyncClient`` serving canned responses.

    Usage:
        client = mock_http({"https://x/t.yaml": "sections: ..."})
        client = mock_http({"https://x/t.yaml": (404, "Not Found")})
        client = mock_http(error=httpx.ConnectError("boom"))

    Every handled request is appended to ``client.requests``.
    """

    def factory(
        routes: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> httpx.AsyncClient:
        routes = routes or {}
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if error is not None:
                raise error
            body = routes.get(str(request.url))
            if body is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(body, tuple):
                status, text = body
                return httpx.Response(status, text=text)
            return httpx.Response(200, text=body)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client.requests = requests  # type: ignore[attr-defined]
        return client

    return factory

"""Fetch templates over HTTP(S) or from local files.

:meth:`TemplateLoader.load` never raises: network, parse and validation
failures are logged and the fallback template is returned, so a checklist
is always renderable. :meth:`TemplateLoader.fetch` is the raising variant
for callers that want to report what went wrong.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

import httpx

from checkmate.errors import ErrorCategory, ensure_extension_error, network_error
from checkmate.logging import get_logger, log_async_function
from checkmate.template.fallback import fallback_template
from checkmate.template.models import Template
from checkmate.template.parser import detect_format, parse_template

__all__ = ["TemplateLoader", "load_template"]

logger = get_logger("template.loader")


class TemplateLoader:
    """Load and validate templates.

    Args:
        client: Shared ``httpx.AsyncClient``. When omitted the loader creates
            one on first use and closes it in :meth:`aclose`.
        timeout: Seconds before a fetch is abandoned. None waits
            indefinitely.

    Example:
        >>> async with TemplateLoader() as loader:
        ...     template = await loader.load("https://example.com/checklist.yaml")
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout

    async def __aenter__(self) -> TemplateLoader:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _read_local(self, url: str) -> str:
        parsed = urlparse(url)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url).expanduser()
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            raise network_error(
                "Failed to read template file",
                details={"url": url, "error": str(e)},
                suggestions=[
                    "Check that the file exists and is readable",
                    "Use an http(s) URL or an absolute path",
                ],
                recoverable=False,
            ) from e

    async def fetch_text(self, url: str) -> str:
        """Return the raw template text at ``url``.

        Raises:
            ExtensionError: ``network`` category for transport failures and
                non-success responses.
        """
        scheme = urlparse(url).scheme
        if scheme not in ("http", "https"):
            return await self._read_local(url)

        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            raise network_error(
                "Failed to fetch template from URL",
                details={"url": url, "error": str(e), "error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            raise network_error(
                f"Failed to fetch template: {response.status_code} {response.reason_phrase}",
                details={"url": url, "status": response.status_code},
            )
        return response.text

    @log_async_function(logger)
    async def fetch(self, url: str) -> Template:
        """Fetch, parse and validate; raise on any failure."""
        text = await self.fetch_text(url)
        return parse_template(text, detect_format(url))

    async def load(self, url: str) -> Template:
        """Fetch, parse and validate; return the fallback on any failure."""
        template, _ = await self.load_with_status(url)
        return template

    async def load_with_status(self, url: str) -> Tuple[Template, bool]:
        """Like :meth:`load`, also reporting whether the fallback was used.

        Returns:
            ``(template, fell_back)``. Callers caching templates should not
            keep a fallback result, so a later call can retry the fetch.
        """
        try:
            template = await self.fetch(url)
        except Exception as e:
            error = ensure_extension_error(e, ErrorCategory.UNKNOWN, "Failed to load template")
            logger.warning(
                "template_fallback_used",
                url=url,
                category=error.category.value,
                reason=error.message,
            )
            return fallback_template(), True

        logger.info(
            "template_loaded",
            url=url,
            sections=len(template.sections),
            items=template.item_count,
        )
        return template, False


async def load_template(url: str, client: Optional[httpx.AsyncClient] = None) -> Template:
    """Load the template at ``url``; always returns a usable template."""
    async with TemplateLoader(client=client) as loader:
        return await loader.load(url)


"""The checklist engine: one caller-owned handle over templates, state and options.

Example:
    >>> from checkmate import ChecklistEngine
    >>> from checkmate.storage import MemoryStorage
    >>>
    >>> async with ChecklistEngine(MemoryStorage()) as engine:
    ...     checklist = await engine.open_checklist("https://github.com/octo/repo/pull/7")
    ...     key = checklist.keys.items[0]
    ...     checklist = await engine.update_item(checklist, key, checked=True)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from checkmate.config import Settings, load_settings
from checkmate.github import state_key_for_url
from checkmate.keys import TemplateKeys, template_keys
from checkmate.logging import get_logger
from checkmate.options import ExtensionOptions, OptionsStore
from checkmate.state.models import ChecklistState
from checkmate.state.operations import (
    AttentionEntry,
    Progress,
    needs_attention,
    progress,
    reconcile,
    reset_state,
    review_summary,
    set_item_state,
    set_section_state,
)
from checkmate.state.reconciler import StateReconciler
from checkmate.storage.adapter import StorageAdapter, StorageStyle
from checkmate.template.loader import TemplateLoader
from checkmate.template.models import Template

__all__ = ["Checklist", "ChecklistEngine"]

logger = get_logger("engine")


@dataclass
class Checklist:
    """A template paired with the state of one review context."""

    state_key: str
    template: Template
    state: ChecklistState
    keys: TemplateKeys = field(default_factory=TemplateKeys)

    @property
    def needs_attention(self) -> List[AttentionEntry]:
        return needs_attention(self.state, self.template)

    @property
    def progress(self) -> Progress:
        return progress(self.state, self.template)

    def summary(self) -> str:
        """Markdown review summary of this checklist."""
        return review_summary(self.state, self.template)


class ChecklistEngine:
    """Entry point for hosts rendering a checklist.

    Holds no global state: each instance owns its storage adapter, template
    loader and a per-URL template cache.

    Args:
        storage: A :class:`StorageAdapter` or any store it can wrap.
        loader: Template loader; one is created from ``settings`` if omitted.
        settings: Engine settings. Defaults to ``load_settings()``, so
            ``CHECKMATE_*`` environment variables apply.
        client: ``httpx.AsyncClient`` for a loader created here.
        storage_style: Force the store's calling convention.
    """

    def __init__(
        self,
        storage: Any,
        loader: Optional[TemplateLoader] = None,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        storage_style: Optional[StorageStyle | str] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.storage = (
            storage if isinstance(storage, StorageAdapter) else StorageAdapter(storage, style=storage_style)
        )
        self.loader = loader or TemplateLoader(client=client, timeout=self.settings.http_timeout)
        self.options = OptionsStore(self.storage)
        self.states = StateReconciler(self.storage, retention=self.settings.retention_seconds)
        self._templates: Dict[str, Template] = {}

    async def __aenter__(self) -> ChecklistEngine:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.loader.aclose()
        await self.storage.aclose()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    async def get_options(self) -> ExtensionOptions:
        return await self.options.get_options()

    async def save_options(self, options: ExtensionOptions | Dict[str, Any]) -> ExtensionOptions:
        saved = await self.options.save_options(options)
        self._templates.clear()
        return saved

    async def template_url(self) -> str:
        """The configured template URL; the environment overrides stored options."""
        if self.settings.template_url:
            return self.settings.template_url
        return (await self.get_options()).default_template_url

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def load_template(self, url: Optional[str] = None, refresh: bool = False) -> Template:
        """Template at ``url`` (configured URL when None). Never raises.

        The fallback template is returned but not cached, so the next call
        retries the fetch.
        """
        url = url or await self.template_url()
        if not refresh and url in self._templates:
            return self._templates[url]
        template, fell_back = await self.loader.load_with_status(url)
        if not fell_back:
            self._templates[url] = template
        return template

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def load_state(self, state_key: str, template: Optional[Template] = None) -> ChecklistState:
        """Stored state for ``state_key``; defaults from the current template if none."""
        url = await self.template_url()
        template = template or await self.load_template(url)
        return await self.states.load_state(state_key, template, url)

    async def save_state(
        self,
        state_key: str,
        state: ChecklistState,
        expected_last_updated: Optional[int] = None,
    ) -> ChecklistState:
        return await self.states.save_state(state_key, state, expected_last_updated)

    # ------------------------------------------------------------------
    # Checklists
    # ------------------------------------------------------------------

    async def open_checklist(self, context: str, template_url: Optional[str] = None) -> Checklist:
        """Template and reconciled state for ``context``.

        ``context`` is a state key (``"owner/repo#12"``) or a GitHub URL.
        Entries for new template items are defaulted in memory; nothing is
        written until the first save.
        """
        state_key = state_key_for_url(context) if "://" in context else context
        url = template_url or await self.template_url()
        template = await self.load_template(url)
        stored = await self.states.load_state(state_key, template, url)
        state = reconcile(stored, template)
        if not state.template_url:
            state = state.model_copy(update={"template_url": url})
        logger.info("checklist_opened", state_key=state_key, template_url=url)
        return Checklist(state_key, template, state, template_keys(template))

    async def update_item(
        self,
        checklist: Checklist,
        key: str,
        checked: Optional[bool] = None,
        needs_attention: Optional[bool] = None,
    ) -> Checklist:
        state = set_item_state(checklist.state, key, checked=checked, needs_attention=needs_attention)
        return await self._commit(checklist, state)

    async def update_section(self, checklist: Checklist, key: str, expanded: bool) -> Checklist:
        state = set_section_state(checklist.state, key, expanded)
        return await self._commit(checklist, state)

    async def reset(self, checklist: Checklist) -> Checklist:
        state = reset_state(checklist.template, checklist.state)
        return await self._commit(checklist, state)

    async def _commit(self, checklist: Checklist, state: ChecklistState) -> Checklist:
        saved = await self.states.save_state(checklist.state_key, state)
        return Checklist(checklist.state_key, checklist.template, saved, checklist.keys)

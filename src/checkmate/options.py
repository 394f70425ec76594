"""User options: template URL and theme preference.

Example:
    >>> store = OptionsStore(StorageAdapter(MemoryStorage()))
    >>> options = await store.get_options()
    >>> options.theme
    'auto'
    >>> await store.save_options(options.model_copy(update={"theme": "dark"}))
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from checkmate.errors import ExtensionError, log_exception, storage_error
from checkmate.logging import get_logger
from checkmate.storage.adapter import StorageAdapter

__all__ = [
    "DEFAULT_TEMPLATE_URL",
    "DEFAULT_THEME",
    "OPTIONS_STORAGE_KEY",
    "ExtensionOptions",
    "OptionsStore",
    "Theme",
]

logger = get_logger("options")

OPTIONS_STORAGE_KEY = "checkmate_options"
DEFAULT_TEMPLATE_URL = "https://raw.githubusercontent.com/checkmate-review/templates/main/default.yaml"
DEFAULT_THEME = "auto"

Theme = Literal["light", "dark", "auto"]


class ExtensionOptions(BaseModel):
    """Persisted options record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    default_template_url: str = Field(DEFAULT_TEMPLATE_URL, alias="defaultTemplateUrl")
    theme: Theme = DEFAULT_THEME

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, data: Any) -> ExtensionOptions:
        """Build options from a stored record, defaulting bad or missing fields."""
        if not isinstance(data, dict):
            return cls()
        fields: Dict[str, Any] = {}
        url = data.get("defaultTemplateUrl")
        if isinstance(url, str) and url.strip():
            fields["default_template_url"] = url
        theme = data.get("theme")
        if theme in ("light", "dark", "auto"):
            fields["theme"] = theme
        return cls(**fields)


class OptionsStore:
    """Read and write :class:`ExtensionOptions`.

    ``get_options`` never fails: a missing record, a missing field or a
    storage error all yield defaults. ``save_options`` writes the whole
    record; callers merge fields themselves.
    """

    def __init__(self, storage: StorageAdapter, storage_key: str = OPTIONS_STORAGE_KEY) -> None:
        self.storage = storage
        self.storage_key = storage_key

    async def get_options(self) -> ExtensionOptions:
        try:
            record = await self.storage.get(self.storage_key)
        except ExtensionError as e:
            log_exception(logger, "Falling back to default options", e, include_traceback=False)
            return ExtensionOptions()

        if record is None:
            logger.debug("options_defaulted")
        return ExtensionOptions.from_record(record)

    async def save_options(self, options: ExtensionOptions | Dict[str, Any]) -> ExtensionOptions:
        """Persist ``options``.

        Raises:
            ExtensionError: ``storage`` category on invalid options or store
                failure.
        """
        if not isinstance(options, ExtensionOptions):
            try:
                options = ExtensionOptions.model_validate(options)
            except ValidationError as e:
                raise storage_error(
                    "Cannot save invalid options",
                    details={"error": str(e)},
                    suggestions=["Theme must be one of light, dark or auto"],
                    recoverable=False,
                ) from e

        await self.storage.set(self.storage_key, options.to_record())
        logger.info("options_saved", theme=options.theme)
        return options

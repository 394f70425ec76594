import os

from dotenv import find_dotenv, load_dotenv

if not os.environ.get("CHECKMATE_ENV_LOADED"):
    load_dotenv(find_dotenv(usecwd=True))
    os.environ["CHECKMATE_ENV_LOADED"] = "1"

from checkmate.config import Settings, load_settings
from checkmate.engine import Checklist, ChecklistEngine
from checkmate.errors import ErrorCategory, ExtensionError, create_error
from checkmate.keys import item_key, item_state_key, section_key
from checkmate.logging import configure_logging, get_logger
from checkmate.options import ExtensionOptions, OptionsStore
from checkmate.state import (
    ChecklistState,
    ItemState,
    StateReconciler,
    needs_attention,
    reset_state,
    set_item_state,
    set_section_state,
)
from checkmate.storage import StorageAdapter, create_storage
from checkmate.template import (
    Item,
    Section,
    Template,
    TemplateLoader,
    fallback_template,
    load_template,
    parse_template,
)

__all__ = [
    # Engine
    "Checklist",
    "ChecklistEngine",
    # Templates
    "Item",
    "Section",
    "Template",
    "TemplateLoader",
    "fallback_template",
    "load_template",
    "parse_template",
    # Keys
    "item_key",
    "item_state_key",
    "section_key",
    # State
    "ChecklistState",
    "ItemState",
    "StateReconciler",
    "needs_attention",
    "reset_state",
    "set_item_state",
    "set_section_state",
    # Options
    "ExtensionOptions",
    "OptionsStore",
    # Storage
    "StorageAdapter",
    "create_storage",
    # Cross-cutting
    "ErrorCategory",
    "ExtensionError",
    "create_error",
    "Settings",
    "load_settings",
    "configure_logging",
    "get_logger",
]

from .options_cmds import register as register_options
from .state_cmds import register as register_state
from .template_cmds import register as register_template

__all__ = [
    "register_options",
    "register_state",
    "register_template",
]

from .context import get_log_context, log_context, reset_context, set_context
from .setup import apply_component_levels, configure_logging

__all__ = ["apply_component_levels", "configure_logging", "get_log_context", "set_context", "reset_context", "log_context"]

from .propagation import CallContext, ContextAwareExecutor, capture_call_context, wrap_callable
from .tenant import clear_tenant, get_tenant, set_tenant, tenant_context
from .user import (
    AutoUserContext,
    UserContext,
    clear_user_context,
    get_user_context,
    set_access_token,
    set_user_context,
    user_context,
)

__all__ = [
    "AutoUserContext",
    "CallContext",
    "ContextAwareExecutor",
    "UserContext",
    "capture_call_context",
    "clear_tenant",
    "clear_user_context",
    "get_tenant",
    "get_user_context",
    "set_access_token",
    "set_tenant",
    "set_user_context",
    "tenant_context",
    "user_context",
    "wrap_callable",
]

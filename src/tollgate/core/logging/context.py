from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

from tollgate.core.context.tenant import get_tenant
from tollgate.core.context.user import get_user_context

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
method_key_var: ContextVar[str | None] = ContextVar("method_key", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "correlation_id": correlation_id_var,
    "method_key": method_key_var,
}


def set_context(**kwargs: str | None) -> dict[str, Token[str | None]]:
    tokens: dict[str, Token[str | None]] = {}
    for key, value in kwargs.items():
        var = _CONTEXT_VARS.get(key)
        if var is None:
            continue
        tokens[key] = var.set(value)
    return tokens


def reset_context(tokens: dict[str, Token[str | None]]) -> None:
    for key, token in tokens.items():
        var = _CONTEXT_VARS.get(key)
        if var is not None:
            var.reset(token)


@contextmanager
def log_context(correlation_id: str | None = None, method_key: str | None = None) -> Iterator[None]:
    tokens = set_context(correlation_id=correlation_id, method_key=method_key)
    try:
        yield
    finally:
        reset_context(tokens)


def get_log_context() -> dict[str, str]:
    user_context = get_user_context()
    values = {
        "correlation_id": correlation_id_var.get(),
        "method_key": method_key_var.get(),
        "tenant": get_tenant(),
        "user": user_context.user if user_context is not None else None,
    }
    return {key: value for key, value in values.items() if value is not None}

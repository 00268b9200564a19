from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_tenant_var: ContextVar[str | None] = ContextVar("tollgate_tenant", default=None)


def get_tenant() -> str | None:
    return _tenant_var.get()


def set_tenant(identifier: str) -> None:
    if not identifier:
        raise ValueError("tenant identifier must not be empty")
    _tenant_var.set(identifier)


def clear_tenant() -> None:
    _tenant_var.set(None)


@contextmanager
def tenant_context(identifier: str) -> Iterator[None]:
    previous = get_tenant()
    set_tenant(identifier)
    try:
        yield
    finally:
        clear_tenant()
        if previous is not None:
            set_tenant(previous)

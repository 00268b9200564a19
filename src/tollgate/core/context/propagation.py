"""Explicit hand-off of the caller context into worker threads.

Context variables are not inherited by pooled threads, so anything submitted to a
worker captures the caller's user and tenant at submission time and installs them
inside the worker for the duration of the call only.
"""
from __future__ import annotations

import functools
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .tenant import clear_tenant, get_tenant, set_tenant
from .user import UserContext, clear_user_context, get_user_context, set_user_context

T = TypeVar("T")


@dataclass(frozen=True)
class CallContext:
    user_context: UserContext | None = None
    tenant: str | None = None

    def install(self) -> None:
        if self.user_context is not None:
            set_user_context(self.user_context)
        else:
            clear_user_context()
        if self.tenant is not None:
            set_tenant(self.tenant)
        else:
            clear_tenant()

    def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        self.install()
        try:
            return fn(*args, **kwargs)
        finally:
            clear_user_context()
            clear_tenant()


def capture_call_context() -> CallContext:
    return CallContext(user_context=get_user_context(), tenant=get_tenant())


def wrap_callable(fn: Callable[..., T]) -> Callable[..., T]:
    captured = capture_call_context()

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        return captured.run(fn, *args, **kwargs)

    return wrapper


class ContextAwareExecutor(ThreadPoolExecutor):
    def submit(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> Future[T]:
        return super().submit(wrap_callable(fn), *args, **kwargs)

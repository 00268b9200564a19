from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass
from types import TracebackType


@dataclass(frozen=True)
class UserContext:
    user: str
    access_token: str


_user_context_var: ContextVar[UserContext | None] = ContextVar("tollgate_user_context", default=None)


def get_user_context() -> UserContext | None:
    return _user_context_var.get()


def set_user_context(context: UserContext) -> None:
    _user_context_var.set(context)


def set_access_token(user: str, access_token: str) -> None:
    _user_context_var.set(UserContext(user=user, access_token=access_token))


def clear_user_context() -> None:
    _user_context_var.set(None)


class AutoUserContext:
    """Installs a caller identity for the length of a ``with`` block.

    The identity active when the guard was created is restored on exit, so an
    inner guard never clobbers the context of an enclosing one.
    """

    def __init__(self, user: str, access_token: str) -> None:
        self._previous = get_user_context()
        set_access_token(user, access_token)

    def close(self) -> None:
        clear_user_context()
        if self._previous is not None:
            set_user_context(self._previous)

    def __enter__(self) -> AutoUserContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def user_context(user: str, access_token: str) -> AutoUserContext:
    return AutoUserContext(user, access_token)

"""Declarations attached to client interface methods.

``@endpoint`` declares the request line of a method and ``@throws_exception``
maps a response status to the exception the method raises for it. Stacked
``@throws_exception`` decorators keep their top-to-bottom order.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_RULES_ATTR = "__tollgate_throws__"
_ENDPOINT_ATTR = "__tollgate_endpoint__"


@dataclass(frozen=True)
class ExceptionRule:
    status: int
    exception: type[BaseException]


@dataclass(frozen=True)
class Endpoint:
    method: str
    path: str


def throws_exception(status: int, exception: type[BaseException]) -> Callable[[F], F]:
    rule = ExceptionRule(status=int(status), exception=exception)

    def decorator(fn: F) -> F:
        existing: tuple[ExceptionRule, ...] = getattr(fn, _RULES_ATTR, ())
        # decorators apply bottom-up; prepend to keep declaration order
        setattr(fn, _RULES_ATTR, (rule, *existing))
        return fn

    return decorator


def endpoint(method: str, path: str) -> Callable[[F], F]:
    declared = Endpoint(method=method.strip().upper(), path=path)

    def decorator(fn: F) -> F:
        setattr(fn, _ENDPOINT_ATTR, declared)
        return fn

    return decorator


def exception_rules(fn: Callable[..., Any]) -> tuple[ExceptionRule, ...]:
    return tuple(getattr(fn, _RULES_ATTR, ()))


def endpoint_of(fn: Callable[..., Any]) -> Endpoint | None:
    return getattr(fn, _ENDPOINT_ATTR, None)


def _type_name(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return "object"
    if isinstance(annotation, str):
        return annotation.rsplit(".", 1)[-1]
    return getattr(annotation, "__name__", str(annotation))


def config_key(interface: type, method: Callable[..., Any]) -> str:
    """Canonical key of a declared method, e.g. ``UserClient#get_user(str)``."""
    parameters = list(inspect.signature(method).parameters.values())
    if parameters and parameters[0].name in {"self", "cls"}:
        parameters = parameters[1:]
    types = ",".join(_type_name(p.annotation) for p in parameters)
    return f"{interface.__name__}#{method.__name__}({types})"


def declared_methods(interface: type) -> dict[str, Callable[..., Any]]:
    """Public functions of ``interface`` and its bases, in declaration order."""
    methods: dict[str, Callable[..., Any]] = {}
    for klass in reversed(interface.__mro__):
        if klass is object:
            continue
        for name, value in vars(klass).items():
            if name.startswith("_") or not inspect.isfunction(value):
                continue
            methods[name] = value
    return methods

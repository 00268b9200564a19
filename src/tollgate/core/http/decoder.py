from __future__ import annotations

import inspect
import logging
from typing import Callable, Mapping, Sequence

import httpx

from .annotations import ExceptionRule, config_key, declared_methods, exception_rules
from .errors import HTTPStatusError, IllegalArgumentError, InternalServerError, InvalidTokenError, NotFoundError

logger = logging.getLogger("tollgate.http.decoder")

ErrorDecoder = Callable[[str, httpx.Response], Exception]


class ExceptionConstructionError(Exception):
    """Internal: the mapped exception type could not be built for a response."""


def response_reason(response: httpx.Response) -> str | None:
    """Reason text of a failed response.

    The server's reason phrase when the transport reported one, otherwise the
    body as text, otherwise ``None``.
    """
    reason = response.extensions.get("reason_phrase")
    if reason:
        return reason.decode("ascii", errors="replace") if isinstance(reason, bytes) else str(reason)
    body = _body_text(response)
    return body or None


def _body_text(response: httpx.Response) -> str | None:
    try:
        content = response.content
    except httpx.ResponseNotRead:
        content = response.read()
    if not content:
        return None
    return response.text


def _accepts_response(parameter: inspect.Parameter) -> bool:
    annotation = parameter.annotation
    if annotation is httpx.Response:
        return True
    if isinstance(annotation, str) and annotation.rsplit(".", 1)[-1] == "Response":
        return True
    return annotation is inspect.Parameter.empty and parameter.name == "response"


def _accepts_text(parameter: inspect.Parameter) -> bool:
    return parameter.annotation is str or parameter.annotation == "str"


def construct_exception(exception: type[BaseException], response: httpx.Response) -> BaseException:
    try:
        signature = inspect.signature(exception)
    except (TypeError, ValueError):
        signature = None

    if signature is not None:
        parameters = [
            p
            for p in signature.parameters.values()
            if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        required = [p for p in parameters if p.default is inspect.Parameter.empty]
        first = parameters[0] if parameters else None
        single = (
            first is not None
            and first.kind is not inspect.Parameter.KEYWORD_ONLY
            and all(p is first for p in required)
        )
        if single and _accepts_response(first):
            return exception(response)
        if single and _accepts_text(first):
            text = _body_text(response)
            return exception(text if text is not None else response_reason(response))
        if required:
            raise ExceptionConstructionError(f"{exception.__name__} has no response, text or no-argument constructor")
    return exception()


class AnnotatedErrorDecoder:
    """Picks the exception for a failed response from the interface's declarations.

    The status -> exception table is built once per interface. When no rule
    matches, or the mapped exception cannot be constructed, a fixed exception
    keyed on the status code is returned instead. ``decode`` never raises.
    """

    def __init__(
        self,
        interface: type | None = None,
        *,
        rules: Mapping[str, Sequence[ExceptionRule]] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.interface = interface
        self.logger = log or logger
        self._rules: dict[str, tuple[ExceptionRule, ...]] = {}
        if interface is not None:
            for method in declared_methods(interface).values():
                self._register(config_key(interface, method), exception_rules(method))
        for method_key, method_rules in (rules or {}).items():
            self._register(method_key, tuple(method_rules))

    def _register(self, method_key: str, method_rules: tuple[ExceptionRule, ...]) -> None:
        seen: set[int] = set()
        for rule in method_rules:
            if rule.status in seen:
                self.logger.warning(
                    "Duplicate exception mapping for status %s on %s; the first declaration wins",
                    rule.status,
                    method_key,
                    extra={"extra_fields": {"method_key": method_key, "status": rule.status}},
                )
            seen.add(rule.status)
        self._rules[method_key] = method_rules

    def rules_for(self, method_key: str) -> tuple[ExceptionRule, ...]:
        return self._rules.get(method_key, ())

    def __call__(self, method_key: str, response: httpx.Response) -> Exception:
        return self.decode(method_key, response)

    def decode(self, method_key: str, response: httpx.Response) -> Exception:
        rule = self._matching_rule(method_key, response)
        if rule is not None:
            built = self._construct(rule, response)
            if built is not None:
                return built
        return self._alternative(method_key, response)

    def _matching_rule(self, method_key: str, response: httpx.Response) -> ExceptionRule | None:
        for rule in self.rules_for(method_key):
            if rule.status == response.status_code:
                return rule
        return None

    def _construct(self, rule: ExceptionRule, response: httpx.Response) -> Exception | None:
        try:
            built = construct_exception(rule.exception, response)
        except Exception:
            self.logger.error(
                "Instantiating exception %s for status %s failed with an exception",
                rule.exception.__name__,
                rule.status,
                exc_info=True,
                extra={"extra_fields": {"exception": rule.exception.__name__, "status": rule.status}},
            )
            return None
        if not isinstance(built, Exception):
            self.logger.error(
                "Instantiating exception %s for status %s produced a non-exception %s",
                rule.exception.__name__,
                rule.status,
                type(built).__name__,
                extra={"extra_fields": {"exception": rule.exception.__name__, "status": rule.status}},
            )
            return None
        return built

    def _alternative(self, method_key: str, response: httpx.Response) -> Exception:
        status = response.status_code
        if status == 400:
            return IllegalArgumentError(response_reason(response))
        if status == 403:
            return InvalidTokenError(response_reason(response))
        if status == 404:
            return NotFoundError()
        if status == 500:
            return InternalServerError(response_reason(response))
        return HTTPStatusError(method_key, status, _body_text(response))


def _rules_from_mapping(mapping: Mapping[str, Mapping[int, type[BaseException]]]) -> dict[str, list[ExceptionRule]]:
    return {
        method_key: [ExceptionRule(status=int(status), exception=exc) for status, exc in statuses.items()]
        for method_key, statuses in mapping.items()
    }


def decoder_from_table(mapping: Mapping[str, Mapping[int, type[BaseException]]], log: logging.Logger | None = None) -> AnnotatedErrorDecoder:
    """Build a decoder from a plain ``{method_key: {status: exception}}`` table."""
    return AnnotatedErrorDecoder(rules=_rules_from_mapping(mapping), log=log)

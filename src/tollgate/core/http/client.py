from __future__ import annotations

import inspect
import json
import logging
import string
from typing import Any, Callable, Sequence
from urllib.parse import quote

import httpx

from tollgate.core.config.loader import ClientSettings, load_settings
from tollgate.core.logging.context import log_context
from tollgate.core.logging.redact import redact_headers
from tollgate.core.logging.setup import apply_component_levels

from .annotations import Endpoint, config_key, declared_methods, endpoint_of
from .cookies import CookieInterceptingTransport
from .decoder import AnnotatedErrorDecoder, ErrorDecoder
from .errors import TollgateError
from .interceptors import RequestInterceptor, TokenInterceptor, empty_body_interceptor, tenant_interceptor
from .template import RequestTemplate

logger = logging.getLogger("tollgate.http.client")

_BODY_PARAM = "body"
_JSON_CONTENT_TYPE = "application/json"


def _build_timeout(settings: ClientSettings) -> httpx.Timeout:
    read_total = max(0.1, settings.timeout_s)
    connect_s = max(0.1, settings.connect_timeout_s)
    return httpx.Timeout(read_total, connect=min(connect_s, read_total))


def _path_fields(path: str) -> set[str]:
    return {name for _, name, _, _ in string.Formatter().parse(path) if name}


def _expand(value: Any) -> str:
    # path variables are a single segment; reserved characters stay inside it
    return quote(str(value), safe="")


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Client for one declared interface bound to one target URL.

    Every method of the interface carrying ``@endpoint`` becomes a callable
    attribute with the same signature. Path placeholders are filled from the
    arguments of the same name, a ``body`` argument is sent as JSON and the
    remaining non-``None`` arguments become query parameters.
    """

    def __init__(
        self,
        interface: type,
        target_url: str,
        http_client: httpx.Client,
        error_decoder: ErrorDecoder,
        interceptors: Sequence[RequestInterceptor] = (),
        cookie_transport: CookieInterceptingTransport | None = None,
    ) -> None:
        self.interface = interface
        self.target_url = target_url
        self.http_client = http_client
        self.error_decoder = error_decoder
        self.interceptors = tuple(interceptors)
        self.cookie_transport = cookie_transport
        for name, method in declared_methods(interface).items():
            declared = endpoint_of(method)
            if declared is not None:
                setattr(self, name, self._bind(method, declared))

    def _bind(self, method: Callable[..., Any], declared: Endpoint) -> Callable[..., Any]:
        signature = inspect.signature(method)
        method_key = config_key(self.interface, method)
        path_fields = _path_fields(declared.path)

        def call(*args: Any, **kwargs: Any) -> Any:
            bound = signature.bind(None, *args, **kwargs)
            bound.apply_defaults()
            arguments = dict(list(bound.arguments.items())[1:])
            template = RequestTemplate(method=declared.method)
            template.append(declared.path.format(**{name: _expand(arguments[name]) for name in path_fields}))
            for name, value in arguments.items():
                if name in path_fields or value is None:
                    continue
                if name == _BODY_PARAM:
                    template.header("Content-Type", _JSON_CONTENT_TYPE)
                    template.set_body(json.dumps(value).encode("utf-8"), "utf-8")
                    continue
                values = value if isinstance(value, (list, tuple)) else [value]
                template.query_param(name, *(str(v) for v in values))
            return _decode_body(self.execute(method_key, template))

        call.__name__ = method.__name__
        call.__doc__ = method.__doc__
        return call

    def execute(self, method_key: str, template: RequestTemplate) -> httpx.Response:
        with log_context(method_key=method_key):
            for interceptor in self.interceptors:
                interceptor(template)
            request = template.to_request(self.target_url)
            logger.debug(
                "Sending %s %s",
                request.method,
                request.url,
                extra={"extra_fields": {"headers": redact_headers(template.headers)}},
            )
            response = self.http_client.send(request)
            response.read()
            if 200 <= response.status_code < 300:
                return response
            logger.info(
                "Call %s failed with status %s",
                method_key,
                response.status_code,
                extra={"extra_fields": {"status": response.status_code}},
            )
            raise self.error_decoder(method_key, response)

    def put_cookie(self, path: str, name: str, value: str) -> None:
        if self.cookie_transport is None:
            raise TollgateError("cookies are not enabled for this client")
        self.cookie_transport.put_cookie(path, name, value)

    def close(self) -> None:
        self.http_client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class _SharedTransport(httpx.BaseTransport):
    def __init__(self, transport: httpx.BaseTransport) -> None:
        self._transport = transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)

    def close(self) -> None:
        pass


class ClientBuilder:
    """Builds ``ApiClient`` instances whose error decoder knows the target interface.

    A ``transport`` given here is shared by every target; closing one client
    leaves it open, and ``close`` on the builder releases it.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        interceptors: Sequence[RequestInterceptor] = (),
        transport: httpx.BaseTransport | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        apply_component_levels(self.settings)
        self.extra_interceptors = tuple(interceptors)
        self.transport = transport
        self.logger = log or logging.getLogger("tollgate.http.decoder")

    def default_interceptors(self) -> list[RequestInterceptor]:
        return [tenant_interceptor, TokenInterceptor(self.settings.token_prefix), empty_body_interceptor]

    def target(self, interface: type, url: str) -> ApiClient:
        decoder = AnnotatedErrorDecoder(interface, log=self.logger)
        interceptors = self.default_interceptors() + list(self.extra_interceptors)
        transport: httpx.BaseTransport | None = None
        if self.transport is not None:
            transport = _SharedTransport(self.transport)
        cookie_transport: CookieInterceptingTransport | None = None
        if self.settings.cookies_enabled:
            cookie_transport = CookieInterceptingTransport(url, transport)
            transport = cookie_transport
            interceptors.append(cookie_transport.cookie_interceptor)
        http_client = httpx.Client(
            transport=transport,
            timeout=_build_timeout(self.settings),
            headers={"User-Agent": self.settings.user_agent},
        )
        return ApiClient(interface, url, http_client, decoder, interceptors, cookie_transport)

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()

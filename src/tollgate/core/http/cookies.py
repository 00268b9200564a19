from __future__ import annotations

import logging
from http.cookiejar import CookieJar

import httpx

from .errors import CookieStoreError
from .template import RequestTemplate, join_url

logger = logging.getLogger("tollgate.http.cookies")


def _cookie_domain(host: str) -> str:
    # http.cookiejar treats dotless hosts as "<host>.local"
    return host if "." in host else f"{host}.local"


def _default_path(path: str) -> str:
    index = path.rfind("/")
    if index <= 0:
        return "/"
    return path[:index]


class CookieInterceptingTransport(httpx.BaseTransport):
    """Transport decorator replaying cookies set by the target across calls.

    Every response's ``Set-Cookie`` headers are stored in the jar under the
    request URI; ``cookie_interceptor`` attaches the applicable ones to later
    requests. The jar is not synchronized: share one instance across threads
    only with external locking. A transport passed in stays open on ``close``;
    its owner closes it.
    """

    def __init__(
        self,
        target_url: str,
        transport: httpx.BaseTransport | None = None,
        cookie_jar: CookieJar | None = None,
    ) -> None:
        self.target_url = target_url
        self._owns_transport = transport is None
        self._transport = transport or httpx.HTTPTransport()
        self.cookies = httpx.Cookies(cookie_jar if cookie_jar is not None else CookieJar())

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        response = self._super_execute(request)
        response.request = request
        if "set-cookie" in response.headers:
            self.cookies.extract_cookies(response)
            logger.debug(
                "Stored cookies from response",
                extra={"extra_fields": {"url": str(request.url), "status": response.status_code}},
            )
        return response

    def _super_execute(self, request: httpx.Request) -> httpx.Response:
        return self._transport.handle_request(request)

    def close(self) -> None:
        if self._owns_transport:
            self._transport.close()

    def put_cookie(self, path: str, name: str, value: str) -> None:
        url = httpx.URL(join_url(self.target_url, path))
        self.cookies.set(name, value, domain=_cookie_domain(url.host), path=_default_path(url.path))

    def cookie_header(self, url: str) -> str | None:
        lookup = httpx.Request("GET", url)
        try:
            self.cookies.set_cookie_header(lookup)
        except OSError as exc:
            raise CookieStoreError(f"cookie store failed while reading cookies for {url}") from exc
        return lookup.headers.get("Cookie")

    def cookie_interceptor(self, template: RequestTemplate) -> None:
        header = self.cookie_header(template.url(self.target_url))
        if header:
            template.header("Cookie", header)

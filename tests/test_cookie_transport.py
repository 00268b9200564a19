from __future__ import annotations

from http.cookiejar import CookieJar

import httpx
import pytest

from tollgate.core.http.cookies import CookieInterceptingTransport
from tollgate.core.http.errors import CookieStoreError
from tollgate.core.http.template import RequestTemplate

TEST_URL = "http://igle.pop.org/app/v1/"


class BrokenJar(CookieJar):
    def add_cookie_header(self, request) -> None:
        raise OSError("cookie store unavailable")


def _transport_setting(cookie: str) -> CookieInterceptingTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, headers=[("Set-Cookie", cookie)], request=request)

    return CookieInterceptingTransport(TEST_URL, httpx.MockTransport(handler))


def test_cookies_placed_in_jar_then_attached_to_request() -> None:
    transport = _transport_setting("x=y;Path=/app/v1")

    with httpx.Client(transport=transport) as client:
        client.get(TEST_URL)

    assert transport.cookie_header(TEST_URL) == "x=y"

    template = RequestTemplate().append("/request")
    transport.cookie_interceptor(template)
    assert template.headers["Cookie"] == ["x=y"]


def test_cookie_not_sent_outside_its_path() -> None:
    transport = _transport_setting("x=y;Path=/app/v1")

    with httpx.Client(transport=transport) as client:
        client.get(TEST_URL)

    assert transport.cookie_header("http://igle.pop.org/other/request") is None


def test_manually_set_cookie_is_replayed() -> None:
    transport = CookieInterceptingTransport(TEST_URL, httpx.MockTransport(lambda request: httpx.Response(200)))
    transport.put_cookie("/blah", "token", "Bearerbear")

    template = RequestTemplate().append("/request")
    transport.cookie_interceptor(template)

    assert template.headers["Cookie"] == ["token=Bearerbear"]


def test_multiple_cookies_join_into_one_header() -> None:
    transport = CookieInterceptingTransport(TEST_URL, httpx.MockTransport(lambda request: httpx.Response(200)))
    transport.put_cookie("/a", "first", "1")
    transport.put_cookie("/b", "second", "2")

    header = transport.cookie_header(f"{TEST_URL}request")

    assert header is not None
    assert sorted(header.split("; ")) == ["first=1", "second=2"]


def test_unexpected_cookie_store_failure_is_fatal() -> None:
    transport = CookieInterceptingTransport(
        TEST_URL,
        httpx.MockTransport(lambda request: httpx.Response(200)),
        cookie_jar=BrokenJar(),
    )
    template = RequestTemplate().append("/request")

    with pytest.raises(CookieStoreError):
        transport.cookie_interceptor(template)

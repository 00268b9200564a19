from __future__ import annotations

from dataclasses import dataclass, field

import httpx


def join_url(target_url: str, path: str) -> str:
    if not path:
        return target_url
    return f"{target_url.rstrip('/')}/{path.lstrip('/')}"


@dataclass
class RequestTemplate:
    method: str = "GET"
    path: str = ""
    query: dict[str, list[str]] = field(default_factory=dict)
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes | None = None
    charset: str | None = None

    def append(self, path: str) -> RequestTemplate:
        self.path = f"{self.path}{path}"
        return self

    def header(self, name: str, *values: str) -> RequestTemplate:
        self.headers.setdefault(name, []).extend(values)
        return self

    def query_param(self, name: str, *values: str) -> RequestTemplate:
        self.query.setdefault(name, []).extend(values)
        return self

    def set_body(self, data: bytes, charset: str | None = None) -> RequestTemplate:
        self.body = data
        self.charset = charset
        return self

    def url(self, target_url: str) -> str:
        return join_url(target_url, self.path)

    def _content_type_with_charset(self, value: str) -> str:
        if self.body is None or not self.charset or "charset=" in value.casefold():
            return value
        return f"{value}; charset={self.charset}"

    def to_request(self, target_url: str) -> httpx.Request:
        headers = [
            (name, self._content_type_with_charset(value) if name.casefold() == "content-type" else value)
            for name, values in self.headers.items()
            for value in values
        ]
        params = [(name, value) for name, values in self.query.items() for value in values]
        return httpx.Request(
            self.method,
            self.url(target_url),
            params=params or None,
            headers=headers,
            content=self.body,
        )

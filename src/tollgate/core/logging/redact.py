from __future__ import annotations

import re

_SECRET_HEADERS = {"authorization", "cookie", "set-cookie"}
_SECRET_VALUE_RE = re.compile(r"(?i)(token|secret|password)(\s*[=:]\s*)([^\s,;]+)")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([^\s]+)")


def redact_string(s: str) -> str:
    redacted = _SECRET_VALUE_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", s)
    redacted = _BEARER_RE.sub(lambda m: f"{m.group(1)}***", redacted)
    return redacted


def redact_headers(headers: dict[str, list[str]]) -> dict[str, list[str]]:
    output = {key: list(values) for key, values in headers.items()}
    for key in list(output.keys()):
        if key.casefold() in _SECRET_HEADERS:
            output[key] = ["***"]
    return output

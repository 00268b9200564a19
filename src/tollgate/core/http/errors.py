from __future__ import annotations


class TollgateError(RuntimeError):
    """Base error for tollgate client helpers."""


class TollgateHTTPError(TollgateError):
    """Base error for failed calls against a declared client."""


class HTTPStatusError(TollgateHTTPError):
    def __init__(self, method_key: str, status_code: int, body: str | None = None) -> None:
        self.method_key = method_key
        self.status_code = status_code
        self.body = body
        message = f"status {status_code} reading {method_key}"
        if body:
            message = f"{message}; content:\n{body}"
        super().__init__(message)


class IllegalArgumentError(TollgateHTTPError, ValueError):
    def __init__(self, message: str | None = None) -> None:
        self.message = message
        super().__init__(message)


class InvalidTokenError(TollgateHTTPError):
    def __init__(self, message: str | None = None) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(TollgateHTTPError):
    def __init__(self) -> None:
        self.message = None
        super().__init__()


class InternalServerError(TollgateHTTPError):
    def __init__(self, message: str | None = None) -> None:
        self.message = message
        super().__init__(message)


class CookieStoreError(TollgateError):
    """Raised when the cookie store cannot be read; the jar is unusable."""

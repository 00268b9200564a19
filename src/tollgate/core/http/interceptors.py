"""Request interceptors applied to every outgoing request template."""
from __future__ import annotations

from typing import Callable

from tollgate.core.context.tenant import get_tenant
from tollgate.core.context.user import get_user_context

from .template import RequestTemplate

TENANT_HEADER = "X-Tenant-Identifier"
USER_HEADER = "User"
AUTHORIZATION_HEADER = "Authorization"
DEFAULT_CHARSET = "utf-8"

RequestInterceptor = Callable[[RequestTemplate], None]


def tenant_interceptor(template: RequestTemplate) -> None:
    tenant = get_tenant()
    if tenant is not None:
        template.header(TENANT_HEADER, tenant)


class TokenInterceptor:
    """Adds the caller's user name and access token.

    ``token_prefix`` is prepended to the token verbatim, e.g. ``"Bearer "``.
    """

    def __init__(self, token_prefix: str = "") -> None:
        self.token_prefix = token_prefix

    def __call__(self, template: RequestTemplate) -> None:
        context = get_user_context()
        if context is None:
            return
        template.header(USER_HEADER, context.user)
        template.header(AUTHORIZATION_HEADER, f"{self.token_prefix}{context.access_token}")


def empty_body_interceptor(template: RequestTemplate) -> None:
    # some servers reject POST/PUT without a length marker
    if template.method.upper() in {"POST", "PUT"} and template.body is None:
        template.set_body(b"", DEFAULT_CHARSET)

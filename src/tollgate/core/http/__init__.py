from .annotations import ExceptionRule, config_key, endpoint, throws_exception
from .client import ApiClient, ClientBuilder
from .cookies import CookieInterceptingTransport
from .decoder import AnnotatedErrorDecoder, decoder_from_table
from .errors import (
    CookieStoreError,
    HTTPStatusError,
    IllegalArgumentError,
    InternalServerError,
    InvalidTokenError,
    NotFoundError,
    TollgateError,
    TollgateHTTPError,
)
from .interceptors import TokenInterceptor, empty_body_interceptor, tenant_interceptor
from .template import RequestTemplate

__all__ = [
    "AnnotatedErrorDecoder",
    "ApiClient",
    "ClientBuilder",
    "CookieInterceptingTransport",
    "CookieStoreError",
    "ExceptionRule",
    "HTTPStatusError",
    "IllegalArgumentError",
    "InternalServerError",
    "InvalidTokenError",
    "NotFoundError",
    "RequestTemplate",
    "TokenInterceptor",
    "TollgateError",
    "TollgateHTTPError",
    "config_key",
    "decoder_from_table",
    "empty_body_interceptor",
    "endpoint",
    "tenant_interceptor",
    "throws_exception",
]

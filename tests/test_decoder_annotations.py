from __future__ import annotations

import logging

import httpx

from tollgate.core.http.annotations import config_key, throws_exception
from tollgate.core.http.decoder import AnnotatedErrorDecoder
from tollgate.core.http.errors import HTTPStatusError, InvalidTokenError

TEST_URL = "http://igle.pop.org/app/v1/"


class ParameterlessException(RuntimeError):
    def __init__(self) -> None:
        super().__init__("I am a parameterless exception.")


class ParameteredException(RuntimeError):
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        super().__init__(f"I am a parametered exception with a response of {response.status_code}")


class StringParameteredException(RuntimeError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class WrongParameteredException(RuntimeError):
    def __init__(self, message: int) -> None:
        super().__init__(str(message))


class ExplodingException(RuntimeError):
    def __init__(self) -> None:
        raise RuntimeError("constructor failed")


class OneMethodClient:
    @throws_exception(status=400, exception=ParameterlessException)
    @throws_exception(status=409, exception=ParameteredException)
    @throws_exception(status=418, exception=WrongParameteredException)
    @throws_exception(status=422, exception=ExplodingException)
    def method(self) -> None: ...


class OneMethodOneAnnotationClient:
    @throws_exception(status=400, exception=ParameterlessException)
    def method(self) -> None: ...


class StringParameteredClient:
    @throws_exception(status=400, exception=StringParameteredException)
    def method(self) -> None: ...


class DuplicateStatusClient:
    @throws_exception(status=409, exception=ParameterlessException)
    @throws_exception(status=409, exception=ParameteredException)
    def method(self) -> None: ...


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, content=b"blah", request=httpx.Request("GET", TEST_URL))


def _key(interface: type) -> str:
    return config_key(interface, interface.method)


def test_mapped_status_uses_no_argument_constructor() -> None:
    result = AnnotatedErrorDecoder(OneMethodClient).decode(_key(OneMethodClient), _response(400))

    assert type(result) is ParameterlessException
    assert str(result) == "I am a parameterless exception."


def test_mapped_status_passes_response_to_constructor() -> None:
    response = _response(409)

    result = AnnotatedErrorDecoder(OneMethodClient).decode(_key(OneMethodClient), response)

    assert type(result) is ParameteredException
    assert result.response is response


def test_unusable_constructor_falls_back_and_logs_once(caplog) -> None:
    decoder = AnnotatedErrorDecoder(OneMethodClient)

    with caplog.at_level(logging.ERROR, logger="tollgate.http.decoder"):
        result = decoder.decode(_key(OneMethodClient), _response(418))

    assert type(result) is HTTPStatusError
    assert result.status_code == 418
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "WrongParameteredException" in errors[0].getMessage()
    assert "418" in errors[0].getMessage()


def test_raising_constructor_falls_back(caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="tollgate.http.decoder"):
        result = AnnotatedErrorDecoder(OneMethodClient).decode(_key(OneMethodClient), _response(422))

    assert type(result) is HTTPStatusError
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 1


def test_unmapped_status_on_annotated_method_falls_back() -> None:
    result = AnnotatedErrorDecoder(OneMethodClient).decode(_key(OneMethodClient), _response(401))

    assert type(result) is HTTPStatusError
    assert result.method_key == _key(OneMethodClient)


def test_single_annotation_still_falls_back_for_other_statuses() -> None:
    decoder = AnnotatedErrorDecoder(OneMethodOneAnnotationClient)

    assert type(decoder.decode(_key(OneMethodOneAnnotationClient), _response(400))) is ParameterlessException
    assert type(decoder.decode(_key(OneMethodOneAnnotationClient), _response(403))) is InvalidTokenError


def test_string_constructor_receives_response_text(caplog) -> None:
    with caplog.at_level(logging.ERROR, logger="tollgate.http.decoder"):
        result = AnnotatedErrorDecoder(StringParameteredClient).decode(_key(StringParameteredClient), _response(400))

    assert type(result) is StringParameteredException
    assert str(result) == "blah"
    assert not [r for r in caplog.records if r.levelno == logging.ERROR]


def test_duplicate_status_first_declaration_wins(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="tollgate.http.decoder"):
        decoder = AnnotatedErrorDecoder(DuplicateStatusClient)

    result = decoder.decode(_key(DuplicateStatusClient), _response(409))

    assert type(result) is ParameterlessException
    assert any("Duplicate exception mapping" in r.getMessage() for r in caplog.records)


def test_rules_keep_declaration_order() -> None:
    decoder = AnnotatedErrorDecoder(OneMethodClient)

    statuses = [rule.status for rule in decoder.rules_for(_key(OneMethodClient))]

    assert statuses == [400, 409, 418, 422]

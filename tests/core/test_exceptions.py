import pytest

from httpclient.core.exceptions import (
    ClientError,
    DecodeError,
    ErrorResponseBody,
    HTTPStatusError,
)


def test_render_all_fields():
    err = ClientError("http://h/items/5", 500, "http returned error status code", ValueError("boom"))
    assert str(err) == "httpclient: url=http://h/items/5 statusCode=500 http returned error status code: boom"


def test_render_omits_empty_fields():
    assert str(ClientError()) == "httpclient: "
    assert str(ClientError(message="encode request body failed", cause=TypeError("bad"))) == \
        "httpclient: encode request body failed: bad"
    assert str(ClientError(url="http://h/x", message="create http request failed")) == \
        "httpclient: url=http://h/x create http request failed"


def test_fields_are_read_only():
    err = ClientError("http://h", 404, "not found")
    with pytest.raises(AttributeError):
        err.status_code = 200
    assert err.status_code == 404


def test_cause_is_exposed_for_matching():
    cause = KeyError("k")
    err = DecodeError("http://h", 200, "decode response body failed", cause)
    assert err.cause is cause
    assert isinstance(err, ClientError)


def test_http_status_error_carries_raw_body():
    err = HTTPStatusError("http://h", 500, "http returned error status code", ErrorResponseBody('{"msg":"bad"}'))
    assert err.body == '{"msg":"bad"}'
    assert str(err).endswith(': {"msg":"bad"}')

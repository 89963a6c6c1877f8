from __future__ import annotations

import pytest

from keel.exceptions import ImmutabilityViolation, MalformedRequestLine
from keel.requests import Request


def build_raw(headers: str = "", body: str = "", request_line: str = "POST /submit HTTP/1.1") -> bytes:
    return f"{request_line}\r\nHost: example.com\r\n{headers}\r\n{body}".encode()


def test_parse_request_line_headers_and_body() -> None:
    raw = b"GET /items HTTP/1.1\r\nHost: example.com\r\nX-Trace:  abc:def \r\n\r\n"
    request = Request.parse(raw)
    assert request.method() == "GET"
    assert request.path() == "/items"
    assert request.header("host") == "example.com"
    assert request.header("X-TRACE") == "abc:def"
    assert request.header("missing", "default") == "default"
    assert request.body() == ""


def test_parse_keeps_last_duplicate_header() -> None:
    request = Request.parse(b"GET / HTTP/1.1\r\nAccept: a\r\naccept: b\r\n\r\n")
    assert request.headers() == {"accept": "b"}


def test_parse_does_not_split_query_string() -> None:
    request = Request.parse(b"GET /search?q=1 HTTP/1.1\r\n\r\n")
    assert request.path() == "/search?q=1"


def test_parse_without_separator_has_empty_body() -> None:
    request = Request.parse(b"GET /health HTTP/1.1\r\nHost: example.com")
    assert request.path() == "/health"
    assert request.body() == ""


def test_parse_accepts_bare_newlines() -> None:
    request = Request.parse("POST /echo HTTP/1.1\nContent-Type: text/plain\n\nhello")
    assert request.header("content-type") == "text/plain"
    assert request.body() == "hello"


@pytest.mark.parametrize("separator", ["\x0b", "\x0c", "\x1c", "\x85", "\u2028"])
def test_header_values_are_split_only_on_newlines(separator: str) -> None:
    raw = f"GET / HTTP/1.1\r\nX-Note: left{separator}right: side\r\nAccept: */*\r\n\r\n"
    request = Request.parse(raw.encode())
    assert request.header("x-note") == f"left{separator}right: side"
    assert request.header("accept") == "*/*"
    assert request.header("right") is None


@pytest.mark.parametrize("raw", [b"", b"GET\r\n\r\n", b"   \r\nHost: x\r\n\r\n"])
def test_parse_rejects_malformed_request_line(raw: bytes) -> None:
    with pytest.raises(MalformedRequestLine):
        Request.parse(raw)


def test_json_body_is_decoded() -> None:
    request = Request.parse(build_raw("content-type: application/json\r\n", '{"email":"a@b.com"}'))
    assert request.all() == {"email": "a@b.com"}
    assert request.input("email") == "a@b.com"
    assert request.input("missing", "fallback") == "fallback"


def test_json_media_type_with_charset_is_decoded() -> None:
    request = Request.parse(build_raw("Content-Type: application/json; charset=utf-8\r\n", '{"n": 1}'))
    assert request.input("n") == 1


@pytest.mark.parametrize("body", ["{not json", "[1, 2]", "", '"text"'])
def test_json_decode_failure_yields_no_fields(body: str) -> None:
    request = Request.parse(build_raw("content-type: application/json\r\n", body))
    assert request.all() == {}
    assert request.body() == body


def test_form_body_is_decoded() -> None:
    request = Request.parse(build_raw("content-type: application/x-www-form-urlencoded\r\n", "name=Sam&age=5"))
    assert request.input("name") == "Sam"
    assert request.input("age") == "5"


def test_form_body_is_percent_decoded() -> None:
    body = "email=a%40b.com&greeting=hello+world&empty="
    request = Request.parse(build_raw("content-type: application/x-www-form-urlencoded\r\n", body))
    assert request.all() == {"email": "a@b.com", "greeting": "hello world", "empty": ""}


def test_unknown_content_type_leaves_fields_empty() -> None:
    request = Request.parse(build_raw("content-type: text/plain\r\n", "name=Sam"))
    assert request.all() == {}
    assert request.body() == "name=Sam"


def test_accessors_return_copies() -> None:
    request = Request("POST", "/", headers={"Content-Type": "application/json"}, body='{"a": 1}')
    request.all()["a"] = 2
    request.headers()["content-type"] = "text/plain"
    assert request.input("a") == 1
    assert request.header("content-type") == "application/json"


def test_request_rejects_attribute_assignment() -> None:
    request = Request("GET", "/")
    with pytest.raises(ImmutabilityViolation):
        request.method = "POST"  # type: ignore[method-assign]
    with pytest.raises(ImmutabilityViolation):
        request._path = "/other"
    with pytest.raises(ImmutabilityViolation):
        del request._body
    assert request.method() == "GET"
    assert request.path() == "/"


def test_params_are_bound_once() -> None:
    request = Request("GET", "/user/55")
    assert request.param("id") is None
    assert request.param("id", "none") == "none"
    request.bind_params({"id": "55"})
    assert request.param("id") == "55"
    assert request.params() == {"id": "55"}
    with pytest.raises(ImmutabilityViolation):
        request.bind_params({"id": "56"})
    assert request.param("id") == "55"


def test_round_trip_preserves_request_line_and_headers() -> None:
    headers = {"Host": "example.com", "X-Request-Id": "r-1", "Accept": "text/html"}
    raw = "GET /a/b HTTP/1.1\r\n" + "".join(f"{k}: {v}\r\n" for k, v in headers.items()) + "\r\n"
    request = Request.parse(raw.encode())
    assert (request.method(), request.path()) == ("GET", "/a/b")
    for name, value in headers.items():
        assert request.header(name) == value
        assert request.header(name.upper()) == value

"""Request primitives."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import parse_qsl

import msgspec

from .exceptions import ImmutabilityViolation, MalformedRequestLine
from .serialization import json_decode

_JSON_MEDIA_TYPE = "application/json"
_FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
_SEPARATORS = ("\r\n\r\n", "\n\n")


class Request:
    """Immutable view of an incoming request.

    Only the route parameters may be attached after construction, once, by the
    dispatch step that matched the route.
    """

    __slots__ = ("_body", "_data", "_headers", "_method", "_params", "_params_bound", "_path")

    def __init__(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: str = "",
    ) -> None:
        _set = object.__setattr__
        _set(self, "_method", method)
        _set(self, "_path", path)
        _set(self, "_headers", {name.strip().lower(): value for name, value in (headers or {}).items()})
        _set(self, "_body", body)
        _set(self, "_data", _decode_fields(self._headers.get("content-type", "").lower(), body))
        _set(self, "_params", {})
        _set(self, "_params_bound", False)

    @classmethod
    def parse(cls, raw: bytes | str) -> "Request":
        """Build a request from the raw bytes of one complete HTTP message."""

        text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else raw
        head, body = text, ""
        for separator in _SEPARATORS:
            if separator in text:
                head, body = text.split(separator, 1)
                break
        lines = [line.removesuffix("\r") for line in head.split("\n")]
        request_line = lines[0] if lines else ""
        tokens = request_line.split()
        if len(tokens) < 2:
            raise MalformedRequestLine(request_line)
        headers: dict[str, str] = {}
        for line in lines[1:]:
            name, colon, value = line.partition(":")
            if not colon:
                continue
            headers[name.strip().lower()] = value.strip()
        return cls(tokens[0], tokens[1], headers=headers, body=body)

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutabilityViolation(f"Request is immutable; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise ImmutabilityViolation(f"Request is immutable; cannot delete {name!r}")

    def __repr__(self) -> str:
        return f"Request({self._method!r}, {self._path!r})"

    def method(self) -> str:
        return self._method

    def path(self) -> str:
        return self._path

    def body(self) -> str:
        return self._body

    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def header(self, name: str, default: str | None = None) -> str | None:
        return self._headers.get(name.lower(), default)

    def input(self, key: str, default: Any = None) -> Any:
        """Return the decoded body field ``key`` or ``default``."""

        return self._data.get(key, default)

    def all(self) -> dict[str, Any]:
        return dict(self._data)

    def param(self, key: str, default: str | None = None) -> str | None:
        """Return the route parameter ``key`` or ``default``."""

        return self._params.get(key, default)

    def params(self) -> dict[str, str]:
        return dict(self._params)

    def bind_params(self, params: Mapping[str, str]) -> "Request":
        """Attach the parameters captured by the matched route."""

        if self._params_bound:
            raise ImmutabilityViolation("Route parameters are already bound")
        object.__setattr__(self, "_params", dict(params))
        object.__setattr__(self, "_params_bound", True)
        return self


def _decode_fields(content_type: str, body: str) -> dict[str, Any]:
    if _JSON_MEDIA_TYPE in content_type:
        return _decode_json(body)
    if _FORM_MEDIA_TYPE in content_type:
        return dict(parse_qsl(body, keep_blank_values=True))
    return {}


def _decode_json(body: str) -> dict[str, Any]:
    if not body.strip():
        return {}
    try:
        decoded = json_decode(body)
    except msgspec.DecodeError:
        return {}
    if not isinstance(decoded, dict):
        return {}
    return decoded


__all__ = ["Request"]

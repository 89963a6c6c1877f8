"""Response primitives."""

from __future__ import annotations

from typing import Any

from .http import Status, ensure_status, reason_phrase
from .serialization import json_encode

HTML_CONTENT_TYPE = "text/html"
TEXT_CONTENT_TYPE = "text/plain"
JSON_CONTENT_TYPE = "application/json"

NOT_FOUND_BODY = "<h1>404 - Route not found</h1>"

_CRLF = "\r\n"


class Response:
    """Mutable, fluently built response.

    Every builder returns the same instance so middleware can adjust the
    response on its way back out of the pipeline.
    """

    __slots__ = ("_body", "_headers", "_status")

    def __init__(
        self,
        body: str | bytes = "",
        *,
        status: int | Status = Status.OK,
        content_type: str = HTML_CONTENT_TYPE,
    ) -> None:
        self._status = ensure_status(status)
        self._headers: dict[str, str] = {"Content-Type": content_type}
        self._body = body

    @classmethod
    def html(cls, body: str | bytes) -> "Response":
        return cls(body, content_type=HTML_CONTENT_TYPE)

    @classmethod
    def text(cls, body: str | bytes) -> "Response":
        return cls(body, content_type=TEXT_CONTENT_TYPE)

    @classmethod
    def json(cls, data: Any) -> "Response":
        """Create a JSON response encoded via :mod:`msgspec`."""

        return cls(json_encode(data), content_type=JSON_CONTENT_TYPE)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Response":
        """Parse a serialized response back into a :class:`Response`."""

        head, _, body = raw.partition(b"\r\n\r\n")
        lines = head.decode("latin-1").split(_CRLF)
        parts = lines[0].split(" ", 2)
        if len(parts) < 2 or not parts[0].startswith("HTTP/"):
            raise ValueError(f"Malformed status line: {lines[0]!r}")
        response = cls(body, status=int(parts[1]))
        response._headers.clear()
        for line in lines[1:]:
            name, _, value = line.partition(":")
            response._headers[name.strip()] = value.strip()
        return response

    def status(self, code: int | Status) -> "Response":
        self._status = ensure_status(code)
        return self

    def header(self, name: str, value: str) -> "Response":
        """Set ``name`` to ``value``, replacing any header with the same name."""

        existing = self._find_header(name)
        self._headers[existing or name] = value
        return self

    def get_header(self, name: str, default: str | None = None) -> str | None:
        existing = self._find_header(name)
        if existing is None:
            return default
        return self._headers[existing]

    @property
    def status_code(self) -> int:
        return self._status

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def body(self) -> bytes:
        if isinstance(self._body, bytes):
            return self._body
        return self._body.encode("utf-8")

    @property
    def text_body(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def serialize(self, *, reason: str | None = None) -> bytes:
        """Render the response as HTTP/1.1 bytes.

        ``reason`` overrides the reason phrase of the status line.
        """

        body = self.body
        phrase = reason if reason is not None else reason_phrase(self._status)
        lines = [f"HTTP/1.1 {self._status} {phrase}"]
        for name, value in self._headers.items():
            if name.lower() == "content-length":
                continue
            lines.append(f"{name}: {value}")
        lines.append(f"Content-Length: {len(body)}")
        head = _CRLF.join(lines) + _CRLF + _CRLF
        return head.encode("latin-1") + body

    def _find_header(self, name: str) -> str | None:
        lowered = name.lower()
        for existing in self._headers:
            if existing.lower() == lowered:
                return existing
        return None

    def __repr__(self) -> str:
        return f"Response(status={self._status}, headers={self._headers!r})"


def not_found_response() -> Response:
    return Response.html(NOT_FOUND_BODY).status(Status.NOT_FOUND)


__all__ = [
    "HTML_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "NOT_FOUND_BODY",
    "Response",
    "TEXT_CONTENT_TYPE",
    "not_found_response",
]

"""Testing helpers."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlencode

from .application import KeelApp
from .responses import Response
from .serialization import json_encode


def build_raw_request(
    method: str,
    path: str,
    *,
    headers: Mapping[str, str] | None = None,
    body: str | bytes = b"",
) -> bytes:
    """Render an HTTP/1.1 request the way a browser would put it on the wire."""

    payload = body.encode("utf-8") if isinstance(body, str) else body
    lines = [f"{method} {path} HTTP/1.1", "Host: testserver"]
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    if payload:
        lines.append(f"Content-Length: {len(payload)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + payload


class TestClient:
    """Client that executes requests in-process from raw request bytes."""

    __test__ = False

    def __init__(self, app: KeelApp) -> None:
        self.app = app

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: str | bytes = b"",
        json: Any | None = None,
        form: Mapping[str, str] | None = None,
    ) -> Response:
        request_headers = dict(headers or {})
        if json is not None:
            body = json_encode(json)
            request_headers.setdefault("Content-Type", "application/json")
        elif form is not None:
            body = urlencode(form)
            request_headers.setdefault("Content-Type", "application/x-www-form-urlencoded")
        raw = build_raw_request(method, path, headers=request_headers, body=body)
        return self.app.process(raw)

    def get(self, path: str, *, headers: Mapping[str, str] | None = None) -> Response:
        return self.request("GET", path, headers=headers)

    def post(
        self,
        path: str,
        *,
        json: Any | None = None,
        form: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        return self.request("POST", path, json=json, form=form, headers=headers)

    def wire(self, raw: bytes) -> bytes:
        """Run ``raw`` through :meth:`KeelApp.handle` and return the response bytes."""

        return self.app.handle(raw)

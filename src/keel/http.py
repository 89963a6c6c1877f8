"""HTTP status codes and reason phrases."""

from __future__ import annotations

from enum import IntEnum
from http import HTTPStatus as _HTTPStatus


class Status(IntEnum):
    """Status codes the runtime emits on its own."""

    OK = 200
    NO_CONTENT = 204
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413
    INTERNAL_SERVER_ERROR = 500


def ensure_status(status: int | Status) -> int:
    """Normalize ``status`` to an ``int`` and ensure it is within the HTTP range."""

    code = int(status)
    if code < 100 or code > 599:
        raise ValueError(f"Invalid HTTP status code: {status}")
    return code


def reason_phrase(status: int | Status) -> str:
    """Return the standard reason phrase for ``status``."""

    try:
        return _HTTPStatus(int(status)).phrase
    except ValueError:
        return "Unknown Status"


def is_client_error(status: int | Status) -> bool:
    code = ensure_status(status)
    return 400 <= code < 500


def is_server_error(status: int | Status) -> bool:
    code = ensure_status(status)
    return 500 <= code < 600


__all__ = [
    "Status",
    "ensure_status",
    "is_client_error",
    "is_server_error",
    "reason_phrase",
]

"""Conversion of request-processing failures into responses."""

from __future__ import annotations

import html
import logging
import traceback
from typing import Callable, ParamSpec

from .http import Status
from .responses import Response

logger = logging.getLogger(__name__)

P = ParamSpec("P")

VERBOSE_TITLE = "<h1>Keel Error</h1>"
QUIET_BODY = "<h1>Internal Server Error</h1>"


class ErrorBoundary:
    """Turn any exception raised while processing a request into a 500.

    ``debug`` is consulted on every failure. When it returns ``True`` the
    response body carries the escaped traceback, otherwise a fixed message.
    """

    __slots__ = ("_debug",)

    def __init__(self, debug: Callable[[], bool]) -> None:
        self._debug = debug

    def guard(self, call: Callable[P, Response], *args: P.args, **kwargs: P.kwargs) -> Response:
        try:
            return call(*args, **kwargs)
        except Exception as exc:
            return self.render(exc)

    def render(self, exc: BaseException) -> Response:
        logger.exception("Request failed: %s", exc, exc_info=exc)
        if self._verbose():
            detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            body = f"{VERBOSE_TITLE}<pre>{html.escape(detail)}</pre>"
        else:
            body = QUIET_BODY
        return Response.html(body).status(Status.INTERNAL_SERVER_ERROR)

    def _verbose(self) -> bool:
        try:
            return bool(self._debug())
        except ValueError:
            logger.warning("Debug flag is not a boolean; rendering quiet error page")
            return False


__all__ = ["ErrorBoundary", "QUIET_BODY", "VERBOSE_TITLE"]

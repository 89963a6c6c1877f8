"""Middleware chaining primitives."""

from __future__ import annotations

from typing import Callable, Iterator

from .exceptions import ContractViolation
from .requests import Request
from .responses import Response

Handler = Callable[[Request], Response]
Middleware = Callable[[Request, Handler], Response]


class MiddlewarePipeline:
    """Ordered interceptors composed around a terminal handler.

    The first registered middleware is the outermost layer: it runs first on
    the way in and last on the way out. A middleware short-circuits the chain
    by returning a response without calling ``handler``.
    """

    __slots__ = ("_middlewares",)

    def __init__(self) -> None:
        self._middlewares: list[Middleware] = []

    def add(self, middleware: Middleware) -> Middleware:
        self._middlewares.append(middleware)
        return middleware

    def __len__(self) -> int:
        return len(self._middlewares)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middlewares)

    def compose(self, request: Request, terminal: Handler) -> Response:
        return self.bind(terminal)(request)

    def bind(self, terminal: Handler) -> Handler:
        """Return a handler running ``terminal`` inside every registered middleware."""

        return _NextHandler(tuple(self._middlewares), 0, terminal)


class _NextHandler:
    __slots__ = ("_index", "_middlewares", "_terminal")

    def __init__(self, middlewares: tuple[Middleware, ...], index: int, terminal: Handler) -> None:
        self._middlewares = middlewares
        self._index = index
        self._terminal = terminal

    def __call__(self, request: Request) -> Response:
        if self._index >= len(self._middlewares):
            return self._terminal(request)
        middleware = self._middlewares[self._index]
        next_handler = _NextHandler(self._middlewares, self._index + 1, self._terminal)
        response = middleware(request, next_handler)
        if not isinstance(response, Response):
            name = getattr(middleware, "__name__", type(middleware).__name__)
            raise ContractViolation(
                f"middleware {name} must return a Response, got {type(response).__name__}",
                returned=response,
            )
        return response


__all__ = ["Handler", "Middleware", "MiddlewarePipeline"]

"""Routing utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping, MutableMapping

import rure
from rure.regex import RegexObject

from .exceptions import ContractViolation
from .requests import Request
from .responses import Response

Handler = Callable[[Request], Response]


_PLACEHOLDER_PATTERN = re.compile(r"{([^{}]*)}")
_IDENTIFIER_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*\Z")
# Characters that are special in both Python and Rust regex syntax.
_REGEX_META = frozenset("\\.+*?()|[]{}^$")


@dataclass(slots=True)
class Route:
    method: str
    path: str
    handler: Handler
    pattern: RegexObject
    param_names: tuple[str, ...]


@dataclass(slots=True)
class RouteMatch:
    route: Route
    params: Mapping[str, str]

    @property
    def handler(self) -> Handler:
        return self.route.handler


class Router:
    """Per-method route lists matched in registration order.

    The first registered pattern that matches wins, even when a later
    pattern is more specific.
    """

    def __init__(self) -> None:
        self._routes_by_method: dict[str, list[Route]] = {}

    def register(self, method: str, path: str, handler: Handler) -> Route:
        method = method.upper()
        pattern, param_names = _compile_path(path)
        route = Route(method=method, path=path, handler=handler, pattern=pattern, param_names=param_names)
        self._routes_by_method.setdefault(method, []).append(route)
        return route

    def get(self, path: str, handler: Handler) -> Route:
        return self.register("GET", path, handler)

    def post(self, path: str, handler: Handler) -> Route:
        return self.register("POST", path, handler)

    def put(self, path: str, handler: Handler) -> Route:
        return self.register("PUT", path, handler)

    def patch(self, path: str, handler: Handler) -> Route:
        return self.register("PATCH", path, handler)

    def delete(self, path: str, handler: Handler) -> Route:
        return self.register("DELETE", path, handler)

    def routes(self, method: str | None = None) -> list[Route]:
        if method is not None:
            return list(self._routes_by_method.get(method.upper(), ()))
        return [route for routes in self._routes_by_method.values() for route in routes]

    def resolve(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route matching ``method`` and ``path``, or ``None``."""

        candidates = self._routes_by_method.get(method.upper())
        if not candidates:
            return None
        for route in candidates:
            captures = route.pattern.match(path)
            if captures is None:
                continue
            params: MutableMapping[str, str] = {}
            for name in route.param_names:
                params[name] = captures.group(name)
            return RouteMatch(route=route, params=params)
        return None

    def dispatch(self, request: Request, match: RouteMatch) -> Response:
        """Bind the captured parameters and invoke the matched handler."""

        request.bind_params(match.params)
        result = match.handler(request)
        if not isinstance(result, Response):
            raise ContractViolation(
                f"handler must return a Response, got {type(result).__name__}",
                returned=result,
            )
        return result


def _compile_path(path: str) -> tuple[RegexObject, tuple[str, ...]]:
    param_names: list[str] = []
    parts: list[str] = []
    position = 0
    for match in _PLACEHOLDER_PATTERN.finditer(path):
        name = match.group(1)
        if not _IDENTIFIER_PATTERN.match(name):
            raise ValueError(f"Invalid route placeholder {match.group(0)!r} in {path!r}")
        if name in param_names:
            raise ValueError(f"Duplicate route placeholder {name!r} in {path!r}")
        param_names.append(name)
        parts.append(_literal(path[position : match.start()], path))
        parts.append(f"(?P<{name}>[^/]+)")
        position = match.end()
    parts.append(_literal(path[position:], path))
    pattern = "^" + "".join(parts) + "$"
    return rure.compile(pattern), tuple(param_names)


def _literal(segment: str, path: str) -> str:
    if "{" in segment or "}" in segment:
        raise ValueError(f"Unbalanced braces in route pattern {path!r}")
    return "".join("\\" + char if char in _REGEX_META else char for char in segment)


__all__ = ["Handler", "Route", "RouteMatch", "Router"]

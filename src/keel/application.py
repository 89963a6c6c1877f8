"""Application core."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from .boundary import QUIET_BODY, ErrorBoundary
from .config import DEBUG_MODE, AppConfig, Settings
from .http import Status
from .middleware import Handler, Middleware, MiddlewarePipeline
from .requests import Request
from .responses import Response, not_found_response
from .routing import Router

logger = logging.getLogger(__name__)


class KeelApp:
    """Composition root tying the router, middleware and error boundary together.

    Routes and middleware are expected to be registered before the first
    request is handled.
    """

    def __init__(self, config: AppConfig | None = None, *, settings: Settings | None = None) -> None:
        self.config = config or AppConfig()
        self.settings = settings or Settings()
        if DEBUG_MODE not in self.settings:
            self.settings.set(DEBUG_MODE, self.config.debug)
        self.router = Router()
        self.middleware = MiddlewarePipeline()
        self.boundary = ErrorBoundary(lambda: self.settings.get_bool(DEBUG_MODE))

    @classmethod
    def from_config(cls, config: AppConfig | Mapping[str, Any]) -> "KeelApp":
        if isinstance(config, AppConfig):
            return cls(config=config)
        return cls(config=AppConfig.from_mapping(config))

    # ------------------------------------------------------------------ routing
    def route(self, path: str, *, methods: Iterable[str]) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            for method in dict.fromkeys(m.upper() for m in methods):
                self.router.register(method, path, func)
            return func

        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("GET",))

    def post(self, path: str) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("POST",))

    def add_middleware(self, middleware: Middleware) -> Middleware:
        """Append ``middleware`` to the pipeline; usable as a decorator."""

        return self.middleware.add(middleware)

    # ------------------------------------------------------------------ request handling
    def dispatch(self, request: Request) -> Response:
        """Run ``request`` through the middleware pipeline and the router."""

        return self.middleware.compose(request, self._endpoint)

    def process(self, raw: bytes | str) -> Response:
        """Parse and dispatch one raw request; failures become a 500 response."""

        return self.boundary.guard(self._parse_and_dispatch, raw)

    def handle(self, raw: bytes | str) -> bytes:
        """Turn the bytes of one request into the bytes of its response."""

        response = self.process(raw)
        try:
            return self.render(response)
        except Exception as exc:
            return self.render_failure(exc)

    def render(self, response: Response) -> bytes:
        reason = "OK" if self.config.legacy_reason_phrase else None
        return response.serialize(reason=reason)

    def render_failure(self, exc: Exception) -> bytes:
        """Serialize the error page for ``exc``, falling back to the quiet page."""

        try:
            return self.render(self.boundary.render(exc))
        except Exception:
            logger.exception("Error page could not be rendered")
            return self.render(Response.html(QUIET_BODY).status(Status.INTERNAL_SERVER_ERROR))

    def _parse_and_dispatch(self, raw: bytes | str) -> Response:
        request = Request.parse(raw)
        return self.dispatch(request)

    def _endpoint(self, request: Request) -> Response:
        match = self.router.resolve(request.method(), request.path())
        if match is None:
            logger.debug("No route for %s %s", request.method(), request.path())
            return not_found_response()
        return self.router.dispatch(request, match)


__all__ = ["KeelApp"]

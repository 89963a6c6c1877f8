"""Minimal Keel application.

Run ``python example.py`` (or ``keel serve example:create_app``) and open
http://127.0.0.1:8080/. Set ``KEEL_DEBUG=1`` to render error details and echo
log lines to the console, ``KEEL_PORT`` to change the port and ``KEEL_LOG_FILE``
to append log lines to a file.
"""

from __future__ import annotations

import os
import time

from keel import AppConfig, KeelApp, Request, Response, ServerConfig
from keel import views
from keel.logs import configure_logging
from keel.server import run


def timing(request: Request, handler) -> Response:
    started = time.perf_counter()
    response = handler(request)
    elapsed = (time.perf_counter() - started) * 1000
    return response.header("X-Response-Time", f"{elapsed:.2f}ms")


def create_app() -> KeelApp:
    """Instantiate the demo application."""

    config = AppConfig(
        name="keel-example",
        debug=os.getenv("KEEL_DEBUG", "0").lower() in {"1", "true", "yes", "on"},
        log_file=os.getenv("KEEL_LOG_FILE") or None,
        server=ServerConfig(port=int(os.getenv("KEEL_PORT", "8080"))),
    )
    app = KeelApp(config)
    app.add_middleware(timing)

    @app.get("/")
    def home(request: Request) -> Response:
        return Response.html(views.text("Keel is running", back="/user/1"))

    @app.get("/user/{id}")
    def show_user(request: Request) -> Response:
        return Response.html(views.text(f"User {request.param('id')}"))

    @app.post("/contact")
    def contact(request: Request) -> Response:
        return Response.json({"received": request.all()})

    @app.get("/fail")
    def fail(request: Request) -> Response:
        raise RuntimeError("deliberate failure")

    return app


def main() -> None:
    app = create_app()
    configure_logging(app.config)
    run(app)


if __name__ == "__main__":
    main()

"""Command line entry point."""

from __future__ import annotations

import argparse
import importlib
import sys
from typing import Sequence

from msgspec import structs

from .application import KeelApp
from .config import DEBUG_MODE, Settings
from .logs import configure_logging
from .server import run


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keel", description="Keel HTTP runtime")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Serve an application on a blocking socket loop")
    serve.add_argument("target", help="Application to serve, as 'module:attribute'")
    serve.add_argument("--host", default=None, help="Interface to bind")
    serve.add_argument("--port", type=int, default=None, help="Port to bind")
    serve.add_argument("--debug", action="store_true", help="Render error details and log to the console")
    serve.add_argument("--config", default=None, help="JSON file loaded into the application settings")
    serve.add_argument("--log-file", default=None, help="Append log lines to this file")
    serve.set_defaults(func=_cmd_serve)

    routes = sub.add_parser("routes", help="List registered routes")
    routes.add_argument("target", help="Application to inspect, as 'module:attribute'")
    routes.set_defaults(func=_cmd_routes)

    return parser


def _cmd_serve(args: argparse.Namespace) -> int:
    app = load_app(args.target)
    if args.config:
        loaded = Settings.from_file(args.config)
        for key, value in loaded.as_dict().items():
            app.settings.set(key, value)
    if args.debug:
        app.settings.set(DEBUG_MODE, True)
    if args.log_file:
        app.config = structs.replace(app.config, log_file=args.log_file)

    overrides = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    server_config = structs.replace(app.config.server, **overrides)

    configure_logging(app.config, debug=app.settings.get_bool(DEBUG_MODE))
    run(app, server_config)
    return 0


def _cmd_routes(args: argparse.Namespace) -> int:
    app = load_app(args.target)
    routes = app.router.routes()
    if not routes:
        print("No routes registered")
        return 0
    for route in routes:
        handler = getattr(route.handler, "__qualname__", repr(route.handler))
        print(f"{route.method:<7} {route.path:<30} {handler}")
    return 0


def load_app(target: str) -> KeelApp:
    """Import ``module:attribute`` and return the application it names."""

    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise SystemExit(f"Expected 'module:attribute', got {target!r}")
    module = importlib.import_module(module_name)
    try:
        app = getattr(module, attribute)
    except AttributeError as exc:
        raise SystemExit(f"Module {module_name!r} has no attribute {attribute!r}") from exc
    if callable(app) and not isinstance(app, KeelApp):
        app = app()
    if not isinstance(app, KeelApp):
        raise SystemExit(f"{target!r} is not a KeelApp")
    return app


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())

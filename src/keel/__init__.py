"""Keel: a small synchronous HTTP runtime."""

from .application import KeelApp
from .boundary import ErrorBoundary
from .config import DEBUG_MODE, AppConfig, ServerConfig, Settings
from .exceptions import ContractViolation, ImmutabilityViolation, KeelError, MalformedRequestLine
from .middleware import MiddlewarePipeline
from .requests import Request
from .responses import Response
from .routing import Route, RouteMatch, Router
from .testing import TestClient

__all__ = [
    "DEBUG_MODE",
    "AppConfig",
    "ContractViolation",
    "ErrorBoundary",
    "ImmutabilityViolation",
    "KeelApp",
    "KeelError",
    "MalformedRequestLine",
    "MiddlewarePipeline",
    "Request",
    "Response",
    "Route",
    "RouteMatch",
    "Router",
    "ServerConfig",
    "Settings",
    "TestClient",
]

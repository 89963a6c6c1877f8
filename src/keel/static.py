"""Static file serving utilities."""

from __future__ import annotations

import mimetypes
import os
from pathlib import Path
from typing import Mapping

from .http import Status
from .middleware import Handler, Middleware
from .requests import Request
from .responses import Response

_NOT_FOUND_BODY = "<h1>404 - File not found</h1>"


class StaticFiles:
    """Serve files from a directory tree."""

    def __init__(
        self,
        directory: str | os.PathLike[str],
        *,
        index_file: str | None = "index.html",
        cache_control: str | None = None,
        content_types: Mapping[str, str] | None = None,
    ) -> None:
        root = Path(os.fspath(directory))
        if not root.is_dir():
            raise ValueError(f"Static directory {root!s} does not exist or is not a directory")
        if index_file is not None and Path(index_file).is_absolute():
            raise ValueError("index_file must be a relative path")
        self._root = root.resolve()
        self._index_file = index_file
        self._cache_control = cache_control
        self._content_types = {suffix.lower(): value for suffix, value in (content_types or {}).items()}

    @property
    def root(self) -> Path:
        return self._root

    def serve(self, path: str) -> Response:
        """Return the file at ``path`` relative to the root, or a 404 response."""

        target = self._locate(path)
        if target is None:
            return Response.html(_NOT_FOUND_BODY).status(Status.NOT_FOUND)
        response = Response(target.read_bytes(), content_type=self._content_type_for(target))
        if self._cache_control:
            response.header("Cache-Control", self._cache_control)
        return response

    def _locate(self, path: str) -> Path | None:
        relative = self._sanitize(path)
        if relative is None:
            return None
        target = (self._root / relative).resolve()
        try:
            target.relative_to(self._root)
        except ValueError:
            return None
        if target.is_dir():
            if self._index_file is None:
                return None
            target = (target / self._index_file).resolve()
            try:
                target.relative_to(self._root)
            except ValueError:
                return None
        if not target.is_file():
            return None
        return target

    def _sanitize(self, path: str) -> Path | None:
        raw = (path or "").lstrip("/")
        if not raw:
            return Path(".")
        candidate = Path(raw)
        if candidate.is_absolute() or any(part == ".." for part in candidate.parts):
            return None
        return candidate

    def _content_type_for(self, path: Path) -> str:
        override = self._content_types.get(path.suffix.lower())
        if override:
            return override
        guessed, _ = mimetypes.guess_type(path.name)
        if guessed is None:
            return "application/octet-stream"
        return guessed


def static_middleware(
    prefix: str,
    directory: str | os.PathLike[str],
    *,
    index_file: str | None = "index.html",
    cache_control: str | None = None,
) -> Middleware:
    """Build a middleware answering ``GET`` requests under ``prefix`` from ``directory``.

    Matching requests never reach the router.
    """

    stripped = prefix.strip().strip("/")
    if not stripped:
        raise ValueError("Static mount prefix cannot be '/' or empty")
    mount = "/" + stripped
    files = StaticFiles(directory, index_file=index_file, cache_control=cache_control)

    def serve_static(request: Request, handler: Handler) -> Response:
        path = request.path()
        if request.method().upper() != "GET":
            return handler(request)
        if path == mount or path.startswith(mount + "/"):
            return files.serve(path[len(mount) :])
        return handler(request)

    return serve_static


__all__ = ["StaticFiles", "static_middleware"]

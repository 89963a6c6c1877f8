"""HTML view helpers."""

from __future__ import annotations

import html
import os
from pathlib import Path

VIEW_NOT_FOUND = "<h1>View not found</h1>"


def render(path: str | os.PathLike[str]) -> str:
    """Return the contents of the HTML file at ``path``."""

    file = Path(path)
    if not file.is_file():
        return VIEW_NOT_FOUND
    return file.read_text(encoding="utf-8")


def text(message: str, *, back: str = "/") -> str:
    return f"<h1>{html.escape(message)}</h1><a href='{html.escape(back, quote=True)}'>&lt;- Back</a>"


__all__ = ["VIEW_NOT_FOUND", "render", "text"]

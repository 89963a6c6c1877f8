"""Application configuration objects."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import msgspec

from .serialization import json_decode

DEBUG_MODE = "debug-mode"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off", ""})


class ServerConfig(msgspec.Struct, frozen=True):
    """Socket transport settings."""

    host: str = "127.0.0.1"
    port: int = 8080
    backlog: int = 16
    read_size: int = 2048
    max_request_bytes: int = 1_048_576
    ignore_favicon: bool = True


class AppConfig(msgspec.Struct, frozen=True):
    """Typed configuration for a :class:`~keel.application.KeelApp` instance."""

    name: str = "keel"
    debug: bool = False
    log_file: str | None = None
    legacy_reason_phrase: bool = False
    server: ServerConfig = ServerConfig()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AppConfig":
        return msgspec.convert(dict(data), type=cls)


class Settings:
    """Mutable key-value settings read at runtime.

    Values are looked up on every call, so toggling a flag takes effect on the
    next request.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "Settings":
        """Load settings from a JSON object stored at ``path``."""

        decoded = json_decode(Path(path).read_bytes())
        if not isinstance(decoded, dict):
            raise ValueError(f"Settings file {path!s} must contain a JSON object")
        return cls(decoded)

    def load(self, data: Mapping[str, Any]) -> None:
        self._data = dict(data)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._data.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUTHY:
                return True
            if lowered in _FALSY:
                return False
        raise ValueError(f"Setting {key!r} is not a boolean: {value!r}")

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)


__all__ = ["DEBUG_MODE", "AppConfig", "ServerConfig", "Settings"]

"""Framework exception types."""

from __future__ import annotations


class KeelError(Exception):
    """Base error type."""


class MalformedRequestLine(KeelError):
    """Raised when the first line of a request has no method and path."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed request line: {line!r}")
        self.line = line


class ContractViolation(KeelError, TypeError):
    """A handler or middleware returned something other than a response."""

    def __init__(self, message: str, *, returned: object = None) -> None:
        super().__init__(message)
        self.returned = returned


class ImmutabilityViolation(KeelError, AttributeError):
    """Raised on any attempt to mutate a constructed request."""


__all__ = ["ContractViolation", "ImmutabilityViolation", "KeelError", "MalformedRequestLine"]

"""Exceptions raised by the HTTP integration layer."""

from typing import Any, Optional


class TransportError(Exception):
    """Network-level failure (connect, timeout, protocol) for one request.

    The underlying httpx exception is chained as ``__cause__``.

    Attributes:
        method: HTTP method of the failed request
        url: Full URL of the failed request
    """

    def __init__(self, message: str, method: str, url: str, body: Optional[Any] = None):
        super().__init__(message)
        self.method = method
        self.url = url
        self.body = body

    def __str__(self) -> str:
        return f"{self.method} {self.url} failed: {super().__str__()}"


class SigningInputError(ValueError):
    """Raised when a signed client is configured without a usable secret key."""

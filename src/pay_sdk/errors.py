"""Exceptions raised by the payment SDK."""

from __future__ import annotations

from typing import Optional


class PaySDKError(Exception):
    """Base class for every error raised by the SDK."""


class ConfigError(PaySDKError):
    """Raised when the client configuration is unusable (e.g. no secret)."""


class APIError(PaySDKError):
    """An error message returned by the API itself.

    ``str(exc)`` is the message exactly as the API sent it.
    """

    def __init__(self, message: str, *, status: Optional[int] = None, route: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.route = route


class HTTPError(PaySDKError):
    def __init__(self, message: str, route: str, status: int, method: str) -> None:
        super().__init__(message)
        self.message = message
        self.route = route
        self.status = status
        self.method = method

    def __str__(self) -> str:
        return f"{self.method} {self.route}: {self.message}"


class RequestTimeoutError(HTTPError):
    def __init__(self, route: str, method: str, timeout_ms: int) -> None:
        super().__init__(f"request timed out after {timeout_ms}ms", route, 0, method)
        self.timeout_ms = timeout_ms


class TransportError(HTTPError):
    def __init__(self, route: str, method: str, cause: BaseException) -> None:
        super().__init__(f"request failed: {cause!r}", route, 0, method)


class RetryExhaustedError(HTTPError):
    def __init__(self, route: str, method: str, status: int, attempts: int) -> None:
        super().__init__(f"{attempts} attempts were performed, all failed", route, status, method)
        self.attempts = attempts


__all__ = [
    "APIError",
    "ConfigError",
    "HTTPError",
    "PaySDKError",
    "RequestTimeoutError",
    "RetryExhaustedError",
    "TransportError",
]

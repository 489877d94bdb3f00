"""Python SDK for the payment-processing REST API."""

from .client import RESTClient
from .config import ClientConfig, RetryPolicy
from .errors import (
    APIError,
    ConfigError,
    HTTPError,
    PaySDKError,
    RequestTimeoutError,
    RetryExhaustedError,
    TransportError,
)
from .utils import RETRYABLE_STATUS

__all__ = [
    "APIError",
    "ClientConfig",
    "ConfigError",
    "HTTPError",
    "PaySDKError",
    "RESTClient",
    "RETRYABLE_STATUS",
    "RequestTimeoutError",
    "RetryExhaustedError",
    "RetryPolicy",
    "TransportError",
]

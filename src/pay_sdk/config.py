"""Configuration objects for the payment REST client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .errors import ConfigError

DEFAULT_BASE_URL = "https://api.example.com/v"
DEFAULT_VERSION = 1
DEFAULT_TIMEOUT_MS = 5_000
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_MS = 3_000
DEFAULT_USER_AGENT = "pay-sdk-python/0.1.0"

SECRET_ENV_KEYS = ("PAY_SDK_SECRET", "PAY_SDK_API_KEY")


@dataclass(frozen=True)
class RetryPolicy:
    """How retryable status codes are retried.

    ``max_attempts`` counts network attempts, so ``max_attempts=1`` disables
    retrying. ``backoff`` receives the attempt number that just failed and
    returns the delay in milliseconds; when unset the delay is the fixed
    ``delay_ms``. ``on_retry`` is called with a :class:`RetryContext` before
    each retry sleep and may be a coroutine function.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay_ms: int = DEFAULT_DELAY_MS
    backoff: Optional[Callable[[int], int]] = None
    on_retry: Optional[Callable[[Any], Any]] = None

    def delay_for(self, attempt: int) -> int:
        if self.backoff is not None:
            return self.backoff(attempt)
        return self.delay_ms


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    version: Union[str, int] = DEFAULT_VERSION
    secret: Optional[str] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    headers: Dict[str, str] = field(default_factory=dict)
    on_rate_limit: Optional[Callable[[Any], Any]] = None
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def root_url(self) -> str:
        return f"{self.base_url}{self.version}"

    def resolve_secret(self, environ: Optional[Mapping[str, str]] = None) -> str:
        """Return the configured secret, falling back to the environment."""
        if self.secret:
            return self.secret
        env = os.environ if environ is None else environ
        for key in SECRET_ENV_KEYS:
            value = env.get(key)
            if value:
                return value
        raise ConfigError("We could not find any API secret, use RESTClient(secret=...) or set PAY_SDK_SECRET")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "ClientConfig":
        env = os.environ if environ is None else environ

        secret = None
        for key in SECRET_ENV_KEYS:
            if env.get(key):
                secret = env[key]
                break

        retry = RetryPolicy(
            max_attempts=_int_from_env(env, "PAY_SDK_RETRY_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            delay_ms=_int_from_env(env, "PAY_SDK_RETRY_DELAY_MS", DEFAULT_DELAY_MS),
        )
        values: Dict[str, Any] = {
            "base_url": env.get("PAY_SDK_BASE_URL", DEFAULT_BASE_URL),
            "version": env.get("PAY_SDK_API_VERSION", DEFAULT_VERSION),
            "secret": secret,
            "timeout_ms": _int_from_env(env, "PAY_SDK_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
            "retry": retry,
        }
        values.update(overrides)
        return cls(**values)


def _int_from_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc


__all__ = ["ClientConfig", "RetryPolicy"]

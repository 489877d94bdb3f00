"""Request and response shapes used by the REST client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict

from .config import RetryPolicy
from .utils import QueryLike


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class SuccessEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: Any = None
    error: None = None


class FailureEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: Any = None
    error: str


Envelope = Union[SuccessEnvelope, FailureEnvelope]


def parse_envelope(payload: Any) -> Envelope:
    """Split a decoded ``{data, error}`` body into success or failure.

    A falsy ``error`` (``null``, ``""``) counts as success.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    error = payload.get("error")
    if error:
        return FailureEnvelope(data=payload.get("data"), error=str(error))
    return SuccessEnvelope(data=payload.get("data"))


@dataclass(frozen=True)
class RequestSpec:
    """One logical call. Shared unchanged by every attempt of that call."""

    route: str
    method: str
    query: Optional[QueryLike] = None
    body: Any = MISSING
    headers: Dict[str, str] = field(default_factory=dict)
    retry: Optional[RetryPolicy] = None

    @property
    def has_body(self) -> bool:
        return self.body is not MISSING


@dataclass(frozen=True)
class RetryContext:
    attempt: int
    route: str
    method: str
    response: Optional[httpx.Response] = None


__all__ = [
    "Envelope",
    "FailureEnvelope",
    "MISSING",
    "RequestSpec",
    "RetryContext",
    "SuccessEnvelope",
    "parse_envelope",
]

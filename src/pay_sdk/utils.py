"""Small helpers shared by the REST client."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlencode

import httpx

RATE_LIMIT_STATUS_CODE = 429
SERVICE_UNAVAILABLE_STATUS_CODE = 503
NO_CONTENT_STATUS_CODE = 204

RETRYABLE_STATUS = frozenset(
    {
        408,
        425,
        RATE_LIMIT_STATUS_CODE,
        500,
        502,
        SERVICE_UNAVAILABLE_STATUS_CODE,
        504,
    }
)

QueryLike = Union[str, Mapping[str, Any], Sequence[Tuple[str, Any]], httpx.QueryParams]


async def sleep(ms: float) -> None:
    await asyncio.sleep(ms / 1000)


def is_timeout_error(exc: BaseException) -> bool:
    return isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException))


def build_query(query: Optional[QueryLike]) -> str:
    """Encode ``query`` as a query string (without the leading ``?``).

    Strings pass through untouched; mappings and pair sequences keep their
    order.
    """
    if not query:
        return ""
    if isinstance(query, str):
        return query
    if isinstance(query, httpx.QueryParams):
        return str(query)
    if isinstance(query, Mapping):
        return urlencode(list(query.items()))
    return urlencode(list(query))


__all__ = [
    "NO_CONTENT_STATUS_CODE",
    "QueryLike",
    "RATE_LIMIT_STATUS_CODE",
    "RETRYABLE_STATUS",
    "SERVICE_UNAVAILABLE_STATUS_CODE",
    "build_query",
    "is_timeout_error",
    "sleep",
]

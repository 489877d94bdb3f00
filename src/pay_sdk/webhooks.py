"""FastAPI adapter for incoming API webhooks.

Signature checking and payload validation are supplied by the caller: ``verify``
decides whether a raw body matches its signature header, and ``parse`` turns
the decoded JSON into an event. The adapter only wires them into a request
flow and dispatches the event to the registered handlers.
"""

from __future__ import annotations

import hmac
import inspect
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import PaySDKError

logger = logging.getLogger("pay_sdk.webhooks")

SIGNATURE_HEADER = "x-webhook-signature"
SECRET_QUERY_PARAM = "webhookSecret"


class WebhookConfigError(PaySDKError):
    def __init__(self, message: str, *, code: str) -> None:
        super().__init__(message)
        self.code = code


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class ParseResult:
    success: bool
    data: Any = None


def parse_event(payload: Any) -> ParseResult:
    try:
        return ParseResult(success=True, data=WebhookEvent.model_validate(payload))
    except ValidationError:
        return ParseResult(success=False)


@dataclass
class WebhookOptions:
    secret: Optional[str]
    verify: Callable[[str, str], bool]
    parse: Callable[[Any], ParseResult] = parse_event
    handlers: Dict[str, Callable[[Any], Any]] = field(default_factory=dict)
    on_event: Optional[Callable[[Any], Any]] = None


async def dispatch(event: Any, options: WebhookOptions) -> None:
    name = getattr(event, "event", None)
    handler = options.handlers.get(name) if name is not None else None
    if handler is None:
        handler = options.on_event
    if handler is None:
        logger.info("No handler registered for webhook event=%s", name)
        return
    result = handler(event)
    if inspect.isawaitable(result):
        await result


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def webhook_endpoint(options: WebhookOptions) -> Callable[[Request], Any]:
    if not options.secret:
        raise WebhookConfigError(
            "Webhook secret is missing. Set WebhookOptions(secret=...).",
            code="WEBHOOK_SECRET_MISSING",
        )

    async def endpoint(request: Request) -> Response:
        provided = request.query_params.get(SECRET_QUERY_PARAM, "")
        if not hmac.compare_digest(provided.encode(), options.secret.encode()):
            return _error(401, "Unauthorized")

        signature = request.headers.get(SIGNATURE_HEADER)
        if not signature:
            return _error(400, "Missing signature")

        raw = (await request.body()).decode("utf-8", errors="replace")
        if not options.verify(raw, signature):
            logger.warning("Rejected webhook with invalid signature")
            return _error(401, "Invalid signature")

        try:
            payload = json.loads(raw)
        except ValueError:
            return _error(400, "Invalid JSON")

        parsed = options.parse(payload)
        if not parsed.success:
            return _error(400, "Invalid payload")

        await dispatch(parsed.data, options)
        return Response(status_code=204)

    return endpoint


def webhook_router(options: WebhookOptions, path: str = "/webhooks") -> APIRouter:
    router = APIRouter()
    router.add_api_route(path, webhook_endpoint(options), methods=["POST"], status_code=204)
    return router


__all__ = [
    "ParseResult",
    "WebhookConfigError",
    "WebhookEvent",
    "WebhookOptions",
    "dispatch",
    "parse_event",
    "webhook_endpoint",
    "webhook_router",
]

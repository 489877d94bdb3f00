"""Async REST client for the payment API."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

import httpx
from pydantic import TypeAdapter

from .config import ClientConfig, RetryPolicy
from .errors import APIError, ConfigError, RequestTimeoutError, RetryExhaustedError, TransportError
from .models import MISSING, FailureEnvelope, RequestSpec, RetryContext, parse_envelope
from .utils import NO_CONTENT_STATUS_CODE, RETRYABLE_STATUS, QueryLike, build_query, is_timeout_error, sleep

logger = logging.getLogger("pay_sdk.rest")


class RESTClient:
    """Runs authenticated requests against the API and unwraps its envelope.

    Options may be given as a ready :class:`ClientConfig`, as keyword
    arguments, or both (keywords override the config's fields)::

        async with RESTClient(secret="sk_live_...") as rest:
            customer = await rest.get("/customer/get", query={"id": "cust_1"})
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **options: Any,
    ) -> None:
        if http_client is not None and transport is not None:
            raise ConfigError("Pass either transport= or http_client=, not both")
        if config is None:
            config = ClientConfig(**options)
        elif options:
            config = replace(config, **options)
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(transport=transport)

    async def __aenter__(self) -> "RESTClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def set_secret(self, secret: str) -> "RESTClient":
        """Use ``secret`` for every request started from now on."""
        self._config = replace(self._config, secret=secret)
        return self

    async def get(self, route: str, **options: Any) -> Any:
        return await self.request(route, method="GET", **options)

    async def post(self, route: str, **options: Any) -> Any:
        return await self.request(route, method="POST", **options)

    async def put(self, route: str, **options: Any) -> Any:
        return await self.request(route, method="PUT", **options)

    async def patch(self, route: str, **options: Any) -> Any:
        return await self.request(route, method="PATCH", **options)

    async def delete(self, route: str, **options: Any) -> Any:
        return await self.request(route, method="DELETE", **options)

    async def request(
        self,
        route: str,
        *,
        method: str,
        query: Optional[QueryLike] = None,
        body: Any = MISSING,
        headers: Optional[Mapping[str, str]] = None,
        retry: Optional[RetryPolicy] = None,
        response_model: Any = None,
    ) -> Any:
        """Run one logical call and return the ``data`` of the response.

        ``body`` is only sent when it is passed at all; ``body=None`` sends a
        JSON ``null``. A 204 response returns ``None``.
        """
        spec = RequestSpec(
            route=route,
            method=method,
            query=query,
            body=body,
            headers=dict(headers or {}),
            retry=retry,
        )
        data = await self._execute(spec, self._config)
        if response_model is not None and data is not None:
            return TypeAdapter(response_model).validate_python(data)
        return data

    async def _execute(self, spec: RequestSpec, config: ClientConfig) -> Any:
        url = self._make_url(config, spec)
        headers = self._make_headers(config, spec.headers)
        retry = spec.retry or config.retry
        content = json.dumps(spec.body) if spec.has_body else None

        attempt = 0
        while True:
            attempt += 1
            response = await self._attempt(config, spec, url, headers, content, attempt)
            if response.is_success:
                return self._process(spec, response)
            await self._handle_error(config, spec, retry, attempt, response)

    async def _attempt(
        self,
        config: ClientConfig,
        spec: RequestSpec,
        url: str,
        headers: httpx.Headers,
        content: Optional[str],
        attempt: int,
    ) -> httpx.Response:
        timeout = config.timeout_ms / 1000
        logger.debug("Sending %s %s attempt=%s", spec.method, spec.route, attempt)
        try:
            return await asyncio.wait_for(
                self._client.request(
                    spec.method,
                    url,
                    headers=headers,
                    content=content,
                    timeout=timeout,
                    follow_redirects=True,
                ),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.HTTPError, OSError) as exc:
            if is_timeout_error(exc):
                logger.error("Request %s %s timed out after %sms", spec.method, spec.route, config.timeout_ms)
                raise RequestTimeoutError(spec.route, spec.method, config.timeout_ms) from exc
            logger.error("Request %s %s failed: %r", spec.method, spec.route, exc)
            raise TransportError(spec.route, spec.method, exc) from exc

    async def _handle_error(
        self,
        config: ClientConfig,
        spec: RequestSpec,
        retry: RetryPolicy,
        attempt: int,
        response: httpx.Response,
    ) -> None:
        status = response.status_code
        if status not in RETRYABLE_STATUS:
            raise APIError(_error_message(response), status=status, route=spec.route)

        if attempt >= retry.max_attempts:
            logger.error(
                "Giving up on %s %s after %s attempts status=%s", spec.method, spec.route, attempt, status
            )
            raise RetryExhaustedError(spec.route, spec.method, status, attempt)

        if retry.on_retry is not None:
            await _call_hook(
                retry.on_retry,
                RetryContext(attempt=attempt, route=spec.route, method=spec.method, response=response),
            )
        if config.on_rate_limit is not None:
            await _call_hook(config.on_rate_limit, response)

        delay = retry.delay_for(attempt)
        logger.warning(
            "Retrying %s %s status=%s attempt=%s/%s delay_ms=%s",
            spec.method,
            spec.route,
            status,
            attempt,
            retry.max_attempts,
            delay,
        )
        await sleep(delay)

    def _process(self, spec: RequestSpec, response: httpx.Response) -> Any:
        if response.status_code == NO_CONTENT_STATUS_CODE:
            return None

        try:
            envelope = parse_envelope(response.json())
        except ValueError as exc:
            raise APIError("Invalid JSON response", status=response.status_code, route=spec.route) from exc

        # A 2xx should never carry an error
        if isinstance(envelope, FailureEnvelope):
            raise APIError(envelope.error, status=response.status_code, route=spec.route)
        return envelope.data

    @staticmethod
    def _make_url(config: ClientConfig, spec: RequestSpec) -> str:
        url = f"{config.root_url}{spec.route}"
        query = build_query(spec.query)
        return f"{url}?{query}" if query else url

    @staticmethod
    def _make_headers(config: ClientConfig, custom: Mapping[str, str]) -> httpx.Headers:
        secret = config.resolve_secret()
        headers = httpx.Headers(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {secret}",
                "User-Agent": config.user_agent,
            }
        )
        headers.update(config.headers)
        headers.update(custom)
        return headers

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    error = payload.get("error") if isinstance(payload, dict) else None
    if error:
        return str(error)
    return response.reason_phrase or f"HTTP {response.status_code}"


async def _call_hook(hook: Callable[[Any], Any], argument: Any) -> None:
    result = hook(argument)
    if inspect.isawaitable(result):
        await result


__all__ = ["RESTClient"]

from __future__ import annotations

from typing import Any, Callable, Dict, List

import httpx
import pytest

from pay_sdk.client import RESTClient
from pay_sdk.config import RetryPolicy


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it was asked to send."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.requests: List[httpx.Request] = []

        async def recording(request: httpx.Request) -> Any:
            self.requests.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        super().__init__(recording)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture(autouse=True)
def clear_secret_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("PAY_SDK_SECRET", "PAY_SDK_API_KEY"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def make_client() -> Callable[..., RESTClient]:
    def factory(transport: httpx.AsyncBaseTransport, **options: Any) -> RESTClient:
        defaults: Dict[str, Any] = {"secret": "test-secret", "retry": RetryPolicy(delay_ms=0)}
        defaults.update(options)
        return RESTClient(transport=transport, **defaults)

    return factory


@pytest.fixture()
def recording_transport() -> Callable[[Callable[[httpx.Request], Any]], RecordingTransport]:
    return RecordingTransport

import json
from typing import Any

import httpx


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = {} if payload is None else payload
        self.text = json.dumps(self._payload) if text is None else text

    def json(self) -> Any:
        return json.loads(self.text)


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient.

    Requested URLs and constructor kwargs are recorded on the instance.
    """

    def __init__(self, response: MockResponse, **kwargs: Any) -> None:
        self._response = response
        self.init_kwargs = kwargs
        self.requested_urls: list[str] = []

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        self.requested_urls.append(url)
        return self._response


class FailingAsyncClient:
    """Async client whose GET raises a ConnectError to simulate network failure."""

    def __init__(self, url: str, *args: Any, **kwargs: Any) -> None:
        self._url = url

    async def __aenter__(self) -> "FailingAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        request = httpx.Request("GET", self._url)
        raise httpx.ConnectError("Network failure", request=request)


class StubOutboundIpClient:
    """Test double for an upstream IP client returning a fixed value or raising a fixed error."""

    def __init__(self, result: str | None = None, exc: Exception | None = None) -> None:
        self._result = result
        self._exc = exc
        self.calls = 0

    async def fetch(self) -> str:
        self.calls += 1
        if self._exc is not None:
            raise self._exc
        assert self._result is not None
        return self._result

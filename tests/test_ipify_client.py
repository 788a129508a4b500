import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

import httpx
import pytest

from simple_service.clients.ipify_client import IpifyClient
from simple_service.errors import MalformedResponseError, TransportError
from tests.common import FailingAsyncClient, MockAsyncClient, MockResponse

IPIFY_URL = "https://api.ipify.org?format=json"


def make_fake_async_client(
    response: MockResponse,
    created: list[MockAsyncClient] | None = None,
) -> Callable[..., MockAsyncClient]:
    """Factory for a fake httpx.AsyncClient returning a fixed response."""

    def _fake_client(*args: Any, **kwargs: Any) -> MockAsyncClient:
        client = MockAsyncClient(response, **kwargs)
        if created is not None:
            created.append(client)
        return client

    return _fake_client


@pytest.mark.asyncio
@pytest.mark.parametrize("ip", ["203.0.113.42", "2001:db8::1", " 198.51.100.7 ", "not-an-ip"])
async def test_fetch_returns_ip_verbatim(monkeypatch: pytest.MonkeyPatch, ip: str) -> None:
    """The `ip` field is returned unchanged, without trimming or validation."""
    response = MockResponse(status_code=HTTPStatus.OK, payload={"ip": ip})
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    result = await IpifyClient().fetch()

    assert result == ip


@pytest.mark.asyncio
@pytest.mark.parametrize("ip", [None, ""])
async def test_fetch_returns_unknown_when_ip_is_null_or_empty(monkeypatch: pytest.MonkeyPatch, ip: str | None) -> None:
    """The result is never empty: a null or empty address becomes "Unknown"."""
    response = MockResponse(status_code=HTTPStatus.OK, payload={"ip": ip})
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    result = await IpifyClient().fetch()

    assert result == "Unknown"


@pytest.mark.asyncio
async def test_fetch_uses_configured_url_and_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[MockAsyncClient] = []
    response = MockResponse(status_code=HTTPStatus.OK, payload={"ip": "203.0.113.42"})
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response, created))

    await IpifyClient(url="https://ip.example.test/?format=json", timeout_seconds=2.5).fetch()

    assert created[0].requested_urls == ["https://ip.example.test/?format=json"]
    assert created[0].init_kwargs["timeout"] == 2.5


@pytest.mark.asyncio
async def test_fetch_invalid_json_raises_malformed_response_error(monkeypatch: pytest.MonkeyPatch) -> None:
    response = MockResponse(status_code=HTTPStatus.OK, text="not json")
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    with pytest.raises(MalformedResponseError):
        await IpifyClient().fetch()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"address": "203.0.113.42"},
        ["203.0.113.42"],
        {"ip": 12345},
    ],
)
async def test_fetch_payload_without_string_ip_raises_malformed_response_error(
    monkeypatch: pytest.MonkeyPatch,
    payload: Any,
) -> None:
    response = MockResponse(status_code=HTTPStatus.OK, payload=payload)
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    with pytest.raises(MalformedResponseError):
        await IpifyClient().fetch()


@pytest.mark.asyncio
async def test_fetch_network_failure_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(httpx, "AsyncClient", lambda *args, **kwargs: FailingAsyncClient(IPIFY_URL, *args, **kwargs))

    with pytest.raises(TransportError) as exc_info:
        await IpifyClient().fetch()

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code",
    [
        HTTPStatus.BAD_REQUEST,
        HTTPStatus.NOT_FOUND,
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.INTERNAL_SERVER_ERROR,
        HTTPStatus.SERVICE_UNAVAILABLE,
    ],
)
async def test_fetch_non_2xx_status_raises_transport_error(
    monkeypatch: pytest.MonkeyPatch,
    status_code: HTTPStatus,
) -> None:
    """Non-2xx responses are surfaced as transport failures even with a valid body."""
    response = MockResponse(status_code=status_code, payload={"ip": "203.0.113.42"})
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))

    with pytest.raises(TransportError):
        await IpifyClient().fetch()


@pytest.mark.asyncio
async def test_fetch_logs_before_and_after_successful_call(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    response = MockResponse(status_code=HTTPStatus.OK, payload={"ip": "192.168.1.1"})
    monkeypatch.setattr(httpx, "AsyncClient", make_fake_async_client(response))
    test_logger = logging.getLogger("tests.ipify")

    with caplog.at_level(logging.INFO, logger="tests.ipify"):
        await IpifyClient(logger=test_logger).fetch()

    messages = [record.getMessage() for record in caplog.records]
    assert any("Calling ipify API" in m for m in messages)
    assert any("Successfully retrieved IP from ipify: 192.168.1.1" in m for m in messages)


@pytest.mark.asyncio
async def test_fetch_logs_error_on_failure(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    monkeypatch.setattr(httpx, "AsyncClient", lambda *args, **kwargs: FailingAsyncClient(IPIFY_URL, *args, **kwargs))
    test_logger = logging.getLogger("tests.ipify")

    with caplog.at_level(logging.INFO, logger="tests.ipify"), pytest.raises(TransportError):
        await IpifyClient(logger=test_logger).fetch()

    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Failed to call ipify API" in errors[0].getMessage()

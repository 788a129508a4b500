from http import HTTPStatus
from logging import Logger
from typing import Any

import httpx

from simple_service.clients.base import BaseOutboundIpClient
from simple_service.config import DEFAULT_IPIFY_URL
from simple_service.errors import MalformedResponseError, OutboundIpError, TransportError
from simple_service.logger import get_component_logger

UNKNOWN_IP = "Unknown"


class IpifyClient(BaseOutboundIpClient):
    """Client for the https://api.ipify.org public IP API.

    The provider answers `{"ip": "<address>"}`. The address is trusted and
    returned verbatim; a null or empty address becomes "Unknown".
    """

    def __init__(
        self,
        url: str = DEFAULT_IPIFY_URL,
        timeout_seconds: float = 5.0,
        logger: Logger | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._logger = logger or get_component_logger("clients.ipify")

    async def fetch(self) -> str:
        self._logger.info(f"Calling ipify API: {self._url}")
        try:
            ip_address = await self._request()
        except OutboundIpError as exc:
            self._logger.error(f"Failed to call ipify API url={self._url} error={exc!r}")
            raise

        self._logger.info(f"Successfully retrieved IP from ipify: {ip_address}")
        return ip_address

    async def _request(self) -> str:
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(self._url)
        except httpx.RequestError as exc:
            raise TransportError(f"Request to ipify failed: {repr(exc)}") from exc

        self._handle_http_errors(response)

        data = self._parse_json(response)
        return self._extract_ip(data)

    @staticmethod
    def _handle_http_errors(response: httpx.Response) -> None:
        """Any non-2xx status is reported as a transport failure."""
        status_code = response.status_code
        if not HTTPStatus.OK <= status_code < HTTPStatus.MULTIPLE_CHOICES:
            raise TransportError(f"ipify returned HTTP {status_code}: {response.text}")

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Failed to decode ipify response as JSON: {exc}") from exc

    @staticmethod
    def _extract_ip(data: Any) -> str:
        if not isinstance(data, dict) or "ip" not in data:
            raise MalformedResponseError(f"ipify response has no 'ip' field: {data!r}")

        ip_address = data["ip"]
        if ip_address is None:
            return UNKNOWN_IP
        if not isinstance(ip_address, str):
            raise MalformedResponseError(f"ipify 'ip' field is not a string: {ip_address!r}")
        # Callers rely on a non-empty result.
        return ip_address or UNKNOWN_IP

from logging import Logger

from simple_service.clients.base import BaseOutboundIpClient
from simple_service.logger import get_component_logger


class OutboundIpService:
    """Resolves the IP address this server's outbound connections appear from.

    Keeps the HTTP layer unaware of which upstream provider is used. Failures
    from the client are logged and re-raised as-is; the route handler decides
    the HTTP-visible error shape.
    """

    def __init__(self, client: BaseOutboundIpClient, logger: Logger | None = None) -> None:
        self._client = client
        self._logger = logger or get_component_logger("services.outbound_ip")

    async def resolve_outbound_ip(self) -> str:
        self._logger.info("Getting outbound IP address")
        try:
            ip_address = await self._client.fetch()
        except Exception as exc:
            self._logger.error(f"Failed to retrieve outbound IP address: {exc!r}")
            raise

        self._logger.info(f"Retrieved outbound IP: {ip_address}")
        return ip_address

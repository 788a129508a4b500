from abc import ABC, abstractmethod


class BaseOutboundIpClient(ABC):
    """Abstract base for upstream IP provider clients.

    Concrete implementations (e.g. ipify, ifconfig.me) call a third-party
    IP-echo service and return the address it observed for this server.
    """

    @abstractmethod
    async def fetch(self) -> str:
        """Return the public IP address reported by the provider, or "Unknown"."""
        raise NotImplementedError

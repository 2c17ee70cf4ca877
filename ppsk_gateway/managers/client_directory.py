"""Client Directory for the gateway.

Lists known clients and renames them by MAC address.
"""

import logging
from typing import Any, Dict, List

from .controller_gateway import ControllerGateway

logger = logging.getLogger("ppsk-gateway")


def normalize_mac(mac: str) -> str:
    return (mac or "").strip().lower()


class ClientDirectory:
    """Client lookups and renames on the UniFi Controller."""

    def __init__(self, gateway: ControllerGateway):
        self._gateway = gateway

    async def list_clients(self) -> List[Dict[str, Any]]:
        """List known clients as {id, mac, ip, name, hostname, note}."""
        clients = await self._gateway.fetch_clients()
        return [c.summary() for c in clients]

    async def rename_by_mac(self, mac: str, alias: str) -> bool:
        """Set the alias of the client with this MAC address.

        Args:
            mac: Client MAC, any case, surrounding whitespace ignored.
            alias: New display name.

        Returns:
            True if the controller accepted the rename, False if no client has that MAC.
        """
        mac = normalize_mac(mac)
        clients = await self._gateway.fetch_clients()
        client = next((c for c in clients if c.mac == mac and c.id), None)
        if client is None:
            logger.debug(f"Client with MAC {mac} not found.")
            return False
        return await self._gateway.rename_client(client.id, alias)

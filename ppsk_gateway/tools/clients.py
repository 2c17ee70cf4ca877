"""
PPSK gateway client tools.

MCP tools to list known clients and set client aliases.
"""

import logging
from typing import Any, Dict

from ppsk_gateway.exceptions import GatewayError
from ppsk_gateway.runtime import client_directory, server

logger = logging.getLogger(__name__)


@server.tool(
    name="ppsk_list_clients",
    description="List clients known to the UniFi controller (id, mac, ip, name, hostname, note).",
)
async def list_clients() -> Dict[str, Any]:
    """List known clients.

    Returns:
        Dict with success flag, count and the normalized client list.
    """
    try:
        clients = await client_directory.list_clients()
        return {"success": True, "count": len(clients), "clients": clients}
    except GatewayError as e:
        logger.error(f"Error listing clients: {e.message}")
        return e.to_dict()


@server.tool(
    name="ppsk_rename_client",
    description="Set the alias (display name) of a client identified by MAC address.",
)
async def rename_client(mac_address: str, alias: str) -> Dict[str, Any]:
    """Rename a client by MAC.

    Args:
        mac_address: MAC address of the client, any case
        alias: New display name, must not be empty

    Returns:
        Dict with success flag and `updated` (False when no client has that MAC)
    """
    if not alias:
        return {"success": False, "error": "alias is required"}
    try:
        updated = await client_directory.rename_by_mac(mac_address, alias)
        return {"success": True, "mac": mac_address, "updated": updated}
    except GatewayError as e:
        logger.error(f"Error renaming client {mac_address}: {e.message}")
        return e.to_dict()

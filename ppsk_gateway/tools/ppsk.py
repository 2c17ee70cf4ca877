"""
PPSK gateway PPSK tools.

MCP tools to list, create and remove private pre-shared keys on WLANs.
"""

import logging
from typing import Any, Dict, Optional

from ppsk_gateway.exceptions import GatewayError
from ppsk_gateway.runtime import ppsk_manager, server

logger = logging.getLogger(__name__)


@server.tool(
    name="ppsk_list_ppsks",
    description="List PPSK entries across WLANs, optionally filtered by WLAN id or SSID (case-insensitive).",
)
async def list_ppsks(wlan_id: Optional[str] = None, ssid: Optional[str] = None) -> Dict[str, Any]:
    """List PPSK entries.

    Args:
        wlan_id: Optional exact WLAN _id filter
        ssid: Optional SSID filter, case-insensitive

    Returns:
        Dict with success flag, count and the PPSK descriptors
    """
    try:
        ppsks = await ppsk_manager.list_ppsks(wlan_id or None, ssid or None)
        return {"success": True, "count": len(ppsks), "ppsks": ppsks}
    except GatewayError as e:
        logger.error(f"Error listing PPSKs: {e.message}")
        return e.to_dict()


@server.tool(
    name="ppsk_create_ppsk",
    description=(
        "Create a PPSK on a WLAN. Password must be 8-63 characters and unique on the WLAN. "
        "networkconf_id defaults to the WLAN's own network."
    ),
)
async def create_ppsk(wlan_id: str, password: str, networkconf_id: Optional[str] = None) -> Dict[str, Any]:
    """Create a PPSK entry.

    Returns:
        Dict with success flag and the created descriptor, or the error dict
    """
    try:
        created = await ppsk_manager.create_ppsk(wlan_id, password, networkconf_id)
        return {"success": True, **created}
    except GatewayError as e:
        logger.error(f"Error creating PPSK on WLAN {wlan_id}: {e.message}")
        return e.to_dict()


@server.tool(
    name="ppsk_remove_ppsk",
    description="Remove the PPSK with the given password from a WLAN.",
)
async def remove_ppsk(wlan_id: str, password: str) -> Dict[str, Any]:
    """Remove a PPSK entry by password.

    Returns:
        Dict with success flag and the removal count (0 when nothing matched)
    """
    try:
        result = await ppsk_manager.remove_ppsk(wlan_id, password)
        return {"success": True, **result}
    except GatewayError as e:
        logger.error(f"Error removing PPSK from WLAN {wlan_id}: {e.message}")
        return e.to_dict()

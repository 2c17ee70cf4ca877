"""PPSK Manager for the gateway.

Manages private pre-shared keys stored inside WLAN configurations. The
controller only accepts a WLAN as a whole object, so every mutation
re-fetches the snapshot, edits a local copy and writes the whole WLAN back.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from ppsk_gateway.exceptions import ConflictError, NotFoundError, ValidationError
from ppsk_gateway.models import PpskEntry, WlanConfig

from .controller_gateway import ControllerGateway

logger = logging.getLogger("ppsk-gateway")

# WPA2-PSK passphrase bounds
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 63


def validate_password(password: str) -> str:
    """Trim a PPSK password and check its WPA2-PSK length.

    Raises:
        ValidationError: Length outside 8-63 characters.
    """
    password = (password or "").strip()
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters.",
            field="password",
        )
    return password


class PpskManager:
    """Lists, creates and removes PPSK entries on the UniFi Controller."""

    def __init__(self, gateway: ControllerGateway):
        """Initialize the PPSK Manager.

        Args:
            gateway: The shared ControllerGateway instance.
        """
        self._gateway = gateway
        self._wlan_locks: Dict[str, asyncio.Lock] = {}
        self._lock_holders: Dict[str, int] = {}

    @asynccontextmanager
    async def _locked(self, wlan_id: str):
        """Serialize mutations of one WLAN. The lock is dropped once nobody holds or awaits it."""
        lock = self._wlan_locks.setdefault(wlan_id, asyncio.Lock())
        self._lock_holders[wlan_id] = self._lock_holders.get(wlan_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[wlan_id] -= 1
            if not self._lock_holders[wlan_id]:
                del self._lock_holders[wlan_id]
                del self._wlan_locks[wlan_id]

    async def _get_wlan(self, wlan_id: str) -> WlanConfig:
        wlan = await self._gateway.fetch_wlan(wlan_id)
        if wlan is None:
            logger.warning(f"WLAN {wlan_id} not found")
            raise NotFoundError(wlan_id)
        return wlan

    async def list_ppsks(self, wlan_id: Optional[str] = None, ssid: Optional[str] = None) -> List[Dict[str, Any]]:
        """List PPSKs for all WLANs or a specific WLAN/SSID.

        Args:
            wlan_id: Only include the WLAN with this exact _id.
            ssid: Only include WLANs whose SSID matches, ignoring case.

        Returns:
            List of {wlan_id, ssid, password, networkconf_id}. Entries without
            their own network id report the WLAN default.
        """
        wlans = await self._gateway.fetch_wlans()
        ssid_lower = ssid.lower() if ssid else None

        out = []
        for wlan in wlans:
            if wlan_id and wlan.id != wlan_id:
                continue
            if ssid_lower is not None and (wlan.name or "").lower() != ssid_lower:
                continue
            for key in wlan.private_preshared_keys:
                out.append(
                    {
                        "wlan_id": wlan.id,
                        "ssid": wlan.name,
                        "password": key.password,
                        "networkconf_id": key.networkconf_id or wlan.networkconf_id,
                    }
                )
        return out

    async def create_ppsk(self, wlan_id: str, password: str, networkconf_id: Optional[str] = None) -> Dict[str, Any]:
        """Create a new PPSK entry on the given WLAN.

        If networkconf_id is not given, the WLAN's own networkconf_id is used.

        Raises:
            ValidationError: Bad password length, or no network id available.
            NotFoundError: WLAN does not exist.
            ConflictError: Password already present on the WLAN.
            RemoteError: Controller call failed.
        """
        password = validate_password(password)
        networkconf_id = (networkconf_id or "").strip() or None

        async with self._locked(wlan_id):
            wlan = await self._get_wlan(wlan_id)

            if wlan.has_password(password):
                logger.warning(f"Refusing duplicate PPSK on WLAN {wlan_id}")
                raise ConflictError(wlan_id)

            use_network_id = networkconf_id or wlan.networkconf_id
            if not use_network_id:
                raise ValidationError(
                    "networkconf_id must be provided or present on WLAN.",
                    field="networkconf_id",
                )

            new_entry = PpskEntry(password=password, networkconf_id=use_network_id)
            wlan.private_preshared_keys = [*wlan.private_preshared_keys, new_entry]
            await self._gateway.replace_wlan(wlan_id, wlan)

        logger.info(f"Created PPSK on WLAN {wlan_id} (network {use_network_id})")
        return {
            "wlan_id": wlan_id,
            "ssid": wlan.name,
            "password": password,
            "networkconf_id": use_network_id,
            "created": True,
        }

    async def remove_ppsk(self, wlan_id: str, password: str) -> Dict[str, Any]:
        """Remove every PPSK with this exact password from the given WLAN.

        Returns:
            {wlan_id, removed} or, when nothing matched,
            {wlan_id, removed: 0, message}. No write happens in that case.
        """
        async with self._locked(wlan_id):
            wlan = await self._get_wlan(wlan_id)

            before = len(wlan.private_preshared_keys)
            kept = [k for k in wlan.private_preshared_keys if k.password != password]
            removed = before - len(kept)

            if removed == 0:
                logger.info(f"No PPSK matched on WLAN {wlan_id}")
                return {
                    "wlan_id": wlan_id,
                    "removed": 0,
                    "message": "No PPSK matched the provided password",
                }

            wlan.private_preshared_keys = kept
            await self._gateway.replace_wlan(wlan_id, wlan)

        if removed > 1:
            logger.warning(f"Removed {removed} PPSK entries sharing one password on WLAN {wlan_id}")
        else:
            logger.info(f"Removed PPSK from WLAN {wlan_id}")
        return {"wlan_id": wlan_id, "removed": removed}

"""Pytest configuration for ppsk-gateway tests."""

import copy
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ppsk_gateway.models import ClientRecord, WlanConfig  # noqa: E402


def create_mock_wlan(
    wlan_id: str = "w1",
    name: str = "Guest",
    networkconf_id: Optional[str] = "net1",
    ppsks: Optional[List[Dict[str, Any]]] = None,
    **kwargs
) -> Dict[str, Any]:
    """Create a raw rest/wlanconf entry as the controller returns it."""
    base = {
        "_id": wlan_id,
        "name": name,
        "enabled": True,
        "security": "wpapsk",
        "wpa_mode": "wpa2",
        "site_id": "site123",
        "x_passphrase": "sharedpassphrase",
    }
    if networkconf_id is not None:
        base["networkconf_id"] = networkconf_id
    if ppsks is not None:
        base["private_preshared_keys"] = ppsks
    base.update(kwargs)
    return base


def create_mock_user(
    client_id: str = "client_id_123",
    mac: str = "aa:bb:cc:dd:ee:ff",
    name: Optional[str] = "Test Client",
    hostname: str = "test-device",
    **kwargs
) -> Dict[str, Any]:
    """Create a raw list/user entry."""
    base = {
        "_id": client_id,
        "mac": mac,
        "name": name,
        "hostname": hostname,
        "oui": "Apple",
        "is_wired": False,
        "first_seen": 1700000000,
    }
    base.update(kwargs)
    return base


class FakeGateway:
    """In-memory stand-in for ControllerGateway.

    Stores raw controller dicts and hands out fresh model snapshots on every
    fetch, the way the real controller does.
    """

    def __init__(self, wlans=None, users=None):
        self.wlans: List[Dict[str, Any]] = copy.deepcopy(wlans or [])
        self.users: List[Dict[str, Any]] = copy.deepcopy(users or [])
        self.fetch_wlans_calls = 0
        self.replace_calls: List[tuple] = []
        self.rename_calls: List[tuple] = []
        self.replace_error: Optional[Exception] = None

    async def fetch_wlans(self) -> List[WlanConfig]:
        self.fetch_wlans_calls += 1
        return [WlanConfig.model_validate(copy.deepcopy(w)) for w in self.wlans]

    async def fetch_wlan(self, wlan_id: str) -> Optional[WlanConfig]:
        wlans = await self.fetch_wlans()
        return next((w for w in wlans if w.id == wlan_id), None)

    async def replace_wlan(self, wlan_id: str, wlan: WlanConfig) -> bool:
        if self.replace_error:
            raise self.replace_error
        payload = wlan.to_payload()
        self.replace_calls.append((wlan_id, payload))
        self.wlans = [payload if w.get("_id") == wlan_id else w for w in self.wlans]
        return True

    async def fetch_clients(self) -> List[ClientRecord]:
        return [ClientRecord.model_validate(copy.deepcopy(u)) for u in self.users]

    async def rename_client(self, client_id: str, name: str) -> bool:
        self.rename_calls.append((client_id, name))
        return True


@pytest.fixture
def guest_wlan() -> Dict[str, Any]:
    """WLAN w1 / SSID Guest / default network net1, no PPSKs."""
    return create_mock_wlan()


@pytest.fixture
def fake_gateway(guest_wlan) -> FakeGateway:
    return FakeGateway(
        wlans=[
            guest_wlan,
            create_mock_wlan(
                "w2",
                "Staff",
                "net2",
                ppsks=[
                    {"password": "staffpass01", "networkconf_id": "vlan20"},
                    {"password": "staffpass02"},
                ],
            ),
        ],
        users=[
            create_mock_user("c1", "AA:BB:CC:00:00:01", "Laptop", last_ip="10.0.0.5", ip="10.0.0.99"),
            create_mock_user("c2", "aa:bb:cc:00:00:02", None, hostname="phone", ip="10.0.0.6", note="lobby"),
        ],
    )

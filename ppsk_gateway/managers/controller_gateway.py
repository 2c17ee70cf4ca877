"""Typed call surface over the UniFi controller API.

Only the endpoints the gateway needs are covered:
- GET  rest/wlanconf          -> WLAN snapshots
- PUT  rest/wlanconf/{id}     -> full-object WLAN replace
- GET  list/user              -> known clients
- POST upd/user/{id}          -> client rename
"""

import asyncio
import logging
import time as _time
from typing import Any, Dict, List, Optional

import aiohttp
from aiounifi.errors import AiounifiException, LoginRequired, Unauthorized
from aiounifi.models.api import ApiRequest
from pydantic import ValidationError as PayloadValidationError

from ppsk_gateway.exceptions import RemoteError
from ppsk_gateway.models import ClientRecord, WlanConfig

from .session_manager import ControllerSession

logger = logging.getLogger("ppsk-gateway")


class ControllerGateway:
    """Issues controller calls through an authenticated ControllerSession."""

    def __init__(self, session: ControllerSession):
        """Initialize the gateway.

        Args:
            session: The ControllerSession shared by every manager.
        """
        self._session = session

    @property
    def session(self) -> ControllerSession:
        return self._session

    async def _request(self, operation: str, api_request: ApiRequest) -> List[Dict[str, Any]]:
        """Send one request and return the `data` list of the response envelope."""
        controller = await self._session.ensure_authenticated()

        try:
            start_ts = _time.perf_counter()
            response = await controller.request(api_request)
            duration_ms = (_time.perf_counter() - start_ts) * 1000.0
            logger.debug(f"{api_request.method.upper()} {api_request.path} took {duration_ms:.1f}ms")
        except (LoginRequired, Unauthorized) as e:
            logger.warning(f"Login required during {operation}, session will be renewed on next call")
            self._session.invalidate()
            raise RemoteError(operation, "login required") from e
        except ValueError as e:
            # Body declared as JSON but not parseable
            logger.error(f"Unparseable response for {operation}: {e}")
            raise RemoteError(operation, "malformed response") from e
        except (AiounifiException, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"API request error: {api_request.method.upper()} {api_request.path} - {e!r}")
            raise RemoteError(operation, str(e) or type(e).__name__) from e

        data = response.get("data") if isinstance(response, dict) else None
        if not isinstance(data, list):
            logger.error(f"Malformed response for {operation}: {type(response).__name__}")
            raise RemoteError(operation, "malformed response")
        return data

    async def fetch_wlans(self) -> List[WlanConfig]:
        """Fetch every WLAN configuration, in controller order."""
        raw = await self._request("fetch_wlans", ApiRequest(method="get", path="/rest/wlanconf"))
        try:
            return [WlanConfig.model_validate(w) for w in raw if isinstance(w, dict)]
        except PayloadValidationError as e:
            raise RemoteError("fetch_wlans", f"unexpected WLAN payload: {e.error_count()} error(s)") from e

    async def fetch_wlan(self, wlan_id: str) -> Optional[WlanConfig]:
        """Fetch a fresh snapshot of one WLAN, or None if it does not exist."""
        wlans = await self.fetch_wlans()
        return next((w for w in wlans if w.id == wlan_id), None)

    async def replace_wlan(self, wlan_id: str, wlan: WlanConfig) -> bool:
        """Replace a WLAN configuration with the given whole object."""
        api_request = ApiRequest(
            method="put",
            path=f"/rest/wlanconf/{wlan_id}",
            data=wlan.to_payload(),
        )
        await self._request("replace_wlan", api_request)
        logger.info(f"Replaced WLAN {wlan_id} ({len(wlan.private_preshared_keys)} PPSK entries)")
        return True

    async def fetch_clients(self) -> List[ClientRecord]:
        """Fetch every known client record."""
        raw = await self._request("fetch_clients", ApiRequest(method="get", path="/list/user"))
        try:
            return [ClientRecord.model_validate(c) for c in raw if isinstance(c, dict)]
        except PayloadValidationError as e:
            raise RemoteError("fetch_clients", f"unexpected client payload: {e.error_count()} error(s)") from e

    async def rename_client(self, client_id: str, name: str) -> bool:
        """Set the display name (alias) of a client."""
        api_request = ApiRequest(
            method="post",
            path=f"/upd/user/{client_id}",
            data={"name": name},
        )
        await self._request("rename_client", api_request)
        logger.info(f"Renamed client {client_id} to '{name}'")
        return True

"""HTTP routes for the PPSK gateway."""

import logging
from typing import Any, Dict

from aiohttp import web

from ppsk_gateway.managers.client_directory import ClientDirectory
from ppsk_gateway.managers.ppsk_manager import PpskManager

from .middleware import json_error

logger = logging.getLogger("ppsk-gateway")

CLIENT_DIRECTORY = web.AppKey("client_directory", ClientDirectory)
PPSK_MANAGER = web.AppKey("ppsk_manager", PpskManager)

routes = web.RouteTableDef()


async def read_payload(request: web.Request) -> Dict[str, Any]:
    """Parse a JSON or form-encoded body. Anything unparseable reads as empty."""
    if not request.body_exists:
        return {}
    if request.content_type in ("application/x-www-form-urlencoded", "multipart/form-data"):
        return dict(await request.post())
    try:
        payload = await request.json()
    except ValueError:
        logger.debug(f"Ignoring non-JSON body on {request.method} {request.path}")
        return {}
    return payload if isinstance(payload, dict) else {}


def _field(payload: Dict[str, Any], name: str) -> str:
    value = payload.get(name)
    return "" if value is None else str(value).strip()


@routes.get("/healthz")
async def healthz(request: web.Request) -> web.Response:
    return web.json_response({"ok": True})


@routes.get("/clients")
async def list_clients(request: web.Request) -> web.Response:
    clients = await request.app[CLIENT_DIRECTORY].list_clients()
    return web.json_response(clients)


@routes.put("/clients/{mac}/alias")
async def set_client_alias(request: web.Request) -> web.Response:
    payload = await read_payload(request)
    alias = payload.get("alias")
    if alias is None or alias == "":
        return json_error("alias is required", 400)

    updated = await request.app[CLIENT_DIRECTORY].rename_by_mac(request.match_info["mac"], str(alias))
    return web.json_response({"updated": bool(updated)})


@routes.get("/ppsk")
async def list_ppsks(request: web.Request) -> web.Response:
    wlan_id = request.query.get("wlan_id") or None
    ssid = request.query.get("ssid") or None
    ppsks = await request.app[PPSK_MANAGER].list_ppsks(wlan_id, ssid)
    return web.json_response(ppsks)


@routes.post("/ppsk/create")
async def create_ppsk(request: web.Request) -> web.Response:
    payload = await read_payload(request)
    wlan_id = _field(payload, "wlan_id")
    password = _field(payload, "password")
    networkconf_id = _field(payload, "networkconf_id") or None
    if not wlan_id or not password:
        return json_error("wlan_id and password are required", 400)

    created = await request.app[PPSK_MANAGER].create_ppsk(wlan_id, password, networkconf_id)
    return web.json_response(created, status=201)


@routes.post("/ppsk/revoke")
async def revoke_ppsk(request: web.Request) -> web.Response:
    payload = await read_payload(request)
    wlan_id = _field(payload, "wlan_id")
    password = _field(payload, "password")
    if not wlan_id or not password:
        return json_error("wlan_id and password are required", 400)

    result = await request.app[PPSK_MANAGER].remove_ppsk(wlan_id, password)
    return web.json_response(result)

"""
Tests for the HTTP surface: auth, payload handling and status mapping.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from ppsk_gateway.exceptions import AuthenticationError, RemoteError
from ppsk_gateway.managers.client_directory import ClientDirectory
from ppsk_gateway.managers.ppsk_manager import PpskManager
from ppsk_gateway.web.app import create_app

TOKEN = "s3cret-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


@pytest_asyncio.fixture
async def client(fake_gateway):
    app = create_app(TOKEN, ClientDirectory(fake_gateway), PpskManager(fake_gateway))
    async with TestClient(TestServer(app)) as test_client:
        yield test_client


class TestBearerAuth:
    """Test the bearer-token middleware."""

    @pytest.mark.asyncio
    async def test_healthz_is_public(self, client):
        resp = await client.get("/healthz")

        assert resp.status == 200
        assert await resp.json() == {"ok": True}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer wrong"}, {"Authorization": TOKEN}, {"Authorization": f"Basic {TOKEN}"}],
    )
    async def test_rejects_missing_or_bad_token(self, client, headers):
        resp = await client.get("/clients", headers=headers)

        assert resp.status == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        assert await resp.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_scheme_is_case_insensitive(self, client):
        resp = await client.get("/clients", headers={"Authorization": f"bearer   {TOKEN}"})

        assert resp.status == 200

    @pytest.mark.asyncio
    async def test_unset_token_rejects_everything(self, fake_gateway):
        app = create_app("", ClientDirectory(fake_gateway), PpskManager(fake_gateway))
        async with TestClient(TestServer(app)) as test_client:
            assert (await test_client.get("/clients", headers={"Authorization": "Bearer "})).status == 401
            assert (await test_client.get("/healthz")).status == 200


class TestClientRoutes:
    """Test /clients routes."""

    @pytest.mark.asyncio
    async def test_list_clients(self, client):
        resp = await client.get("/clients", headers=AUTH)

        assert resp.status == 200
        body = await resp.json()
        assert [c["id"] for c in body] == ["c1", "c2"]
        assert body[0]["ip"] == "10.0.0.5"

    @pytest.mark.asyncio
    async def test_set_alias(self, client, fake_gateway):
        resp = await client.put("/clients/AA:BB:CC:00:00:01/alias", json={"alias": "Front desk"}, headers=AUTH)

        assert resp.status == 200
        assert await resp.json() == {"updated": True}
        assert fake_gateway.rename_calls == [("c1", "Front desk")]

    @pytest.mark.asyncio
    async def test_set_alias_unknown_mac(self, client):
        resp = await client.put("/clients/00:11:22:33:44:55/alias", json={"alias": "Ghost"}, headers=AUTH)

        assert resp.status == 200
        assert await resp.json() == {"updated": False}

    @pytest.mark.asyncio
    async def test_set_alias_form_encoded(self, client, fake_gateway):
        resp = await client.put("/clients/aa:bb:cc:00:00:02/alias", data={"alias": "Kiosk"}, headers=AUTH)

        assert resp.status == 200
        assert fake_gateway.rename_calls == [("c2", "Kiosk")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"alias": ""}, None])
    async def test_alias_required(self, client, body):
        resp = await client.put("/clients/aa:bb:cc:00:00:02/alias", json=body, headers=AUTH)

        assert resp.status == 400
        assert await resp.json() == {"error": "alias is required"}

    @pytest.mark.asyncio
    async def test_controller_failure_is_generic_500(self, fake_gateway):
        fake_gateway.fetch_clients = AsyncMock(side_effect=AuthenticationError("invalid password for admin"))
        app = create_app(TOKEN, ClientDirectory(fake_gateway), PpskManager(fake_gateway))
        async with TestClient(TestServer(app)) as test_client:
            resp = await test_client.get("/clients", headers=AUTH)

            assert resp.status == 500
            assert await resp.json() == {"error": "Internal Server Error"}


class TestPpskRoutes:
    """Test /ppsk routes."""

    @pytest.mark.asyncio
    async def test_create_list_revoke(self, client):
        resp = await client.post("/ppsk/create", json={"wlan_id": "w1", "password": "longpassword1"}, headers=AUTH)
        assert resp.status == 201
        assert await resp.json() == {
            "wlan_id": "w1",
            "ssid": "Guest",
            "password": "longpassword1",
            "networkconf_id": "net1",
            "created": True,
        }

        resp = await client.get("/ppsk", params={"wlan_id": "w1"}, headers=AUTH)
        assert await resp.json() == [
            {"wlan_id": "w1", "ssid": "Guest", "password": "longpassword1", "networkconf_id": "net1"}
        ]

        resp = await client.post("/ppsk/revoke", json={"wlan_id": "w1", "password": "longpassword1"}, headers=AUTH)
        assert resp.status == 200
        assert await resp.json() == {"wlan_id": "w1", "removed": 1}

        resp = await client.get("/ppsk", params={"wlan_id": "w1"}, headers=AUTH)
        assert await resp.json() == []

    @pytest.mark.asyncio
    async def test_list_with_ssid_filter(self, client):
        resp = await client.get("/ppsk", params={"ssid": "staff"}, headers=AUTH)

        assert resp.status == 200
        assert len(await resp.json()) == 2

    @pytest.mark.asyncio
    async def test_empty_filters_mean_no_filter(self, client):
        resp = await client.get("/ppsk", params={"wlan_id": "", "ssid": ""}, headers=AUTH)

        assert len(await resp.json()) == 2

    @pytest.mark.asyncio
    async def test_create_with_network_id(self, client):
        resp = await client.post(
            "/ppsk/create",
            json={"wlan_id": "w1", "password": "longpassword1", "networkconf_id": "vlan7"},
            headers=AUTH,
        )

        assert (await resp.json())["networkconf_id"] == "vlan7"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/ppsk/create", "/ppsk/revoke"])
    @pytest.mark.parametrize("body", [{"wlan_id": "w1"}, {"password": "longpassword1"}, {"wlan_id": " ", "password": "x"}])
    async def test_required_fields(self, client, path, body):
        resp = await client.post(path, json=body, headers=AUTH)

        assert resp.status == 400
        assert await resp.json() == {"error": "wlan_id and password are required"}

    @pytest.mark.asyncio
    async def test_create_short_password(self, client, fake_gateway):
        resp = await client.post("/ppsk/create", json={"wlan_id": "w1", "password": "short"}, headers=AUTH)

        assert resp.status == 400
        assert await resp.json() == {"error": "Password must be 8-63 characters."}
        assert fake_gateway.replace_calls == []

    @pytest.mark.asyncio
    async def test_create_unknown_wlan(self, client):
        resp = await client.post("/ppsk/create", json={"wlan_id": "nope", "password": "longpassword1"}, headers=AUTH)

        assert resp.status == 404
        assert await resp.json() == {"error": "WLAN not found: nope"}

    @pytest.mark.asyncio
    async def test_create_duplicate(self, client):
        resp = await client.post("/ppsk/create", json={"wlan_id": "w2", "password": "staffpass01"}, headers=AUTH)

        assert resp.status == 409
        assert await resp.json() == {"error": "PPSK password already exists on this WLAN."}

    @pytest.mark.asyncio
    async def test_revoke_absent_password(self, client):
        resp = await client.post("/ppsk/revoke", json={"wlan_id": "w2", "password": "notthere1"}, headers=AUTH)

        assert resp.status == 200
        assert (await resp.json())["removed"] == 0

    @pytest.mark.asyncio
    async def test_remote_failure_does_not_leak(self, fake_gateway):
        fake_gateway.replace_error = RemoteError("replace_wlan", "api.err.InvalidPayload at 10.0.0.1")
        app = create_app(TOKEN, ClientDirectory(fake_gateway), PpskManager(fake_gateway))
        async with TestClient(TestServer(app)) as test_client:
            resp = await test_client.post(
                "/ppsk/create", json={"wlan_id": "w1", "password": "longpassword1"}, headers=AUTH
            )

            assert resp.status == 500
            assert await resp.json() == {"error": "Internal Server Error"}

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_500(self, fake_gateway):
        manager = MagicMock()
        manager.list_ppsks = AsyncMock(side_effect=KeyError("boom"))
        app = create_app(TOKEN, ClientDirectory(fake_gateway), manager)
        async with TestClient(TestServer(app)) as test_client:
            resp = await test_client.get("/ppsk", headers=AUTH)

            assert resp.status == 500

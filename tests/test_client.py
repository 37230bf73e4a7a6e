"""Unit tests for client.py - Enterprise Management API client."""

import asyncio
import time

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from client import (
    BearerTokenAuthenticator,
    EnterpriseManagementClient,
    IAMAuthenticator,
    _error_message,
    build_client,
)
from config import EnterpriseAPIConfig
from errors import ClientUnavailable, RemoteFailure, RemoteNotFound
from models import CreateEnterpriseRequest

TOKEN = "tok-1"
API_KEY = "good-key"


@pytest.fixture
async def api_server(enterprise_json):
    """In-process fake of the Enterprise Management and IAM endpoints."""
    state = {"requests": [], "token_requests": 0}

    def unauthorized(request):
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return web.json_response(
                {"errors": [{"code": "not_authorized", "message": "Unauthorized"}]},
                status=401,
            )
        return None

    async def token(request):
        form = await request.post()
        state["token_requests"] += 1
        if form.get("apikey") != API_KEY:
            return web.json_response(
                {"errorMessage": "Provided API key could not be found"}, status=400
            )
        return web.json_response(
            {
                "access_token": TOKEN,
                "expires_in": 3600,
                "expiration": int(time.time()) + 3600,
            }
        )

    async def create(request):
        denied = unauthorized(request)
        if denied:
            return denied
        body = await request.json()
        state["requests"].append(("POST", body))
        if body.get("name") == "fail":
            return web.json_response(
                {"errors": [{"code": "invalid_name", "message": "name is invalid"}]},
                status=400,
            )
        return web.json_response(
            {"enterprise_id": "ent-123", "enterprise_account_id": "acct-ent-123"},
            status=202,
        )

    async def get(request):
        denied = unauthorized(request)
        if denied:
            return denied
        enterprise_id = request.match_info["enterprise_id"]
        if enterprise_id == "ent-123":
            return web.json_response(enterprise_json)
        if enterprise_id == "ent-500":
            return web.Response(status=500, text="internal error")
        if enterprise_id == "ent-slow":
            await asyncio.sleep(2)
            return web.json_response(enterprise_json)
        return web.json_response(
            {"errors": [{"code": "not_found", "message": "Enterprise not found"}]},
            status=404,
        )

    async def patch(request):
        denied = unauthorized(request)
        if denied:
            return denied
        state["requests"].append(("PATCH", await request.json()))
        if request.match_info["enterprise_id"] != "ent-123":
            return web.json_response(
                {"errors": [{"message": "Enterprise not found"}]}, status=404
            )
        return web.Response(status=204)

    app = web.Application()
    app.router.add_post("/identity/token", token)
    app.router.add_post("/v1/enterprises", create)
    app.router.add_get("/v1/enterprises/{enterprise_id}", get)
    app.router.add_patch("/v1/enterprises/{enterprise_id}", patch)

    server = TestServer(app)
    await server.start_server()
    yield server, state
    await server.close()


@pytest.fixture
def api_client(api_server):
    server, _ = api_server
    return EnterpriseManagementClient(
        api_base_url=str(server.make_url("/v1")),
        authenticator=BearerTokenAuthenticator(TOKEN),
        request_timeout=5,
    )


@pytest.fixture
def create_request():
    return CreateEnterpriseRequest(
        source_account_id="acc-1",
        name="Acme Corp",
        primary_contact_iam_id="IBMid-AB12CD34EF",
        domain="acme.com",
    )


# ==================== Error message extraction ====================


class TestErrorMessage:
    """Tests for _error_message."""

    def test_errors_list(self):
        body = '{"errors": [{"message": "a"}, {"message": "b"}]}'
        assert _error_message(body) == "a; b"

    def test_message_field(self):
        assert _error_message('{"message": "nope"}') == "nope"

    def test_plain_text(self):
        assert _error_message("internal error") == "internal error"

    def test_empty_body(self):
        assert _error_message("") == "no response body"


# ==================== Client calls ====================


@pytest.mark.asyncio
class TestEnterpriseManagementClient:
    """Tests for EnterpriseManagementClient against a fake API."""

    async def test_create_enterprise(self, api_client, api_server, create_request):
        _, state = api_server

        enterprise_id = await api_client.create_enterprise(create_request)

        assert enterprise_id == "ent-123"
        assert state["requests"] == [
            (
                "POST",
                {
                    "source_account_id": "acc-1",
                    "name": "Acme Corp",
                    "primary_contact_iam_id": "IBMid-AB12CD34EF",
                    "domain": "acme.com",
                },
            )
        ]

    async def test_create_enterprise_failure(self, api_client, create_request):
        create_request.name = "fail"

        with pytest.raises(RemoteFailure) as exc_info:
            await api_client.create_enterprise(create_request)

        error = exc_info.value
        assert error.operation == "CreateEnterprise"
        assert error.status_code == 400
        assert "name is invalid" in str(error)
        assert "invalid_name" in error.response_body

    async def test_get_enterprise(self, api_client):
        enterprise = await api_client.get_enterprise("ent-123")

        assert enterprise.id == "ent-123"
        assert enterprise.state == "active"
        assert enterprise.created_at.year == 2024

    async def test_get_enterprise_not_found(self, api_client):
        with pytest.raises(RemoteNotFound) as exc_info:
            await api_client.get_enterprise("ent-999")

        assert exc_info.value.identifier == "ent-999"

    async def test_get_enterprise_server_error(self, api_client):
        with pytest.raises(RemoteFailure) as exc_info:
            await api_client.get_enterprise("ent-500")

        assert exc_info.value.status_code == 500
        assert exc_info.value.operation == "GetEnterprise"

    async def test_get_enterprise_deadline(self, api_client):
        with pytest.raises(RemoteFailure) as exc_info:
            await api_client.get_enterprise("ent-slow", timeout=0.2)

        assert "timed out" in str(exc_info.value)
        assert exc_info.value.status_code is None

    async def test_update_enterprise(self, api_client, api_server):
        _, state = api_server

        await api_client.update_enterprise("ent-123", {"domain": "sub.acme.com"})

        assert state["requests"] == [("PATCH", {"domain": "sub.acme.com"})]

    async def test_update_enterprise_failure(self, api_client):
        with pytest.raises(RemoteFailure) as exc_info:
            await api_client.update_enterprise("ent-999", {"name": "New Name"})

        assert exc_info.value.status_code == 404
        assert exc_info.value.operation == "UpdateEnterprise"

    async def test_unauthorized(self, api_server):
        server, _ = api_server
        client = EnterpriseManagementClient(
            api_base_url=str(server.make_url("/v1")),
            authenticator=BearerTokenAuthenticator("wrong"),
        )

        with pytest.raises(RemoteFailure) as exc_info:
            await client.get_enterprise("ent-123")

        assert exc_info.value.status_code == 401
        assert "Unauthorized" in str(exc_info.value)

    async def test_connection_error(self):
        client = EnterpriseManagementClient(
            api_base_url="http://127.0.0.1:1/v1",
            authenticator=BearerTokenAuthenticator(TOKEN),
            request_timeout=2,
        )

        with pytest.raises(RemoteFailure) as exc_info:
            await client.get_enterprise("ent-123")

        assert exc_info.value.status_code is None


# ==================== IAM authentication ====================


@pytest.mark.asyncio
class TestIAMAuthenticator:
    """Tests for API key to token exchange."""

    async def test_exchanges_api_key_once(self, api_server):
        server, state = api_server
        client = EnterpriseManagementClient(
            api_base_url=str(server.make_url("/v1")),
            authenticator=IAMAuthenticator(
                API_KEY, str(server.make_url("/identity/token"))
            ),
        )

        await client.get_enterprise("ent-123")
        await client.get_enterprise("ent-123")

        assert state["token_requests"] == 1

    async def test_bad_api_key(self, api_server):
        server, _ = api_server
        client = EnterpriseManagementClient(
            api_base_url=str(server.make_url("/v1")),
            authenticator=IAMAuthenticator(
                "bad-key", str(server.make_url("/identity/token"))
            ),
        )

        with pytest.raises(RemoteFailure) as exc_info:
            await client.get_enterprise("ent-123")

        assert exc_info.value.operation == "RequestIAMToken"
        assert exc_info.value.status_code == 400
        assert "could not be found" in str(exc_info.value)


# ==================== build_client ====================


class TestBuildClient:
    """Tests for build_client."""

    def test_no_credentials(self):
        with pytest.raises(ClientUnavailable):
            build_client(EnterpriseAPIConfig())

    def test_api_key_uses_iam(self):
        client = build_client(EnterpriseAPIConfig(api_key="k"))
        assert isinstance(client.authenticator, IAMAuthenticator)
        assert client.authenticator.api_key == "k"

    def test_bearer_token_preferred(self):
        client = build_client(EnterpriseAPIConfig(api_key="k", bearer_token="t"))
        assert isinstance(client.authenticator, BearerTokenAuthenticator)

    def test_base_url_and_timeout(self):
        client = build_client(
            EnterpriseAPIConfig(
                api_base_url="https://example.test/v1/",
                bearer_token="t",
                request_timeout=30,
            )
        )
        assert client.api_base_url == "https://example.test/v1"
        assert client.request_timeout == 30

    def test_explicit_zero_timeout_is_kept(self):
        client = build_client(
            EnterpriseAPIConfig(bearer_token="t", request_timeout=30)
        )
        assert client._client_timeout(0).total == 0
        assert client._client_timeout(None).total == 30

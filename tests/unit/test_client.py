"""Tests for the Onshape HTTP client."""

import base64
import json
import os
from unittest import mock
from unittest.mock import AsyncMock

import httpx
import pytest

from onshape_mcp.client import (
    ONSHAPE_MEDIA_TYPE,
    OnshapeClient,
    find_element_by_name,
    get_default_workspace,
)
from onshape_mcp.config import ServerConfig
from onshape_mcp.errors import (
    ApiError,
    ConfigurationError,
    ConnectionFailedError,
    ResponseDecodeError,
    UnauthorizedError,
)


def respond(status, **kwargs):
    """Handler that answers every request with one fixed response."""

    def handler(request):
        return httpx.Response(status, **kwargs)

    return handler


def make_client(handler, access_key="access", secret_key="secret"):
    """Client wired to an in-memory transport."""
    return OnshapeClient(
        base_url="https://cad.onshape.com/api/v1/",
        access_key=access_key,
        secret_key=secret_key,
        transport=httpx.MockTransport(handler),
    )


class TestRequest:
    """Tests for OnshapeClient.request."""

    @pytest.mark.asyncio
    async def test_success_returns_parsed_json(self):
        """A 200 response should be decoded."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"items": [{"id": "D1"}]})

        async with make_client(handler) as client:
            result = await client.request("GET", "/documents", query={"limit": 5})

        assert result == {"items": [{"id": "D1"}]}
        assert seen[0].url.path == "/api/v1/documents"
        assert seen[0].url.params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_sends_basic_auth_and_media_type(self):
        """Requests should carry the configured credential and Onshape headers."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await client.request("GET", "/documents")

        expected = base64.b64encode(b"access:secret").decode()
        assert seen[0].headers["Authorization"] == f"Basic {expected}"
        assert seen[0].headers["Accept"] == ONSHAPE_MEDIA_TYPE

    @pytest.mark.asyncio
    async def test_no_auth_without_both_keys(self):
        """A missing key should leave requests unauthenticated."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with make_client(handler, secret_key=None) as client:
            assert client.is_authenticated is False
            await client.request("GET", "/documents")

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_none_query_values_are_dropped(self):
        """Query entries whose value is None should not be sent."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await client.request(
                "GET", "/parts", query={"configuration": None, "linkDocumentId": "L1"}
            )

        assert "configuration" not in seen[0].url.params
        assert seen[0].url.params["linkDocumentId"] == "L1"

    @pytest.mark.asyncio
    async def test_body_is_sent_as_json(self):
        """The request body should be JSON encoded."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "D2"})

        async with make_client(handler) as client:
            await client.request("POST", "/documents", {"name": "Bracket"})

        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"name": "Bracket"}

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(self):
        """A successful empty response should decode to {}."""
        async with make_client(respond(200, content=b"")) as client:
            result = await client.request("DELETE", "/documents/D1")

        assert result == {}

    @pytest.mark.asyncio
    async def test_invalid_json_raises_decode_error(self):
        """A successful response with a non-JSON body should fail."""
        async with make_client(respond(200, content=b"<html>oops</html>")) as client:
            with pytest.raises(ResponseDecodeError) as exc_info:
                await client.request("GET", "/documents")

        assert exc_info.value.raw_body == "<html>oops</html>"

    @pytest.mark.asyncio
    async def test_401_raises_unauthorized(self):
        """A 401 should surface as UnauthorizedError."""
        async with make_client(respond(401, text="bad key")) as client:
            with pytest.raises(UnauthorizedError) as exc_info:
                await client.request("GET", "/documents")

        assert exc_info.value.status == 401
        assert "bad key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_status_raises_api_error(self):
        """Non-success statuses should carry status, reason, and body."""
        async with make_client(respond(404, text='{"message": "not found"}')) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.request("GET", "/documents/missing")

        error = exc_info.value
        assert not isinstance(error, UnauthorizedError)
        assert error.status == 404
        assert error.status_text == "Not Found"
        assert error.raw_body == '{"message": "not found"}'
        assert str(error).startswith("Onshape API Error: 404 Not Found")

    @pytest.mark.asyncio
    async def test_transport_failure_raises_connection_failed(self):
        """A request that gets no response should raise ConnectionFailedError."""

        def handler(request):
            raise httpx.ConnectError("connection refused")

        async with make_client(handler) as client:
            with pytest.raises(ConnectionFailedError) as exc_info:
                await client.request("GET", "/documents")

        assert exc_info.value.status == 0
        assert "connection refused" in str(exc_info.value)


class TestFromConfig:
    """Tests for OnshapeClient.from_config."""

    @pytest.mark.asyncio
    async def test_missing_credentials_warns(self, caplog):
        """Missing keys should be logged but tolerated by default."""
        with mock.patch.dict(os.environ, {}, clear=True):
            config = ServerConfig(_env_file=None)

        client = OnshapeClient.from_config(config)
        await client.aclose()

        assert client.is_authenticated is False
        assert "Onshape API keys not set" in caplog.text

    def test_missing_credentials_required_raises(self):
        """Missing keys should abort when credentials are required."""
        with mock.patch.dict(os.environ, {}, clear=True):
            config = ServerConfig(_env_file=None, require_credentials=True)

        with pytest.raises(ConfigurationError):
            OnshapeClient.from_config(config)

    @pytest.mark.asyncio
    async def test_configured_client(self):
        """Configured keys and URL should be applied."""
        with mock.patch.dict(os.environ, {}, clear=True):
            config = ServerConfig(
                _env_file=None,
                api_url="https://company.onshape.com/api/v6/",
                access_key="a",
                secret_key="s",
            )

        async with OnshapeClient.from_config(config) as client:
            assert client.is_authenticated is True
            assert client.base_url == "https://company.onshape.com/api/v6"


class TestLookupHelpers:
    """Tests for the document lookup helpers."""

    @pytest.mark.asyncio
    async def test_get_default_workspace(self, mock_client):
        """Should return the default workspace ID."""
        mock_client.request = AsyncMock(return_value={"defaultWorkspace": {"id": "W1"}})

        assert await get_default_workspace(mock_client, "D1") == "W1"
        mock_client.request.assert_awaited_once_with("GET", "/documents/D1")

    @pytest.mark.asyncio
    async def test_get_default_workspace_missing(self, mock_client):
        """Should return None when the document reports no default workspace."""
        mock_client.request = AsyncMock(return_value={"name": "Doc"})

        assert await get_default_workspace(mock_client, "D1") is None

    @pytest.mark.asyncio
    async def test_find_element_by_name(self, mock_client):
        """Should return the first element with an exact name match."""
        mock_client.request = AsyncMock(
            return_value=[
                {"id": "E1", "name": "Part Studio 10"},
                {"id": "E2", "name": "Part Studio 1"},
            ]
        )

        element = await find_element_by_name(mock_client, "D1", "W1", "Part Studio 1")

        assert element == {"id": "E2", "name": "Part Studio 1"}
        mock_client.request.assert_awaited_once_with(
            "GET",
            "/documents/d/D1/w/W1/elements",
            query={"elementType": "PARTSTUDIO"},
        )

    @pytest.mark.asyncio
    async def test_find_element_by_name_not_found(self, mock_client):
        """Should return None when nothing matches."""
        mock_client.request = AsyncMock(return_value=[])

        assert await find_element_by_name(mock_client, "D1", "W1", "Nope") is None

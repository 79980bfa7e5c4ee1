"""
Тесты поиска workspace id
"""

import base64

import httpx
import pytest

from insight_client.discovery import discover_workspace_id
from insight_client.errors import DiscoveryError


def make_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestDiscoverWorkspaceId:
    @pytest.mark.asyncio
    async def test_returns_first_workspace(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200, json={"values": [{"workspaceId": "W9"}, {"workspaceId": "W2"}]}
            )

        async with make_client(handler) as client:
            workspace_id = await discover_workspace_id(
                "acme", "user@example.com", "token", http_client=client
            )

        assert workspace_id == "W9"
        assert len(requests) == 1
        request = requests[0]
        assert request.method == "GET"
        assert str(request.url) == (
            "https://acme.atlassian.net/rest/servicedeskapi/insight/workspace"
        )
        expected = base64.b64encode(b"user@example.com:token").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{"values": []}, {}, {"values": "W9"}, {"values": [{"name": "no id"}]}],
    )
    async def test_no_workspace(self, payload):
        async with make_client(lambda request: httpx.Response(200, json=payload)) as client:
            with pytest.raises(DiscoveryError, match="No workspace found"):
                await discover_workspace_id(
                    "acme", "user@example.com", "token", http_client=client
                )

    @pytest.mark.asyncio
    async def test_http_error_keeps_status(self):
        async with make_client(lambda request: httpx.Response(401)) as client:
            with pytest.raises(DiscoveryError) as exc_info:
                await discover_workspace_id(
                    "acme", "user@example.com", "token", http_client=client
                )

        assert exc_info.value.status_code == 401
        assert "[401]" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(DiscoveryError) as exc_info:
                await discover_workspace_id(
                    "acme", "user@example.com", "token", http_client=client
                )

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async with make_client(
            lambda request: httpx.Response(200, content=b"<html>")
        ) as client:
            with pytest.raises(DiscoveryError, match="invalid JSON"):
                await discover_workspace_id(
                    "acme", "user@example.com", "token", http_client=client
                )

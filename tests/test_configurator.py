"""
Тесты настройки сгенерированного клиента и fallback middleware
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

import pytest

from insight_client.config import ResolvedConfig
from insight_client.configurator import (
    EndpointFallback,
    GeneratedClient,
    configure_client,
    workspace_base_url,
)
from insight_client.errors import ConfiguratorError


@dataclass
class FakeConfig:
    base_url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    with_credentials: bool = False
    credentials: str = "omit"
    interceptors: List[Any] = field(default_factory=list)


class FakeClient:
    def __init__(self):
        self.config = FakeConfig()


@dataclass(frozen=True)
class FakeRequest:
    url: str

    def with_url(self, url: str) -> "FakeRequest":
        return replace(self, url=url)


def resolved(**kwargs) -> ResolvedConfig:
    values = dict(
        base_url="https://api.atlassian.com/assets",
        email="user@example.com",
        api_token="token",
        spec_file="assets-openapi.json",
        output_dir="generated",
    )
    values.update(kwargs)
    return ResolvedConfig(**values)


class TestConfigureClient:
    def test_workspace_url_when_workspace_known(self):
        client = FakeClient()
        configure_client(client, resolved(workspace_id="W9"))

        assert client.config.base_url == (
            "https://api.atlassian.com/jsm/insight/workspace/W9/v1"
        )
        assert client.config.base_url == workspace_base_url("W9")

    def test_base_url_without_workspace(self):
        client = FakeClient()
        configure_client(client, resolved(base_url="https://example.com/assets"))

        assert client.config.base_url == "https://example.com/assets"
        assert client.config.interceptors == []

    def test_headers_and_credentials(self):
        client = FakeClient()
        configure_client(client, resolved())

        assert client.config.headers["Authorization"].startswith("Basic ")
        assert client.config.headers["Content-Type"] == "application/json"
        assert client.config.headers["Accept"] == "application/json"
        assert client.config.with_credentials is True
        assert client.config.credentials == "include"

    @pytest.mark.parametrize(
        "instance, workspace_id, expected",
        [("acme", "W9", 1), ("acme", None, 0), (None, "W9", 0), (None, None, 0)],
    )
    def test_fallback_only_with_instance_and_workspace(
        self, instance, workspace_id, expected
    ):
        client = FakeClient()
        configure_client(
            client, resolved(instance=instance, workspace_id=workspace_id)
        )

        assert len(client.config.interceptors) == expected
        if expected:
            assert isinstance(client.config.interceptors[0], EndpointFallback)

    def test_invalid_client(self):
        with pytest.raises(ConfiguratorError, match="OpenAPI configuration not found"):
            configure_client(object(), resolved())

    def test_config_without_required_fields(self):
        class Broken:
            config = object()

        with pytest.raises(ConfiguratorError):
            configure_client(Broken(), resolved())

    def test_fake_client_matches_protocol(self):
        assert isinstance(FakeClient(), GeneratedClient)


class TestEndpointFallback:
    """Повтор запроса на альтернативном хосте"""

    def test_alternate_url(self):
        fallback = EndpointFallback("acme")

        assert fallback.alternate_url(
            "https://api.atlassian.com/jsm/insight/workspace/W9/v1/object/1"
        ) == "https://acme.atlassian.net/jsm/insight/workspace/W9/v1/object/1"
        assert fallback.alternate_url(
            "https://acme.atlassian.net/jsm/insight/workspace/W9/v1/object/1"
        ) == "https://api.atlassian.com/jsm/insight/workspace/W9/v1/object/1"

    @pytest.mark.asyncio
    async def test_success_does_not_retry(self):
        sent = []

        async def send(request):
            sent.append(request.url)
            return "ok"

        result = await EndpointFallback("acme")(
            FakeRequest("https://api.atlassian.com/x"), send
        )

        assert result == "ok"
        assert sent == ["https://api.atlassian.com/x"]

    @pytest.mark.asyncio
    async def test_retry_on_alternate_host(self):
        sent = []

        async def send(request):
            sent.append(request.url)
            if len(sent) == 1:
                raise RuntimeError("boom")
            return "second"

        result = await EndpointFallback("acme")(
            FakeRequest("https://api.atlassian.com/jsm/insight/workspace/W9/v1/x"),
            send,
        )

        assert result == "second"
        assert sent == [
            "https://api.atlassian.com/jsm/insight/workspace/W9/v1/x",
            "https://acme.atlassian.net/jsm/insight/workspace/W9/v1/x",
        ]

    @pytest.mark.asyncio
    async def test_second_failure_propagates(self):
        sent = []

        async def send(request):
            sent.append(request.url)
            raise RuntimeError(f"failed {len(sent)}")

        with pytest.raises(RuntimeError, match="failed 2"):
            await EndpointFallback("acme")(
                FakeRequest("https://acme.atlassian.net/x"), send
            )

        # Третьей попытки нет
        assert sent == ["https://acme.atlassian.net/x", "https://api.atlassian.com/x"]

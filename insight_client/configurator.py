"""
Настройка сгенерированного клиента: base URL, авторизация, fallback endpoint
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Protocol, runtime_checkable

from .auth import json_headers
from .config import ResolvedConfig
from .errors import ConfiguratorError

logger = logging.getLogger(__name__)

API_HOST = "https://api.atlassian.com"
INSTANCE_HOST = "https://{instance}.atlassian.net"
WORKSPACE_BASE_URL = API_HOST + "/jsm/insight/workspace/{workspace_id}/v1"


class InterceptedRequest(Protocol):
    url: str

    def with_url(self, url: str) -> "InterceptedRequest": ...


Send = Callable[[Any], Awaitable[Any]]


@runtime_checkable
class ClientConfig(Protocol):
    """Объект конфигурации сгенерированного клиента"""

    base_url: str
    headers: Dict[str, str]
    with_credentials: bool
    credentials: str
    interceptors: List[Any]


@runtime_checkable
class GeneratedClient(Protocol):
    """Сгенерированный клиент: конфигурация плюс сервисы с операциями"""

    config: ClientConfig


class EndpointFallback:
    """
    Middleware повторной отправки на альтернативный хост.

    API доступно и через api.atlassian.com, и через <instance>.atlassian.net.
    После первой ошибки запрос один раз отправляется на другой хост, ошибка
    второй попытки пробрасывается как есть.
    """

    def __init__(self, instance: str):
        self.instance = instance
        self.instance_host = INSTANCE_HOST.format(instance=instance)

    def alternate_url(self, url: str) -> str:
        if url.startswith(API_HOST):
            return self.instance_host + url[len(API_HOST) :]
        return url.replace(self.instance_host, API_HOST, 1)

    async def __call__(self, request: InterceptedRequest, send: Send) -> Any:
        try:
            return await send(request)
        except Exception as exc:
            retry = request.with_url(self.alternate_url(request.url))
            logger.info(
                f"Request to {request.url} failed ({exc}), "
                f"retrying with alternative endpoint: {retry.url}"
            )
            return await send(retry)

    def __repr__(self) -> str:
        return f"EndpointFallback(instance={self.instance!r})"


def workspace_base_url(workspace_id: str) -> str:
    return WORKSPACE_BASE_URL.format(workspace_id=workspace_id)


def configure_client(client: Any, config: ResolvedConfig) -> None:
    """
    Настройка клиента на месте.

    Workspace-адресация имеет приоритет над base_url. Fallback middleware
    ставится только если известны и instance, и workspace id.

    Raises:
        ConfiguratorError: у клиента нет объекта конфигурации нужной формы
    """
    if not isinstance(client, GeneratedClient) or not isinstance(
        client.config, ClientConfig
    ):
        raise ConfiguratorError("Invalid client: OpenAPI configuration not found")

    client_config = client.config

    if config.workspace_id:
        client_config.base_url = workspace_base_url(config.workspace_id)
    else:
        client_config.base_url = config.base_url

    client_config.with_credentials = True
    client_config.credentials = "include"
    client_config.headers = json_headers(config.email, config.api_token)

    if config.instance and config.workspace_id:
        client_config.interceptors = [EndpointFallback(config.instance)]
    else:
        client_config.interceptors = []

    logger.debug(
        f"Client configured: base_url={client_config.base_url}, "
        f"interceptors={len(client_config.interceptors)}"
    )

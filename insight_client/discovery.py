"""
Поиск workspace id для JSM Insight API
"""

import logging
from typing import Optional

import httpx

from .auth import json_headers
from .errors import DiscoveryError

logger = logging.getLogger(__name__)

DISCOVERY_URL = "https://{instance}.atlassian.net/rest/servicedeskapi/insight/workspace"


async def discover_workspace_id(
    instance: str,
    email: str,
    api_token: str,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Получение workspace id по имени инстанса.

    Делает ровно один GET запрос, без повторов.

    Args:
        instance: имя инстанса (acme для acme.atlassian.net)
        email: email пользователя
        api_token: API токен
        http_client: готовый httpx.AsyncClient, иначе создается временный

    Returns:
        workspaceId первого workspace из ответа

    Raises:
        DiscoveryError: сетевая ошибка, HTTP ошибка или пустой список
    """
    url = DISCOVERY_URL.format(instance=instance)
    headers = json_headers(email, api_token)

    logger.debug(f"Requesting workspace list from {url}")

    try:
        if http_client is None:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, headers=headers)
        else:
            response = await http_client.get(url, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DiscoveryError(
            f"Failed to discover workspace ID: {exc}",
            status_code=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise DiscoveryError(f"Failed to discover workspace ID: {exc}") from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise DiscoveryError(
            f"Failed to discover workspace ID: invalid JSON ({exc})",
            status_code=response.status_code,
        ) from exc

    values = data.get("values") if isinstance(data, dict) else None
    if not isinstance(values, list) or not values:
        raise DiscoveryError("No workspace found in the response")

    first = values[0]
    workspace_id = first.get("workspaceId") if isinstance(first, dict) else None
    if not workspace_id:
        raise DiscoveryError("No workspace found in the response")

    return str(workspace_id)

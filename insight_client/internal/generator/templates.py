class Templates:
    """Шаблоны для генерации файлов"""

    constants = """BASE_URL = {base_url!r}
VERSION = {version!r}
TITLE = {title!r}
SOURCE_URL = {source_url!r}
"""

    core = """\"\"\"
Ядро клиента: конфигурация, отправка запросов и цепочка middleware
\"\"\"

import asyncio
import json
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import aiohttp
from pydantic import BaseModel, TypeAdapter, ValidationError

from . import constants

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message, url, status_code=None, body=None):
        self.message = message
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"[{status_code}] {url}: {message}")


@dataclass(frozen=True)
class ApiRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[List[Tuple[str, str]]] = None
    body: Any = None

    def with_url(self, url: str) -> "ApiRequest":
        return replace(self, url=url)


@dataclass
class ApiResponse:
    url: str
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


Send = Callable[[ApiRequest], Awaitable[ApiResponse]]
Interceptor = Callable[[ApiRequest, Send], Awaitable[ApiResponse]]


@dataclass
class OpenAPIConfig:
    \"\"\"Настройки клиента, общие для всех сервисов одного клиента\"\"\"

    base_url: str = constants.BASE_URL
    version: str = constants.VERSION
    with_credentials: bool = False
    credentials: str = "include"
    headers: Dict[str, str] = field(default_factory=dict)
    interceptors: List[Interceptor] = field(default_factory=list)
    timeout: int = 30
    transport: Optional[Send] = None


def serialize_value(value: Any) -> Any:
    \"\"\"Рекурсивная сериализация значений для JSON\"\"\"
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    return value


def serialize_query(query: Optional[Dict[str, Any]]) -> List[Tuple[str, str]]:
    \"\"\"Query параметры: None пропускается, списки разворачиваются\"\"\"
    items = []
    for name, value in (query or {}).items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            item = serialize_value(item)
            if isinstance(item, bool):
                item = str(item).lower()
            items.append((name, str(item)))
    return items


def format_path(path: str, path_params: Optional[Dict[str, Any]] = None) -> str:
    for name, value in (path_params or {}).items():
        path = path.replace("{" + name + "}", quote(str(serialize_value(value)), safe=""))
    return path


async def _read_body(response: aiohttp.ClientResponse) -> Any:
    content_type = response.headers.get("content-type", "").lower()
    if "json" in content_type:
        text = await response.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text
    if content_type.startswith("text/") or "xml" in content_type:
        return await response.text()
    return await response.read() or None


async def send_request(request: ApiRequest, timeout: int = 30) -> ApiResponse:
    \"\"\"Отправка запроса через aiohttp\"\"\"
    logger.debug(f"Making {request.method} request to {request.url}")

    kwargs: Dict[str, Any] = {"headers": request.headers}
    if request.params:
        kwargs["params"] = request.params
    if request.body is not None:
        kwargs["json"] = request.body

    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout)
        ) as session:
            async with session.request(request.method, request.url, **kwargs) as response:
                logger.debug(f"Response status: {response.status}")
                body = await _read_body(response)

                if response.status >= 400:
                    raise ApiError(
                        response.reason or "Request failed",
                        url=request.url,
                        status_code=response.status,
                        body=body,
                    )

                return ApiResponse(
                    url=request.url,
                    status_code=response.status,
                    headers=dict(response.headers),
                    body=body,
                )
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise ApiError(str(exc) or type(exc).__name__, url=request.url) from exc


def _bind(interceptor: Interceptor, send: Send) -> Send:
    async def call(request: ApiRequest) -> ApiResponse:
        return await interceptor(request, send)

    return call


def build_chain(interceptors: List[Interceptor], transport: Send) -> Send:
    \"\"\"Оборачивает transport в middleware, первый в списке - внешний\"\"\"
    send = transport
    for interceptor in reversed(interceptors):
        send = _bind(interceptor, send)
    return send


def parse_response(body: Any, response_type: Any = None) -> Any:
    \"\"\"Парсинг ответа в модель, при несовпадении возвращаются сырые данные\"\"\"
    if response_type is None or body is None:
        return body
    try:
        return TypeAdapter(response_type).validate_python(body)
    except ValidationError as exc:
        logger.debug(f"Response does not match {response_type}: {exc}")
        return body


async def request(
    config: OpenAPIConfig,
    method: str,
    path: str,
    path_params: Optional[Dict[str, Any]] = None,
    query: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, Any]] = None,
    body: Any = None,
    response_type: Any = None,
) -> Any:
    \"\"\"Сборка запроса из конфигурации и отправка через цепочку middleware\"\"\"
    request_headers = dict(config.headers)
    for name, value in (headers or {}).items():
        if value is not None:
            request_headers[name] = str(serialize_value(value))

    api_request = ApiRequest(
        method=method.upper(),
        url=config.base_url.rstrip("/") + format_path(path, path_params),
        headers=request_headers,
        params=serialize_query(query) or None,
        body=serialize_value(body),
    )

    transport = config.transport
    if transport is None:

        async def transport(r: ApiRequest) -> ApiResponse:
            return await send_request(r, config.timeout)

    send = build_chain(list(config.interceptors), transport)
    response = await send(api_request)
    return parse_response(response.body, response_type)
"""

    client_header = """\"\"\"
{title} {version}

Сгенерировано insight_client, не редактировать вручную.
\"\"\"
"""


templates = Templates()

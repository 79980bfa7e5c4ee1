"""
Инициализация клиента Atlassian Assets: конфигурация, поиск workspace,
генерация и импорт клиента, настройка авторизации
"""

import dataclasses
import logging
from enum import Enum
from typing import Mapping, Optional

import httpx

from .config import ClientOptions, ResolvedConfig, resolve_config
from .configurator import GeneratedClient, configure_client
from .discovery import discover_workspace_id
from .errors import (
    ClientImportError,
    DiscoveryError,
    GenerationError,
    InsightClientError,
    SpecDownloadError,
)
from .generator import generate_client
from .loader import has_generated_client, load_generated_client
from .spec import download_and_save_spec

logger = logging.getLogger(__name__)


class InitStage(str, Enum):
    RESOLVING = "resolving"
    DISCOVERING = "discovering"
    IMPORTING = "importing"
    CONFIGURING = "configuring"
    READY = "ready"
    FAILED = "failed"


async def _discover(
    config: ResolvedConfig, http_client: Optional[httpx.AsyncClient]
) -> ResolvedConfig:
    """Поиск workspace id; при ошибке продолжаем с исходным base URL"""
    logger.info(f"Discovering workspace ID for instance: {config.instance}")
    try:
        workspace_id = await discover_workspace_id(
            config.instance,
            config.email,
            config.api_token,
            http_client=http_client,
        )
    except DiscoveryError as exc:
        logger.warning(f"Failed to discover workspace ID: {exc}")
        logger.warning("Falling back to the provided base URL without workspace ID")
        return config

    logger.info(f"Discovered workspace ID: {workspace_id}")
    return dataclasses.replace(config, workspace_id=workspace_id)


async def _import_client(
    config: ResolvedConfig, http_client: Optional[httpx.AsyncClient]
) -> GeneratedClient:
    if config.regenerate or not has_generated_client(config.output_dir):
        try:
            if config.regenerate:
                logger.info("Regenerating client code...")
                await download_and_save_spec(
                    config.spec_file, http_client=http_client
                )
            else:
                logger.info(
                    f"Generated client not found in {config.output_dir}, generating..."
                )
            await generate_client(
                config.spec_file, config.output_dir, http_client=http_client
            )
        except (SpecDownloadError, GenerationError) as exc:
            raise ClientImportError(f"Failed to generate client: {exc}") from exc

    return load_generated_client(config.output_dir)


async def init_client(
    options: Optional[ClientOptions] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> GeneratedClient:
    """
    Создание настроенного клиента.

    Каждый вызов возвращает независимый клиент со своей конфигурацией.

    Args:
        options: опции вызывающего кода, перекрывают переменные окружения
        environ: переменные окружения, по умолчанию os.environ
        http_client: httpx.AsyncClient для discovery и загрузки спецификации

    Raises:
        ConfigurationError: не заданы токен или email, сеть не используется
        ClientImportError: клиент не удалось сгенерировать или импортировать
        ConfiguratorError: у клиента нет объекта конфигурации
    """
    stage = InitStage.RESOLVING
    logger.debug(f"Client initialization stage: {stage.value}")

    try:
        config = resolve_config(options, environ)

        if not config.workspace_id and config.instance:
            stage = InitStage.DISCOVERING
            logger.debug(f"Client initialization stage: {stage.value}")
            config = await _discover(config, http_client)

        stage = InitStage.IMPORTING
        logger.debug(f"Client initialization stage: {stage.value}")
        client = await _import_client(config, http_client)

        stage = InitStage.CONFIGURING
        logger.debug(f"Client initialization stage: {stage.value}")
        configure_client(client, config)
    except InsightClientError as exc:
        logger.debug(
            f"Client initialization stage: {InitStage.FAILED.value} "
            f"(at {stage.value}: {exc})"
        )
        raise

    logger.debug(f"Client initialization stage: {InitStage.READY.value}")
    return client

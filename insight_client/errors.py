"""
Исключения клиента Insight
"""

from typing import Optional


class InsightClientError(Exception):
    """Базовое исключение пакета"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(InsightClientError):
    """Не хватает обязательных настроек (токен, email) или файл настроек битый"""


class DiscoveryError(InsightClientError):
    """Не удалось получить workspace id через discovery endpoint"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(
            f"[{status_code}] {message}" if status_code is not None else message
        )


class SpecDownloadError(InsightClientError):
    """Ошибка загрузки или чтения OpenAPI спецификации"""


class GenerationError(InsightClientError):
    """Ошибка генерации клиента"""


class ClientImportError(InsightClientError, ImportError):
    """Сгенерированный клиент не удалось сгенерировать или импортировать"""


class ConfiguratorError(InsightClientError):
    """У клиента нет ожидаемого объекта конфигурации"""

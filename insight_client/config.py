"""
Конфигурация клиента Insight: опции вызывающего кода, переменные окружения
и значения по умолчанию
"""

import os
import re
from dataclasses import dataclass, fields, asdict
from typing import Dict, Optional, Mapping, Tuple

import toml

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.atlassian.com/assets"
DEFAULT_SPEC_FILE = "assets-openapi.json"
DEFAULT_OUTPUT_DIR = "generated"
DEFAULT_CONFIG_FILE = "insight.toml"

# поле -> переменная окружения
ENV_VARS: Dict[str, str] = {
    "base_url": "ASSETS_BASE_URL",
    "api_token": "ASSETS_API_TOKEN",
    "email": "JIRA_EMAIL",
    "instance": "JIRA_INSTANCE",
    "workspace_id": "JIRA_WORKSPACE_ID",
    "spec_file": "ASSETS_SPEC_FILE",
    "output_dir": "ASSETS_OUTPUT_DIR",
}

_INSTANCE_PATTERN = re.compile(r"https://([^./]+)\.atlassian\.net")

# Токен в файл не сохраняется
_SECRET_FIELDS = {"api_token"}


@dataclass
class ClientOptions:
    """Опции инициализации клиента, все поля необязательные"""

    base_url: Optional[str] = None
    instance: Optional[str] = None
    email: Optional[str] = None
    api_token: Optional[str] = None
    workspace_id: Optional[str] = None
    spec_file: Optional[str] = None
    output_dir: Optional[str] = None
    regenerate: bool = False

    @classmethod
    def from_file(
        cls, config_path: str = DEFAULT_CONFIG_FILE
    ) -> Optional["ClientOptions"]:
        """Загрузка опций из toml файла"""
        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except (toml.TomlDecodeError, OSError) as exc:
            raise ConfigurationError(
                f"Не удалось прочитать {config_path}: {exc}"
            ) from exc

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_data.items() if k in known})

    def save_to_file(self, config_path: str = DEFAULT_CONFIG_FILE) -> None:
        """Сохранение опций в файл (без токена)"""
        config_data = {
            key: value
            for key, value in asdict(self).items()
            if value is not None and key not in _SECRET_FIELDS
        }

        with open(config_path, "w") as f:
            toml.dump(config_data, f)

    def merge(self, other: "ClientOptions") -> "ClientOptions":
        """Объединение: заполненные поля other перекрывают текущие"""
        merged = asdict(self)
        for key, value in asdict(other).items():
            if key == "regenerate":
                merged[key] = merged[key] or value
            elif value is not None:
                merged[key] = value
        return ClientOptions(**merged)


@dataclass(frozen=True)
class ResolvedConfig:
    """Итоговая конфигурация, вычисляется один раз на инициализацию"""

    base_url: str
    email: str
    api_token: str
    spec_file: str
    output_dir: str
    instance: Optional[str] = None
    workspace_id: Optional[str] = None
    regenerate: bool = False


def extract_instance_from_url(url: str) -> Optional[str]:
    """Имя инстанса из URL вида https://<instance>.atlassian.net/..."""
    match = _INSTANCE_PATTERN.match(url or "")
    return match.group(1) if match else None


def _pick(
    options: ClientOptions, environ: Mapping[str, str], name: str
) -> Optional[str]:
    value = getattr(options, name)
    if value:
        return value
    return environ.get(ENV_VARS[name]) or None


def resolve_paths(
    options: Optional[ClientOptions] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[str, str]:
    """Файл спецификации и директория клиента, без проверки учетных данных"""
    options = options or ClientOptions()
    environ = os.environ if environ is None else environ

    return (
        _pick(options, environ, "spec_file") or DEFAULT_SPEC_FILE,
        _pick(options, environ, "output_dir") or DEFAULT_OUTPUT_DIR,
    )


def resolve_config(
    options: Optional[ClientOptions] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ResolvedConfig:
    """
    Сборка итоговой конфигурации.

    Порядок для каждого поля: явная опция, переменная окружения, значение
    по умолчанию. Пустые строки считаются отсутствующими.

    Raises:
        ConfigurationError: не задан api_token или email
    """
    options = options or ClientOptions()
    environ = os.environ if environ is None else environ

    base_url = _pick(options, environ, "base_url") or DEFAULT_BASE_URL
    api_token = _pick(options, environ, "api_token")
    email = _pick(options, environ, "email")

    if not api_token:
        raise ConfigurationError(
            "API token is required. Provide it via options.api_token "
            f"or {ENV_VARS['api_token']} environment variable."
        )

    if not email:
        raise ConfigurationError(
            "Email is required for JSM Insight API. Provide it via options.email "
            f"or {ENV_VARS['email']} environment variable."
        )

    instance = _pick(options, environ, "instance") or extract_instance_from_url(
        base_url
    )
    spec_file, output_dir = resolve_paths(options, environ)

    return ResolvedConfig(
        base_url=base_url,
        email=email,
        api_token=api_token,
        instance=instance,
        workspace_id=_pick(options, environ, "workspace_id"),
        spec_file=spec_file,
        output_dir=output_dir,
        regenerate=bool(options.regenerate),
    )

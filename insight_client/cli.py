import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .client import init_client
from .config import (
    DEFAULT_CONFIG_FILE,
    ClientOptions,
    resolve_config,
    resolve_paths,
)
from .discovery import discover_workspace_id
from .errors import ConfigurationError, InsightClientError
from .generator import generate_client
from .patches import fix_generated_code
from .spec import SPEC_URL, download_and_save_spec

OPTION_FIELDS = (
    "base_url",
    "instance",
    "email",
    "api_token",
    "workspace_id",
    "spec_file",
    "output_dir",
)


def _load_options(args: argparse.Namespace) -> ClientOptions:
    """Опции из файла, поверх них - переданные аргументы"""
    file_options = ClientOptions.from_file(args.config)
    if file_options:
        print(f"📋 Используется конфиг из {args.config}")

    arg_options = ClientOptions(
        **{name: getattr(args, name, None) for name in OPTION_FIELDS},
        regenerate=getattr(args, "regenerate", False),
    )
    return (file_options or ClientOptions()).merge(arg_options)


def cmd_download(args: argparse.Namespace) -> None:
    spec_file, _ = resolve_paths(_load_options(args))

    print(f"📥 Загрузка OpenAPI спецификации из {args.url}...")
    path = asyncio.run(download_and_save_spec(spec_file, args.url))
    print(f"✅ Спецификация сохранена в {path}")


def cmd_generate(args: argparse.Namespace) -> None:
    spec_file, output_dir = resolve_paths(_load_options(args))

    print(f"⚙️ Генерация клиента из {spec_file}...")
    path = asyncio.run(generate_client(spec_file, output_dir))
    print("✅ Генерация завершена успешно!")
    print(f"📦 Клиент создан в: {path.resolve()}")


def cmd_fix(args: argparse.Namespace) -> None:
    _, output_dir = resolve_paths(_load_options(args))

    count = fix_generated_code(output_dir)
    print(f"🔧 Исправлено мест: {count}")


def cmd_discover(args: argparse.Namespace) -> None:
    config = resolve_config(_load_options(args))
    if not config.instance:
        raise ConfigurationError(
            "Instance is required to discover workspace ID. "
            "Provide it via --instance or JIRA_INSTANCE environment variable."
        )

    print(f"🔍 Поиск workspace для {config.instance}...")
    workspace_id = asyncio.run(
        discover_workspace_id(config.instance, config.email, config.api_token)
    )
    print(f"✅ Workspace ID: {workspace_id}")


def cmd_init_config(args: argparse.Namespace) -> None:
    options = _load_options(args)
    options.save_to_file(args.config)
    print(f"💾 Конфиг сохранен в {args.config}")


def cmd_check(args: argparse.Namespace) -> None:
    print("🚀 Инициализация клиента...")
    client = asyncio.run(init_client(_load_options(args)))

    print("✅ Клиент готов")
    print(f"   Base URL: {client.config.base_url}")
    print(f"   Interceptors: {len(client.config.interceptors)}")


def _add_paths(parser: argparse.ArgumentParser, spec_file=True, output_dir=True):
    if spec_file:
        parser.add_argument("--spec-file", type=str, help="Файл OpenAPI спецификации")
    if output_dir:
        parser.add_argument(
            "--output-dir", type=str, help="Директория сгенерированного клиента"
        )


def _add_credentials(parser: argparse.ArgumentParser):
    parser.add_argument("--base-url", type=str, help="Base URL API")
    parser.add_argument("--instance", type=str, help="Инстанс: <instance>.atlassian.net")
    parser.add_argument("--email", type=str, help="Email пользователя Jira")
    parser.add_argument("--api-token", type=str, help="API токен")
    parser.add_argument("--workspace-id", type=str, help="Workspace ID")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Клиент Atlassian Assets (JSM Insight) API"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=f"Файл настроек (по умолчанию {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Подробный лог")

    subparsers = parser.add_subparsers(dest="command")

    download = subparsers.add_parser("download", help="Скачать спецификацию")
    _add_paths(download, output_dir=False)
    download.add_argument("--url", type=str, default=SPEC_URL, help="URL спецификации")
    download.set_defaults(handler=cmd_download)

    generate = subparsers.add_parser("generate", help="Сгенерировать клиент")
    _add_paths(generate)
    generate.set_defaults(handler=cmd_generate)

    fix = subparsers.add_parser("fix", help="Исправить сгенерированный код")
    _add_paths(fix, spec_file=False)
    fix.set_defaults(handler=cmd_fix)

    discover = subparsers.add_parser("discover", help="Найти workspace ID")
    _add_credentials(discover)
    discover.set_defaults(handler=cmd_discover)

    init_config = subparsers.add_parser("init-config", help="Создать файл настроек")
    _add_credentials(init_config)
    _add_paths(init_config)
    init_config.set_defaults(handler=cmd_init_config)

    check = subparsers.add_parser("check", help="Инициализировать клиент")
    _add_credentials(check)
    _add_paths(check)
    check.add_argument(
        "--regenerate", action="store_true", help="Перегенерировать клиент"
    )
    check.set_defaults(handler=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Точка входа insight-client"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        args.handler(args)
    except InsightClientError as exc:
        print(f"❌ Ошибка: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Импорт сгенерированного клиента из произвольной директории
"""

import hashlib
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Any, Union

from .errors import ClientImportError

logger = logging.getLogger(__name__)


def has_generated_client(output_dir: Union[str, Path]) -> bool:
    path = Path(output_dir)
    return (path / "__init__.py").is_file() and (path / "client.py").is_file()


def _module_name(path: Path) -> str:
    digest = hashlib.md5(str(path).encode("utf-8")).hexdigest()[:12]
    return f"_insight_generated_{digest}"


def _forget(module_name: str) -> None:
    """Удаление пакета и его подмодулей из sys.modules"""
    for name in list(sys.modules):
        if name == module_name or name.startswith(module_name + "."):
            del sys.modules[name]


def import_generated_package(output_dir: Union[str, Path]) -> ModuleType:
    """
    Импорт сгенерированного пакета под уникальным именем.

    Прежняя версия пакета из той же директории выгружается, поэтому после
    перегенерации импортируется свежий код.
    """
    path = Path(output_dir).resolve()
    init_file = path / "__init__.py"
    if not init_file.is_file():
        raise ClientImportError(f"Generated client not found in {path}")

    module_name = _module_name(path)
    _forget(module_name)
    importlib.invalidate_caches()

    spec = importlib.util.spec_from_file_location(
        module_name, init_file, submodule_search_locations=[str(path)]
    )
    if spec is None or spec.loader is None:
        raise ClientImportError(f"Cannot import generated client from {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        _forget(module_name)
        raise ClientImportError(
            f"Failed to import generated client from {path}: {exc}"
        ) from exc

    logger.debug(f"Imported generated client {module_name} from {path}")
    return module


def load_generated_client(output_dir: Union[str, Path]) -> Any:
    """Экземпляр Client из сгенерированного пакета"""
    module = import_generated_package(output_dir)

    factory = getattr(module, "create_client", None)
    if not callable(factory):
        raise ClientImportError(
            f"Generated client in {output_dir} has no create_client()"
        )

    try:
        return factory()
    except Exception as exc:
        raise ClientImportError(f"Failed to create generated client: {exc}") from exc

"""
Главный модуль генератора - чистый интерфейс
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx

from .config import DEFAULT_OUTPUT_DIR, DEFAULT_SPEC_FILE
from .errors import GenerationError, InsightClientError
from .internal.generator.client_generator import ClientGenerator
from .internal.types.models import Project
from .patches import fix_generated_code
from .spec import SPEC_URL, download_and_save_spec, load_spec

logger = logging.getLogger(__name__)


class ApiClientGenerator:
    """Чистый интерфейс для генерации API клиентов"""

    def __init__(self, openapi_spec: Dict[str, Any], source_url: str = None):
        self.generator = ClientGenerator(openapi_spec, source_url)

    def generate(self) -> Project:
        """Генерация проекта клиента"""
        return self.generator.generate()


def save_project_files(project: Project, target_path: Union[str, Path]) -> Path:
    """Сохранение файлов проекта"""
    target = Path(target_path)
    logger.info(f"Writing {len(project.files)} files to {target}")

    for code_model in project.files:
        path = target / code_model.file_name
        os.makedirs(path.parent, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(str(code_model))

    return target


async def generate_client(
    spec_file: Union[str, Path] = DEFAULT_SPEC_FILE,
    output_dir: Union[str, Path] = DEFAULT_OUTPUT_DIR,
    *,
    spec_url: str = SPEC_URL,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Path:
    """
    Генерация Python клиента из файла спецификации.

    Если файла нет, спецификация сначала скачивается. После записи файлов
    применяются исправления известных дефектов спецификации.

    Raises:
        SpecDownloadError: спецификацию не удалось скачать или прочитать
        GenerationError: ошибка генерации или записи файлов
    """
    spec_path = Path(spec_file)
    if not spec_path.exists():
        logger.info(f"API spec file {spec_path} not found. Downloading...")
        await download_and_save_spec(spec_path, spec_url, http_client=http_client)

    spec = load_spec(spec_path)
    logger.info(f"Generating Python client from {spec_path} to {output_dir}")

    try:
        project = ApiClientGenerator(spec, source_url=str(spec_path)).generate()
        target = save_project_files(project, output_dir)
    except InsightClientError:
        raise
    except Exception as exc:
        raise GenerationError(f"Error generating API client: {exc}") from exc

    fix_generated_code(target)
    logger.info("API client generated successfully")
    return target

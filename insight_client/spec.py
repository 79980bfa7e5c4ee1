"""
Загрузка OpenAPI спецификации Atlassian Assets
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx
import jsonref

from .config import DEFAULT_SPEC_FILE
from .errors import SpecDownloadError

logger = logging.getLogger(__name__)

SPEC_URL = "https://dac-static.atlassian.com/cloud/assets/swagger.v3.json"


async def download_spec(
    url: str = SPEC_URL, *, http_client: Optional[httpx.AsyncClient] = None
) -> Dict[str, Any]:
    """Загрузка спецификации по HTTP"""
    headers = {"Accept": "application/json"}

    try:
        if http_client is None:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(url, headers=headers)
        else:
            response = await http_client.get(url, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as exc:
        raise SpecDownloadError(f"Error downloading API spec: {exc}") from exc
    except ValueError as exc:
        raise SpecDownloadError(
            f"Error downloading API spec: invalid JSON from {url} ({exc})"
        ) from exc


def save_spec(spec: Dict[str, Any], output_file: Union[str, Path]) -> Path:
    """Сохранение спецификации в JSON файл"""
    path = Path(output_file)
    try:
        if path.parent and not path.parent.exists():
            os.makedirs(path.parent, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(spec, f, indent=2, ensure_ascii=False)
    except OSError as exc:
        raise SpecDownloadError(f"Error saving API spec: {exc}") from exc

    logger.info(f"Saved API specification to {path}")
    return path


def load_spec(spec_file: Union[str, Path]) -> Dict[str, Any]:
    """
    Чтение спецификации с разрешением $ref через jsonref.

    Ссылки остаются прокси-объектами jsonref.JsonRef, поэтому генератор
    видит исходные имена схем.
    """
    try:
        with open(spec_file, "r", encoding="utf-8") as f:
            raw_spec = json.load(f)
    except FileNotFoundError as exc:
        raise SpecDownloadError(f"Spec file {spec_file} not found") from exc
    except (OSError, ValueError) as exc:
        raise SpecDownloadError(f"Error reading API spec {spec_file}: {exc}") from exc

    return jsonref.replace_refs(raw_spec)


async def download_and_save_spec(
    output_file: Union[str, Path] = DEFAULT_SPEC_FILE,
    url: str = SPEC_URL,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Path:
    """Загрузка и сохранение спецификации"""
    logger.info(f"Downloading Atlassian Assets API specification from {url}")
    spec = await download_spec(url, http_client=http_client)
    return save_spec(spec, output_file)

"""
Исправления сгенерированного кода под известные дефекты спецификации Assets
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Pattern, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodePatch:
    description: str
    pattern: Pattern
    replacement: str
    file_name: str = "services.py"


# В спецификации у булева параметра asc вместо значения по умолчанию стоит
# его описание
KNOWN_PATCHES: List[CodePatch] = [
    CodePatch(
        description="asc default replaced with True",
        pattern=re.compile(
            r"(\basc\w*\s*:[^=\n]*=\s*)([\"'])Uses the Jira setting for sort order\2"
        ),
        replacement=r"\1True",
    ),
]


def fix_generated_code(
    output_dir: Union[str, Path], patches: List[CodePatch] = KNOWN_PATCHES
) -> int:
    """
    Применение исправлений к файлам в output_dir.

    Повторный запуск ничего не меняет. Отсутствующий файл пропускается.

    Returns:
        Общее число замен
    """
    total = 0

    for patch in patches:
        path = Path(output_dir) / patch.file_name
        if not path.exists():
            logger.warning(f"Generated file {path} not found, skipping fix")
            continue

        content = path.read_text(encoding="utf-8")
        content, count = patch.pattern.subn(patch.replacement, content)

        if count:
            path.write_text(content, encoding="utf-8")
            logger.info(f"Fixed {count} occurrence(s) in {path}: {patch.description}")
        total += count

    if not total:
        logger.info("No fixes needed in generated code")
    return total

"""Утилиты для имен классов, функций и параметров генерируемого кода"""

import keyword
import re
from typing import Set


def snake_case(name: str) -> str:
    """
    Преобразование в snake_case.

    Examples:
        >>> snake_case("objectFindById")
        'object_find_by_id'
        >>> snake_case("HTTPValidationError")
        'http_validation_error'
    """
    name = re.sub(r"[^a-zA-Z0-9]+", "_", name)
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub("_+", "_", s2).strip("_").lower()


def pascal_case(name: str) -> str:
    """
    Преобразование в PascalCase, короткие аббревиатуры сохраняются.

    Examples:
        >>> pascal_case("object_type")
        'ObjectType'
        >>> pascal_case("AQL-search")
        'AQLSearch'
    """
    parts = []
    for part in re.sub(r"[^a-zA-Z0-9]", "_", name).split("_"):
        if not part:
            continue
        if part.isupper() and len(part) <= 4:
            parts.append(part)
        else:
            parts.append(part[0].upper() + part[1:])
    return "".join(parts)


def clean_identifier(name: str, fallback: str = "param") -> str:
    """Валидный идентификатор Python из произвольного имени"""
    name = snake_case(name)
    if not name:
        return fallback
    if name[0].isdigit():
        name = f"{fallback}_{name}"
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        name = f"{name}_"
    return name


def clean_enum_member(value: str) -> str:
    """Имя атрибута enum из его значения"""
    if not value or value.isspace():
        return "EMPTY"

    name = re.sub("_+", "_", "".join(c.upper() if c.isalnum() else "_" for c in value))
    name = name.strip("_")
    if not name:
        return "VALUE"
    if name[0].isdigit():
        name = f"VALUE_{name}"
    return name


def unique_name(name: str, used: Set[str]) -> str:
    """Добавляет числовой суффикс, пока имя занято; регистрирует результат"""
    candidate = name
    index = 2
    while candidate in used:
        candidate = f"{name}_{index}"
        index += 1
    used.add(candidate)
    return candidate

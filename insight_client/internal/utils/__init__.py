"""Утилиты для генератора"""

from .naming import (
    snake_case,
    pascal_case,
    clean_identifier,
    clean_enum_member,
    unique_name,
)

__all__ = [
    "snake_case",
    "pascal_case",
    "clean_identifier",
    "clean_enum_member",
    "unique_name",
]

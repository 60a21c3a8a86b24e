"""
Validator — статическая проверка сгенерированного кода

Экспортирует:
- validate_code(): проверка с выбором правил по виду кода
- validate_jsx(): правила для React/JSX
- register_validator(): подключение новых наборов правил
"""

from .dispatch import register_validator, validate_code, validate_non_empty
from .jsx import (
    CHECK_DUPLICATE_ATTRS,
    CHECK_HREF_HASH,
    CHECK_MISMATCHED_TAGS,
    CHECK_SYNTAX,
    find_syntax_error,
    validate_jsx,
)

__all__ = [
    "validate_code",
    "validate_jsx",
    "validate_non_empty",
    "register_validator",
    "find_syntax_error",
    "CHECK_SYNTAX",
    "CHECK_HREF_HASH",
    "CHECK_MISMATCHED_TAGS",
    "CHECK_DUPLICATE_ATTRS",
]

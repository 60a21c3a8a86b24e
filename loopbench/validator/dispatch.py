"""
Validator dispatch — выбор набора правил по виду кода

jsx/tsx/javascript/typescript проверяются правилами JSX.
Для остальных видов — только проверка, что ответ не пустой.
Новые наборы правил регистрируются через register_validator,
цикл исправлений при этом не меняется.
"""

import logging
from typing import Callable, Dict

from ..schemas.results import IssueType, ValidationIssue, ValidationResult
from .jsx import validate_jsx

logger = logging.getLogger(__name__)

Validator = Callable[[str], ValidationResult]


def validate_non_empty(code: str) -> ValidationResult:
    """Запасная проверка: есть ли хоть какой-то код"""
    if code and code.strip():
        return ValidationResult.from_errors([], {"non_empty": True})
    errors = [ValidationIssue(
        type=IssueType.EMPTY_CODE,
        message="No code generated",
        fix="Return the complete code.",
    )]
    return ValidationResult.from_errors(errors, {"non_empty": False})


_VALIDATORS: Dict[str, Validator] = {
    "jsx": validate_jsx,
    "tsx": validate_jsx,
    "javascript": validate_jsx,
    "typescript": validate_jsx,
}


def register_validator(language: str, validator: Validator) -> None:
    """Зарегистрировать набор правил для вида кода"""
    _VALIDATORS[language.lower()] = validator
    logger.debug(f"Зарегистрирован валидатор для '{language}'")


def validate_code(code: str, language: str = "jsx") -> ValidationResult:
    """
    Проверить код согласно его виду

    Args:
        code: Текст кода
        language: Вид кода (jsx, tsx, javascript, typescript, ...)
    """
    validator = _VALIDATORS.get(language.lower(), validate_non_empty)
    return validator(code)

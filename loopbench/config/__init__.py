"""
Config module — централизованная конфигурация проекта

Экспортирует:
- Settings: класс настроек
- load_settings(): создать объект настроек
- setup_logging(): настроить логирование согласно конфигу
- классификатор моделей (ModelClass, WireProtocol, classify_model, ...)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from .settings import Settings, load_settings
from .models import (
    MODEL_TIERS,
    TIMEOUT_CONFIG,
    ModelClass,
    ModelPolicy,
    WireProtocol,
    classify_model,
    effective_max_tokens,
    get_model_by_tier,
    get_model_policy,
    get_timeout,
    select_protocol,
)


def setup_logging(settings: Settings) -> None:
    """
    Настроить логирование согласно settings.yaml

    Настраивает:
    - Консольный вывод (если enabled)
    - Файловый вывод с ротацией (если enabled)

    Args:
        settings: Объект настроек
    """
    log_config = settings.logging
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_config.level, logging.INFO))
    root_logger.handlers.clear()
    formatter = logging.Formatter(
        fmt=log_config.format,
        datefmt=log_config.date_format,
    )
    if log_config.console.enabled:
        # stderr: stdout занят таблицами и живым выводом прогона
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, log_config.console.level, logging.INFO))
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_config.file.enabled:
        log_file_path = settings.get_log_file_path()
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        if log_config.file.rotation.enabled:
            file_handler = RotatingFileHandler(
                filename=str(log_file_path),
                maxBytes=log_config.file.rotation.max_size_mb * 1024 * 1024,
                backupCount=log_config.file.rotation.backup_count,
                encoding="utf-8",
            )
        else:
            file_handler = logging.FileHandler(
                filename=str(log_file_path),
                encoding="utf-8",
            )

        file_handler.setLevel(getattr(logging, log_config.file.level, logging.DEBUG))
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.debug(f"Логирование настроено: level={log_config.level}, file={log_config.file.enabled}")


__all__ = [
    "Settings",
    "load_settings",
    "setup_logging",
    "MODEL_TIERS",
    "TIMEOUT_CONFIG",
    "ModelClass",
    "ModelPolicy",
    "WireProtocol",
    "classify_model",
    "effective_max_tokens",
    "get_model_by_tier",
    "get_model_policy",
    "get_timeout",
    "select_protocol",
]

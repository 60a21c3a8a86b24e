"""
file operations - работа с файлами конфигов и экспорта
"""

import json
import yaml
from pathlib import Path
from typing import Any, Union


def ensure_dir(path: Union[str, Path]) -> Path:
    """
    Создать директорию если не существует

    Args:
        path: Путь к директории

    Returns:
        Path объект
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_yaml(path: Union[str, Path]) -> dict:
    """
    Загрузить YAML файл

    Args:
        path: Путь к файлу

    Returns:
        Словарь с данными (пустой, если файл пустой)

    Raises:
        FileNotFoundError: Если файл не найден
        yaml.YAMLError: Если файл невалидный
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def save_json(data: Any, path: Union[str, Path], indent: int = 2) -> Path:
    """
    Сохранить данные в JSON файл

    Args:
        data: Данные для сохранения (datetime сериализуется через str)
        path: Путь к файлу
        indent: Отступ для форматирования

    Returns:
        Путь к сохранённому файлу
    """
    path = Path(path)
    ensure_dir(path.parent)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=indent, default=str)

    return path


def load_json(path: Union[str, Path]) -> Any:
    """Загрузить JSON файл"""
    path = Path(path)

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)

"""
Utils — утилиты бенчмарка

Модули:
- file_ops: Работа с файлами (YAML, JSON)
- cli: Форматирование CLI вывода
"""

from .file_ops import load_yaml, load_json, save_json, ensure_dir
from .cli import print_section, print_kv, print_table_header, print_table_row, table_width

__all__ = [
    # File operations
    "load_yaml",
    "load_json",
    "save_json",
    "ensure_dir",
    # CLI
    "print_section",
    "print_kv",
    "print_table_header",
    "print_table_row",
    "table_width",
]

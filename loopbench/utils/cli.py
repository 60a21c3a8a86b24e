"""
cli utilities - форматирование cli
"""


def print_section(title: str, char: str = "=", width: int = 70):
    """Вывести заголовок секции"""
    print()
    print(char * width)
    print(f" {title}")
    print(char * width)


def print_kv(label: str, value: str, indent: int = 2):
    """Вывести пару ключ-значение с выравниванием"""
    print(" " * indent + f"{label}: {value}")


def print_table_header(*columns: tuple[str, int], indent: int = 2, char: str = "-"):
    """Вывести заголовок таблицы

    Args:
        columns: кортежи (название, ширина)
        indent: отступ слева
        char: символ линии под заголовком
    """
    header = "".join(f"{col:<{width}}" for col, width in columns)
    print(" " * indent + header)
    print(" " * indent + char * table_width(*columns))


def print_table_row(*values: tuple[str, int], indent: int = 2):
    """Вывести строку таблицы

    Args:
        values: кортежи (значение, ширина)
        indent: отступ слева
    """
    row = "".join(f"{str(val):<{width}}" for val, width in values)
    print(" " * indent + row)


def table_width(*columns: tuple[str, int]) -> int:
    """Полная ширина таблицы"""
    return sum(width for _, width in columns)

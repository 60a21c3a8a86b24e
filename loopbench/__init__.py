"""
LoopBench — бенчмарк генерации кода с циклом исправлений

Пакеты:
- config: настройки и классификация моделей
- schemas: схемы данных (реестр, тесты, запросы, результаты)
- clients: шлюз к LLM API и типизированные ошибки
- validator: статическая проверка сгенерированного кода
- core: цикл исправлений, координатор, наблюдатели, отчёты
- utils: файлы и форматирование CLI
"""

__version__ = "0.1.0"

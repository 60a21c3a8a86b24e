"""
Core — ядро бенчмарка

Основные компоненты:
- BenchmarkRunner: Координатор прогона (тесты × модели)
- FixLoop: Цикл генерация → валидация → исправление
- CancellationToken: Кооперативная отмена
- BenchmarkObserver и реализации: события для живых потребителей
- reporter: Вывод и экспорт результатов
"""

from .benchmark import BenchmarkRunner
from .cancellation import CancellationToken
from .fix_loop import FixLoop, LoopState, build_fix_prompt
from .observer import (
    BenchmarkObserver,
    CompositeObserver,
    ConsoleObserver,
    LoggingObserver,
    NullObserver,
)
from .reporter import (
    ReportFormatter,
    build_export_record,
    export_results,
    format_iteration_history,
    print_analysis,
    print_availability,
    print_loop_effectiveness,
    print_summary,
    print_test_details,
)

__all__ = [
    # Основные классы
    "BenchmarkRunner",
    "FixLoop",
    "LoopState",
    "build_fix_prompt",
    "CancellationToken",
    # Наблюдатели
    "BenchmarkObserver",
    "NullObserver",
    "LoggingObserver",
    "ConsoleObserver",
    "CompositeObserver",
    # Отчёты
    "ReportFormatter",
    "format_iteration_history",
    "print_availability",
    "print_summary",
    "print_analysis",
    "print_loop_effectiveness",
    "print_test_details",
    "build_export_record",
    "export_results",
]

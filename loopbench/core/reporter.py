"""
Reporter — вывод и экспорт результатов прогона

Функции:
- Сводная таблица по моделям
- Анализ: доля с первой попытки, после цикла, среднее число итераций
- Эффективность цикла исправлений
- Экспорт в переносимую JSON-запись {timestamp, results}

Использование:
    from loopbench.core.reporter import print_summary, export_results

    print_summary(run)
    export_results(run, "results/benchmark.json")
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..schemas.results import BenchmarkRun, IterationRecord, UnavailableModel
from ..schemas.models import ModelConfig
from ..utils.cli import print_section, print_table_header, print_table_row, table_width
from ..utils.file_ops import save_json


SUMMARY_COLUMNS = (
    ("Model", 16),
    ("1st Try", 8),
    ("Fixed", 8),
    ("Failed", 8),
    ("Avg Time", 10),
    ("Tokens (P/C/R)", 28),
)


class ReportFormatter:
    """Форматирование значений для отчётов"""

    @staticmethod
    def format_tokens(tokens: int) -> str:
        """Форматировать токены"""
        if tokens >= 1_000_000:
            return f"{tokens/1_000_000:.2f}M"
        elif tokens >= 1_000:
            return f"{tokens/1_000:.1f}K"
        return str(tokens)

    @staticmethod
    def format_time(seconds: float) -> str:
        """Форматировать время"""
        if seconds < 60:
            return f"{seconds:.1f}s"
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"

    @staticmethod
    def format_percent(value: float) -> str:
        """Форматировать долю как процент"""
        return f"{value * 100:.0f}%"

    @staticmethod
    def format_check(passed: bool) -> str:
        """Отметка пройденной/непройденной проверки"""
        return "✅" if passed else "❌"


def format_iteration_history(history: List[IterationRecord]) -> str:
    """
    История итераций одной строкой

    Пример: ❌(SYNTAX_ERROR) → ❌(MISMATCHED_TAGS) → ✅
    """
    parts = []
    for record in history:
        if record.valid:
            parts.append(ReportFormatter.format_check(True))
        else:
            parts.append(f"{ReportFormatter.format_check(False)}({','.join(record.error_types)})")
    return " → ".join(parts)


def print_availability(available: List[ModelConfig], unavailable: List[UnavailableModel]) -> None:
    """Вывести итог проверки доступности"""
    print("\n🔍 Model Availability:\n")
    print(f"   Available: {len(available)}")
    print(f"   Unavailable: {len(unavailable)}\n")

    if unavailable:
        print("   Unavailable models:")
        for item in unavailable:
            print(f"     - {item.model.name}: {item.reason}")
        print()


def print_summary(run: BenchmarkRun) -> None:
    """Вывести сводную таблицу по моделям (в порядке реестра)"""
    fmt = ReportFormatter()

    print_section("SUMMARY", char="═", width=table_width(*SUMMARY_COLUMNS))
    print_table_header(*SUMMARY_COLUMNS, indent=0, char="═")

    for model in run.available:
        aggregate = run.aggregates.get(model.id)
        if aggregate is None:
            continue

        if aggregate.total_tests:
            avg_time = fmt.format_time(aggregate.average_duration_ms / 1000)
        else:
            avg_time = "N/A"
        tokens = aggregate.total_tokens

        print_table_row(
            (aggregate.name, 16),
            (aggregate.passed_first_try, 8),
            (aggregate.passed_after_loop, 8),
            (aggregate.total_failed, 8),
            (avg_time, 10),
            (f"{tokens.prompt}/{tokens.completion}/{tokens.reasoning}", 28),
            indent=0,
        )

    print("═" * table_width(*SUMMARY_COLUMNS))
    print("Tokens: P=Prompt, C=Completion, R=Reasoning\n")

    if run.cancelled:
        print(f"⚠️  Прогон отменён: завершено {run.completed_pairs} пар\n")


def print_analysis(run: BenchmarkRun) -> None:
    """Вывести доли успеха и среднее число итераций по моделям"""
    fmt = ReportFormatter()
    print("📊 ANALYSIS:\n")

    for model in run.available:
        aggregate = run.aggregates.get(model.id)
        if aggregate is None or not aggregate.total_tests:
            continue

        print(f"   {aggregate.name}:")
        print(f"     • First-try success rate: {fmt.format_percent(aggregate.first_try_rate)}")
        print(f"     • After validation loop:  {fmt.format_percent(aggregate.loop_success_rate)}")
        print(f"     • Average iterations:     {aggregate.average_iterations:.1f}\n")


def print_loop_effectiveness(run: BenchmarkRun) -> None:
    """Вывести, сколько провалов исправил цикл для каждой модели"""
    print("📈 VALIDATION LOOP EFFECTIVENESS:\n")

    for model in run.available:
        aggregate = run.aggregates.get(model.id)
        if aggregate is None:
            continue

        if aggregate.passed_after_loop > 0:
            print(f"   ✅ {aggregate.name}: Validation loop fixed "
                  f"{aggregate.passed_after_loop} test(s) that would have failed!")
        elif aggregate.passed_first_try == run.test_count:
            print(f"   🎯 {aggregate.name}: All tests passed on first try (loop not needed)")
        else:
            print(f"   ⚠️  {aggregate.name}: Validation loop couldn't fix "
                  f"{aggregate.total_failed} failure(s)")
    print()


def print_test_details(run: BenchmarkRun) -> None:
    """Вывести историю итераций каждой сохранённой пары"""
    for model in run.available:
        aggregate = run.aggregates.get(model.id)
        if aggregate is None or not aggregate.tests:
            continue

        print(f"   {aggregate.name}:")
        for result in aggregate.tests:
            line = format_iteration_history(result.history) or "-"
            suffix = f"  ({result.error})" if result.error else ""
            print(f"     {result.test_name:<24} {line}{suffix}")
        print()


# =============================================================================
# Экспорт
# =============================================================================

def build_export_record(
    run: BenchmarkRun,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Построить переносимую запись результатов

    Args:
        run: Результат прогона
        timestamp: Время экспорта (по умолчанию — сейчас)

    Returns:
        {"timestamp": ISO-8601, "results": {model_id: агрегат}}
    """
    timestamp = timestamp or datetime.now()
    return {
        "timestamp": timestamp.isoformat(),
        "results": {
            model_id: aggregate.model_dump(mode="json")
            for model_id, aggregate in run.aggregates.items()
        },
    }


def export_results(
    run: BenchmarkRun,
    path: Union[str, Path],
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Сохранить запись результатов в JSON

    Returns:
        Путь к сохранённому файлу
    """
    return save_json(build_export_record(run, timestamp), path)

"""
Observer — события прогона для живых потребителей

Координатор и цикл исправлений сообщают о ходе работы только через
BenchmarkObserver и не знают, сколько и каких слушателей подключено.

События (в скобках — имя канала для UI):
- availability_started / availability_checked / availability_completed (availability:*)
- benchmark_started / benchmark_completed (benchmark:*)
- test_started / test_completed (test:*)
- iteration_started / iteration_completed (iteration:*)
- log (свободный текст)
- progress_updated (новый снимок прогресса)

Реализации:
- NullObserver: ничего не делает
- LoggingObserver: пишет события в logging
- ConsoleObserver: живой вывод в консоль для CLI
- CompositeObserver: раздаёт события списку наблюдателей
"""

import logging
from typing import List, Optional, Protocol

from ..schemas.models import ModelConfig
from ..schemas.tasks import TestCase
from ..schemas.results import (
    BenchmarkRun,
    IterationRecord,
    ProgressSnapshot,
    TestResult,
    UnavailableModel,
    ValidationIssue,
)

logger = logging.getLogger(__name__)


class BenchmarkObserver(Protocol):
    """Порт наблюдателя: события прогона в терминах предметной области"""

    def availability_started(self, models: List[ModelConfig]) -> None: ...

    def availability_checked(
        self,
        model: ModelConfig,
        available: bool,
        elapsed: float,
        reason: Optional[str] = None,
    ) -> None: ...

    def availability_completed(
        self,
        available: List[ModelConfig],
        unavailable: List[UnavailableModel],
    ) -> None: ...

    def benchmark_started(self, models: List[ModelConfig], test_cases: List[TestCase]) -> None: ...

    def benchmark_completed(self, run: BenchmarkRun) -> None: ...

    def test_started(self, model: ModelConfig, test_case: TestCase) -> None: ...

    def test_completed(self, model: ModelConfig, test_case: TestCase, result: TestResult) -> None: ...

    def iteration_started(self, model: ModelConfig, test_case: TestCase, iteration: int) -> None: ...

    def iteration_completed(
        self,
        model: ModelConfig,
        test_case: TestCase,
        record: IterationRecord,
        errors: List[ValidationIssue],
    ) -> None: ...

    def log(self, level: str, message: str, model_id: Optional[str] = None) -> None: ...

    def progress_updated(self, snapshot: ProgressSnapshot) -> None: ...


class NullObserver:
    """Наблюдатель по умолчанию — игнорирует все события"""

    def availability_started(self, models):
        pass

    def availability_checked(self, model, available, elapsed, reason=None):
        pass

    def availability_completed(self, available, unavailable):
        pass

    def benchmark_started(self, models, test_cases):
        pass

    def benchmark_completed(self, run):
        pass

    def test_started(self, model, test_case):
        pass

    def test_completed(self, model, test_case, result):
        pass

    def iteration_started(self, model, test_case, iteration):
        pass

    def iteration_completed(self, model, test_case, record, errors):
        pass

    def log(self, level, message, model_id=None):
        pass

    def progress_updated(self, snapshot):
        pass


_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LoggingObserver(NullObserver):
    """Пишет события прогона в стандартный logging"""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._logger = log or logger

    def availability_checked(self, model, available, elapsed, reason=None):
        if available:
            self._logger.info(f"{model.name} доступна ({elapsed:.1f}с)")
        else:
            self._logger.warning(f"{model.name} недоступна: {reason}")

    def benchmark_started(self, models, test_cases):
        self._logger.info(
            f"Запуск бенчмарка: тестов={len(test_cases)}, "
            f"моделей=[{', '.join(m.name for m in models)}]"
        )

    def benchmark_completed(self, run):
        self._logger.info(
            f"Бенчмарк завершён: пар={run.completed_pairs}, "
            f"токенов={run.total_tokens.total}, отменён={run.cancelled}"
        )

    def test_completed(self, model, test_case, result):
        if not result.success:
            self._logger.error(f"{model.name} / {test_case.name}: ошибка: {result.error}")
        else:
            self._logger.info(
                f"{model.name} / {test_case.name}: "
                f"passed={result.passed_after_loop}, итераций={result.iterations}, "
                f"время={result.duration_ms}мс"
            )

    def iteration_completed(self, model, test_case, record, errors):
        self._logger.debug(
            f"{model.name} / {test_case.name}: итерация {record.iteration}, "
            f"valid={record.valid}, ошибки={record.error_types}"
        )

    def log(self, level, message, model_id=None):
        prefix = f"[{model_id}] " if model_id else ""
        self._logger.log(_LOG_LEVELS.get(level, logging.INFO), f"{prefix}{message}")


class ConsoleObserver(NullObserver):
    """Живой вывод прогона в консоль (для CLI)"""

    def availability_started(self, models):
        print()
        print(f" Проверка доступности {len(models)} моделей...")
        print()

    def availability_checked(self, model, available, elapsed, reason=None):
        if available:
            print(f"   {model.name:<16} [+] доступна ({elapsed:.1f}с)")
        else:
            print(f"   {model.name:<16} [x] недоступна: {reason}")

    def availability_completed(self, available, unavailable):
        total = len(available) + len(unavailable)
        print()
        print(f"   Итого: {len(available)}/{total} моделей доступно")

    def benchmark_started(self, models, test_cases):
        print()
        print("=" * 60)
        print(f" Тестов: {len(test_cases)}, моделей: {len(models)}")
        print("=" * 60)

    def test_started(self, model, test_case):
        print(f"\n  {test_case.name} | {model.name}")

    def iteration_started(self, model, test_case, iteration):
        if iteration == 1:
            print("     Итерация 1: генерация...")
        else:
            print(f"     Итерация {iteration}: исправление...")

    def iteration_completed(self, model, test_case, record, errors):
        if record.valid:
            print(f"     [+] Итерация {record.iteration}: валидация пройдена")
        else:
            print(f"     [x] Итерация {record.iteration}: ошибок {len(errors)} "
                  f"({', '.join(record.error_types)})")

    def test_completed(self, model, test_case, result):
        if not result.success:
            print(f"     ОШИБКА: {result.error}")
        elif result.passed_first_try:
            print("     PASSED с первой попытки")
        elif result.passed_after_loop:
            print(f"     PASSED после {result.iterations} итераций")
        else:
            print(f"     FAILED после {result.iterations} итераций")

    def progress_updated(self, snapshot):
        if snapshot.completed_pairs and snapshot.total_pairs:
            print(f"     Прогресс: {snapshot.completed_pairs}/{snapshot.total_pairs} "
                  f"({snapshot.percent:.0f}%)")


class CompositeObserver:
    """
    Раздаёт каждое событие всем наблюдателям по порядку

    Не наследуется от BenchmarkObserver (структурная типизация через Protocol).
    """

    def __init__(self, observers: List[BenchmarkObserver]) -> None:
        self._observers = observers

    def availability_started(self, models):
        for obs in self._observers:
            obs.availability_started(models)

    def availability_checked(self, model, available, elapsed, reason=None):
        for obs in self._observers:
            obs.availability_checked(model, available, elapsed, reason)

    def availability_completed(self, available, unavailable):
        for obs in self._observers:
            obs.availability_completed(available, unavailable)

    def benchmark_started(self, models, test_cases):
        for obs in self._observers:
            obs.benchmark_started(models, test_cases)

    def benchmark_completed(self, run):
        for obs in self._observers:
            obs.benchmark_completed(run)

    def test_started(self, model, test_case):
        for obs in self._observers:
            obs.test_started(model, test_case)

    def test_completed(self, model, test_case, result):
        for obs in self._observers:
            obs.test_completed(model, test_case, result)

    def iteration_started(self, model, test_case, iteration):
        for obs in self._observers:
            obs.iteration_started(model, test_case, iteration)

    def iteration_completed(self, model, test_case, record, errors):
        for obs in self._observers:
            obs.iteration_completed(model, test_case, record, errors)

    def log(self, level, message, model_id=None):
        for obs in self._observers:
            obs.log(level, message, model_id)

    def progress_updated(self, snapshot):
        for obs in self._observers:
            obs.progress_updated(snapshot)

"""
BenchmarkRunner — координатор прогона бенчмарка

Центральный компонент, отвечающий за:
- Предварительную проверку доступности моделей
- Обход тестов × доступных моделей (строго по одной паре)
- Накопление агрегатов по моделям
- Публикацию снимка прогресса
- Кооперативную отмену

Использование:
    from loopbench.core import BenchmarkRunner, CancellationToken

    runner = BenchmarkRunner.from_settings(settings, gateway, fix_loop)
    token = CancellationToken()

    run = runner.run(models, test_cases, cancel_token=token)
    for aggregate in run.aggregates.values():
        print(aggregate.name, aggregate.loop_success_rate)
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..clients.errors import (
    AvailabilityError,
    BenchmarkCancelledError,
    NoModelsAvailableError,
)
from ..clients.gateway import OpenAIGateway
from ..config.settings import ProbeConfig
from ..schemas.messages import GenerationRequest
from ..schemas.models import ModelConfig
from ..schemas.tasks import TestCase
from ..schemas.results import (
    BenchmarkRun,
    ModelAggregate,
    ProgressSnapshot,
    RunPhase,
    UnavailableModel,
)
from .cancellation import CancellationToken
from .fix_loop import FixLoop
from .observer import BenchmarkObserver, NullObserver


logger = logging.getLogger(__name__)


def _format_time(seconds: float) -> str:
    """Форматировать время для логов"""
    if seconds < 1:
        return f"{seconds*1000:.0f}мс"
    return f"{seconds:.1f}с"


# =============================================================================
# Основной класс
# =============================================================================

class BenchmarkRunner:
    """
    Координатор прогона

    Координирует весь процесс:
    1. Проверка доступности каждой модели (последовательно)
    2. Тесты в порядке вызывающего × модели в порядке реестра
    3. Учёт каждого TestResult в ModelAggregate
    4. Снимок прогресса после каждой пары

    Единственный писатель состояния прогона. Читатели получают только
    неизменяемый ProgressSnapshot, который заменяется целиком.

    Атрибуты:
        gateway: Шлюз к API (для проверки доступности)
        fix_loop: Цикл исправлений для пар
        observer: Получатель событий
        last_run: Результат последнего прогона (в том числе отменённого)

    Example:
        runner = BenchmarkRunner(gateway, FixLoop(gateway))
        run = runner.run(models, cases)
        print(f"Пар: {run.completed_pairs}")
    """

    def __init__(
        self,
        gateway: OpenAIGateway,
        fix_loop: FixLoop,
        observer: Optional[BenchmarkObserver] = None,
        probe: Optional[ProbeConfig] = None,
        pair_delay_ms: int = 1000,
        retain_results: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            gateway: Шлюз к API
            fix_loop: Цикл исправлений
            observer: Получатель событий (по умолчанию NullObserver)
            probe: Параметры проверки доступности
            pair_delay_ms: Пауза между парами
            retain_results: Хранить TestResult в агрегатах
            sleep: Функция ожидания (для тестов)
        """
        self.gateway = gateway
        self.fix_loop = fix_loop
        self.observer = observer or NullObserver()
        self.probe = probe or ProbeConfig()
        self.pair_delay_ms = pair_delay_ms
        self.retain_results = retain_results
        self._sleep = sleep

        self._progress = ProgressSnapshot()
        self.last_run: Optional[BenchmarkRun] = None

        logger.debug(f"BenchmarkRunner инициализирован (пауза между парами: {pair_delay_ms}мс)")

    @classmethod
    def from_settings(
        cls,
        settings,
        gateway: OpenAIGateway,
        fix_loop: FixLoop,
        observer: Optional[BenchmarkObserver] = None,
        **kwargs,
    ) -> "BenchmarkRunner":
        """
        Создать координатор из Settings

        Args:
            settings: Объект Settings из loopbench.config
            gateway: Шлюз к API
            fix_loop: Цикл исправлений
            observer: Получатель событий
            **kwargs: Переопределения (sleep, pair_delay_ms, ...)
        """
        benchmark = settings.benchmark
        params = dict(
            probe=benchmark.probe,
            pair_delay_ms=benchmark.pair_delay_ms,
            retain_results=benchmark.retain_results,
        )
        params.update(kwargs)
        return cls(gateway, fix_loop, observer=observer, **params)

    # =========================================================================
    # Публичный API
    # =========================================================================

    @property
    def progress(self) -> ProgressSnapshot:
        """Текущий снимок прогресса (неизменяемый)"""
        return self._progress

    def check_availability(
        self,
        models: List[ModelConfig],
        cancel_token: Optional[CancellationToken] = None,
    ) -> Tuple[List[ModelConfig], List[UnavailableModel]]:
        """
        Проверить доступность моделей минимальным запросом

        Args:
            models: Модели для проверки
            cancel_token: Токен отмены (проверяется перед каждой моделью)

        Returns:
            Кортеж (доступные, недоступные с причиной)

        Raises:
            BenchmarkCancelledError: Если отмена запрошена во время проверки
        """
        self.observer.availability_started(models)

        available: List[ModelConfig] = []
        unavailable: List[UnavailableModel] = []

        for index, model in enumerate(models):
            if cancel_token is not None and cancel_token.cancelled:
                raise BenchmarkCancelledError()

            start_time = time.time()
            try:
                self._probe(model)
            except AvailabilityError as e:
                logger.warning(f"Модель {model.id} недоступна: {e.reason}")
                unavailable.append(UnavailableModel(model=model, reason=e.reason))
                self.observer.availability_checked(model, False, time.time() - start_time, e.reason)
            else:
                elapsed = time.time() - start_time
                logger.info(f"Модель {model.id} доступна ({_format_time(elapsed)})")
                available.append(model)
                self.observer.availability_checked(model, True, elapsed)

            if index < len(models) - 1:
                self._sleep(self.probe.delay_ms / 1000)

        self.observer.availability_completed(available, unavailable)
        return available, unavailable

    def run(
        self,
        models: List[ModelConfig],
        test_cases: List[TestCase],
        cancel_token: Optional[CancellationToken] = None,
    ) -> BenchmarkRun:
        """
        Запустить прогон

        Args:
            models: Запрошенные модели (в порядке реестра)
            test_cases: Тесты (порядок сохраняется)
            cancel_token: Токен кооперативной отмены

        Returns:
            BenchmarkRun с агрегатами по доступным моделям

        Raises:
            NoModelsAvailableError: Если ни одна модель не прошла проверку
            BenchmarkCancelledError: При отмене; err.run — частичный прогон
        """
        run = BenchmarkRun(test_count=len(test_cases))
        self.last_run = run

        logger.info(
            f"Запуск бенчмарка: моделей={len(models)}, тестов={len(test_cases)}"
        )

        self._progress = ProgressSnapshot()
        self._publish(phase=RunPhase.CHECKING)
        try:
            available, unavailable = self.check_availability(models, cancel_token)
        except BenchmarkCancelledError:
            self._finish(run, RunPhase.CANCELLED)
            raise BenchmarkCancelledError(run)

        run.available = available
        run.unavailable = unavailable

        if not available:
            self._finish(run, RunPhase.FAILED)
            logger.error("Нет доступных моделей")
            raise NoModelsAvailableError(unavailable)

        for model in available:
            run.aggregates[model.id] = ModelAggregate(model_id=model.id, name=model.name)

        total_pairs = len(test_cases) * len(available)
        self._publish(
            phase=RunPhase.RUNNING,
            total_pairs=total_pairs,
            available_models=len(available),
        )
        self.observer.benchmark_started(available, test_cases)

        pair_index = 0
        for test_case in test_cases:
            self._check_cancelled(run, cancel_token)

            for model in available:
                self._check_cancelled(run, cancel_token)

                pair_index += 1
                self._publish(current_test=test_case.name, current_model=model.id)
                self.observer.test_started(model, test_case)
                logger.info(
                    f"[{pair_index}/{total_pairs}] {test_case.name} | {model.name}"
                )

                result = self.fix_loop.run(model, test_case)
                run.aggregates[model.id].record(result, retain=self.retain_results)

                self.observer.test_completed(model, test_case, result)
                self._publish(
                    completed_pairs=run.completed_pairs,
                    tokens=run.total_tokens,
                )

                if pair_index < total_pairs:
                    self._sleep(self.pair_delay_ms / 1000)

        self._finish(run, RunPhase.COMPLETE)
        self.observer.benchmark_completed(run)

        logger.info(
            f"Бенчмарк завершён: пар={run.completed_pairs}, "
            f"токенов={run.total_tokens.total}"
        )
        return run

    # =========================================================================
    # Приватные методы
    # =========================================================================

    def _probe(self, model: ModelConfig) -> None:
        """
        Минимальный запрос к модели

        Raises:
            AvailabilityError: С причиной отказа
        """
        request = GenerationRequest(
            model=model.id,
            system_prompt=self.probe.system_prompt,
            user_prompt=self.probe.user_prompt,
            max_tokens=self.probe.max_tokens,
            timeout_ms=self.probe.timeout_ms,
        )
        try:
            self.gateway.generate(request, model.policy)
        except Exception as e:
            raise AvailabilityError(model.id, str(e) or type(e).__name__) from e

    def _check_cancelled(
        self,
        run: BenchmarkRun,
        cancel_token: Optional[CancellationToken],
    ) -> None:
        """Остановить прогон, если запрошена отмена"""
        if cancel_token is None or not cancel_token.cancelled:
            return

        logger.warning(f"Прогон отменён после {run.completed_pairs} пар")
        self.observer.log("warning", f"Прогон отменён после {run.completed_pairs} пар")
        self._finish(run, RunPhase.CANCELLED)
        self.observer.benchmark_completed(run)
        raise BenchmarkCancelledError(run)

    def _finish(self, run: BenchmarkRun, phase: RunPhase) -> None:
        run.finished_at = datetime.now()
        run.cancelled = phase is RunPhase.CANCELLED
        self._publish(phase=phase, current_test=None, current_model=None)

    def _publish(self, **changes) -> None:
        """Заменить снимок прогресса целиком и уведомить наблюдателя"""
        self._progress = self._progress.model_copy(update=changes)
        self.observer.progress_updated(self._progress)

"""
FixLoop — цикл генерация → валидация → исправление для одной пары модель × тест

Состояния: GENERATING → VALIDATING → {DONE | FIXING → VALIDATING → ...} → DONE | FAILED

- GENERATING: первый вызов с промптом теста (температура выше)
- VALIDATING: проверка кода, запись IterationRecord
- FIXING: вызов с корректирующим промптом (температура ниже)
- DONE: код прошёл валидацию
- FAILED: бюджет итераций исчерпан или вызов API упал после всех повторов

Использование:
    from loopbench.core import FixLoop

    loop = FixLoop(gateway, max_iterations=3)
    result = loop.run(model, test_case)
    print(result.passed_after_loop, result.iterations)
"""

import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from ..clients.gateway import OpenAIGateway
from ..schemas.messages import GenerationRequest, GenerationResult, TokenUsage
from ..schemas.models import ModelConfig
from ..schemas.tasks import TestCase
from ..schemas.results import (
    IssueType,
    IterationRecord,
    TestResult,
    ValidationIssue,
    ValidationResult,
)
from ..validator import validate_code
from .observer import BenchmarkObserver, NullObserver

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    """Состояние цикла исправлений"""
    GENERATING = "generating"
    VALIDATING = "validating"
    FIXING = "fixing"
    DONE = "done"
    FAILED = "failed"


FIX_PROMPT_TEMPLATE = """The following code has validation errors:

```jsx
{code}
```

ERRORS FOUND:
{errors}

IMPORTANT - How to fix MISMATCHED_TAGS:
❌ WRONG: <button onClick={{...}}>Text</a>  (opens button, closes a)
✅ RIGHT: <button onClick={{...}}>Text</button>  (both must match!)

Please COMPLETELY REWRITE the navigation elements. Return ONLY the fixed code, no explanations."""


def build_fix_prompt(code: str, errors: List[ValidationIssue]) -> str:
    """
    Построить корректирующий промпт

    Args:
        code: Предыдущий код (вставляется без изменений)
        errors: Текущие ошибки валидации

    Returns:
        Текст промпта с кодом, списком ошибок и примером исправления
    """
    error_lines = "\n".join(f"- {e.message}\n  Fix: {e.fix}" for e in errors)
    return FIX_PROMPT_TEMPLATE.format(code=code, errors=error_lines)


class FixLoop:
    """
    Ограниченный цикл исправлений

    Ответственность (SRP):
    - Вызовы шлюза и валидатора для одной пары
    - Учёт итераций, токенов и времени
    - Превращение исключений шлюза в структурный результат (success=False)

    Не знает о других парах, агрегатах и отмене прогона.
    """

    def __init__(
        self,
        gateway: OpenAIGateway,
        observer: Optional[BenchmarkObserver] = None,
        max_iterations: int = 3,
        max_tokens: int = 2000,
        generation_temperature: float = 0.7,
        fix_temperature: float = 0.3,
        iteration_delay_ms: int = 500,
        system_prompt: str = "You are an expert React developer. Generate clean, valid JSX code.",
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            gateway: Шлюз к API (любой объект с методом generate)
            observer: Получатель событий итераций
            max_iterations: Максимум вызовов модели на пару
            max_tokens: Бюджет ответа на вызов
            generation_temperature: Температура первой генерации
            fix_temperature: Температура исправлений
            iteration_delay_ms: Пауза перед каждым исправлением
            system_prompt: Системный промпт для всех вызовов
            sleep: Функция ожидания (для тестов)
        """
        if max_iterations < 1:
            raise ValueError("max_iterations должно быть >= 1")

        self.gateway = gateway
        self.observer = observer or NullObserver()
        self.max_iterations = max_iterations
        self.max_tokens = max_tokens
        self.generation_temperature = generation_temperature
        self.fix_temperature = fix_temperature
        self.iteration_delay_ms = iteration_delay_ms
        self.system_prompt = system_prompt
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings,
        gateway: OpenAIGateway,
        observer: Optional[BenchmarkObserver] = None,
        **kwargs,
    ) -> "FixLoop":
        """
        Создать цикл из Settings

        Args:
            settings: Объект Settings из loopbench.config
            gateway: Шлюз к API
            observer: Получатель событий
            **kwargs: Переопределения (max_iterations, sleep, ...)
        """
        loop = settings.loop
        params = dict(
            max_iterations=loop.max_iterations,
            max_tokens=loop.max_tokens,
            generation_temperature=loop.generation_temperature,
            fix_temperature=loop.fix_temperature,
            iteration_delay_ms=loop.iteration_delay_ms,
            system_prompt=loop.system_prompt,
        )
        params.update(kwargs)
        return cls(gateway, observer=observer, **params)

    # =========================================================================
    # Публичный API
    # =========================================================================

    def run(self, model: ModelConfig, test_case: TestCase) -> TestResult:
        """
        Прогнать цикл для пары модель × тест

        Args:
            model: Модель из реестра
            test_case: Тест (имя, промпт, вид кода)

        Returns:
            TestResult. Исключения шлюза не пробрасываются:
            они дают success=False и ошибку GENERATION_FAILED.
        """
        state = LoopState.GENERATING
        iteration = 1
        code: Optional[str] = None
        validation: Optional[ValidationResult] = None
        history: List[IterationRecord] = []
        usage = TokenUsage()
        start_time = time.time()

        logger.debug(f"{model.id} / {test_case.name}: старт цикла")

        try:
            while state not in (LoopState.DONE, LoopState.FAILED):
                if state is LoopState.GENERATING:
                    self.observer.iteration_started(model, test_case, iteration)
                    result = self._call(model, test_case.prompt, self.generation_temperature)
                    state = LoopState.VALIDATING

                elif state is LoopState.FIXING:
                    self._sleep(self.iteration_delay_ms / 1000)
                    iteration += 1
                    self.observer.iteration_started(model, test_case, iteration)
                    result = self._call(
                        model,
                        build_fix_prompt(code or "", validation.errors),
                        self.fix_temperature,
                    )
                    state = LoopState.VALIDATING

                else:
                    code = result.text
                    validation = validate_code(code, test_case.language)

                    record = IterationRecord(
                        iteration=iteration,
                        valid=validation.valid,
                        error_types=validation.error_types,
                        usage=result.usage,
                    )
                    history.append(record)
                    usage = usage + result.usage
                    self.observer.iteration_completed(model, test_case, record, validation.errors)

                    if validation.valid:
                        state = LoopState.DONE
                    elif iteration < self.max_iterations:
                        state = LoopState.FIXING
                    else:
                        state = LoopState.FAILED

        except Exception as e:
            logger.warning(f"{model.id} / {test_case.name}: итерация {iteration} прервана: {e}")
            self.observer.log("error", f"{test_case.name}: {e}", model.id)
            return self._failure(model, test_case, e, code, iteration, history, usage, start_time)

        logger.debug(
            f"{model.id} / {test_case.name}: {state.value}, итераций={iteration}"
        )

        return TestResult(
            model_id=model.id,
            test_name=test_case.name,
            success=True,
            code=code,
            validation=validation,
            iterations=iteration,
            history=history,
            duration_ms=self._elapsed_ms(start_time),
            passed_after_loop=state is LoopState.DONE,
            token_usage=usage,
        )

    # =========================================================================
    # Приватные методы
    # =========================================================================

    def _call(self, model: ModelConfig, user_prompt: str, temperature: float) -> GenerationResult:
        """Один вызов модели через шлюз"""
        request = GenerationRequest(
            model=model.id,
            system_prompt=self.system_prompt,
            user_prompt=user_prompt,
            max_tokens=self.max_tokens,
            temperature=temperature,
        )
        return self.gateway.generate(request, model.policy)

    def _failure(
        self,
        model: ModelConfig,
        test_case: TestCase,
        error: Exception,
        code: Optional[str],
        iteration: int,
        history: List[IterationRecord],
        usage: TokenUsage,
        start_time: float,
    ) -> TestResult:
        """Результат инфраструктурного сбоя"""
        message = str(error) or type(error).__name__
        validation = ValidationResult.from_errors([ValidationIssue(
            type=IssueType.GENERATION_FAILED,
            message=message,
        )])
        return TestResult(
            model_id=model.id,
            test_name=test_case.name,
            success=False,
            code=code,
            validation=validation,
            iterations=iteration,
            history=history,
            duration_ms=self._elapsed_ms(start_time),
            passed_after_loop=False,
            token_usage=usage,
            error=message,
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return max(0, int((time.time() - start_time) * 1000))

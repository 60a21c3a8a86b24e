"""
Result Schemas - схемы для результатов бенчмарка

Отвечает за:
- Результаты валидации (ValidationIssue, ValidationResult)
- Историю итераций цикла исправления (IterationRecord)
- Результат пары модель × тест (TestResult)
- Агрегаты по модели (ModelAggregate)
- Результат прогона целиком (BenchmarkRun)
- Снимок прогресса для живых потребителей (ProgressSnapshot)
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .messages import TokenUsage
from .models import ModelConfig


class IssueType(str, Enum):
    """Тип обнаруженного дефекта"""
    SYNTAX_ERROR = "SYNTAX_ERROR"
    NAVIGATION_ERROR = "NAVIGATION_ERROR"
    MISMATCHED_TAGS = "MISMATCHED_TAGS"
    DUPLICATE_ATTRIBUTE = "DUPLICATE_ATTRIBUTE"
    EMPTY_CODE = "EMPTY_CODE"
    GENERATION_FAILED = "GENERATION_FAILED"


class ValidationIssue(BaseModel):
    """Один дефект кода с подсказкой для исправления"""
    model_config = ConfigDict(frozen=True)

    type: IssueType
    message: str
    fix: str = ""


class ValidationResult(BaseModel):
    """
    Результат валидации кода

    valid всегда равно отсутствию ошибок.
    checks — по одному флагу на семейство проверок.
    """
    valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    checks: Dict[str, bool] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_valid_matches_errors(self) -> "ValidationResult":
        if self.valid != (len(self.errors) == 0):
            raise ValueError("valid должно совпадать с отсутствием ошибок")
        return self

    @classmethod
    def from_errors(
        cls,
        errors: List[ValidationIssue],
        checks: Optional[Dict[str, bool]] = None,
    ) -> "ValidationResult":
        """Собрать результат из списка ошибок"""
        return cls(valid=not errors, errors=list(errors), checks=dict(checks or {}))

    @property
    def error_types(self) -> List[str]:
        """Типы ошибок по порядку обнаружения"""
        return [e.type.value for e in self.errors]


class IterationRecord(BaseModel):
    """Одна итерация цикла: вызов модели + валидация. Не изменяется после записи."""
    model_config = ConfigDict(frozen=True)

    iteration: int = Field(..., ge=1)
    valid: bool
    error_types: List[str] = Field(default_factory=list)
    usage: TokenUsage = Field(default_factory=TokenUsage)


class TestResult(BaseModel):
    """
    Результат пары модель × тест

    success=False — инфраструктурный сбой (вызов API упал после всех повторов).
    success=True, passed_after_loop=False — измеренный провал: бюджет итераций
    исчерпан, а код так и не прошёл валидацию.
    """
    __test__ = False

    model_config = ConfigDict(protected_namespaces=())

    model_id: str = ""
    test_name: str = ""

    success: bool
    code: Optional[str] = None
    validation: ValidationResult
    iterations: int = Field(..., ge=1)
    history: List[IterationRecord] = Field(default_factory=list)
    duration_ms: int = Field(default=0, ge=0)
    passed_after_loop: bool = False
    token_usage: TokenUsage = Field(default_factory=TokenUsage)
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_outcome_consistency(self) -> "TestResult":
        if self.success and self.passed_after_loop != self.validation.valid:
            raise ValueError("passed_after_loop должно совпадать с validation.valid")
        if not self.success and (self.validation.valid or not self.error):
            raise ValueError("Неуспешный результат требует error и невалидной валидации")
        return self

    @property
    def passed_first_try(self) -> bool:
        """Прошёл ли код валидацию сразу"""
        return self.passed_after_loop and self.iterations == 1


class ModelAggregate(BaseModel):
    """
    Накопленные метрики модели за прогон

    На каждый завершённый TestResult увеличивается ровно один из счётчиков
    passed_first_try / passed_after_loop / total_failed.
    """
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    name: str
    passed_first_try: int = 0
    passed_after_loop: int = 0
    total_failed: int = 0
    total_iterations: int = 0
    total_duration_ms: int = 0
    total_tokens: TokenUsage = Field(default_factory=TokenUsage)
    tests: List[TestResult] = Field(default_factory=list)

    @computed_field
    @property
    def total_tests(self) -> int:
        """Сколько пар учтено"""
        return self.passed_first_try + self.passed_after_loop + self.total_failed

    @property
    def first_try_rate(self) -> float:
        """Доля прошедших с первой попытки (0.0-1.0)"""
        if not self.total_tests:
            return 0.0
        return self.passed_first_try / self.total_tests

    @property
    def loop_success_rate(self) -> float:
        """Доля прошедших с учётом цикла исправлений (0.0-1.0)"""
        if not self.total_tests:
            return 0.0
        return (self.passed_first_try + self.passed_after_loop) / self.total_tests

    @property
    def average_iterations(self) -> float:
        """Среднее число итераций на тест"""
        if not self.total_tests:
            return 0.0
        return self.total_iterations / self.total_tests

    @property
    def average_duration_ms(self) -> float:
        """Среднее время теста в миллисекундах"""
        if not self.total_tests:
            return 0.0
        return self.total_duration_ms / self.total_tests

    def record(self, result: TestResult, retain: bool = True) -> None:
        """Учесть результат пары (ровно один счётчик исхода)"""
        if result.success and result.passed_after_loop:
            if result.iterations == 1:
                self.passed_first_try += 1
            else:
                self.passed_after_loop += 1
        else:
            self.total_failed += 1

        self.total_iterations += result.iterations
        self.total_duration_ms += result.duration_ms
        self.total_tokens = self.total_tokens + result.token_usage

        if retain:
            self.tests.append(result)


class UnavailableModel(BaseModel):
    """Модель, не прошедшая предварительную проверку"""
    model: ModelConfig
    reason: str


class BenchmarkRun(BaseModel):
    """
    Результат прогона бенчмарка

    Принадлежит координатору на время прогона; на каждый прогон создаётся новый.
    """
    aggregates: Dict[str, ModelAggregate] = Field(default_factory=dict)
    available: List[ModelConfig] = Field(default_factory=list)
    unavailable: List[UnavailableModel] = Field(default_factory=list)
    test_count: int = Field(default=0, ge=0)

    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    cancelled: bool = False

    @property
    def total_tokens(self) -> TokenUsage:
        """Токены по всем моделям"""
        total = TokenUsage()
        for aggregate in self.aggregates.values():
            total = total + aggregate.total_tokens
        return total

    @property
    def completed_pairs(self) -> int:
        """Сколько пар модель × тест завершено"""
        return sum(a.total_tests for a in self.aggregates.values())


class RunPhase(str, Enum):
    """Фаза прогона"""
    IDLE = "idle"
    CHECKING = "checking"
    RUNNING = "running"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ProgressSnapshot(BaseModel):
    """
    Снимок прогресса прогона

    Неизменяемый: координатор заменяет снимок целиком после каждой пары,
    читатели никогда не видят частично обновлённое состояние.
    """
    model_config = ConfigDict(frozen=True)

    phase: RunPhase = RunPhase.IDLE
    total_pairs: int = 0
    completed_pairs: int = 0
    current_test: Optional[str] = None
    current_model: Optional[str] = None
    available_models: int = 0
    tokens: TokenUsage = Field(default_factory=TokenUsage)

    @property
    def percent(self) -> float:
        """Процент завершённых пар (0-100)"""
        if not self.total_pairs:
            return 0.0
        return self.completed_pairs / self.total_pairs * 100

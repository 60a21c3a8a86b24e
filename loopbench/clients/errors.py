"""
Errors — типизированные ошибки бенчмарка

Повторяется автоматически только TransportError (и только retryable).
Ошибки валидации и исчерпание итераций исключениями не являются —
это обычные результаты (ValidationIssue, TestResult).
"""

from typing import Optional


# HTTP статусы, после которых имеет смысл повторить запрос
RETRYABLE_STATUSES = frozenset([429, 500, 502, 503, 504])

# Коды сетевых ошибок, после которых имеет смысл повторить запрос
RETRYABLE_CODES = frozenset(["ECONNRESET", "ETIMEDOUT"])


class BenchmarkError(Exception):
    """Базовая ошибка бенчмарка"""

    def __init__(self, message: str, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class TransportError(BenchmarkError):
    """
    Ошибка вызова API: HTTP статус, сетевой сбой или таймаут

    Args:
        message: Текст ошибки (от провайдера или сетевого слоя)
        status: HTTP статус, если ответ был получен
        code: Код сетевой ошибки (ECONNRESET, ETIMEDOUT)
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
    ) -> None:
        self.status = status
        self.code = code
        super().__init__(message, retryable=is_retryable_error(message, status, code))


class AvailabilityError(BenchmarkError):
    """Модель не ответила на предварительную проверку"""

    def __init__(self, model_id: str, reason: str) -> None:
        super().__init__(f"{model_id}: {reason}")
        self.model_id = model_id
        self.reason = reason


class NoModelsAvailableError(BenchmarkError):
    """Ни одна модель не прошла предварительную проверку"""

    def __init__(self, unavailable=None) -> None:
        super().__init__("No models available")
        self.unavailable = list(unavailable or [])


class BenchmarkCancelledError(BenchmarkError):
    """
    Прогон остановлен по запросу

    run — частичный BenchmarkRun с уже завершёнными парами.
    """

    def __init__(self, run=None) -> None:
        super().__init__("Benchmark cancelled")
        self.run = run


def is_retryable_error(
    message: str,
    status: Optional[int] = None,
    code: Optional[str] = None,
) -> bool:
    """
    Можно ли повторить вызов после такой ошибки

    Повторяемые: 429/5xx шлюза, ECONNRESET/ETIMEDOUT, упоминание rate limit.
    """
    if status in RETRYABLE_STATUSES:
        return True
    if code in RETRYABLE_CODES:
        return True
    return "rate limit" in (message or "").lower()

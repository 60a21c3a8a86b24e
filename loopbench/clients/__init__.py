"""
Clients - клиенты внешних API

- OpenAIGateway: генерация через Chat Completions / Responses API
- errors: типизированные ошибки и классификация повторяемых сбоев
"""

from .errors import (
    AvailabilityError,
    BenchmarkCancelledError,
    BenchmarkError,
    NoModelsAvailableError,
    TransportError,
    is_retryable_error,
)
from .gateway import OpenAIGateway, strip_markdown_fences

__all__ = [
    "OpenAIGateway",
    "strip_markdown_fences",
    "AvailabilityError",
    "BenchmarkCancelledError",
    "BenchmarkError",
    "NoModelsAvailableError",
    "TransportError",
    "is_retryable_error",
]

"""
Data Schemas - схемы данных для бенчмарка

Экспортирует все схемы из подмодулей:
- models: ModelConfig, ModelsRegistry
- tasks: TestCase, TestSuitesFile
- messages: ChatMessage, GenerationRequest, GenerationResult, TokenUsage
- results: ValidationIssue, ValidationResult, IterationRecord, TestResult,
  ModelAggregate, BenchmarkRun, ProgressSnapshot
"""

from .models import (
    DEFAULT_MODELS,
    ModelConfig,
    ModelsRegistry,
)

from .tasks import (
    TestCase,
    TestSuitesFile,
)

from .messages import (
    ChatMessage,
    GenerationRequest,
    GenerationResult,
    TokenUsage,
)

from .results import (
    IssueType,
    ValidationIssue,
    ValidationResult,
    IterationRecord,
    TestResult,
    ModelAggregate,
    UnavailableModel,
    BenchmarkRun,
    RunPhase,
    ProgressSnapshot,
)

__all__ = [
    # Models
    "DEFAULT_MODELS",
    "ModelConfig",
    "ModelsRegistry",
    # Tasks
    "TestCase",
    "TestSuitesFile",
    # Messages
    "ChatMessage",
    "GenerationRequest",
    "GenerationResult",
    "TokenUsage",
    # Results
    "IssueType",
    "ValidationIssue",
    "ValidationResult",
    "IterationRecord",
    "TestResult",
    "ModelAggregate",
    "UnavailableModel",
    "BenchmarkRun",
    "RunPhase",
    "ProgressSnapshot",
]

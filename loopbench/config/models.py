"""
Model classes — классификация моделей по семейству

Отвечает за:
- Выбор протокола API (chat completions / responses)
- Таймаут вызова по классу модели
- Бюджет токенов с учётом скрытых reasoning-токенов

Классификация тотальна: любое имя попадает ровно в один ModelClass,
неизвестные семейства — в STANDARD.

Использование:
    from loopbench.config.models import get_model_policy

    policy = get_model_policy("o3-mini")
    print(policy.model_class, policy.timeout_ms)
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ModelClass(str, Enum):
    """Класс модели для политики токенов и таймаутов"""
    STANDARD = "standard"
    REASONING = "reasoning"
    LARGE_OUTPUT = "large_output"


class WireProtocol(str, Enum):
    """Форма запроса к провайдеру"""
    CHAT = "chat"
    RESPONSES = "responses"


# Таймауты в миллисекундах
TIMEOUT_CONFIG = {
    ModelClass.STANDARD: 120_000,
    ModelClass.REASONING: 300_000,
    ModelClass.LARGE_OUTPUT: 300_000,
}

# Множитель и минимум бюджета токенов для моделей со скрытым reasoning
REASONING_TOKEN_MULTIPLIER = 4
REASONING_TOKEN_FLOOR = 6000

# Порядок важен: первое совпадение определяет класс
_CLASS_PATTERNS = [
    (re.compile(r"^o[134](?:$|-)"), ModelClass.REASONING),
    (re.compile(r"gpt-5"), ModelClass.REASONING),
    (re.compile(r"codex"), ModelClass.LARGE_OUTPUT),
]

_RESPONSES_PATTERN = re.compile(r"codex|5\.1")

MODEL_TIERS = {
    "lite": {
        "id": "gpt-4o-mini",
        "name": "Lite",
        "description": "Fast & economical",
    },
    "regular": {
        "id": "gpt-4.1-mini",
        "name": "Regular",
        "description": "Balanced performance",
    },
    "pro": {
        "id": "gpt-4.1",
        "name": "Pro",
        "description": "Most capable",
    },
}


@dataclass(frozen=True)
class ModelPolicy:
    """Итоговая политика вызова для конкретной модели"""
    model_class: ModelClass
    protocol: WireProtocol
    timeout_ms: int

    @property
    def uses_hidden_reasoning(self) -> bool:
        """Тратит ли модель скрытые токены до видимого ответа"""
        return self.model_class is ModelClass.REASONING


def classify_model(model_id: str) -> ModelClass:
    """Определить класс модели по её ID"""
    for pattern, model_class in _CLASS_PATTERNS:
        if pattern.search(model_id):
            return model_class
    return ModelClass.STANDARD


def select_protocol(model_id: str) -> WireProtocol:
    """Определить протокол API по ID модели"""
    if _RESPONSES_PATTERN.search(model_id):
        return WireProtocol.RESPONSES
    return WireProtocol.CHAT


def get_timeout(model_id: str) -> int:
    """Таймаут вызова в миллисекундах"""
    return TIMEOUT_CONFIG[classify_model(model_id)]


def get_model_policy(
    model_id: str,
    model_class: Optional[ModelClass] = None,
    protocol: Optional[WireProtocol] = None,
) -> ModelPolicy:
    """
    Собрать политику вызова модели

    Args:
        model_id: ID модели
        model_class: Явно заданный класс (из реестра), иначе по имени
        protocol: Явно заданный протокол (из реестра), иначе по имени
    """
    resolved_class = model_class or classify_model(model_id)
    return ModelPolicy(
        model_class=resolved_class,
        protocol=protocol or select_protocol(model_id),
        timeout_ms=TIMEOUT_CONFIG[resolved_class],
    )


def effective_max_tokens(max_tokens: int, model_class: ModelClass) -> int:
    """
    Бюджет токенов с поправкой на класс модели

    Reasoning-модели расходуют часть бюджета на скрытые рассуждения,
    поэтому бюджет увеличивается в 4 раза, но не меньше 6000.
    """
    if model_class is ModelClass.REASONING:
        return max(max_tokens * REASONING_TOKEN_MULTIPLIER, REASONING_TOKEN_FLOOR)
    return max_tokens


def get_model_by_tier(tier: str) -> dict:
    """Модель по уровню (lite/regular/pro), по умолчанию regular"""
    return MODEL_TIERS.get(tier, MODEL_TIERS["regular"])

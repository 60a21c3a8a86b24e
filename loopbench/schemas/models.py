"""
Model Schemas — схемы для реестра моделей из models.yaml

Отвечает за:
- Валидацию конфигурации моделей
- Порядок моделей в реестре (он же порядок прогона)
- Выбор подмножества моделей для эксперимента
"""

import logging
import re
from pathlib import Path
from typing import Optional, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.models import ModelClass, ModelPolicy, WireProtocol, get_model_policy
from ..utils.file_ops import load_yaml

logger = logging.getLogger(__name__)


class ModelConfig(BaseModel):
    """
    Модель из реестра

    Пример YAML:
        - name: "GPT-4.1"
          id: "gpt-4.1"
        - name: "Future reasoning"
          id: "acme-think-1"
          model_class: reasoning
    """
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    name: str = Field(..., min_length=1, description="Человекочитаемое название")
    id: str = Field(..., min_length=1, description="ID модели для API")

    # Явная классификация, если имя не подходит под известные семейства
    model_class: Optional[ModelClass] = None
    protocol: Optional[WireProtocol] = None

    @property
    def policy(self) -> ModelPolicy:
        """Политика вызова (класс, протокол, таймаут)"""
        return get_model_policy(self.id, self.model_class, self.protocol)


class ModelsRegistry(BaseModel):
    """
    Реестр всех моделей из models.yaml

    Пример YAML:
        models:
          - name: "GPT-4.1"
            id: "gpt-4.1"
          - name: "o3-mini"
            id: "o3-mini"
    """
    models: List[ModelConfig] = Field(default_factory=list)

    @field_validator("models")
    @classmethod
    def validate_unique_ids(cls, v: List[ModelConfig]) -> List[ModelConfig]:
        """Проверить уникальность ID моделей"""
        ids = [m.id for m in v]
        if len(ids) != len(set(ids)):
            raise ValueError("ID моделей должны быть уникальными")
        return v

    def get(self, model_id: str) -> Optional[ModelConfig]:
        """Получить модель по ID"""
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def ids(self) -> List[str]:
        """Список ID моделей"""
        return [m.id for m in self.models]

    def select(self, model_ids: List[str]) -> List[ModelConfig]:
        """
        Отобрать модели по ID

        Порядок результата — порядок реестра, а не порядок аргументов.
        """
        wanted = set(model_ids)
        return [m for m in self.models if m.id in wanted]

    def filter(self, pattern: str) -> List[ModelConfig]:
        """Модели, у которых имя или ID совпадает с шаблоном (без учёта регистра)"""
        regex = re.compile(pattern, re.IGNORECASE)
        return [m for m in self.models if regex.search(m.name) or regex.search(m.id)]

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ModelsRegistry":
        """
        Загрузить реестр из models.yaml

        Если файла нет, используется встроенный список DEFAULT_MODELS.
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Файл реестра не найден: {path}, используется встроенный список")
            return cls(models=DEFAULT_MODELS)

        raw_data = load_yaml(path)
        return cls(models=raw_data.get("models", []))

    def __iter__(self):
        return iter(self.models)

    def __len__(self):
        return len(self.models)


DEFAULT_MODELS = [
    ModelConfig(name="GPT-5.1-codex", id="gpt-5.1-codex-mini"),
    ModelConfig(name="GPT-5-mini", id="gpt-5-mini"),
    ModelConfig(name="GPT-5-nano", id="gpt-5-nano"),
    ModelConfig(name="GPT-4.1", id="gpt-4.1"),
    ModelConfig(name="GPT-4.1-mini", id="gpt-4.1-mini"),
    ModelConfig(name="GPT-4.1-nano", id="gpt-4.1-nano"),
    ModelConfig(name="GPT-4o", id="gpt-4o"),
    ModelConfig(name="GPT-4o-mini", id="gpt-4o-mini"),
    ModelConfig(name="o1-mini", id="o1-mini"),
    ModelConfig(name="o3-mini", id="o3-mini"),
    ModelConfig(name="o4-mini", id="o4-mini"),
    ModelConfig(name="Codex-latest", id="codex-mini-latest"),
]

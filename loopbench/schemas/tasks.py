"""
Task Schemas — схемы для тестовых наборов из test_suites.yaml

Отвечает за:
- Валидацию тестовых кейсов (name + prompt)
- Группировку кейсов в именованные наборы
"""

from pathlib import Path
from typing import List, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.file_ops import load_yaml


class TestCase(BaseModel):
    """
    Один тестовый кейс

    Пример YAML:
        - name: "Basic Navigation"
          prompt: |
            Create a responsive navigation bar component...
    """
    __test__ = False  # не тестовый класс для pytest

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1, description="Текст задания для модели")
    language: str = Field(default="jsx", description="Вид кода для валидатора")


class TestSuitesFile(BaseModel):
    """
    Схема файла test_suites.yaml

    Пример YAML:
        suites:
          navigation:
            - name: "Basic Navigation"
              prompt: "..."
    """
    __test__ = False

    suites: Dict[str, List[TestCase]] = Field(default_factory=dict)

    @field_validator("suites")
    @classmethod
    def validate_not_empty(cls, v: Dict[str, List[TestCase]]) -> Dict[str, List[TestCase]]:
        """Набор не может быть пустым"""
        for name, cases in v.items():
            if not cases:
                raise ValueError(f"Набор '{name}' не содержит кейсов")
        return v

    def get_cases(self, suite: str) -> List[TestCase]:
        """
        Получить кейсы набора

        Args:
            suite: Имя набора или "all" для всех наборов подряд

        Raises:
            KeyError: Если набор не найден
        """
        if suite == "all":
            return [case for cases in self.suites.values() for case in cases]
        if suite not in self.suites:
            raise KeyError(f"Набор тестов не найден: {suite}")
        return list(self.suites[suite])

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "TestSuitesFile":
        """Загрузить наборы из test_suites.yaml"""
        return cls(**load_yaml(path))

    @property
    def suite_names(self) -> List[str]:
        """Имена всех наборов"""
        return list(self.suites.keys())

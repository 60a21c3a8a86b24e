"""
Settings - централизованная конфигурация проекта

Единая точка доступа ко всем настройкам:
- Загружает configs/settings.yaml
- Загружает секреты из окружения (.env подхватывается в main.py)
- Валидирует значения через Pydantic
- Предоставляет типизированный доступ

Объект настроек создаётся один раз на запуск и передаётся явно
в OpenAIGateway, FixLoop и BenchmarkRunner (через from_settings).

Использование:
    from loopbench.config import load_settings

    settings = load_settings()
    print(settings.provider.base_url)
    print(settings.loop.max_iterations)
"""

import os
from pathlib import Path
from typing import Optional, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Вложенные модели - точно соответствуют settings.yaml
# =============================================================================

class PathsConfig(BaseModel):
    """Пути проекта"""
    configs_dir: str = "configs"
    results_dir: str = "results"
    logs_dir: str = "logs"

    # Файлы конфигов (относительно configs_dir)
    models_file: str = "models.yaml"
    suites_file: str = "test_suites.yaml"

    def get_models_path(self) -> Path:
        """Полный путь к models.yaml"""
        return Path(self.configs_dir) / self.models_file

    def get_suites_path(self) -> Path:
        """Полный путь к test_suites.yaml"""
        return Path(self.configs_dir) / self.suites_file


class ProviderConfig(BaseModel):
    """Настройки API провайдера (OpenAI-совместимый)"""
    api_key: Optional[str] = None  # Загружается из окружения
    base_url: str = "https://api.openai.com/v1"


class RetryConfig(BaseModel):
    """Политика повторов для транспортных ошибок"""
    max_retries: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=1000, ge=0)


class LoopConfig(BaseModel):
    """Параметры цикла генерация → валидация → исправление"""
    max_iterations: int = Field(default=3, ge=1)
    max_tokens: int = Field(default=2000, ge=1)
    generation_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    fix_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    iteration_delay_ms: int = Field(default=500, ge=0)
    system_prompt: str = "You are an expert React developer. Generate clean, valid JSX code."


class ProbeConfig(BaseModel):
    """Параметры предварительной проверки доступности моделей"""
    system_prompt: str = "You are a test assistant."
    user_prompt: str = "Say hello in one word."
    max_tokens: int = Field(default=50, ge=1)
    timeout_ms: int = Field(default=60000, ge=1)
    delay_ms: int = Field(default=500, ge=0)


class BenchmarkConfig(BaseModel):
    """Настройки координатора бенчмарка"""
    pair_delay_ms: int = Field(default=1000, ge=0)
    retain_results: bool = True
    default_suite: str = "navigation"
    probe: ProbeConfig = Field(default_factory=ProbeConfig)


class LoggingConsoleConfig(BaseModel):
    """Настройки консольного логирования"""
    enabled: bool = True
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


class LoggingRotationConfig(BaseModel):
    """Настройки ротации логов"""
    enabled: bool = True
    max_size_mb: int = 10
    backup_count: int = 5


class LoggingFileConfig(BaseModel):
    """Настройки файлового логирования"""
    enabled: bool = True
    path: str = "benchmark.log"
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "DEBUG"
    rotation: LoggingRotationConfig = Field(default_factory=LoggingRotationConfig)


class LoggingConfig(BaseModel):
    """Настройки логирования"""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: str = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    console: LoggingConsoleConfig = Field(default_factory=LoggingConsoleConfig)
    file: LoggingFileConfig = Field(default_factory=LoggingFileConfig)


# =============================================================================
# Главный класс настроек
# =============================================================================

class Settings(BaseSettings):
    """
    Централизованные настройки проекта

    Загружает:
    1. Дефолтные значения из класса
    2. Значения из configs/settings.yaml
    3. Переменные окружения (секреты и LOOPBENCH_* переопределения)

    Приоритет: OPENAI_API_KEY > kwargs > yaml > LOOPBENCH_* > defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="LOOPBENCH_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    loop: LoopConfig = Field(default_factory=LoopConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def __init__(self, config_path: Optional[Path] = None, **kwargs):
        yaml_data = self._load_yaml_config(config_path)

        # Мержим: yaml < kwargs (kwargs имеет приоритет)
        merged = self._deep_merge(yaml_data, kwargs)

        api_key = os.getenv("OPENAI_API_KEY")
        if api_key:
            merged.setdefault("provider", {})
            merged["provider"]["api_key"] = api_key

        super().__init__(**merged)

    @staticmethod
    def _load_yaml_config(config_path: Optional[Path] = None) -> dict:
        """Загрузить settings.yaml (если есть)"""
        # Импортируем здесь чтобы избежать циклических импортов
        from loopbench.utils.file_ops import load_yaml

        if config_path is not None:
            possible_paths = [Path(config_path)]
        else:
            possible_paths = [
                Path("configs/settings.yaml"),
                Path(__file__).parent.parent.parent / "configs" / "settings.yaml",
            ]

        for path in possible_paths:
            if path.exists():
                return load_yaml(path) or {}

        return {}

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Глубокое слияние словарей"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Settings._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def validate_api_key(self) -> None:
        """Проверить наличие API ключа"""
        if not self.provider.api_key:
            raise ValueError(
                "API ключ не найден. Установите переменную окружения OPENAI_API_KEY "
                "или добавьте её в файл .env"
            )

    def get_log_file_path(self) -> Path:
        """Полный путь к файлу логов"""
        return Path(self.paths.logs_dir) / self.logging.file.path


def load_settings(config_path: Optional[Path] = None, **overrides) -> Settings:
    """
    Создать объект настроек

    Вызывается один раз при старте; результат передаётся дальше явно.

    Args:
        config_path: Путь к settings.yaml (если None — поиск по умолчанию)
        **overrides: Переопределения секций, например loop={"max_iterations": 5}
    """
    return Settings(config_path=config_path, **overrides)

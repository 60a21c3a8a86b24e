"""
OpenAI Gateway - HTTP клиент для OpenAI-совместимого API

Ответственность (SRP):
- Выбор протокола (chat completions / responses) по классу модели
- Бюджет токенов и таймаут по классу модели
- Нормализация ответов обоих протоколов к одной форме
- Снятие markdown-обрамления с кода
- Повтор временных сбоев с экспоненциальной задержкой

НЕ отвечает за:
- Валидацию кода (validator)
- Цикл исправлений (FixLoop)
- Подсчёт агрегатов (BenchmarkRunner)

Использование:
    from loopbench.config import load_settings
    from loopbench.clients import OpenAIGateway
    from loopbench.schemas import GenerationRequest

    settings = load_settings()
    gateway = OpenAIGateway.from_settings(settings)

    result = gateway.generate(GenerationRequest(
        model="gpt-4.1-mini",
        system_prompt="You are an expert React developer.",
        user_prompt="Create a button component",
    ))
    print(result.text, result.usage.completion)
"""

import re
import time
import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from ..config.models import (
    ModelPolicy,
    WireProtocol,
    effective_max_tokens,
    get_model_policy,
)
from ..schemas.messages import ChatMessage, GenerationRequest, GenerationResult, TokenUsage
from .errors import TransportError

logger = logging.getLogger(__name__)


# Открывающий ``` с необязательным языком и закрывающий ``` в самом конце
_OPENING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\s*$")


def strip_markdown_fences(content: str) -> str:
    """
    Снять одно обрамление ```lang ... ``` с ответа модели

    Если обрамление неполное или его нет, текст возвращается как есть
    (только без крайних пробелов).
    """
    if not content:
        return content
    stripped = _OPENING_FENCE.sub("", content.strip(), count=1)
    stripped = _CLOSING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


class OpenAIGateway:
    """
    HTTP клиент для OpenAI API (Chat Completions + Responses)

    Принципы:
    - Stateless (кроме конфигурации и HTTP сессии)
    - Не знает о бизнес-логике бенчмарка
    - Ошибки поднимает как TransportError (после всех повторов)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            api_key: API ключ провайдера
            base_url: Базовый URL API
            max_retries: Максимум попыток на один вызов
            base_delay_ms: Базовая задержка между попытками (удваивается)
            session: HTTP сессия (для тестов можно подменить)
            sleep: Функция ожидания между попытками (для тестов)
        """
        if not api_key:
            raise ValueError("API ключ не может быть пустым")

        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.session = session or requests.Session()
        self._sleep = sleep

        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(f"OpenAIGateway инициализирован, base_url={self.base_url}")

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "OpenAIGateway":
        """
        Создать клиент из Settings

        Args:
            settings: Объект Settings из loopbench.config
            **kwargs: Переопределения (session, sleep)
        """
        settings.validate_api_key()

        return cls(
            api_key=settings.provider.api_key,
            base_url=settings.provider.base_url,
            max_retries=settings.retry.max_retries,
            base_delay_ms=settings.retry.base_delay_ms,
            **kwargs,
        )

    # =========================================================================
    # Публичный API
    # =========================================================================

    def generate(
        self,
        request: GenerationRequest,
        policy: Optional[ModelPolicy] = None,
    ) -> GenerationResult:
        """
        Отправить запрос на генерацию

        Args:
            request: Запрос (модель, промпты, бюджет, температура, таймаут)
            policy: Политика модели из реестра (если None — по имени модели)

        Returns:
            GenerationResult с текстом без обрамления и токенами

        Raises:
            TransportError: Если вызов не удался после всех повторов
            ValueError: Если запрос не содержит сообщений
        """
        policy = policy or get_model_policy(request.model)
        messages = request.build_messages()
        timeout_ms = request.timeout_ms or policy.timeout_ms

        if policy.protocol is WireProtocol.RESPONSES:
            endpoint = "responses"
            payload = self._build_responses_payload(request, messages, policy)
        else:
            endpoint = "chat/completions"
            payload = self._build_chat_payload(request, messages, policy)

        logger.debug(
            f"Запрос к {request.model} ({policy.protocol.value}), "
            f"сообщений={len(messages)}, таймаут={timeout_ms}мс"
        )

        start_time = time.time()
        data = self._with_retry(
            lambda: self._post(endpoint, payload, timeout_ms),
            request.model,
        )
        elapsed = time.time() - start_time

        if policy.protocol is WireProtocol.RESPONSES:
            data = self._remap_responses_payload(data)

        return self._parse_success_response(data, request.model, elapsed)

    # =========================================================================
    # Построение запросов
    # =========================================================================

    def _build_chat_payload(
        self,
        request: GenerationRequest,
        messages: List[ChatMessage],
        policy: ModelPolicy,
    ) -> Dict[str, Any]:
        """Тело запроса для /chat/completions"""
        payload: Dict[str, Any] = {
            "model": request.model,
            "messages": [m.to_api_dict() for m in messages],
        }

        if policy.uses_hidden_reasoning:
            # temperature такими моделями не поддерживается
            payload["max_completion_tokens"] = effective_max_tokens(
                request.max_tokens, policy.model_class
            )
        else:
            payload["max_tokens"] = request.max_tokens
            payload["temperature"] = request.temperature

        return payload

    def _build_responses_payload(
        self,
        request: GenerationRequest,
        messages: List[ChatMessage],
        policy: ModelPolicy,
    ) -> Dict[str, Any]:
        """Тело запроса для /responses"""
        return {
            "model": request.model,
            "input": [m.to_api_dict() for m in messages],
            "max_output_tokens": effective_max_tokens(request.max_tokens, policy.model_class),
        }

    # =========================================================================
    # Транспорт и повторы
    # =========================================================================

    def _with_retry(self, call: Callable[[], Dict[str, Any]], model: str) -> Dict[str, Any]:
        """
        Выполнить вызов с повторами

        Задержка перед повтором: base_delay_ms * 2^attempt.
        Неповторяемая ошибка и ошибка последней попытки поднимаются сразу.
        """
        last_error: Optional[TransportError] = None

        for attempt in range(self.max_retries):
            try:
                return call()
            except TransportError as e:
                last_error = e
                if not e.retryable or attempt == self.max_retries - 1:
                    raise

                delay_ms = self.base_delay_ms * (2 ** attempt)
                logger.warning(
                    f"Вызов {model} не удался (попытка {attempt + 1}/{self.max_retries}): "
                    f"{e}. Повтор через {delay_ms}мс"
                )
                self._sleep(delay_ms / 1000)

        raise last_error

    def _post(self, endpoint: str, payload: Dict[str, Any], timeout_ms: int) -> Dict[str, Any]:
        """Один HTTP вызов с таймаутом"""
        try:
            response = self.session.post(
                f"{self.base_url}/{endpoint}",
                headers=self.headers,
                json=payload,
                timeout=timeout_ms / 1000,
            )
        except requests.exceptions.Timeout:
            raise TransportError(f"Таймаут после {timeout_ms}мс", code="ETIMEDOUT")
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Ошибка соединения: {e}", code="ECONNRESET")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Ошибка передачи: {e}", code="ECONNRESET")

        if response.status_code != 200:
            raise self._parse_error_response(response)

        try:
            return response.json()
        except ValueError:
            raise TransportError(
                f"Некорректный JSON в ответе: {response.text[:200]}",
                status=response.status_code,
            )

    # =========================================================================
    # Разбор ответов
    # =========================================================================

    @staticmethod
    def _remap_responses_payload(data: Dict[str, Any]) -> Dict[str, Any]:
        """Привести ответ /responses к форме /chat/completions"""
        text = ""
        for item in data.get("output") or []:
            for part in item.get("content") or []:
                if part.get("text"):
                    text = part["text"]
                    break
            if text:
                break
        if not text:
            text = data.get("output_text") or ""

        usage = data.get("usage") or {}
        details = usage.get("output_tokens_details") or {}
        prompt_tokens = usage.get("input_tokens") or 0
        completion_tokens = usage.get("output_tokens") or 0

        return {
            "model": data.get("model", ""),
            "choices": [{"message": {"content": text}}],
            "usage": {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
                "completion_tokens_details": {
                    "reasoning_tokens": details.get("reasoning_tokens") or 0,
                },
            },
        }

    def _parse_success_response(
        self,
        data: Dict[str, Any],
        model: str,
        elapsed: float
    ) -> GenerationResult:
        """Парсить успешный ответ (chat-форма)"""
        choices = data.get("choices") or []
        content = ""
        if choices:
            message = choices[0].get("message") or {}
            content = message.get("content") or ""

        usage = data.get("usage") or {}
        details = usage.get("completion_tokens_details") or {}
        token_usage = TokenUsage(
            prompt=usage.get("prompt_tokens") or 0,
            completion=usage.get("completion_tokens") or 0,
            reasoning=details.get("reasoning_tokens") or 0,
        )

        logger.debug(
            f"Ответ {model}: {len(content)} символов, "
            f"токены={token_usage.prompt}/{token_usage.completion}/{token_usage.reasoning}, "
            f"время={elapsed:.2f}s"
        )

        return GenerationResult(
            text=strip_markdown_fences(content),
            raw_text=content,
            usage=token_usage,
            elapsed_time=elapsed,
            model_used=data.get("model") or model,
            raw_response=data,
        )

    @staticmethod
    def _parse_error_response(response: requests.Response) -> TransportError:
        """Собрать TransportError из ответа с ошибкой"""
        error_msg = f"HTTP {response.status_code}"

        try:
            error = response.json().get("error")
            if isinstance(error, dict):
                error_msg = f"{error_msg}: {error.get('message', '')}"
            elif error:
                error_msg = f"{error_msg}: {error}"
        except (ValueError, AttributeError):
            error_msg = f"{error_msg}: {response.text[:200]}"

        logger.warning(f"Ошибка API: {error_msg}")
        return TransportError(error_msg, status=response.status_code)

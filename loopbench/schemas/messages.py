"""
Message Schemas — схемы для работы с LLM API

Отвечает за:
- Структуру сообщений чата (ChatMessage)
- Запрос на генерацию (GenerationRequest)
- Нормализованный ответ обоих протоколов (GenerationResult)
- Учёт токенов (TokenUsage)
"""

from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TokenUsage(BaseModel):
    """Токены одного вызова или накопленные за несколько вызовов"""
    model_config = ConfigDict(frozen=True)

    prompt: int = Field(default=0, ge=0)
    completion: int = Field(default=0, ge=0)
    reasoning: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        """Входные + выходные (reasoning уже входят в completion)"""
        return self.prompt + self.completion

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt=self.prompt + other.prompt,
            completion=self.completion + other.completion,
            reasoning=self.reasoning + other.reasoning,
        )


class ChatMessage(BaseModel):
    """
    Сообщение чата для LLM API

    Одинаково используется в messages (chat) и input (responses).
    """
    role: Literal["system", "user", "assistant"]
    content: str = ""

    def to_api_dict(self) -> Dict[str, Any]:
        """Преобразовать в формат для API"""
        return {"role": self.role, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        """Создать системное сообщение"""
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        """Создать сообщение пользователя"""
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        """Создать сообщение ассистента"""
        return cls(role="assistant", content=content)


class GenerationRequest(BaseModel):
    """
    Запрос на генерацию

    Либо messages, либо system_prompt/user_prompt.
    timeout_ms=None — таймаут берётся из класса модели.
    """
    model: str
    system_prompt: str = ""
    user_prompt: str = ""
    messages: Optional[List[ChatMessage]] = None
    max_tokens: int = Field(default=2000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_ms: Optional[int] = Field(default=None, ge=1)

    def build_messages(self) -> List[ChatMessage]:
        """
        Собрать список сообщений

        Raises:
            ValueError: Если запрос не содержит ни одного сообщения
        """
        if self.messages:
            return list(self.messages)

        messages = []
        if self.system_prompt:
            messages.append(ChatMessage.system(self.system_prompt))
        if self.user_prompt:
            messages.append(ChatMessage.user(self.user_prompt))

        if not messages:
            raise ValueError("Запрос не содержит сообщений")
        return messages


class GenerationResult(BaseModel):
    """
    Нормализованный ответ LLM API

    text — ответ без обрамляющего markdown-блока,
    raw_text — ответ как есть.
    """
    text: str = ""
    raw_text: str = ""
    usage: TokenUsage = Field(default_factory=TokenUsage)

    elapsed_time: float = Field(default=0.0, ge=0.0)
    model_used: str = ""

    # Сырой ответ (для отладки), уже в chat-форме
    raw_response: Optional[Dict[str, Any]] = None

"""Chat-completion clients used to answer questions."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, TypedDict

from openai import AsyncOpenAI

from docqa.config import Settings
from docqa.errors import ModelConfigurationError

LOGGER = logging.getLogger(__name__)


class ChatMessage(TypedDict):
    role: str
    content: str


class ChatModel(ABC):
    """Common contract for chat-completion backends.

    ``complete`` returns the backend's raw response; callers normalise it with
    :func:`docqa.llm.responses.coerce_response`.
    """

    model_name: str = "unknown"
    temperature: Optional[float] = None

    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> Any:
        """Send ``messages`` to the model and return its raw response."""


class OpenAIChatModel(ChatModel):
    """Client for any OpenAI-compatible chat completions endpoint (Groq by default)."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        temperature: float = 0.3,
        max_tokens: int | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model_name = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def complete(self, messages: Sequence[ChatMessage]) -> Any:
        params: dict[str, Any] = {
            "model": self.model_name,
            "messages": [dict(message) for message in messages],
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens
        return await self._client.chat.completions.create(**params)


def create_chat_model(settings: Settings) -> ChatModel:
    """Build the chat model configured in ``settings``."""

    if not settings.llm_api_key:
        raise ModelConfigurationError("LLM_API_KEY (or GROQ_API_KEY) is not set; cannot create the chat model")
    LOGGER.info("Creating chat model %s at %s", settings.llm_model, settings.llm_base_url)
    return OpenAIChatModel(
        settings.llm_model,
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
    )


__all__: List[str] = ["ChatMessage", "ChatModel", "OpenAIChatModel", "create_chat_model"]

"""Chat model clients and response normalisation."""

from .client import ChatMessage, ChatModel, OpenAIChatModel, create_chat_model
from .responses import ModelResponse, PlainText, StructuredParts, coerce_response, response_to_text

__all__ = [
    "ChatMessage",
    "ChatModel",
    "ModelResponse",
    "OpenAIChatModel",
    "PlainText",
    "StructuredParts",
    "coerce_response",
    "create_chat_model",
    "response_to_text",
]

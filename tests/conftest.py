"""Shared fixtures wiring the test doubles into the service."""
from __future__ import annotations

import pytest

from docqa.config import Settings
from docqa.services.qa import DocumentQAService
from docqa.session import SessionStore

from helpers import KeywordEmbeddingModel, RecordingChatModel


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def keyword_embedder() -> KeywordEmbeddingModel:
    return KeywordEmbeddingModel(["apple", "banana", "cherry"])


@pytest.fixture
def chat_model() -> RecordingChatModel:
    return RecordingChatModel()


@pytest.fixture
def qa_service(
    settings: Settings,
    keyword_embedder: KeywordEmbeddingModel,
    chat_model: RecordingChatModel,
) -> DocumentQAService:
    return DocumentQAService(
        settings=settings,
        embedding_model=keyword_embedder,
        model_factory=lambda: chat_model,
        sessions=SessionStore(),
    )

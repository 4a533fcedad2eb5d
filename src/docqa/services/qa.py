"""Upload and chat orchestration for per-session document question answering."""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from docqa.config import Settings, get_settings
from docqa.embeddings import EmbeddingModel, create_embedding_model, get_embedding_model
from docqa.errors import ExtractionError, IndexingError, ModelConfigurationError, NoDocumentLoadedError
from docqa.ingest.models import Document
from docqa.ingest.pipeline import IngestPipeline, IngestPipelineConfig
from docqa.llm.client import ChatModel, create_chat_model
from docqa.llm.responses import coerce_response, payload_text, response_to_text
from docqa.logging_config import get_audit_logger
from docqa.prompt_builder import SYSTEM_PROMPT, build_context, build_messages
from docqa.session import DEFAULT_SESSION_ID, Session, SessionStore
from docqa.telemetry import (
    emit_exception,
    emit_inference_request,
    emit_inference_result,
    emit_prompt_event,
    emit_upload_event,
)
from docqa.vectorstore import InMemoryChunkIndex

LOGGER = logging.getLogger(__name__)

UPLOAD_SUCCESS_MESSAGE = "Document uploaded and processed successfully!"
NO_FILE_MESSAGE = "No file provided"
NO_DOCUMENT_MESSAGE = "Please upload a document first."

ChatModelFactory = Callable[[], ChatModel]


@dataclass(slots=True)
class UploadResult:
    """Outcome of an upload; ``message`` is what the user is shown."""

    success: bool
    message: str
    chunk_count: int = 0
    dropped_chunks: int = 0


class DocumentQAService:
    """Upload a document into a session, then answer questions grounded in it."""

    def __init__(
        self,
        *,
        pipeline: IngestPipeline | None = None,
        embedding_model: EmbeddingModel | None = None,
        model_factory: ChatModelFactory | None = None,
        sessions: SessionStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._owns_settings = settings is not None
        self.settings = settings or get_settings()
        self.pipeline = pipeline or IngestPipeline(IngestPipelineConfig.from_settings(self.settings))
        self._embedding_model = embedding_model
        self._model_factory = model_factory or (lambda: create_chat_model(self.settings))
        self.sessions = sessions or SessionStore()
        self.top_k = self.settings.top_k
        self.audit_logger = get_audit_logger(self.settings)

    @property
    def embedding_model(self) -> EmbeddingModel:
        """Resolve the embedding backend on first use.

        Injected settings select their own backend; otherwise the process-wide
        cached model is shared. Backend construction errors (unknown backend,
        missing optional package, unreadable model files) become
        :class:`IndexingError` so uploads can report them.
        """

        if self._embedding_model is None:
            try:
                if self._owns_settings:
                    self._embedding_model = create_embedding_model(self.settings)
                else:
                    self._embedding_model = get_embedding_model()
            except Exception as error:
                raise IndexingError(f"Embedding model unavailable: {error}", cause=error) from error
        return self._embedding_model

    async def upload(
        self,
        session_id: str,
        data: bytes | None,
        mime_type: str | None,
        file_name: str | None = None,
    ) -> UploadResult:
        """Index an uploaded document for ``session_id``.

        Failures are reported through :attr:`UploadResult.message` instead of
        being raised, so the caller can show the reason as is.
        """

        started = time.perf_counter()
        if not data:
            return UploadResult(success=False, message=NO_FILE_MESSAGE)

        document = Document(data=data, mime_type=mime_type, file_name=file_name)
        emit_upload_event(
            "upload.start",
            session_id=session_id,
            file_name=file_name,
            mime_type=mime_type,
            size_bytes=document.size_bytes,
        )

        try:
            outcome = await self.pipeline.ingest(document)
        except ExtractionError as error:
            LOGGER.warning("Error extracting text from %s: %s (%s)", file_name, error, error.reason.value)
            emit_upload_event(
                "upload.failed",
                session_id=session_id,
                file_name=file_name,
                mime_type=mime_type,
                size_bytes=document.size_bytes,
                duration_ms=(time.perf_counter() - started) * 1000.0,
                error=error,
            )
            return UploadResult(success=False, message=f"Failed to extract text from document: {error}")

        try:
            model = self._model_factory()
            index = await InMemoryChunkIndex.build(outcome.chunks, self.embedding_model)
        except (IndexingError, ModelConfigurationError) as error:
            LOGGER.error("Error building the retrieval index for %s: %s", file_name, error)
            emit_exception(module=f"{__name__}.index", error=error, session_id=session_id)
            return UploadResult(success=False, message=f"Failed to process document: {error}")

        self.sessions.put(session_id, Session(index=index, model=model, document_name=file_name))

        emit_upload_event(
            "upload.complete",
            session_id=session_id,
            file_name=file_name,
            mime_type=mime_type,
            size_bytes=document.size_bytes,
            text_length=outcome.text_length,
            chunks=len(outcome.chunks),
            dropped_chunks=outcome.dropped_chunks,
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        self.audit_logger.info(
            {
                "event": "upload",
                "session_id": session_id,
                "file_name": file_name,
                "mime_type": mime_type,
                "chunk_count": len(outcome.chunks),
                "dropped_chunks": outcome.dropped_chunks,
            }
        )
        return UploadResult(
            success=True,
            message=UPLOAD_SUCCESS_MESSAGE,
            chunk_count=len(outcome.chunks),
            dropped_chunks=outcome.dropped_chunks,
        )

    async def answer(self, session_id: str, question: str) -> str:
        """Answer ``question`` from the session's document.

        Returns a fixed guidance message when nothing was uploaded yet. Retrieval
        failures raise :class:`IndexingError`; errors raised by the model call
        propagate unchanged.
        """

        try:
            session = self.sessions.require(session_id)
        except NoDocumentLoadedError:
            return NO_DOCUMENT_MESSAGE

        try:
            chunks = await session.index.search(question, self.top_k)
        except IndexingError as error:
            emit_exception(module=f"{__name__}.retrieval", error=error, session_id=session_id)
            raise
        messages = build_messages(question, chunks)
        emit_prompt_event(
            system_prompt=SYSTEM_PROMPT,
            sources=[chunk.index for chunk in chunks],
            context_chars=len(build_context(chunks)),
        )

        req_id = uuid.uuid4().hex
        emit_inference_request(
            req_id=req_id,
            session_id=session_id,
            model=session.model.model_name,
            prompt_len=sum(len(message["content"]) for message in messages),
            temperature=session.model.temperature,
        )
        started = time.perf_counter()
        try:
            raw = await session.model.complete(messages)
        except Exception as error:
            emit_exception(module=f"{__name__}.llm", error=error, req_id=req_id, session_id=session_id)
            raise

        response = coerce_response(raw)
        answer = response_to_text(response)
        emit_inference_result(
            req_id=req_id,
            session_id=session_id,
            duration_ms=(time.perf_counter() - started) * 1000.0,
            response_kind=response.kind,
            answer_preview=answer,
            fallback=not payload_text(response),
        )
        self.audit_logger.info(
            {
                "event": "chat",
                "session_id": session_id,
                "question": question,
                "sources": [chunk.index for chunk in chunks],
            }
        )
        return answer


@lru_cache()
def get_qa_service() -> DocumentQAService:
    """FastAPI dependency returning the shared :class:`DocumentQAService` instance."""

    return DocumentQAService()


__all__ = [
    "DEFAULT_SESSION_ID",
    "DocumentQAService",
    "NO_DOCUMENT_MESSAGE",
    "NO_FILE_MESSAGE",
    "UPLOAD_SUCCESS_MESSAGE",
    "UploadResult",
    "get_qa_service",
]

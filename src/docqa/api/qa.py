"""API router exposing the upload and chat operations per session."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from docqa.config import Settings, get_settings
from docqa.errors import IndexingError
from docqa.services.qa import DocumentQAService, UploadResult, get_qa_service

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["qa"])


class UploadResponse(BaseModel):
    """Response body returned from the upload endpoint."""

    session_id: str
    success: bool
    message: str
    chunks: int
    dropped_chunks: int


class ChatRequest(BaseModel):
    """Request body accepted by the chat endpoint."""

    question: str = Field(..., min_length=1, description="Question about the uploaded document.")


class ChatResponse(BaseModel):
    """Response payload for the chat endpoint."""

    session_id: str
    question: str
    answer: str


async def _read_limited(upload: UploadFile, limit: int) -> bytes:
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File is too large; the limit is {limit // (1024 * 1024)} MB",
        )
    return data


@router.post("/{session_id}/upload", response_model=UploadResponse)
async def upload_document(
    session_id: str,
    file: UploadFile = File(...),
    qa_service: DocumentQAService = Depends(get_qa_service),
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    """Replace the session's document with the uploaded file."""

    data = await _read_limited(file, settings.max_upload_bytes)
    LOGGER.info("File type: %s, size: %s bytes", file.content_type, len(data))
    result: UploadResult = await qa_service.upload(
        session_id,
        data,
        file.content_type,
        file_name=file.filename,
    )
    return UploadResponse(
        session_id=session_id,
        success=result.success,
        message=result.message,
        chunks=result.chunk_count,
        dropped_chunks=result.dropped_chunks,
    )


@router.post("/{session_id}/chat", response_model=ChatResponse)
async def chat(
    session_id: str,
    request: ChatRequest,
    qa_service: DocumentQAService = Depends(get_qa_service),
) -> ChatResponse:
    """Answer a question about the session's current document."""

    if not request.question.strip():
        raise HTTPException(status_code=422, detail="Question must not be empty")

    try:
        answer = await qa_service.answer(session_id, request.question)
    except IndexingError as exc:
        LOGGER.exception("Retrieval failed for session %s", session_id)
        raise HTTPException(status_code=502, detail=f"Retrieval failed: {exc}") from exc
    except Exception as exc:
        LOGGER.exception("Chat turn failed for session %s", session_id)
        raise HTTPException(status_code=502, detail=f"Model call failed: {exc}") from exc
    return ChatResponse(session_id=session_id, question=request.question, answer=answer)

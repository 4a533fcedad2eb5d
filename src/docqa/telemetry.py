"""Structured lifecycle events for uploads, retrieval and inference."""

from __future__ import annotations

import logging
import time
import traceback
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

LOGGER = logging.getLogger("docqa.telemetry")


def _format_exception(error: BaseException) -> str:
    return "".join(traceback.format_exception(error.__class__, error, error.__traceback__))


def log_event(
    logger: Optional[logging.Logger],
    step: str,
    *,
    level: str = "info",
    req_id: str | None = None,
    session_id: str | None = None,
    duration_ms: float | None = None,
    exc: BaseException | str | None = None,
    details: dict[str, Any] | None = None,
    **payload: Any,
) -> None:
    """Emit a structured log event with the agreed-upon schema."""

    logger = logger or LOGGER
    event: dict[str, Any] = {"step": step, "module": logger.name}
    if req_id:
        event["req_id"] = req_id
    if session_id:
        event["session_id"] = session_id
    if duration_ms is not None:
        event["duration_ms"] = round(duration_ms, 3)
    if details is not None:
        event["details"] = details
    event.update(payload)

    exc_info = None
    if exc is not None:
        if isinstance(exc, BaseException):
            event["exc"] = _format_exception(exc)
            exc_info = (exc.__class__, exc, exc.__traceback__)
        else:
            event["exc"] = str(exc)

    log_method = getattr(logger, level.lower(), logger.info)
    log_method(event, exc_info=exc_info)


def emit_upload_event(
    step: str,
    *,
    session_id: str,
    file_name: str | None,
    mime_type: str | None,
    size_bytes: int | None = None,
    text_length: int | None = None,
    chunks: int | None = None,
    dropped_chunks: int | None = None,
    duration_ms: float | None = None,
    error: BaseException | None = None,
) -> None:
    details = {
        "file": file_name,
        "mime_type": mime_type,
        "size_bytes": size_bytes,
        "text_length": text_length,
        "chunks": chunks,
        "dropped_chunks": dropped_chunks,
    }
    level = "warning" if error else "info"
    log_event(
        LOGGER,
        step,
        level=level,
        session_id=session_id,
        duration_ms=duration_ms,
        details=details,
        exc=str(error) if error else None,
    )


def emit_extraction_fallback(*, document_format: str, reason: str, timeout_s: float) -> None:
    details = {"format": document_format, "reason": reason[:200], "timeout_s": timeout_s}
    log_event(LOGGER, "extract.fallback", level="warning", details=details)


def emit_chunking_event(*, total_chunks: int, kept_chunks: int, chunk_size: int) -> None:
    details = {
        "total_chunks": total_chunks,
        "kept_chunks": kept_chunks,
        "dropped_chunks": max(total_chunks - kept_chunks, 0),
        "chunk_size": chunk_size,
    }
    level = "warning" if total_chunks > kept_chunks else "info"
    log_event(LOGGER, "chunking.complete", level=level, details=details)


def emit_embeddings_event(
    *, model: str, count: int, duration_ms: float, errors: list[str] | None = None
) -> None:
    details = {
        "model": model,
        "count": count,
        "errors": errors or [],
        "per_item_ms": round(duration_ms / count, 3) if count else None,
    }
    level = "error" if errors else "info"
    log_event(LOGGER, "embeddings.compute", level=level, duration_ms=duration_ms, details=details)


def emit_index_event(
    step: str,
    *,
    count: int,
    dimension: int | None,
    duration_ms: float | None = None,
    error: BaseException | None = None,
) -> None:
    details = {"count": count, "dimension": dimension}
    level = "error" if error else "info"
    log_event(LOGGER, step, level=level, duration_ms=duration_ms, details=details, exc=error)


def emit_retriever_event(
    *,
    query: str,
    top_k: int,
    results: list[dict[str, Any]],
    duration_ms: float,
) -> None:
    details = {
        "query_preview": query[:120],
        "top_k": top_k,
        "results": results,
    }
    log_event(LOGGER, "retriever.search", duration_ms=duration_ms, details=details)


def emit_prompt_event(
    *,
    system_prompt: str,
    sources: Iterable[int],
    context_chars: int,
) -> None:
    details = {
        "system_prompt_preview": system_prompt[:120],
        "sources": list(sources),
        "context_chars": context_chars,
    }
    log_event(LOGGER, "prompt.compose", details=details)


def emit_inference_request(
    *,
    req_id: str,
    session_id: str,
    model: str,
    prompt_len: int,
    temperature: float | None,
) -> None:
    details = {
        "model": model,
        "prompt_len": prompt_len,
        "temperature": temperature,
    }
    log_event(LOGGER, "inference.request", req_id=req_id, session_id=session_id, details=details)


def emit_inference_result(
    *,
    req_id: str,
    session_id: str,
    duration_ms: float,
    response_kind: str,
    answer_preview: str,
    fallback: bool,
) -> None:
    details = {
        "response_kind": response_kind,
        "answer_preview": answer_preview[:120],
        "fallback": fallback,
    }
    log_event(
        LOGGER,
        "inference.result",
        req_id=req_id,
        session_id=session_id,
        duration_ms=duration_ms,
        details=details,
    )


def emit_exception(
    *,
    module: str,
    error: BaseException,
    req_id: str | None = None,
    session_id: str | None = None,
) -> None:
    log_event(
        LOGGER,
        "exception",
        level="error",
        req_id=req_id,
        session_id=session_id,
        details={"module": module},
        exc=error,
    )


@contextmanager
def traced_duration(step: str, *, logger: Optional[logging.Logger] = None, **fields: Any) -> Iterator[None]:
    start = time.perf_counter()
    log_event(logger or LOGGER, f"{step}.start", details=fields)
    try:
        yield
    except Exception as error:
        log_event(logger or LOGGER, f"{step}.error", level="error", details=fields, exc=error)
        raise
    finally:
        log_event(
            logger or LOGGER,
            f"{step}.complete",
            duration_ms=(time.perf_counter() - start) * 1000.0,
            details=fields,
        )

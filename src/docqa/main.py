import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from docqa.api.qa import router as qa_router
from docqa.config import get_settings
from docqa.embeddings import EmbeddingModel, get_embedding_model
from docqa.logging_config import configure_logging
from docqa.telemetry import log_event

configure_logging(get_settings())

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Document Q&A API")
app.include_router(qa_router)


@app.on_event("startup")
async def _log_startup() -> None:
    settings = get_settings()
    log_event(
        LOGGER,
        "app.startup",
        details={
            "embedding_backend": settings.embedding_backend,
            "llm_model": settings.llm_model,
            "llm_base_url": settings.llm_base_url,
            "llm_api_key_set": bool(settings.llm_api_key),
            "chunk_size": settings.chunk_size,
            "max_chunks": settings.max_chunks,
        },
    )
    if not settings.llm_api_key:
        LOGGER.warning("LLM_API_KEY is not set; uploads will fail until it is configured")


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"


@app.get("/healthz", response_class=PlainTextResponse)
def healthcheck() -> str:
    """Liveness probe used by container orchestrators."""
    return "ok"


@app.get("/readyz", response_class=PlainTextResponse)
def readiness_probe(embedding_model: EmbeddingModel = Depends(get_embedding_model)) -> str:
    """Readiness probe that ensures the embedding collaborator answers."""

    try:
        embedding_model.embed_texts(["__readyz__"])
    except Exception as exc:
        raise HTTPException(status_code=503, detail=f"embedding_model_unavailable: {exc}") from exc
    return "ok"

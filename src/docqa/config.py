"""Runtime configuration sourced from environment variables."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_LLM_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_LLM_MODEL = "llama-3.1-8b-instant"
DEFAULT_EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_AUDIT_LOGGER = "docqa.audit"


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


def _str_from_env(*names: str, default: str | None = None) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return default


@dataclass(slots=True)
class Settings:
    """Tunable parameters of the ingestion and answering pipeline."""

    chunk_size: int = 1000
    max_chunks: int = 50
    top_k: int = 3
    pdf_fallback_timeout: float = 30.0
    max_upload_bytes: int = 10 * 1024 * 1024

    embedding_backend: str = "hashing"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimension: int = 384
    embedding_device: str | None = None

    llm_base_url: str = DEFAULT_LLM_BASE_URL
    llm_model: str = DEFAULT_LLM_MODEL
    llm_temperature: float = 0.3
    llm_api_key: str | None = None

    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    audit_logger: str = DEFAULT_AUDIT_LOGGER
    audit_log_file: str = "upload_audit.log"
    audit_max_bytes: int = 5 * 1024 * 1024
    audit_backup_count: int = 3

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""

        return cls(
            chunk_size=_int_from_env("DOCQA_CHUNK_SIZE", 1000),
            max_chunks=_int_from_env("DOCQA_MAX_CHUNKS", 50),
            top_k=_int_from_env("DOCQA_TOP_K", 3),
            pdf_fallback_timeout=_float_from_env("DOCQA_PDF_FALLBACK_TIMEOUT", 30.0),
            max_upload_bytes=_int_from_env("DOCQA_MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
            embedding_backend=(_str_from_env("EMBEDDING_BACKEND", default="hashing") or "hashing").lower(),
            embedding_model=_str_from_env("EMBEDDING_MODEL_PATH", default=DEFAULT_EMBEDDING_MODEL)
            or DEFAULT_EMBEDDING_MODEL,
            embedding_dimension=_int_from_env("EMBEDDING_DIMENSION", 384),
            embedding_device=_str_from_env("EMBEDDING_DEVICE"),
            llm_base_url=_str_from_env("LLM_BASE_URL", default=DEFAULT_LLM_BASE_URL) or DEFAULT_LLM_BASE_URL,
            llm_model=_str_from_env("LLM_MODEL", default=DEFAULT_LLM_MODEL) or DEFAULT_LLM_MODEL,
            llm_temperature=_float_from_env("LLM_TEMPERATURE", 0.3),
            llm_api_key=_str_from_env("LLM_API_KEY", "GROQ_API_KEY"),
            log_dir=Path(_str_from_env("DOCQA_LOG_DIR", default="logs") or "logs"),
            log_level=(_str_from_env("DOCQA_LOG_LEVEL", default="INFO") or "INFO").upper(),
            audit_logger=_str_from_env("DOCQA_AUDIT_LOGGER", default=DEFAULT_AUDIT_LOGGER) or DEFAULT_AUDIT_LOGGER,
            audit_log_file=_str_from_env("DOCQA_AUDIT_LOG_FILE", default="upload_audit.log") or "upload_audit.log",
            audit_max_bytes=_int_from_env("DOCQA_AUDIT_MAX_BYTES", 5 * 1024 * 1024),
            audit_backup_count=_int_from_env("DOCQA_AUDIT_BACKUP_COUNT", 3),
        )


@lru_cache()
def get_settings() -> Settings:
    """Return the cached process settings."""

    return Settings.from_env()


def reset_settings_cache() -> None:
    """Clear the cached settings instance (primarily for testing)."""

    get_settings.cache_clear()  # type: ignore[attr-defined]

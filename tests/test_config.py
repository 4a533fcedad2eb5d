from pathlib import Path

import pytest

from docqa.config import (
    DEFAULT_LLM_BASE_URL,
    DEFAULT_LLM_MODEL,
    Settings,
    get_settings,
    reset_settings_cache,
)

_ENV_VARS = (
    "DOCQA_CHUNK_SIZE",
    "DOCQA_MAX_CHUNKS",
    "DOCQA_TOP_K",
    "DOCQA_PDF_FALLBACK_TIMEOUT",
    "DOCQA_MAX_UPLOAD_BYTES",
    "EMBEDDING_BACKEND",
    "LLM_API_KEY",
    "GROQ_API_KEY",
    "LLM_MODEL",
    "LLM_TEMPERATURE",
    "DOCQA_LOG_DIR",
    "DOCQA_LOG_LEVEL",
    "DOCQA_AUDIT_LOGGER",
    "DOCQA_AUDIT_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_defaults():
    settings = Settings.from_env()

    assert (settings.chunk_size, settings.max_chunks, settings.top_k) == (1000, 50, 3)
    assert settings.pdf_fallback_timeout == 30.0
    assert settings.llm_model == DEFAULT_LLM_MODEL == "llama-3.1-8b-instant"
    assert settings.llm_base_url == DEFAULT_LLM_BASE_URL
    assert settings.llm_temperature == 0.3
    assert settings.llm_api_key is None
    assert settings.embedding_backend == "hashing"
    assert settings.log_dir == Path("logs")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DOCQA_CHUNK_SIZE", "500")
    monkeypatch.setenv("DOCQA_PDF_FALLBACK_TIMEOUT", "2.5")
    monkeypatch.setenv("EMBEDDING_BACKEND", "Sentence-Transformers")
    monkeypatch.setenv("LLM_MODEL", "mixtral-8x7b")
    monkeypatch.setenv("DOCQA_LOG_DIR", "/tmp/docqa-logs")

    settings = Settings.from_env()

    assert settings.chunk_size == 500
    assert settings.pdf_fallback_timeout == 2.5
    assert settings.embedding_backend == "sentence-transformers"
    assert settings.llm_model == "mixtral-8x7b"
    assert settings.log_dir == Path("/tmp/docqa-logs")


def test_groq_key_is_accepted_as_fallback(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

    assert Settings.from_env().llm_api_key == "gsk-test"

    monkeypatch.setenv("LLM_API_KEY", "primary")

    assert Settings.from_env().llm_api_key == "primary"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch, caplog):
    monkeypatch.setenv("DOCQA_MAX_CHUNKS", "many")
    monkeypatch.setenv("LLM_TEMPERATURE", "warm")

    with caplog.at_level("WARNING", logger="docqa.config"):
        settings = Settings.from_env()

    assert settings.max_chunks == 50
    assert settings.llm_temperature == 0.3
    assert "DOCQA_MAX_CHUNKS" in caplog.text


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("DOCQA_TOP_K", "5")

    assert get_settings() is first

    reset_settings_cache()

    assert get_settings().top_k == 5


def test_logging_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DOCQA_LOG_LEVEL", "warning")
    monkeypatch.setenv("DOCQA_AUDIT_LOGGER", "docqa.audit.staging")
    monkeypatch.setenv("DOCQA_AUDIT_LOG_FILE", "staging_audit.log")

    settings = Settings.from_env()

    assert settings.log_level == "WARNING"
    assert settings.audit_logger == "docqa.audit.staging"
    assert settings.audit_log_file == "staging_audit.log"
    assert settings.audit_max_bytes == 5 * 1024 * 1024

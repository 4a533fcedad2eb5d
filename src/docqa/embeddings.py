"""Embedding collaborators: sentence-transformers or deterministic token hashing."""
from __future__ import annotations

import hashlib
import logging
import re
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import List, Sequence

import numpy as np

from docqa.config import Settings, get_settings
from docqa.telemetry import emit_embeddings_event

LOGGER = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


class EmbeddingModel(ABC):
    """Turns texts into vectors, reporting timing for every batch."""

    model_name: str = "unknown"

    def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        started = time.perf_counter()
        try:
            embeddings = self._embed(list(texts))
        except Exception as error:
            emit_embeddings_event(
                model=self.model_name,
                count=len(texts),
                duration_ms=(time.perf_counter() - started) * 1000.0,
                errors=[str(error)],
            )
            raise

        emit_embeddings_event(
            model=self.model_name,
            count=len(texts),
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return embeddings

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Length of the produced vectors."""

    @abstractmethod
    def _embed(self, texts: List[str]) -> List[List[float]]:
        ...


class HashingEmbeddingModel(EmbeddingModel):
    """Bag-of-words vectors built by hashing lower-cased tokens into buckets.

    Needs no model download, so uploads are processed instantly; similarity is
    purely lexical.
    """

    model_name = "token-hashing"

    def __init__(self, dimension: int = 384) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be a positive integer")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def _embed(self, texts: List[str]) -> List[List[float]]:
        matrix = np.zeros((len(texts), self._dimension), dtype=np.float64)
        for row, text in enumerate(texts):
            for token in _TOKEN_RE.findall(text.lower()):
                digest = hashlib.sha256(token.encode("utf-8")).digest()
                matrix[row, int.from_bytes(digest[:8], "big") % self._dimension] += 1.0
        return matrix.tolist()


class SentenceTransformerEmbeddingModel(EmbeddingModel):
    """Wrapper around a SentenceTransformer model."""

    def __init__(self, model_name_or_path: str, *, device: str | None = None) -> None:
        from sentence_transformers import SentenceTransformer

        LOGGER.info("Loading sentence-transformers model %s", model_name_or_path)
        self._model = SentenceTransformer(model_name_or_path, device=device)
        self.model_name = model_name_or_path
        self._dimension = int(self._model.get_sentence_embedding_dimension())

    @property
    def dimension(self) -> int:
        return self._dimension

    def _embed(self, texts: List[str]) -> List[List[float]]:
        embeddings = self._model.encode(
            texts,
            convert_to_numpy=True,
            show_progress_bar=False,
            normalize_embeddings=False,
        )
        return embeddings.tolist()


def create_embedding_model(settings: Settings) -> EmbeddingModel:
    """Instantiate the embedding backend selected in ``settings``."""

    backend = settings.embedding_backend
    if backend in {"sentence-transformers", "sentence_transformers"}:
        return SentenceTransformerEmbeddingModel(settings.embedding_model, device=settings.embedding_device)
    if backend == "hashing":
        return HashingEmbeddingModel(settings.embedding_dimension)
    raise ValueError(f"Unknown embedding backend: {backend}")


@lru_cache()
def get_embedding_model() -> EmbeddingModel:
    """Return a cached embedding model instance."""

    return create_embedding_model(get_settings())


def reset_embedding_model_cache() -> None:
    """Clear the cached embedding model instance (primarily for testing)."""

    get_embedding_model.cache_clear()  # type: ignore[attr-defined]

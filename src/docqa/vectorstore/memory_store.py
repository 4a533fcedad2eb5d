"""In-memory retrieval index over the chunks of a single document."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Protocol, Sequence

import numpy as np

from docqa.errors import IndexingError
from docqa.ingest.models import Chunk
from docqa.telemetry import emit_index_event, emit_retriever_event

LOGGER = logging.getLogger(__name__)


class EmbeddingModelLike(Protocol):
    """Protocol describing the embedding interface used by the index."""

    def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        ...


@dataclass(frozen=True, slots=True)
class EmbeddedChunk:
    """A chunk paired with its embedding vector."""

    chunk: Chunk
    embedding: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class ChunkSearchResult:
    """A retrieved chunk and its cosine similarity to the query."""

    chunk: Chunk
    score: float


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    return matrix / norms


class InMemoryChunkIndex:
    """Holds the embedded chunks of one document and answers top-k queries.

    Instances are built once with :meth:`build` and never mutated; replacing the
    document means building a new index.
    """

    def __init__(self, entries: Sequence[EmbeddedChunk], embedding_model: EmbeddingModelLike) -> None:
        self._entries = list(entries)
        self._embedding_model = embedding_model
        if self._entries:
            matrix = np.array([entry.embedding for entry in self._entries], dtype=np.float64)
            self._matrix = _unit_rows(matrix)
        else:
            self._matrix = np.zeros((0, 0), dtype=np.float64)

    @classmethod
    async def build(cls, chunks: Sequence[Chunk], embedding_model: EmbeddingModelLike) -> "InMemoryChunkIndex":
        """Embed every chunk; any failure aborts the build so no partial index exists."""

        started = time.perf_counter()
        texts = [chunk.text for chunk in chunks]
        try:
            embeddings = await asyncio.to_thread(embedding_model.embed_texts, texts)
        except Exception as error:
            emit_index_event("index.build", count=len(chunks), dimension=None, error=error)
            raise IndexingError(f"Embedding failed: {error}", cause=error) from error

        if len(embeddings) != len(chunks):
            error = IndexingError(
                f"Embedding returned {len(embeddings)} vectors for {len(chunks)} chunks"
            )
            emit_index_event("index.build", count=len(chunks), dimension=None, error=error)
            raise error

        dimensions = {len(vector) for vector in embeddings}
        if len(dimensions) > 1 or 0 in dimensions:
            error = IndexingError(f"Embedding returned vectors of inconsistent dimension: {sorted(dimensions)}")
            emit_index_event("index.build", count=len(chunks), dimension=None, error=error)
            raise error

        entries = [
            EmbeddedChunk(chunk=chunk, embedding=tuple(float(value) for value in vector))
            for chunk, vector in zip(chunks, embeddings)
        ]
        index = cls(entries, embedding_model)
        emit_index_event(
            "index.build",
            count=len(entries),
            dimension=index.dimension,
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return index

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def dimension(self) -> int | None:
        return int(self._matrix.shape[1]) if self._entries else None

    @property
    def chunks(self) -> List[Chunk]:
        return [entry.chunk for entry in self._entries]

    async def search_with_scores(self, query: str, k: int = 3) -> List[ChunkSearchResult]:
        """Return up to ``k`` chunks by descending cosine similarity.

        Equal scores keep document order: the lower chunk ordinal comes first.
        """

        if k <= 0 or not self._entries:
            return []

        started = time.perf_counter()
        try:
            query_embeddings = await asyncio.to_thread(self._embedding_model.embed_texts, [query])
        except Exception as error:
            raise IndexingError(f"Query embedding failed: {error}", cause=error) from error
        query_vector = np.asarray(query_embeddings[0], dtype=np.float64)
        if query_vector.shape != (self._matrix.shape[1],):
            raise IndexingError(
                f"Query embedding has dimension {query_vector.shape[-1]}, index expects {self._matrix.shape[1]}"
            )
        norm = np.linalg.norm(query_vector)
        if norm:
            query_vector = query_vector / norm
        scores = self._matrix @ query_vector

        ranked = sorted(
            range(len(self._entries)),
            key=lambda position: (-round(float(scores[position]), 12), self._entries[position].chunk.index),
        )[:k]
        results = [
            ChunkSearchResult(chunk=self._entries[position].chunk, score=float(scores[position]))
            for position in ranked
        ]
        emit_retriever_event(
            query=query,
            top_k=k,
            results=[{"chunk": item.chunk.index, "score": round(item.score, 6)} for item in results],
            duration_ms=(time.perf_counter() - started) * 1000.0,
        )
        return results

    async def search(self, query: str, k: int = 3) -> List[Chunk]:
        """Return the ``k`` chunks most similar to ``query``, most similar first."""

        return [result.chunk for result in await self.search_with_scores(query, k)]

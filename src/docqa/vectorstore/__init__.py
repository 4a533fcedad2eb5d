"""Retrieval index over embedded document chunks."""

from __future__ import annotations

from .memory_store import ChunkSearchResult, EmbeddedChunk, EmbeddingModelLike, InMemoryChunkIndex

__all__ = ["ChunkSearchResult", "EmbeddedChunk", "EmbeddingModelLike", "InMemoryChunkIndex"]

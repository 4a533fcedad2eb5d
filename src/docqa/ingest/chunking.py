"""Split extracted text into bounded, non-overlapping windows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from docqa.telemetry import emit_chunking_event

from .models import Chunk

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_MAX_CHUNKS = 50


@dataclass(slots=True)
class ChunkingConfig:
    chunk_chars: int = DEFAULT_CHUNK_SIZE
    max_chunks: int = DEFAULT_MAX_CHUNKS


class FixedWindowChunker:
    """Partition text into fixed-size windows, keeping only the first ``max_chunks``.

    Windows never overlap and cover the text left to right; only the last one may
    be shorter than ``chunk_chars``. The tail of a long document is dropped, not
    sampled, so the number of embedding calls per upload stays bounded.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self.config = config or ChunkingConfig()
        if self.config.chunk_chars <= 0:
            raise ValueError("chunk_chars must be a positive integer")
        if self.config.max_chunks <= 0:
            raise ValueError("max_chunks must be a positive integer")

    def split(self, text: str) -> Tuple[List[Chunk], int]:
        """Return the kept chunks and the number of windows before truncation."""

        size = self.config.chunk_chars
        total = -(-len(text) // size)
        kept = min(total, self.config.max_chunks)
        chunks = [
            Chunk(
                index=index,
                text=text[index * size : (index + 1) * size],
                char_start=index * size,
                char_end=min((index + 1) * size, len(text)),
            )
            for index in range(kept)
        ]
        if total > kept:
            LOGGER.warning("Limiting chunks to %s of %s to bound embedding calls", kept, total)
        emit_chunking_event(total_chunks=total, kept_chunks=kept, chunk_size=size)
        return chunks, total


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_chunks: int = DEFAULT_MAX_CHUNKS,
) -> List[Chunk]:
    """Split *text* into at most ``max_chunks`` windows of ``chunk_size`` characters."""

    chunks, _ = FixedWindowChunker(ChunkingConfig(chunk_chars=chunk_size, max_chunks=max_chunks)).split(text)
    return chunks

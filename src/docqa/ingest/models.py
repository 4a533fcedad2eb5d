"""Data models used by the ingestion pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class Document:
    """Raw upload together with its declared MIME type."""

    data: bytes
    mime_type: Optional[str]
    file_name: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class Chunk:
    """Contiguous window of extracted text, tagged with its ordinal."""

    index: int
    text: str
    char_start: int
    char_end: int


@dataclass(slots=True)
class IngestOutcome:
    """Result of running a document through extraction and chunking."""

    text_length: int
    chunks: List[Chunk] = field(default_factory=list)
    total_chunks: int = 0

    @property
    def dropped_chunks(self) -> int:
        return max(self.total_chunks - len(self.chunks), 0)

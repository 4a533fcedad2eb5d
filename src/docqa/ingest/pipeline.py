"""High level ingestion pipeline entry point."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from docqa.config import Settings
from docqa.telemetry import traced_duration

from .chunking import ChunkingConfig, FixedWindowChunker
from .extractors import TextExtractor, build_extractor_registry, extract_text
from .format_detection import DocumentFormat
from .models import Document, IngestOutcome

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestPipelineConfig:
    chunk_chars: int = 1000
    max_chunks: int = 50
    pdf_fallback_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "IngestPipelineConfig":
        return cls(
            chunk_chars=settings.chunk_size,
            max_chunks=settings.max_chunks,
            pdf_fallback_timeout=settings.pdf_fallback_timeout,
        )


class IngestPipeline:
    """Pipeline orchestrating document extraction and chunking."""

    def __init__(
        self,
        config: Optional[IngestPipelineConfig] = None,
        *,
        extractors: Optional[Mapping[DocumentFormat, TextExtractor]] = None,
    ) -> None:
        self.config = config or IngestPipelineConfig()
        self.extractors = extractors or build_extractor_registry(self.config.pdf_fallback_timeout)
        self.chunker = FixedWindowChunker(
            ChunkingConfig(chunk_chars=self.config.chunk_chars, max_chunks=self.config.max_chunks)
        )

    async def ingest(self, document: Document) -> IngestOutcome:
        """Extract and chunk an uploaded document.

        Raises :class:`~docqa.errors.ExtractionError` when no text can be recovered.
        """

        LOGGER.info(
            "Processing upload %s (%s, %s bytes)",
            document.file_name,
            document.mime_type,
            document.size_bytes,
        )
        with traced_duration("ingest.extract", file_name=document.file_name, mime_type=document.mime_type):
            text = await extract_text(document, self.extractors)
        LOGGER.info("Extracted text length: %s", len(text))

        chunks, total = self.chunker.split(text)
        LOGGER.info("Number of chunks: %s", len(chunks))
        return IngestOutcome(text_length=len(text), chunks=chunks, total_chunks=total)

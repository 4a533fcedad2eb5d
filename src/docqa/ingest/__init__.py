"""Document ingestion: format detection, text extraction and chunking."""
from __future__ import annotations

from .chunking import ChunkingConfig, FixedWindowChunker, chunk_text
from .extractors import (
    DocxExtractor,
    PDFExtractor,
    PlainTextExtractor,
    TextExtractor,
    build_extractor_registry,
    extract_text,
)
from .format_detection import DocumentFormat, detect_format
from .models import Chunk, Document, IngestOutcome
from .pipeline import IngestPipeline, IngestPipelineConfig

__all__ = [
    "Chunk",
    "ChunkingConfig",
    "Document",
    "DocumentFormat",
    "DocxExtractor",
    "FixedWindowChunker",
    "IngestOutcome",
    "IngestPipeline",
    "IngestPipelineConfig",
    "PDFExtractor",
    "PlainTextExtractor",
    "TextExtractor",
    "build_extractor_registry",
    "chunk_text",
    "detect_format",
    "extract_text",
]

"""Extractors turning uploaded bytes into plain text, one per supported format."""
from __future__ import annotations

import asyncio
import io
import logging
from abc import ABC, abstractmethod
from typing import Iterator, Mapping

from docx import Document as load_docx
from docx.table import Table
from pdfminer.high_level import extract_pages
from pdfminer.layout import LTContainer, LTTextLine
from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect
from PyPDF2 import PdfReader

from docqa.errors import (
    CorruptSourceError,
    EmptyExtractionError,
    EncryptedSourceError,
    ExtractionError,
    ExtractionTimeoutError,
    UnsupportedFormatError,
)
from docqa.telemetry import emit_extraction_fallback

from .format_detection import DocumentFormat, detect_format
from .models import Document

LOGGER = logging.getLogger(__name__)

DEFAULT_PDF_FALLBACK_TIMEOUT = 30.0

_ENCRYPTION_MARKERS = ("password", "encrypt", "decrypt")


def _require_text(text: str | None, label: str) -> str:
    if not text or not text.strip():
        raise EmptyExtractionError(f"{label} appears to be empty or contains no extractable text")
    return text


class TextExtractor(ABC):
    """Common contract for format-specific text extraction."""

    format: DocumentFormat

    @abstractmethod
    async def extract(self, data: bytes) -> str:
        """Return the non-empty text recovered from ``data``."""


class PlainTextExtractor(TextExtractor):
    """Decode plaintext uploads as UTF-8."""

    format = DocumentFormat.TXT

    async def extract(self, data: bytes) -> str:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as error:
            raise CorruptSourceError(f"Text file is not valid UTF-8: {error}", cause=error) from error
        return _require_text(text, "Text file")


class DocxExtractor(TextExtractor):
    """Extract paragraphs and table text from Word documents."""

    format = DocumentFormat.DOCX

    async def extract(self, data: bytes) -> str:
        try:
            text = await asyncio.to_thread(self._read_docx, data)
        except Exception as error:
            raise CorruptSourceError(f"Failed to parse DOCX file: {error}", cause=error) from error
        return _require_text(text, "DOCX")

    @staticmethod
    def _read_docx(data: bytes) -> str:
        document = load_docx(io.BytesIO(data))
        parts: list[str] = []
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                for row in block.rows:
                    for cell in row.cells:
                        parts.extend(paragraph.text for paragraph in cell.paragraphs if paragraph.text)
            elif block.text:
                parts.append(block.text)
        return "\n\n".join(parts)


class PDFExtractor(TextExtractor):
    """Extract PDF text with a strict parser and a tolerant layout-walk fallback.

    The strict PyPDF2 pass handles well-formed files. When it fails on a damaged
    cross-reference table, pdfminer.six rebuilds the object table itself and the
    page layout tree is walked line by line. The fallback runs in a worker thread
    under a deadline; the thread is not interrupted when the deadline passes.
    """

    format = DocumentFormat.PDF

    def __init__(self, fallback_timeout: float = DEFAULT_PDF_FALLBACK_TIMEOUT) -> None:
        self.fallback_timeout = fallback_timeout

    async def extract(self, data: bytes) -> str:
        try:
            text = await asyncio.to_thread(self._read_strict, data)
        except ExtractionError:
            raise
        except Exception as error:
            message = str(error) or type(error).__name__
            lowered = message.lower()
            if "xref" in lowered:
                return await self._extract_with_fallback(data, message)
            if any(marker in lowered for marker in _ENCRYPTION_MARKERS):
                raise EncryptedSourceError(
                    "This PDF appears to be password-protected or encrypted. "
                    "Please remove the password and try again.",
                    cause=error,
                ) from error
            raise CorruptSourceError(
                f"Failed to parse PDF. The file may be corrupted or in an unsupported format: {message}",
                cause=error,
            ) from error
        return _require_text(text, "PDF")

    @staticmethod
    def _read_strict(data: bytes) -> str:
        reader = PdfReader(io.BytesIO(data), strict=True)
        if reader.is_encrypted and not reader.decrypt(""):
            raise EncryptedSourceError(
                "This PDF appears to be password-protected or encrypted. "
                "Please remove the password and try again."
            )
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages)

    async def _extract_with_fallback(self, data: bytes, primary_error: str) -> str:
        LOGGER.warning("Strict PDF parse failed (%s); retrying with layout walk", primary_error)
        emit_extraction_fallback(
            document_format=self.format.value,
            reason=primary_error,
            timeout_s=self.fallback_timeout,
        )
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._walk_layout, data),
                timeout=self.fallback_timeout,
            )
        except asyncio.TimeoutError as error:
            raise ExtractionTimeoutError(
                "PDF parsing timeout - the file may be too large or corrupted",
                cause=error,
            ) from error
        except (PDFPasswordIncorrect, PDFEncryptionError) as error:
            raise EncryptedSourceError(
                "This PDF appears to be password-protected or encrypted. "
                "Please remove the password and try again.",
                cause=error,
            ) from error
        except Exception as error:
            raise CorruptSourceError(
                "PDF parsing failed due to file structure issues (bad XRef entry). "
                "Try re-saving the PDF in a different application or converting it to DOCX or TXT. "
                f"Technical details: {primary_error}. Fallback error: {error}",
                cause=error,
            ) from error
        return _require_text(text, "PDF")

    @classmethod
    def _walk_layout(cls, data: bytes) -> str:
        pages: list[str] = []
        for page in extract_pages(io.BytesIO(data)):
            lines = [line.strip() for line in cls._iter_text_lines(page)]
            pages.append(" ".join(line for line in lines if line))
        return "\n".join(pages).strip()

    @classmethod
    def _iter_text_lines(cls, container: LTContainer) -> Iterator[str]:
        for item in container:
            if isinstance(item, LTTextLine):
                yield item.get_text()
            elif isinstance(item, LTContainer):
                yield from cls._iter_text_lines(item)


def build_extractor_registry(
    pdf_fallback_timeout: float = DEFAULT_PDF_FALLBACK_TIMEOUT,
) -> dict[DocumentFormat, TextExtractor]:
    """Return the format -> extractor mapping used by the pipeline."""

    extractors: list[TextExtractor] = [
        PDFExtractor(fallback_timeout=pdf_fallback_timeout),
        DocxExtractor(),
        PlainTextExtractor(),
    ]
    return {extractor.format: extractor for extractor in extractors}


async def extract_text(document: Document, registry: Mapping[DocumentFormat, TextExtractor]) -> str:
    """Extract text from ``document`` using the extractor for its declared format."""

    document_format = detect_format(document.mime_type)
    extractor = registry.get(document_format)
    if extractor is None:
        raise UnsupportedFormatError(f"No extractor registered for {document_format.value}")
    return await extractor.extract(document.data)

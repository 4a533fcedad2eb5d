"""Resolve the declared MIME type of an upload to a supported format."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from docqa.errors import UnsupportedFormatError


class DocumentFormat(str, Enum):
    """Supported document formats."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"


MIME_TYPES: dict[str, DocumentFormat] = {
    "application/pdf": DocumentFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentFormat.DOCX,
    "text/plain": DocumentFormat.TXT,
}


def detect_format(mime_type: Optional[str]) -> DocumentFormat:
    """Return the format for a declared MIME type.

    Parameters such as ``; charset=utf-8`` are ignored. The file name is never
    consulted: an upload is accepted or rejected on its declared type alone.
    """

    essence = (mime_type or "").split(";", 1)[0].strip().lower()
    try:
        return MIME_TYPES[essence]
    except KeyError:
        raise UnsupportedFormatError(f"Unsupported file type: {mime_type or 'unknown'}") from None

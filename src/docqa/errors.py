"""Exception taxonomy shared by the ingestion and answering layers."""
from __future__ import annotations

from enum import Enum


class DocQAError(RuntimeError):
    """Base class for errors raised by the service."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.__cause__ = cause


class ExtractionReason(str, Enum):
    """Why text could not be recovered from an upload."""

    UNSUPPORTED_FORMAT = "unsupported_format"
    EMPTY = "empty"
    CORRUPT = "corrupt"
    ENCRYPTED = "encrypted"
    TIMEOUT = "timeout"


class ExtractionError(DocQAError):
    """Raised when an uploaded document cannot be turned into text."""

    reason: ExtractionReason = ExtractionReason.CORRUPT


class UnsupportedFormatError(ExtractionError):
    reason = ExtractionReason.UNSUPPORTED_FORMAT


class EmptyExtractionError(ExtractionError):
    reason = ExtractionReason.EMPTY


class CorruptSourceError(ExtractionError):
    reason = ExtractionReason.CORRUPT


class EncryptedSourceError(ExtractionError):
    reason = ExtractionReason.ENCRYPTED


class ExtractionTimeoutError(ExtractionError):
    reason = ExtractionReason.TIMEOUT


class IndexingError(DocQAError):
    """Raised when the retrieval index cannot be built for a document."""


class ModelConfigurationError(DocQAError):
    """Raised when the chat model client cannot be created."""


class NoDocumentLoadedError(DocQAError):
    """Raised when a session has no uploaded document yet."""


__all__ = [
    "CorruptSourceError",
    "DocQAError",
    "EmptyExtractionError",
    "EncryptedSourceError",
    "ExtractionError",
    "ExtractionReason",
    "ExtractionTimeoutError",
    "IndexingError",
    "ModelConfigurationError",
    "NoDocumentLoadedError",
    "UnsupportedFormatError",
]

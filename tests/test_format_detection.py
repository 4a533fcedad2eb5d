import pytest

from docqa.errors import ExtractionReason, UnsupportedFormatError
from docqa.ingest.format_detection import DocumentFormat, detect_format


@pytest.mark.parametrize(
    "mime_type,expected",
    [
        ("application/pdf", DocumentFormat.PDF),
        (
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            DocumentFormat.DOCX,
        ),
        ("text/plain", DocumentFormat.TXT),
        ("text/plain; charset=utf-8", DocumentFormat.TXT),
        ("Application/PDF", DocumentFormat.PDF),
    ],
)
def test_detect_format_from_declared_mime(mime_type, expected):
    assert detect_format(mime_type) is expected


@pytest.mark.parametrize("mime_type", ["image/png", "application/msword", "", None])
def test_detect_format_rejects_other_types(mime_type):
    with pytest.raises(UnsupportedFormatError) as excinfo:
        detect_format(mime_type)

    assert excinfo.value.reason is ExtractionReason.UNSUPPORTED_FORMAT
    assert str(excinfo.value).startswith("Unsupported file type")

"""Document builders and deterministic collaborators shared by the tests."""
from __future__ import annotations

import io
from typing import Any, Iterable, List, Sequence

from docx import Document as DocxDocument

from docqa.embeddings import EmbeddingModel
from docqa.llm.client import ChatMessage, ChatModel

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT_MIME = "text/plain"


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: Sequence[str]) -> bytes:
    """Return a minimal PDF with one Helvetica text line per page and a valid xref table."""

    page_count = len(pages)
    font_number = 3 + 2 * page_count
    kids = " ".join(f"{3 + 2 * index} 0 R" for index in range(page_count))
    objects: List[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode("ascii"),
    ]
    for index, text in enumerate(pages):
        stream = f"BT /F1 12 Tf 72 720 Td ({_escape_pdf_text(text)}) Tj ET".encode("latin-1") if text else b""
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents {4 + 2 * index} 0 R "
                f"/Resources << /Font << /F1 {font_number} 0 R >> >> >>"
            ).encode("ascii")
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets: List[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


def build_docx(paragraphs: Iterable[str], table: Sequence[Sequence[str]] | None = None) -> bytes:
    document = DocxDocument()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for row_index, row in enumerate(table):
            for col_index, value in enumerate(row):
                grid.cell(row_index, col_index).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def repeat_word(word: str, length: int) -> str:
    """Return ``word`` repeated with spaces, cut to exactly ``length`` characters."""

    return ((word + " ") * (length // (len(word) + 1) + 1))[:length]


class KeywordEmbeddingModel(EmbeddingModel):
    """Embeds a text as the occurrence counts of a fixed keyword list."""

    model_name = "keyword-test"

    def __init__(self, keywords: Sequence[str]) -> None:
        self.keywords = [keyword.lower() for keyword in keywords]
        self.calls: List[List[str]] = []

    @property
    def dimension(self) -> int:
        return len(self.keywords)

    def _embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [[float(text.lower().count(keyword)) for keyword in self.keywords] for text in texts]


class FailingEmbeddingModel(EmbeddingModel):
    model_name = "failing-test"

    @property
    def dimension(self) -> int:
        return 3

    def _embed(self, texts: List[str]) -> List[List[float]]:
        raise RuntimeError("embedding backend unreachable")


class RecordingChatModel(ChatModel):
    """Returns a canned response and records the prompts it was sent."""

    model_name = "recording-test"

    def __init__(self, response: Any = "stub answer") -> None:
        self.response = response
        self.calls: List[List[ChatMessage]] = []

    async def complete(self, messages: Sequence[ChatMessage]) -> Any:
        self.calls.append(list(messages))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

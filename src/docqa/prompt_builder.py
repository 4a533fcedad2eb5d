"""Utilities for constructing the grounded chat prompt."""
from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from docqa.ingest.models import Chunk
from docqa.llm.client import ChatMessage

_PROMPT_DIR = Path(__file__).resolve().parent / "prompts"
_SYSTEM_PROMPT_PATH = _PROMPT_DIR / "system.txt"
_USER_PROMPT_PATH = _PROMPT_DIR / "user.md"

CONTEXT_SEPARATOR = "\n\n"


def _load_template(path: Path) -> str:
    """Read and trim the contents of a template file."""
    return path.read_text(encoding="utf-8").strip()


SYSTEM_PROMPT = _load_template(_SYSTEM_PROMPT_PATH)
_USER_TEMPLATE = _load_template(_USER_PROMPT_PATH)


def build_context(chunks: Sequence[Chunk]) -> str:
    """Join chunk texts in retrieval order."""

    return CONTEXT_SEPARATOR.join(chunk.text for chunk in chunks)


def build_messages(question: str, chunks: Sequence[Chunk]) -> List[ChatMessage]:
    """Compose the system instruction and the user turn for ``question``."""

    if question is None:
        raise ValueError("question must not be None")

    user_content = _USER_TEMPLATE.format(context=build_context(chunks), question=question)
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


__all__ = ["CONTEXT_SEPARATOR", "SYSTEM_PROMPT", "build_context", "build_messages"]

"""Normalisation of loosely-shaped chat model responses into plain text.

Backends return anything from a bare string to an SDK object whose message
content is a list of typed parts. :func:`coerce_response` maps every shape onto
the closed union ``PlainText | StructuredParts`` and :func:`response_to_text`
is the single place that turns that union into the answer string.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Tuple, Union

_MISSING = object()


@dataclass(frozen=True, slots=True)
class TextPart:
    text: str


@dataclass(frozen=True, slots=True)
class OtherPart:
    payload: Any


Part = Union[TextPart, OtherPart]


@dataclass(frozen=True, slots=True)
class PlainText:
    text: str
    raw: Any = None

    kind = "plain_text"


@dataclass(frozen=True, slots=True)
class StructuredParts:
    parts: Tuple[Part, ...]
    raw: Any = None

    kind = "structured_parts"


ModelResponse = Union[PlainText, StructuredParts]


def _lookup(container: Any, key: str) -> Any:
    if isinstance(container, dict):
        return container.get(key, _MISSING)
    return getattr(container, key, _MISSING)


def _message_content(raw: Any) -> Any:
    choices = _lookup(raw, "choices")
    if isinstance(choices, (list, tuple)) and choices:
        message = _lookup(choices[0], "message")
        if message is not _MISSING and message is not None:
            return _lookup(message, "content")
    return _lookup(raw, "content")


def _coerce_part(part: Any) -> Part:
    if isinstance(part, str):
        return TextPart(part)
    text = _lookup(part, "text")
    if text is not _MISSING and text is not None:
        return TextPart(str(text))
    return OtherPart(part)


def coerce_response(raw: Any) -> ModelResponse:
    """Classify a raw model response without ever raising."""

    if isinstance(raw, str):
        return PlainText(raw, raw)

    content = _message_content(raw)
    if isinstance(content, str):
        return PlainText(content, raw)
    if isinstance(content, (list, tuple)):
        return StructuredParts(tuple(_coerce_part(part) for part in content), raw)
    if content is _MISSING or content is None:
        return StructuredParts((), raw)
    return StructuredParts((OtherPart(content),), raw)


def describe_raw(raw: Any) -> str:
    """Best-effort string dump of a response that carried no usable text."""

    dump = getattr(raw, "model_dump_json", None)
    if callable(dump):
        try:
            return str(dump())
        except (TypeError, ValueError):
            pass
    if isinstance(raw, (dict, list, tuple)):
        try:
            return json.dumps(raw, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            pass
    return str(raw)


def payload_text(response: ModelResponse) -> str:
    """Return only the text carried by ``response``; may be empty."""

    if isinstance(response, PlainText):
        return response.text
    if isinstance(response, StructuredParts):
        return "".join(part.text for part in response.parts if isinstance(part, TextPart))
    raise TypeError(f"Unsupported response type: {type(response).__name__}")


def response_to_text(response: ModelResponse) -> str:
    """Return the textual payload, or a dump of the raw response when there is none."""

    return payload_text(response) or describe_raw(response.raw)


__all__ = [
    "ModelResponse",
    "OtherPart",
    "Part",
    "PlainText",
    "StructuredParts",
    "TextPart",
    "coerce_response",
    "describe_raw",
    "payload_text",
    "response_to_text",
]

"""Per-session binding of an uploaded document's index to a chat model."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from docqa.errors import NoDocumentLoadedError
from docqa.llm.client import ChatModel
from docqa.vectorstore import InMemoryChunkIndex

LOGGER = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


@dataclass(slots=True)
class Session:
    """The current document of a session and the model that answers about it."""

    index: InMemoryChunkIndex
    model: ChatModel
    document_name: Optional[str] = None
    created_at: float = field(default_factory=time.time)


class SessionStore:
    """Maps session ids to their single current :class:`Session`.

    ``put`` overwrites unconditionally and nothing is locked: when two uploads
    for the same session race, whichever finishes last wins.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def put(self, session_id: str, session: Session) -> None:
        replaced = session_id in self._sessions
        self._sessions[session_id] = session
        LOGGER.info(
            "Session %s bound to %s (%s chunks, replaced=%s)",
            session_id,
            session.document_name,
            len(session.index),
            replaced,
        )

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise NoDocumentLoadedError(f"No document uploaded for session {session_id}")
        return session

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()

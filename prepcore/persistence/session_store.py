"""
Purpose: Interview session storage (in-memory; a database-backed store
implements the same SessionStore protocol).

Sessions are owner-scoped: a session owned by someone else is reported as
missing, never returned.

Testing: simple state tests.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

from ..models import InterviewSession


class InMemorySessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, InterviewSession] = {}

    def get(self, owner: str, session_id: str) -> Optional[InterviewSession]:
        session = self._sessions.get(session_id)
        if session is None or session.owner != owner:
            return None
        return session

    def list(self, owner: str) -> list[InterviewSession]:
        """Newest first."""
        mine = [s for s in self._sessions.values() if s.owner == owner]
        return sorted(mine, key=lambda s: s.created_at, reverse=True)

    def save(self, session: InterviewSession) -> InterviewSession:
        session.updated_at = datetime.now(timezone.utc)
        self._sessions[session.id] = session
        return session

    def delete(self, owner: str, session_id: str) -> Optional[InterviewSession]:
        session = self.get(owner, session_id)
        if session is not None:
            del self._sessions[session_id]
        return session

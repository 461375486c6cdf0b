"""
In-memory application session store
Holds sessions between prepare, review and submit requests
"""
from typing import Dict, List

from core.exceptions import SessionNotFoundException
from domain.entities import ApplicationSession


class InMemorySessionStore:
    """Sessions keyed by session_id for the lifetime of the process"""

    def __init__(self):
        self._sessions: Dict[str, ApplicationSession] = {}

    def add(self, session: ApplicationSession) -> ApplicationSession:
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> ApplicationSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def list(self) -> List[ApplicationSession]:
        return sorted(self._sessions.values(), key=lambda s: s.started_at, reverse=True)

    def __len__(self) -> int:
        return len(self._sessions)

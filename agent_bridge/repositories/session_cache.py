"""
Bounded in-memory session cache.

Clients rarely close sessions, so the cache evicts the oldest inserted
session once it holds more than ``max_sessions``.
"""
import logging
from collections import OrderedDict
from typing import Iterator, Optional

from agent_bridge.domains.conversation import Session
from agent_bridge.interfaces.repositories.session import SessionCache

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000


class BoundedSessionCache(SessionCache):
    """Insertion-ordered cache with oldest-first eviction."""

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, Session]" = OrderedDict()

    def put(self, session: Session) -> None:
        # Re-putting an existing id keeps its original insertion slot
        self._sessions[session.id] = session
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted session {evicted_id} (cache limit {self.max_sessions})")

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from agent_bridge.domains.conversation import Session


class SessionCache(ABC):
    """Interface for the in-memory session store."""

    @abstractmethod
    def put(self, session: Session) -> None:
        """Store a session, evicting others if the cache is full."""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        """Get a session by id."""
        pass

    @abstractmethod
    def delete(self, session_id: str) -> None:
        """Remove a session if present."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        pass

    def __contains__(self, session_id: object) -> bool:
        return isinstance(session_id, str) and self.get(session_id) is not None

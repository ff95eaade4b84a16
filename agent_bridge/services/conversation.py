"""
Conversation service.

Owns per-session message history. Histories are append-only; a tool
result must answer a tool call of the assistant message it follows.
"""
import logging
from typing import List, Optional

from agent_bridge.domains.conversation import Message, Session
from agent_bridge.errors import SessionNotFoundError
from agent_bridge.interfaces.repositories.session import SessionCache
from agent_bridge.repositories.session_cache import BoundedSessionCache

# Setup logger for this module
logger = logging.getLogger(__name__)


class ConversationManager:
    """Creates sessions and appends messages to them."""

    def __init__(self, cache: Optional[SessionCache] = None):
        self.cache = cache or BoundedSessionCache()

    def create(self) -> Session:
        session = Session()
        self.cache.put(session)
        logger.debug(f"Created session {session.id}")
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self.cache.get(session_id)

    def require(self, session_id: str) -> Session:
        session = self.cache.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    @staticmethod
    def _check_tool_message(session: Session, message: Message) -> None:
        for previous in reversed(session.messages):
            if previous.role == "tool":
                continue
            if previous.role == "assistant" and previous.tool_calls:
                if any(tc.id == message.tool_call_id for tc in previous.tool_calls):
                    return
            break
        raise ValueError(
            f"Tool message {message.tool_call_id} does not answer a tool call "
            f"of the preceding assistant message"
        )

    def add_message(self, session_id: str, message: Message) -> None:
        """Append a message to a session.

        Raises:
            SessionNotFoundError: If the session is unknown
            ValueError: If a tool message does not match a pending tool call
        """
        session = self.require(session_id)
        if message.role == "tool":
            self._check_tool_message(session, message)
        session.messages.append(message)

    def get_messages(self, session_id: str) -> List[Message]:
        session = self.cache.get(session_id)
        return list(session.messages) if session else []

    def destroy(self, session_id: str) -> None:
        self.cache.delete(session_id)

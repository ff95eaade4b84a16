from abc import ABC, abstractmethod
from typing import List

from agent_bridge.domains.conversation import Message
from agent_bridge.domains.tools import LLMResponse, LLMTool


class LLMProvider(ABC):
    """Interface for chat-completion backends that support tool calling."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable backend name, used in error messages."""
        pass

    @abstractmethod
    async def chat(self, messages: List[Message], tools: List[LLMTool]) -> LLMResponse:
        """Send the history and tool definitions, return text and/or tool calls.

        Raises:
            ProviderError: If the backend rejects the request and no fallback succeeds
        """
        pass

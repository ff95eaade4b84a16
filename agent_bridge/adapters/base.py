"""
Shared retry/fallback behaviour for tool-calling backends.

Providers reject tool-enabled requests for reasons unrelated to the
conversation: payload too large, schemas they cannot parse, or malformed
function calls from the model. The ladder here retries such rejections
with half the tools, then with no tools, before giving up. Authentication
and quota failures are never retried.
"""
import logging
from abc import abstractmethod
from typing import List, Optional, Tuple, Type

from agent_bridge.domains.conversation import Message
from agent_bridge.domains.tools import LLMResponse, LLMTool
from agent_bridge.errors import ProviderError
from agent_bridge.interfaces.providers.llm import LLMProvider

# Setup logger for this module
logger = logging.getLogger(__name__)

REJECTION_STATUS = frozenset({400, 413, 422})
FATAL_STATUS = frozenset({401, 403, 429})
REJECTION_HINTS = (
    "failed to call a function",
    "tool_use_failed",
    "no body",
    "too large",
)


def status_of(error: BaseException) -> Optional[int]:
    """HTTP status carried by an SDK exception, if any."""
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


class ToolFallbackAdapter(LLMProvider):
    """Base adapter implementing the fewer-tools / no-tools fallback ladder."""

    # SDK exceptions that mean the request never got an answer
    transport_errors: Tuple[Type[BaseException], ...] = ()

    @abstractmethod
    async def complete(self, messages: List[Message], tools: List[LLMTool]) -> LLMResponse:
        """Send one request to the backend, without any retry."""
        pass

    def is_fatal(self, error: BaseException) -> bool:
        return status_of(error) in FATAL_STATUS

    def is_tool_rejection(self, error: BaseException) -> bool:
        if self.is_fatal(error) or isinstance(error, self.transport_errors):
            return False
        if status_of(error) in REJECTION_STATUS:
            return True
        message = str(error).lower()
        return any(hint in message for hint in REJECTION_HINTS)

    def enrich_error(self, error: BaseException) -> ProviderError:
        """Turn an SDK exception into a ProviderError with a useful message."""
        if isinstance(error, ProviderError):
            return error

        status = status_of(error)
        provider = self.name
        raw = str(error) or type(error).__name__

        if isinstance(error, self.transport_errors):
            detail = f"{provider} request failed before a response arrived: {raw}"
        elif status == 429:
            detail = f"{provider} rate limit/quota exceeded (429). Check API key quota or billing."
        elif status == 401:
            detail = f"{provider} authentication failed (401). Check API key."
        elif status == 403:
            detail = f"{provider} denied access (403). Check API key permissions or model access."
        elif status == 413:
            detail = f"{provider} rejected the request as too large (413). Try fewer tools or a shorter conversation."
        elif status == 400 and self.is_tool_rejection(error):
            detail = (
                f"{provider} rejected the request (400). This is often model/tool "
                f"compatibility or key restrictions: {raw}"
            )
        elif status is not None:
            detail = f"{provider} request failed ({status}): {raw}"
        else:
            detail = f"{provider} request failed: {raw}"

        return ProviderError(detail, status_code=status, provider=provider)

    async def chat(self, messages: List[Message], tools: List[LLMTool]) -> LLMResponse:
        try:
            return await self.complete(messages, tools)
        except Exception as e:
            if not tools or not self.is_tool_rejection(e):
                raise self.enrich_error(e) from e
            logger.warning(
                f"{self.name} rejected a request with {len(tools)} tools: {e}"
            )

        reduced = tools[: max(1, len(tools) // 2)]
        if len(reduced) < len(tools):
            try:
                logger.warning(f"Retrying {self.name} with {len(reduced)} tools")
                return await self.complete(messages, reduced)
            except Exception as e:
                if not self.is_tool_rejection(e):
                    raise self.enrich_error(e) from e
                logger.warning(f"{self.name} rejected the reduced tool set: {e}")

        try:
            logger.warning(f"Retrying {self.name} without tools")
            return await self.complete(messages, [])
        except Exception as e:
            raise self.enrich_error(e) from e

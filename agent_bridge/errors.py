"""
Exception types for the Agent Bridge system.

Configuration problems (bad manifests, duplicate plugins) fail fast at load
time. Request-time problems are turned into failed ActionResults by the
executor and compiler, except ProviderError which reaches the caller.
"""
from typing import List, Optional


class AgentBridgeError(Exception):
    """Base class for all Agent Bridge errors."""


class ManifestError(AgentBridgeError):
    """Raised when a manifest document is malformed."""


class PluginRegistrationError(AgentBridgeError):
    """Raised when a plugin cannot be registered."""


class InvalidToolNameError(AgentBridgeError, ValueError):
    """Raised when a tool name cannot be encoded or decoded."""


class SessionNotFoundError(AgentBridgeError, KeyError):
    """Raised when a session id is unknown."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id

    def __str__(self) -> str:
        return self.args[0]


class ParameterValidationError(AgentBridgeError, ValueError):
    """Raised when tool call arguments do not match an action's schema."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__(", ".join(self.messages))


class EnrichmentError(AgentBridgeError):
    """Raised by an enrichment hook that refuses to guess missing input."""

    def __init__(self, message: str, data: Optional[dict] = None):
        super().__init__(message)
        self.data = data


class ProviderError(AgentBridgeError):
    """Normalized error from a chat-completion backend."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider

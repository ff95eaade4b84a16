"""
Domain models for sessions and their message history.
"""
import uuid
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from agent_bridge.domains.tools import ToolCall


class Message(BaseModel):
    """One entry of a session's history."""

    role: Literal["system", "user", "assistant", "tool"]
    content: str = ""
    tool_call_id: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None

    @model_validator(mode="after")
    def tool_message_has_call_id(self) -> "Message":
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("Tool messages require tool_call_id")
        return self


class Session(BaseModel):
    """In-memory conversation state owned by the ConversationManager."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    messages: List[Message] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

"""
Domain models for the Agent Bridge system.

This package contains the pydantic models for manifests, the tool-calling
protocol, and conversation sessions.
"""
from agent_bridge.domains.manifest import (
    Manifest,
    ManifestAction,
    ManifestAuth,
    ManifestParameter,
    OAuth2Config,
)
from agent_bridge.domains.tools import (
    ActionResult,
    LLMResponse,
    LLMTool,
    ToolCall,
    ToolResult,
    encode_tool_name,
    parse_tool_name,
)
from agent_bridge.domains.conversation import Message, Session

__all__ = [
    "Manifest",
    "ManifestAction",
    "ManifestAuth",
    "ManifestParameter",
    "OAuth2Config",
    "ActionResult",
    "LLMResponse",
    "LLMTool",
    "ToolCall",
    "ToolResult",
    "encode_tool_name",
    "parse_tool_name",
    "Message",
    "Session",
]

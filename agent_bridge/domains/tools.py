"""
Domain models for the tool-calling protocol.

These models describe what travels between the model and the runtime:
tool definitions, tool calls requested by the model, and the results fed
back to it.
"""
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from agent_bridge.domains.manifest import is_valid_name
from agent_bridge.errors import InvalidToolNameError

TOOL_NAME_SEPARATOR = "__"


def encode_tool_name(plugin_name: str, action_name: str) -> str:
    """Build the model-facing tool name for a plugin action.

    Raises:
        InvalidToolNameError: If either component could make the name ambiguous
    """
    for component in (plugin_name, action_name):
        if not is_valid_name(component):
            raise InvalidToolNameError(
                f"Invalid tool name component '{component}': names may not be empty "
                f"or contain '{TOOL_NAME_SEPARATOR}'"
            )
    return f"{plugin_name}{TOOL_NAME_SEPARATOR}{action_name}"


def parse_tool_name(tool_name: str) -> Tuple[str, str]:
    """Split a tool name back into ``(plugin_name, action_name)``.

    Raises:
        InvalidToolNameError: If the name was not produced by encode_tool_name
    """
    parts = tool_name.split(TOOL_NAME_SEPARATOR)
    if len(parts) != 2 or not all(is_valid_name(p) for p in parts):
        raise InvalidToolNameError(
            f'Invalid tool name format: "{tool_name}". Expected "pluginName{TOOL_NAME_SEPARATOR}actionName"'
        )
    return parts[0], parts[1]


class ActionResult(BaseModel):
    """Outcome of one action execution."""

    success: bool
    message: str
    data: Any = None
    follow_up: Optional[str] = None

    @classmethod
    def failure(cls, message: str, data: Any = None) -> "ActionResult":
        return cls(success=False, message=message, data=data)


class ToolCall(BaseModel):
    """A single invocation requested by the model."""

    id: str
    name: str
    plugin_name: str = ""
    action_name: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_tool_name(
        cls, id: str, name: str, parameters: Optional[Dict[str, Any]] = None
    ) -> "ToolCall":
        """Decode a wire tool name; malformed names keep empty components."""
        try:
            plugin_name, action_name = parse_tool_name(name)
        except InvalidToolNameError:
            plugin_name, action_name = "", ""
        return cls(
            id=id,
            name=name,
            plugin_name=plugin_name,
            action_name=action_name,
            parameters=parameters or {},
        )

    @property
    def qualified_name(self) -> str:
        if self.plugin_name and self.action_name:
            return f"{self.plugin_name}.{self.action_name}"
        return self.name


class ToolResult(BaseModel):
    """The result for exactly one ToolCall, correlated by id."""

    tool_call_id: str
    result: ActionResult


class LLMTool(BaseModel):
    """Model-facing projection of a compiled action."""

    name: str
    description: str
    parameters: Dict[str, Any]


class LLMResponse(BaseModel):
    """Normalized backend reply: text, tool calls, or both."""

    text: Optional[str] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

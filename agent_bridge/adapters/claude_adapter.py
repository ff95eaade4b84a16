"""
Anthropic adapter for the Agent Bridge system.

Implements LLMProvider on the Messages API. Tool calls travel as
``tool_use`` blocks in assistant turns and results as ``tool_result``
blocks in the following user turn.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import logfire
from anthropic import APIConnectionError, APITimeoutError, AsyncAnthropic

from agent_bridge.adapters.base import ToolFallbackAdapter
from agent_bridge.domains.conversation import Message
from agent_bridge.domains.tools import LLMResponse, LLMTool, ToolCall

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT = 60.0


class ClaudeAdapter(ToolFallbackAdapter):
    """Anthropic implementation of LLMProvider."""

    transport_errors = (APITimeoutError, APIConnectionError)

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        logfire_api_key: Optional[str] = None,
        client: Optional[AsyncAnthropic] = None,
    ):
        self.model = model or DEFAULT_CLAUDE_MODEL
        self.max_tokens = max_tokens
        self.client = client or AsyncAnthropic(
            api_key=api_key, timeout=timeout, max_retries=0
        )

        self.logfire = False
        if logfire_api_key:
            try:
                logfire.configure(token=logfire_api_key)
                logfire.instrument_anthropic(self.client)
                self.logfire = True
                logger.info(
                    "Logfire configured and Anthropic client instrumented successfully."
                )
            except Exception as e:
                logger.error(f"Failed to configure Logfire: {e}")

    @property
    def name(self) -> str:
        return "Anthropic"

    def convert_tools(self, tools: List[LLMTool]) -> List[Dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.parameters,
            }
            for tool in tools
        ]

    def convert_messages(
        self, messages: List[Message], flatten_tools: bool = False
    ) -> List[Dict[str, Any]]:
        """Convert non-system messages; consecutive tool results share one user turn.

        With ``flatten_tools`` earlier tool traffic is rendered as plain text for requests that define no tools.
        """
        if flatten_tools:
            return self.flatten_messages(messages)
        result: List[Dict[str, Any]] = []
        for msg in messages:
            if msg.role == "user":
                result.append({"role": "user", "content": msg.content})
            elif msg.role == "assistant":
                content: List[Dict[str, Any]] = []
                if msg.content:
                    content.append({"type": "text", "text": msg.content})
                for tc in msg.tool_calls or []:
                    content.append(
                        {
                            "type": "tool_use",
                            "id": tc.id,
                            "name": tc.name,
                            "input": tc.parameters,
                        }
                    )
                if content:
                    result.append({"role": "assistant", "content": content})
            elif msg.role == "tool":
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.content,
                }
                previous = result[-1] if result else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                ):
                    previous["content"].append(block)
                else:
                    result.append({"role": "user", "content": [block]})
        return result

    def flatten_messages(self, messages: List[Message]) -> List[Dict[str, Any]]:
        result: List[Dict[str, Any]] = []
        for msg in messages:
            if msg.role == "system":
                continue
            if msg.role == "assistant":
                role = "assistant"
                lines = [msg.content] if msg.content else []
                for tc in msg.tool_calls or []:
                    lines.append(f"[called {tc.name} {json.dumps(tc.parameters)}]")
                text = "\n".join(lines)
            elif msg.role == "tool":
                role = "user"
                text = f"[result of {msg.tool_call_id}] {msg.content}"
            else:
                role = "user"
                text = msg.content
            if not text:
                continue
            if result and result[-1]["role"] == role:
                result[-1]["content"] += "\n" + text
            else:
                result.append({"role": role, "content": text})
        return result

    def parse_response(self, response: Any) -> LLMResponse:
        text = ""
        tool_calls: List[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                text += block.text
            elif block.type == "tool_use":
                params = block.input if isinstance(block.input, dict) else {}
                tool_calls.append(
                    ToolCall.from_tool_name(id=block.id, name=block.name, parameters=params)
                )
        return LLMResponse(text=text or None, tool_calls=tool_calls)

    async def complete(self, messages: List[Message], tools: List[LLMTool]) -> LLMResponse:
        system = "\n\n".join(m.content for m in messages if m.role == "system")
        request_params: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": self.convert_messages(messages, flatten_tools=not tools),
        }
        if system:
            request_params["system"] = system
        if tools:
            request_params["tools"] = self.convert_tools(tools)

        response = await self.client.messages.create(**request_params)
        return self.parse_response(response)

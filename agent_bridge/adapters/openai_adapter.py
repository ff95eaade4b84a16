"""
OpenAI adapter for the Agent Bridge system.

Implements LLMProvider on the Chat Completions API. The same adapter
serves OpenAI-compatible endpoints (Groq, Gemini, OpenRouter, Ollama...)
through ``base_url``.
"""
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

import logfire
from openai import APIConnectionError, APITimeoutError, AsyncOpenAI

from agent_bridge.adapters.base import ToolFallbackAdapter
from agent_bridge.domains.conversation import Message
from agent_bridge.domains.tools import LLMResponse, LLMTool, ToolCall

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT = 60.0

# base_url fragment -> display name
KNOWN_PROVIDERS = (
    ("groq", "Groq"),
    ("generativelanguage.googleapis.com", "Gemini"),
    ("openrouter", "OpenRouter"),
    ("together", "Together"),
    ("localhost:11434", "Ollama"),
    ("ollama", "Ollama"),
    ("api.openai.com", "OpenAI"),
)


def detect_provider(base_url: Optional[str]) -> str:
    """Infer a display name for the backend from its endpoint."""
    if not base_url:
        return "OpenAI"
    lowered = base_url.lower()
    for fragment, name in KNOWN_PROVIDERS:
        if fragment in lowered:
            return name
    return "LLM provider"


class OpenAIAdapter(ToolFallbackAdapter):
    """OpenAI implementation of LLMProvider using Chat Completions."""

    transport_errors = (APITimeoutError, APIConnectionError)

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = DEFAULT_TIMEOUT,
        logfire_api_key: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model or DEFAULT_CHAT_MODEL
        self.max_tokens = max_tokens
        self.client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )

        self.logfire = False
        if logfire_api_key:
            try:
                logfire.configure(token=logfire_api_key)
                logfire.instrument_openai(self.client)
                self.logfire = True
                logger.info(
                    "Logfire configured and OpenAI client instrumented successfully."
                )
            except Exception as e:
                logger.error(f"Failed to configure Logfire: {e}")

    @property
    def name(self) -> str:
        return detect_provider(self.base_url)

    def convert_tools(self, tools: List[LLMTool]) -> List[Dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.parameters,
                },
            }
            for tool in tools
        ]

    def convert_messages(self, messages: List[Message]) -> List[Dict[str, Any]]:
        result: List[Dict[str, Any]] = []
        for msg in messages:
            if msg.role in ("system", "user"):
                result.append({"role": msg.role, "content": msg.content})
            elif msg.role == "assistant":
                entry: Dict[str, Any] = {"role": "assistant", "content": msg.content or None}
                if msg.tool_calls:
                    entry["tool_calls"] = [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": json.dumps(tc.parameters),
                            },
                        }
                        for tc in msg.tool_calls
                    ]
                result.append(entry)
            elif msg.role == "tool":
                result.append(
                    {
                        "role": "tool",
                        "content": msg.content,
                        "tool_call_id": msg.tool_call_id,
                    }
                )
        return result

    @staticmethod
    def parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning(f"Model sent tool arguments that are not JSON: {raw[:200]}")
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def parse_response(self, response: Any) -> LLMResponse:
        if not response.choices:
            return LLMResponse(text="No response from LLM.")

        message = response.choices[0].message
        tool_calls = [
            ToolCall.from_tool_name(
                id=tc.id or f"call_{uuid.uuid4().hex}",
                name=tc.function.name,
                parameters=self.parse_arguments(tc.function.arguments),
            )
            for tc in (message.tool_calls or [])
        ]
        return LLMResponse(text=message.content or None, tool_calls=tool_calls)

    async def complete(self, messages: List[Message], tools: List[LLMTool]) -> LLMResponse:
        request_params: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": self.convert_messages(messages),
        }
        if tools:
            request_params["tools"] = self.convert_tools(tools)

        response = await self.client.chat.completions.create(**request_params)
        if getattr(response, "usage", None):
            logger.debug(
                f"{self.name} usage: prompt={response.usage.prompt_tokens}, "
                f"completion={response.usage.completion_tokens}"
            )
        return self.parse_response(response)

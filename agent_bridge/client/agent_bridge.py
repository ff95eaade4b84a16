"""
Simplified client interface for interacting with the Agent Bridge system.

This module provides a clean API for end users to interact with
the runtime without dealing with internal implementation details.
"""
import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

from agent_bridge.domains.tools import ActionResult, ToolCall
from agent_bridge.factories.agent_factory import AgentBridgeFactory
from agent_bridge.interfaces.plugins.plugins import AskUser, Plugin


class AgentBridge:
    """Simplified client interface for interacting with the runtime."""

    def __init__(self, config_path: str = None, config: Dict[str, Any] = None):
        """Initialize the system from a JSON config file or dictionary.

        Args:
            config_path: Path to configuration file (JSON)
            config: Configuration dictionary
        """
        if not config and not config_path:
            raise ValueError("Either config or config_path must be provided")

        if config_path:
            with open(config_path, "r") as f:
                config = json.load(f)

        self.runtime = AgentBridgeFactory.create_from_config(config)
        self.engine = self.runtime.engine
        self._ready = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Register configured manifests and entry-point plugins once."""
        async with self._lock:
            if self._ready:
                return
            manager = self.runtime.plugin_manager
            await manager.load_manifests(self.runtime.manifests, self.runtime.credentials)
            await manager.load_plugins()
            self._ready = True

    async def register_plugin(self, plugin: Plugin) -> None:
        await self.initialize()
        await self.engine.register_plugin(plugin)

    async def create_session(self) -> str:
        """Create a conversation session.

        Returns:
            The new session id
        """
        await self.initialize()
        return self.engine.create_session()

    async def chat(
        self,
        session_id: str,
        message: str,
        ask_user: Optional[AskUser] = None,
        on_tool_call: Optional[Callable[[ToolCall], Any]] = None,
        on_tool_result: Optional[Callable[[str, ActionResult], Any]] = None,
    ) -> str:
        """Send a user message and return the assistant's reply."""
        await self.initialize()
        return await self.engine.chat(
            session_id,
            message,
            ask_user=ask_user,
            on_tool_call=on_tool_call,
            on_tool_result=on_tool_result,
        )

    async def list_plugins(self) -> List[Dict[str, Any]]:
        await self.initialize()
        return self.runtime.plugin_manager.list_plugins()

    async def close(self) -> None:
        await self.runtime.plugin_manager.compiler.aclose()

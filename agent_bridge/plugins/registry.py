"""
Plugin registry for the Agent Bridge system.

This module implements the PluginRegistry that holds loaded plugins, maps
tool names back to their actions, and projects actions into the tool
definitions sent to the model.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

from agent_bridge.domains.tools import LLMTool, encode_tool_name, parse_tool_name
from agent_bridge.errors import InvalidToolNameError, PluginRegistrationError
from agent_bridge.interfaces.plugins.plugins import Action, Plugin, ToolRanker
from agent_bridge.plugins.ranking import KeywordToolRanker
from agent_bridge.plugins.schema import compact_json_schema, ensure_array_items

# Setup logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredTool:
    """Everything the registry knows about one tool name."""

    plugin: Plugin
    action: Action
    tool: LLMTool
    compact_tool: LLMTool


class PluginRegistry:
    """Instance-based registry of plugins and their tools."""

    def __init__(self, ranker: Optional[ToolRanker] = None):
        """Initialize an empty registry.

        Args:
            ranker: Strategy used by select_llm_tools, defaults to KeywordToolRanker
        """
        self._plugins: Dict[str, Plugin] = {}  # name -> plugin
        self._tools: Dict[str, RegisteredTool] = {}  # tool name -> entry
        self._pending: Set[str] = set()
        self.ranker = ranker or KeywordToolRanker()

    parse_tool_name = staticmethod(parse_tool_name)
    encode_tool_name = staticmethod(encode_tool_name)

    def _build_entries(self, plugin: Plugin) -> Dict[str, RegisteredTool]:
        entries: Dict[str, RegisteredTool] = {}
        for action in plugin.actions:
            try:
                tool_name = encode_tool_name(plugin.name, action.name)
            except InvalidToolNameError as e:
                raise PluginRegistrationError(
                    f'Plugin "{plugin.name}" has an invalid name: {e}'
                ) from e
            if tool_name in entries:
                raise PluginRegistrationError(
                    f'Plugin "{plugin.name}" declares action "{action.name}" twice'
                )

            schema = ensure_array_items(action.get_schema())
            description = f"[{plugin.name}] {action.description}"
            entries[tool_name] = RegisteredTool(
                plugin=plugin,
                action=action,
                tool=LLMTool(name=tool_name, description=description, parameters=schema),
                compact_tool=LLMTool(
                    name=tool_name,
                    description=description,
                    parameters=compact_json_schema(schema),
                ),
            )
        return entries

    async def register(self, plugin: Plugin) -> None:
        """Register a plugin and run its setup hook.

        Raises:
            PluginRegistrationError: If the name is taken or not encodable
        """
        if plugin.name in self._plugins or plugin.name in self._pending:
            raise PluginRegistrationError(f'Plugin "{plugin.name}" is already registered')

        entries = self._build_entries(plugin)
        self._pending.add(plugin.name)
        try:
            await plugin.setup()
            self._plugins[plugin.name] = plugin
            self._tools.update(entries)
        finally:
            self._pending.discard(plugin.name)

        logger.info(
            f"Successfully registered plugin {plugin.name} with {len(entries)} actions"
        )

    async def unregister(self, name: str) -> bool:
        """Remove a plugin and run its teardown hook.

        Returns:
            True if the plugin was registered
        """
        plugin = self._plugins.pop(name, None)
        if plugin is None:
            return False

        for tool_name in [t for t, entry in self._tools.items() if entry.plugin is plugin]:
            del self._tools[tool_name]

        try:
            await plugin.teardown()
        except Exception as e:
            logger.error(f"Error tearing down plugin {name}: {e}")
        logger.info(f"Unregistered plugin {name}")
        return True

    def get_plugin(self, name: str) -> Optional[Plugin]:
        """Get a plugin by name."""
        return self._plugins.get(name)

    def get_action(self, plugin_name: str, action_name: str) -> Optional[Action]:
        """Get an action by plugin and action name."""
        try:
            tool_name = encode_tool_name(plugin_name, action_name)
        except InvalidToolNameError:
            return None
        entry = self._tools.get(tool_name)
        return entry.action if entry else None

    def resolve(self, tool_name: str) -> Tuple[Plugin, Action]:
        """Map a tool name back to its plugin and action.

        Raises:
            InvalidToolNameError: If the name is malformed
            KeyError: If no such tool is registered
        """
        parse_tool_name(tool_name)
        entry = self._tools.get(tool_name)
        if entry is None:
            raise KeyError(tool_name)
        return entry.plugin, entry.action

    def get_all_plugins(self) -> List[Plugin]:
        return list(self._plugins.values())

    def list_plugins(self) -> List[Dict[str, Any]]:
        """List all registered plugins with their details."""
        return [
            {
                "name": plugin.name,
                "description": plugin.description,
                "version": plugin.version,
                "actions": [action.name for action in plugin.actions],
            }
            for plugin in self._plugins.values()
        ]

    def list_all_tools(self) -> List[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def to_llm_tools(self, compact: bool = True) -> List[LLMTool]:
        """Project every action of every plugin into a tool definition.

        Args:
            compact: Strip descriptions/defaults from parameter schemas
        """
        return [
            entry.compact_tool if compact else entry.tool
            for entry in self._tools.values()
        ]

    def select_llm_tools(
        self, user_input: str, max_tools: int, compact: bool = True
    ) -> List[LLMTool]:
        """Return a relevance-ranked subset of at most ``max_tools`` tools.

        All tools are returned when they already fit the budget.
        """
        tools = self.to_llm_tools(compact=compact)
        if max_tools <= 0 or len(tools) <= max_tools:
            return tools

        selected = self.ranker.rank(user_input, tools, list(self._plugins), max_tools)
        logger.debug(
            f"Selected {len(selected)} of {len(tools)} tools: {[t.name for t in selected]}"
        )
        return selected[:max_tools]

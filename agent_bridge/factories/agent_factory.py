"""
Factory for creating and wiring components of the Agent Bridge system.

This module handles the creation and dependency injection for all
services and components used in the system.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

# Service imports
from agent_bridge.services.conversation import ConversationManager
from agent_bridge.services.engine import DEFAULT_MAX_ITERATIONS, OrchestrationEngine

# Repository imports
from agent_bridge.repositories.session_cache import (
    DEFAULT_MAX_SESSIONS,
    BoundedSessionCache,
)

# Adapter imports
from agent_bridge.adapters.claude_adapter import ClaudeAdapter
from agent_bridge.adapters.openai_adapter import OpenAIAdapter
from agent_bridge.interfaces.providers.llm import LLMProvider

# Domain and plugin imports
from agent_bridge.domains.manifest import Manifest
from agent_bridge.manifests.compiler import DEFAULT_TIMEOUT, ActionCompiler
from agent_bridge.plugins.manager import PluginManager
from agent_bridge.plugins.registry import PluginRegistry

# Setup logger for this module
logger = logging.getLogger(__name__)


@dataclass
class BridgeRuntime:
    """Everything the client needs: the engine plus manifests still to load."""

    engine: OrchestrationEngine
    plugin_manager: PluginManager
    manifests: List[Manifest] = field(default_factory=list)
    credentials: Dict[str, Dict[str, Any]] = field(default_factory=dict)


class AgentBridgeFactory:
    """Factory for creating and wiring components of the Agent Bridge system."""

    @staticmethod
    def create_llm_provider(config: Dict[str, Any]) -> LLMProvider:
        """Build the LLM adapter; ``openai`` wins when both sections exist."""
        logfire_api_key = None
        if "logfire" in config:
            if "api_key" not in config["logfire"]:
                raise ValueError("Pydantic Logfire API key is required.")
            logfire_api_key = config["logfire"]["api_key"]

        if "openai" in config:
            llm_config = config["openai"]
            if "api_key" not in llm_config:
                raise ValueError("OpenAI API key is required in config.")
            options = {
                k: llm_config[k] for k in ("max_tokens", "timeout") if k in llm_config
            }
            adapter = OpenAIAdapter(
                api_key=llm_config["api_key"],
                model=llm_config.get("model"),
                base_url=llm_config.get("base_url"),
                logfire_api_key=logfire_api_key,
                **options,
            )
            logger.info(f"Using {adapter.name} as LLM provider with model: {adapter.model}")
            return adapter

        if "anthropic" in config:
            llm_config = config["anthropic"]
            if "api_key" not in llm_config:
                raise ValueError("Anthropic API key is required in config.")
            options = {
                k: llm_config[k] for k in ("max_tokens", "timeout") if k in llm_config
            }
            adapter = ClaudeAdapter(
                api_key=llm_config["api_key"],
                model=llm_config.get("model"),
                logfire_api_key=logfire_api_key,
                **options,
            )
            logger.info(f"Using Anthropic as LLM provider with model: {adapter.model}")
            return adapter

        raise ValueError("An 'openai' or 'anthropic' section is required in config.")

    @staticmethod
    def load_manifests(entries: List[Any]) -> List[Manifest]:
        """Load manifests given as file paths or inline documents.

        Raises:
            ManifestError: If a manifest is invalid
            ValueError: If an entry is neither a path nor a document
        """
        manifests = []
        for entry in entries:
            if isinstance(entry, Manifest):
                manifests.append(entry)
            elif isinstance(entry, str):
                manifests.append(Manifest.load_file(entry))
            elif isinstance(entry, dict):
                manifests.append(Manifest.load(entry))
            else:
                raise ValueError(
                    f"Manifest entries must be paths or objects, got {type(entry).__name__}"
                )
        return manifests

    @staticmethod
    def create_from_config(config: Dict[str, Any]) -> BridgeRuntime:
        """Create the agent system from configuration.

        Args:
            config: Configuration dictionary

        Returns:
            A BridgeRuntime whose manifests are parsed but not yet registered
        """
        llm_adapter = AgentBridgeFactory.create_llm_provider(config)

        engine_config = config.get("engine", {})
        http_config = config.get("http", {})

        compiler = ActionCompiler(timeout=http_config.get("timeout", DEFAULT_TIMEOUT))
        registry = PluginRegistry()
        conversations = ConversationManager(
            cache=BoundedSessionCache(
                max_sessions=engine_config.get("max_sessions", DEFAULT_MAX_SESSIONS)
            )
        )

        engine = OrchestrationEngine(
            llm_provider=llm_adapter,
            registry=registry,
            conversations=conversations,
            system_prompt=engine_config.get("system_prompt"),
            max_iterations=engine_config.get("max_iterations", DEFAULT_MAX_ITERATIONS),
            max_tools_per_turn=engine_config.get("max_tools_per_turn"),
        )

        manifests = AgentBridgeFactory.load_manifests(config.get("manifests", []))
        credentials = config.get("credentials", {})
        logger.info(f"Configured {len(manifests)} manifests")

        return BridgeRuntime(
            engine=engine,
            plugin_manager=PluginManager(registry=registry, compiler=compiler),
            manifests=manifests,
            credentials=credentials,
        )

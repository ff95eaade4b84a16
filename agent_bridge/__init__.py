"""
Agent Bridge - connect a tool-calling LLM to third-party APIs.

This package turns declarative API manifests and code-defined plugins into
tools a language model can call, and drives the conversation loop that
executes them.
"""

__version__ = "0.1.0"

# Client interface (main entry point)
from agent_bridge.client.agent_bridge import AgentBridge

# Factory for creating the runtime
from agent_bridge.factories.agent_factory import AgentBridgeFactory

# Plugin authoring and discovery
from agent_bridge.plugins.manager import PluginManager
from agent_bridge.plugins.registry import PluginRegistry
from agent_bridge.plugins.sdk import FunctionAction, PluginTester, define_plugin
from agent_bridge.interfaces.plugins.plugins import Action, ActionContext, Plugin

# Manifests
from agent_bridge.domains.manifest import Manifest
from agent_bridge.manifests.compiler import ActionCompiler

# Engine and protocol server
from agent_bridge.services.engine import OrchestrationEngine
from agent_bridge.protocol.server import ProtocolServer

# Package metadata
__all__ = [
    "__version__",
    # Main client interfaces
    "AgentBridge",
    # Factories
    "AgentBridgeFactory",
    # Plugins
    "PluginManager",
    "PluginRegistry",
    "FunctionAction",
    "PluginTester",
    "define_plugin",
    "Action",
    "ActionContext",
    "Plugin",
    # Manifests
    "Manifest",
    "ActionCompiler",
    # Runtime
    "OrchestrationEngine",
    "ProtocolServer",
]

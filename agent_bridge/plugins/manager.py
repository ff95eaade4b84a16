"""
Plugin manager for the Agent Bridge system.

This module implements the PluginManager that discovers code-defined
plugins through entry points, compiles manifests into plugins, and
registers both with a PluginRegistry.
"""
import importlib.metadata
import logging
from typing import Any, Dict, Iterable, List, Optional

from agent_bridge.domains.manifest import Manifest
from agent_bridge.domains.tools import encode_tool_name
from agent_bridge.interfaces.plugins.plugins import Plugin
from agent_bridge.interfaces.repositories.manifest import ManifestStore
from agent_bridge.manifests.compiler import ActionCompiler
from agent_bridge.plugins.registry import PluginRegistry

# Setup logger for this module
logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "agent_bridge.plugins"


def plugin_metadata(plugin: Plugin) -> Dict[str, Any]:
    """Summary of a compiled plugin, as reported back to the manifest store."""
    return {
        "name": plugin.name,
        "version": plugin.version,
        "action_count": len(plugin.actions),
        "tool_names": [encode_tool_name(plugin.name, a.name) for a in plugin.actions],
    }


class PluginManager:
    """Manager for discovering, compiling and loading plugins."""

    # Class variable to track loaded entry points
    _loaded_entry_points = set()

    def __init__(
        self,
        registry: Optional[PluginRegistry] = None,
        compiler: Optional[ActionCompiler] = None,
    ):
        """Initialize with an optional registry and compiler."""
        self.registry = registry or PluginRegistry()
        self.compiler = compiler or ActionCompiler()

    async def load_plugins(self) -> List[str]:
        """Load all plugins published under the entry point group.

        Each entry point must resolve to a Plugin or a zero-argument
        factory returning one. Import errors are logged and skipped;
        registration errors propagate.

        Returns:
            List of loaded plugin names
        """
        loaded: List[str] = []

        for entry_point in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            entry_point_id = f"{entry_point.name}:{entry_point.value}"
            if entry_point_id in PluginManager._loaded_entry_points:
                logger.info(f"Skipping already loaded plugin: {entry_point.name}")
                continue

            try:
                logger.info(f"Found plugin entry point: {entry_point.name}")
                target = entry_point.load()
                plugin = target if isinstance(target, Plugin) else target()
            except Exception as e:
                logger.error(f"Error loading plugin {entry_point.name}: {e}")
                continue

            await self.registry.register(plugin)
            PluginManager._loaded_entry_points.add(entry_point_id)
            loaded.append(plugin.name)

        return loaded

    async def load_manifest(
        self, manifest: Manifest, credentials: Optional[Dict[str, Any]] = None
    ) -> Plugin:
        """Compile one manifest and register the resulting plugin.

        Raises:
            PluginRegistrationError: If a plugin with the same name is loaded
        """
        plugin = self.compiler.compile(manifest, credentials)
        await self.registry.register(plugin)
        return plugin

    async def load_manifests(
        self,
        manifests: Iterable[Manifest],
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> List[str]:
        """Compile and register several manifests.

        Args:
            manifests: Manifests to load
            credentials: Credential records keyed by manifest name
        """
        credentials = credentials or {}
        loaded = []
        for manifest in manifests:
            plugin = await self.load_manifest(manifest, credentials.get(manifest.name))
            loaded.append(plugin.name)
        return loaded

    async def load_from_store(
        self, store: ManifestStore, names: Optional[Iterable[str]] = None
    ) -> List[str]:
        """Load manifests from a store and report plugin metadata back to it.

        Args:
            store: The manifest directory
            names: Manifest names to load; all manifests when omitted

        Raises:
            KeyError: If a requested manifest is not in the store
        """
        if names is None:
            manifests = store.list_manifests()
        else:
            manifests = []
            for name in names:
                manifest = store.get_manifest(name)
                if manifest is None:
                    raise KeyError(f'API "{name}" not found in store')
                manifests.append(manifest)

        loaded = []
        for manifest in manifests:
            plugin = await self.load_manifest(manifest, store.get_credentials(manifest.name))
            store.save_plugin_metadata(plugin.name, plugin_metadata(plugin))
            loaded.append(plugin.name)
        logger.info(f"Loaded {len(loaded)} plugins from manifest store")
        return loaded

    def get_plugin(self, name: str) -> Optional[Plugin]:
        return self.registry.get_plugin(name)

    def list_plugins(self) -> List[Dict[str, Any]]:
        return self.registry.list_plugins()

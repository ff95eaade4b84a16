"""
Tests for the PluginManager implementation.
"""
import pytest
from unittest.mock import MagicMock, patch

from agent_bridge.errors import PluginRegistrationError
from agent_bridge.manifests.compiler import ActionCompiler
from agent_bridge.plugins.manager import PluginManager, plugin_metadata
from agent_bridge.plugins.registry import PluginRegistry
from agent_bridge.plugins.sdk import define_plugin
from agent_bridge.repositories.manifest_store import InMemoryManifestStore


@pytest.fixture
def manager(transport):
    return PluginManager(registry=PluginRegistry(), compiler=ActionCompiler(send=transport))


@pytest.fixture(autouse=True)
def reset_entry_points():
    PluginManager._loaded_entry_points = set()
    yield
    PluginManager._loaded_entry_points = set()


def entry_point(name, target):
    ep = MagicMock()
    ep.name = name
    ep.value = f"pkg.{name}:plugin"
    if isinstance(target, Exception):
        ep.load.side_effect = target
    else:
        ep.load.return_value = target
    return ep


@pytest.mark.asyncio
async def test_load_manifests(manager, items_manifest, spotify_manifest):
    loaded = await manager.load_manifests(
        [items_manifest, spotify_manifest], {"spotify": {"token": "t"}}
    )
    assert loaded == ["inventory", "spotify"]
    assert "spotify__create_playlist" in manager.registry.list_all_tools()
    assert [p["name"] for p in manager.list_plugins()] == ["inventory", "spotify"]


@pytest.mark.asyncio
async def test_load_duplicate_manifest_fails(manager, items_manifest):
    await manager.load_manifest(items_manifest)
    with pytest.raises(PluginRegistrationError):
        await manager.load_manifest(items_manifest)


@pytest.mark.asyncio
async def test_load_from_store_writes_metadata(manager, items_manifest, spotify_manifest):
    store = InMemoryManifestStore()
    store.add_manifest(items_manifest, {"token": "abc"})
    store.add_manifest(spotify_manifest)

    loaded = await manager.load_from_store(store, names=["inventory"])

    assert loaded == ["inventory"]
    assert manager.get_plugin("spotify") is None
    assert store.plugin_metadata["inventory"] == {
        "name": "inventory",
        "version": "1.2.0",
        "action_count": 4,
        "tool_names": [
            "inventory__get_item",
            "inventory__search_items",
            "inventory__create_item",
            "inventory__delete_item",
        ],
    }
    action = manager.get_plugin("inventory").get_action("get_item")
    assert action._credentials == {"token": "abc"}


@pytest.mark.asyncio
async def test_load_from_store_missing_name(manager):
    with pytest.raises(KeyError):
        await manager.load_from_store(InMemoryManifestStore(), names=["nope"])


@pytest.mark.asyncio
async def test_load_plugins_from_entry_points(manager):
    ready = define_plugin("ready", "Instance", "1.0.0", [])
    factory = MagicMock(return_value=define_plugin("built", "Factory", "1.0.0", []))
    points = [
        entry_point("ready", ready),
        entry_point("built", factory),
        entry_point("broken", ImportError("missing dependency")),
    ]

    with patch(
        "agent_bridge.plugins.manager.importlib.metadata.entry_points",
        return_value=points,
    ):
        loaded = await manager.load_plugins()
        again = await manager.load_plugins()

    assert loaded == ["ready", "built"]
    assert again == []
    factory.assert_called_once_with()


def test_plugin_metadata_for_empty_plugin():
    plugin = define_plugin("empty", "Nothing", "0.0.1", [])
    assert plugin_metadata(plugin) == {
        "name": "empty",
        "version": "0.0.1",
        "action_count": 0,
        "tool_names": [],
    }

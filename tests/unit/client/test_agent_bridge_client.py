"""
Tests for the AgentBridge client.
"""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from agent_bridge.client.agent_bridge import AgentBridge
from agent_bridge.domains.tools import LLMResponse


@pytest.fixture
def config(items_manifest_doc):
    return {
        "openai": {"api_key": "test_key"},
        "manifests": [items_manifest_doc],
        "credentials": {"inventory": {"token": "t"}},
    }


@pytest.fixture
def agent(config):
    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter"):
        bridge = AgentBridge(config=config)
    bridge.engine.llm = MagicMock()
    bridge.engine.llm.chat = AsyncMock(return_value=LLMResponse(text="Hello!"))
    return bridge


@pytest.fixture(autouse=True)
def no_entry_points():
    with patch("agent_bridge.plugins.manager.importlib.metadata.entry_points", return_value=[]):
        yield


def test_requires_config():
    with pytest.raises(ValueError):
        AgentBridge()


def test_loads_json_file(config, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter"):
        bridge = AgentBridge(config_path=str(path))
    assert [m.name for m in bridge.runtime.manifests] == ["inventory"]


@pytest.mark.asyncio
async def test_manifests_register_lazily_once(agent):
    assert agent.engine.get_plugins() == []

    plugins = await agent.list_plugins()
    await agent.list_plugins()

    assert [p["name"] for p in plugins] == ["inventory"]
    assert len(agent.engine.get_plugins()) == 1


@pytest.mark.asyncio
async def test_chat(agent):
    session_id = await agent.create_session()
    assert await agent.chat(session_id, "hi") == "Hello!"

    messages, tools = agent.engine.llm.chat.call_args.args
    assert "**inventory**: Inventory API" in messages[0].content
    assert len(tools) == 4

"""
Tests for the AgentBridgeFactory implementation.
"""
import json

import pytest
from unittest.mock import patch

from agent_bridge.errors import ManifestError
from agent_bridge.factories.agent_factory import AgentBridgeFactory, BridgeRuntime


@pytest.fixture
def basic_config():
    """Basic configuration for testing."""
    return {"openai": {"api_key": "test_key"}}


def test_create_minimal_config(basic_config):
    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter") as mock_llm:
        runtime = AgentBridgeFactory.create_from_config(basic_config)

    assert isinstance(runtime, BridgeRuntime)
    mock_llm.assert_called_once_with(
        api_key="test_key", model=None, base_url=None, logfire_api_key=None
    )
    assert runtime.engine.max_iterations == 10
    assert runtime.engine.max_tools_per_turn is None
    assert runtime.engine.conversations.cache.max_sessions == 1000
    assert runtime.manifests == []


def test_engine_and_http_settings(basic_config):
    basic_config["engine"] = {
        "system_prompt": "Be brief.",
        "max_iterations": 4,
        "max_tools_per_turn": 12,
        "max_sessions": 5,
    }
    basic_config["http"] = {"timeout": 3.0}
    basic_config["openai"].update({"max_tokens": 256, "base_url": "https://api.groq.com/openai/v1"})

    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter") as mock_llm:
        runtime = AgentBridgeFactory.create_from_config(basic_config)

    assert mock_llm.call_args.kwargs["max_tokens"] == 256
    assert runtime.engine.system_prompt == "Be brief."
    assert runtime.engine.max_iterations == 4
    assert runtime.engine.max_tools_per_turn == 12
    assert runtime.engine.conversations.cache.max_sessions == 5
    assert runtime.plugin_manager.compiler._timeout == 3.0


def test_anthropic_provider():
    with patch("agent_bridge.factories.agent_factory.ClaudeAdapter") as mock_claude:
        AgentBridgeFactory.create_from_config(
            {"anthropic": {"api_key": "a", "model": "claude-x"}, "logfire": {"api_key": "lf"}}
        )
    mock_claude.assert_called_once_with(api_key="a", model="claude-x", logfire_api_key="lf")


def test_openai_wins_when_both_present():
    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter") as mock_openai, patch(
        "agent_bridge.factories.agent_factory.ClaudeAdapter"
    ) as mock_claude:
        AgentBridgeFactory.create_from_config(
            {"openai": {"api_key": "o"}, "anthropic": {"api_key": "a"}}
        )
    mock_openai.assert_called_once()
    mock_claude.assert_not_called()


@pytest.mark.parametrize(
    "config, message",
    [
        ({}, "'openai' or 'anthropic'"),
        ({"openai": {}}, "OpenAI API key"),
        ({"anthropic": {}}, "Anthropic API key"),
        ({"openai": {"api_key": "k"}, "logfire": {}}, "Logfire API key"),
    ],
)
def test_missing_keys(config, message):
    with pytest.raises(ValueError, match=message):
        AgentBridgeFactory.create_from_config(config)


def test_manifests_from_paths_and_documents(basic_config, items_manifest_doc, tmp_path):
    path = tmp_path / "inventory.json"
    path.write_text(json.dumps(items_manifest_doc))
    inline = dict(items_manifest_doc, name="inventory-copy")
    basic_config["manifests"] = [str(path), inline]
    basic_config["credentials"] = {"inventory": {"token": "t"}}

    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter"):
        runtime = AgentBridgeFactory.create_from_config(basic_config)

    assert [m.name for m in runtime.manifests] == ["inventory", "inventory-copy"]
    assert runtime.credentials == {"inventory": {"token": "t"}}


def test_invalid_manifest_entries(basic_config):
    basic_config["manifests"] = [{"name": "bad__name", "base_url": "https://x"}]
    with patch("agent_bridge.factories.agent_factory.OpenAIAdapter"):
        with pytest.raises(ManifestError):
            AgentBridgeFactory.create_from_config(basic_config)

    with pytest.raises(ValueError):
        AgentBridgeFactory.load_manifests([42])

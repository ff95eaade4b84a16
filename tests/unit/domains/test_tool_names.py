"""
Tests for tool name encoding and the tool-calling domain models.
"""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from agent_bridge.domains.tools import (
    ActionResult,
    LLMResponse,
    ToolCall,
    encode_tool_name,
    parse_tool_name,
)
from agent_bridge.errors import InvalidToolNameError

segment = st.from_regex(r"\A[A-Za-z0-9]{1,6}\Z")
separator = st.sampled_from(["-", "_"])
valid_name = st.builds(
    lambda first, rest: first + "".join(sep + seg for sep, seg in rest),
    segment,
    st.lists(st.tuples(separator, segment), max_size=3),
)


@given(valid_name, valid_name)
def test_encode_then_parse_is_identity(plugin, action):
    assert parse_tool_name(encode_tool_name(plugin, action)) == (plugin, action)


@given(valid_name, valid_name, valid_name, valid_name)
def test_distinct_pairs_get_distinct_names(p1, a1, p2, a2):
    if (p1, a1) != (p2, a2):
        assert encode_tool_name(p1, a1) != encode_tool_name(p2, a2)


def test_encode_format():
    assert encode_tool_name("spotify", "search") == "spotify__search"


@pytest.mark.parametrize(
    "plugin, action", [("", "x"), ("x", ""), ("my__plugin", "x"), ("x", "do__it")]
)
def test_encode_rejects_ambiguous_components(plugin, action):
    with pytest.raises(InvalidToolNameError):
        encode_tool_name(plugin, action)


@pytest.mark.parametrize(
    "name", ["spotify", "spotify__", "__search", "a__b__c", "spotify.search"]
)
def test_parse_rejects_malformed_names(name):
    with pytest.raises(InvalidToolNameError):
        parse_tool_name(name)


def test_tool_call_from_malformed_name_keeps_raw_name():
    tc = ToolCall.from_tool_name(id="1", name="nonsense", parameters=None)
    assert tc.plugin_name == ""
    assert tc.action_name == ""
    assert tc.parameters == {}
    assert tc.qualified_name == "nonsense"


def test_tool_call_qualified_name():
    tc = ToolCall.from_tool_name(id="1", name="spotify__search", parameters={"q": "x"})
    assert tc.qualified_name == "spotify.search"


def test_llm_response_has_tool_calls():
    assert not LLMResponse(text="hi").has_tool_calls
    tc = ToolCall.from_tool_name(id="1", name="a__b")
    assert LLMResponse(tool_calls=[tc]).has_tool_calls


def test_action_result_failure():
    result = ActionResult.failure("nope", {"status": 500})
    assert result.success is False
    assert result.data == {"status": 500}

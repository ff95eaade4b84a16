"""
Tests for JSON schema compaction and array item repair.
"""
from hypothesis import given
from hypothesis import strategies as st

from agent_bridge.plugins.schema import compact_json_schema, ensure_array_items

SCHEMA = {
    "type": "object",
    "title": "Params",
    "description": "Search parameters",
    "properties": {
        "description": {"type": "string", "description": "A field named description"},
        "kind": {"type": "string", "enum": ["a", "b"], "default": "a"},
        "tags": {"type": "array", "examples": [["x"]]},
        "filters": {
            "type": "object",
            "properties": {"ids": {"type": "array", "items": {}}},
        },
    },
    "required": ["description"],
}


def test_compaction_strips_descriptive_keys():
    compact = compact_json_schema(SCHEMA)
    assert compact == {
        "type": "object",
        "properties": {
            "description": {"type": "string"},
            "kind": {"type": "string", "enum": ["a", "b"]},
            "tags": {"type": "array"},
            "filters": {"type": "object", "properties": {"ids": {"type": "array", "items": {}}}},
        },
        "required": ["description"],
    }


def test_compaction_does_not_mutate_input():
    before = repr(SCHEMA)
    compact_json_schema(SCHEMA)
    assert repr(SCHEMA) == before


json_leaf = st.one_of(st.none(), st.booleans(), st.integers(), st.text(max_size=5))
json_value = st.recursive(
    json_leaf,
    lambda children: st.one_of(
        st.lists(children, max_size=3),
        st.dictionaries(
            st.sampled_from(
                ["type", "properties", "items", "description", "title", "enum", "x"]
            ),
            children,
            max_size=4,
        ),
    ),
    max_leaves=12,
)


@given(json_value)
def test_compaction_is_idempotent(schema):
    once = compact_json_schema(schema)
    assert compact_json_schema(once) == once


def test_ensure_array_items_fills_missing_and_empty():
    fixed = ensure_array_items(SCHEMA)
    assert fixed["properties"]["tags"]["items"] == {"type": "string"}
    assert fixed["properties"]["filters"]["properties"]["ids"]["items"] == {"type": "string"}
    assert fixed["properties"]["kind"] == SCHEMA["properties"]["kind"]


def test_ensure_array_items_keeps_existing_items():
    schema = {"type": ["array", "null"], "items": {"type": "integer"}}
    assert ensure_array_items(schema) == schema
    assert ensure_array_items({"type": ["array", "null"]})["items"] == {"type": "string"}

"""
Tests for manifest parameter schemas and argument validation.
"""
import pytest

from agent_bridge.errors import ParameterValidationError
from agent_bridge.manifests.schema import (
    build_parameter_model,
    build_parameter_schema,
    validate_parameters,
)


def test_schema_projection(items_manifest):
    schema = build_parameter_schema(items_manifest.get_action("search_items").parameters)
    assert schema["type"] == "object"
    assert schema["required"] == ["q"]
    assert schema["properties"]["limit"] == {"type": "integer", "default": 10}
    assert schema["properties"]["tags"] == {"type": "array", "items": {"type": "string"}}


def test_schema_without_required_omits_key(items_manifest):
    params = items_manifest.get_action("search_items").parameters[1:]
    assert "required" not in build_parameter_schema(params)


def test_required_with_default_is_not_required(items_manifest_doc):
    from agent_bridge.domains.manifest import Manifest

    items_manifest_doc["actions"][1]["parameters"][1]["required"] = True
    manifest = Manifest.load(items_manifest_doc)
    schema = build_parameter_schema(manifest.get_action("search_items").parameters)
    assert schema["required"] == ["q"]


def test_validation_applies_defaults_and_keeps_declared_names(items_manifest):
    action = items_manifest.get_action("search_items")
    model = build_parameter_model("search_params", action.parameters)
    assert validate_parameters(model, {"q": "lamp", "X-Request-Id": "abc"}) == {
        "q": "lamp",
        "limit": 10,
        "X-Request-Id": "abc",
    }


def test_validation_reports_every_failure(items_manifest):
    action = items_manifest.get_action("create_item")
    model = build_parameter_model("create_params", action.parameters)
    with pytest.raises(ParameterValidationError) as exc_info:
        validate_parameters(model, {"price": "cheap"})
    messages = exc_info.value.messages
    assert any(m.startswith("name:") for m in messages)
    assert any(m.startswith("price:") for m in messages)


def test_validation_rejects_non_object(items_manifest):
    model = build_parameter_model("get_params", items_manifest.get_action("get_item").parameters)
    with pytest.raises(ParameterValidationError, match="Expected an object"):
        validate_parameters(model, ["42"])


def test_numbers_are_accepted_for_string_parameters(items_manifest):
    model = build_parameter_model("get_params", items_manifest.get_action("get_item").parameters)
    assert validate_parameters(model, {"id": 42}) == {"id": "42"}


def test_unknown_parameters_are_dropped(items_manifest):
    model = build_parameter_model("get_params", items_manifest.get_action("get_item").parameters)
    assert validate_parameters(model, {"id": "1", "extra": True}) == {"id": "1"}

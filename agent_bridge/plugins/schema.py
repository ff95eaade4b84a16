"""
JSON schema helpers shared by the registry and the protocol server.
"""
from typing import Any, Dict

# Keys that only help humans; argument validation never needs them
NON_ESSENTIAL_KEYS = frozenset(
    {"description", "default", "examples", "title", "$id", "$comment", "$schema"}
)

ARRAY_ITEMS_PLACEHOLDER = {"type": "string"}

# Keys whose value is a map of name -> schema, not a schema itself
_SCHEMA_MAP_KEYS = ("properties", "$defs", "definitions", "patternProperties")


def compact_json_schema(value: Any) -> Any:
    """Strip non-essential keys from a schema, recursively.

    Property names are never stripped, so a parameter literally named
    ``description`` survives. ``type``, ``properties``, ``required``,
    ``items`` and ``enum`` are always preserved.
    """
    if isinstance(value, list):
        return [compact_json_schema(v) for v in value]
    if not isinstance(value, dict):
        return value

    out: Dict[str, Any] = {}
    for key, raw in value.items():
        if key in NON_ESSENTIAL_KEYS:
            continue
        if key in _SCHEMA_MAP_KEYS and isinstance(raw, dict):
            out[key] = {name: compact_json_schema(sub) for name, sub in raw.items()}
        elif key in ("enum", "required", "const"):
            out[key] = raw
        else:
            out[key] = compact_json_schema(raw)
    return out


def ensure_array_items(value: Any) -> Any:
    """Give every array node a non-empty ``items`` schema.

    Several backends reject ``{"type": "array"}`` without ``items``.
    """
    if isinstance(value, list):
        return [ensure_array_items(v) for v in value]
    if not isinstance(value, dict):
        return value

    out: Dict[str, Any] = {}
    for key, raw in value.items():
        if key in _SCHEMA_MAP_KEYS and isinstance(raw, dict):
            out[key] = {name: ensure_array_items(sub) for name, sub in raw.items()}
        elif key in ("enum", "required", "const", "default", "examples"):
            out[key] = raw
        else:
            out[key] = ensure_array_items(raw)

    node_type = out.get("type")
    is_array = node_type == "array" or (
        isinstance(node_type, list) and "array" in node_type
    )
    if is_array and not out.get("items"):
        out["items"] = dict(ARRAY_ITEMS_PLACEHOLDER)
    return out

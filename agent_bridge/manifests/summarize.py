"""
Short, model-friendly summaries of API responses.
"""
import json
from typing import Any

MAX_SUMMARY_CHARS = 500
MAX_ERROR_BODY_CHARS = 200
PREVIEW_ITEMS = 3
TRUNCATION_MARKER = "... (truncated)"


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str, separators=(",", ":"))


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def _preview_item(item: Any, limit: int) -> str:
    if isinstance(item, (dict, list)):
        return to_json(item)[:limit]
    return str(item)


def summarize_response(data: Any, action_id: str) -> str:
    """Summarize a parsed response body for the model.

    Lists report their length and the first few items; paginated objects
    (``{"items": [...], "total": n}``) report the total and item names;
    anything else is the JSON body cut to a fixed budget.
    """
    if data is None or data == "":
        return f"{action_id} completed with an empty response"

    if isinstance(data, str):
        return truncate(data, MAX_SUMMARY_CHARS)

    if isinstance(data, list):
        preview = ", ".join(_preview_item(item, 100) for item in data[:PREVIEW_ITEMS])
        more = "..." if len(data) > PREVIEW_ITEMS else ""
        return f"{action_id} returned {len(data)} results: {preview}{more}"

    if isinstance(data, dict) and isinstance(data.get("items"), list):
        items = data["items"]
        count = data.get("total")
        if count is None:
            count = len(items)
        names = []
        for item in items[:PREVIEW_ITEMS]:
            if isinstance(item, dict) and (item.get("name") or item.get("title")):
                names.append(str(item.get("name") or item.get("title")))
            else:
                names.append(_preview_item(item, 80))
        more = "..." if len(items) > PREVIEW_ITEMS else ""
        return f"Found {count} results: {', '.join(names)}{more}"

    return truncate(to_json(data), MAX_SUMMARY_CHARS)


def summarize_error(status_code: int, data: Any) -> str:
    body = data if isinstance(data, str) else to_json(data)
    return f"API returned {status_code}: {truncate(body, MAX_ERROR_BODY_CHARS)}"

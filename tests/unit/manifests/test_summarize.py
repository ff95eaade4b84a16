"""
Tests for response summaries.
"""
from agent_bridge.manifests.summarize import (
    MAX_SUMMARY_CHARS,
    TRUNCATION_MARKER,
    summarize_error,
    summarize_response,
)


def test_empty():
    assert summarize_response(None, "list") == "list completed with an empty response"
    assert summarize_response("", "list") == "list completed with an empty response"


def test_list_preview():
    summary = summarize_response([1, 2, 3, 4], "list_things")
    assert summary == "list_things returned 4 results: 1, 2, 3..."


def test_paginated_items():
    data = {"items": [{"name": "a"}, {"title": "b"}], "total": 40}
    assert summarize_response(data, "search") == "Found 40 results: a, b"


def test_long_object_is_truncated():
    summary = summarize_response({"text": "x" * 2000}, "get")
    assert summary.endswith(TRUNCATION_MARKER)
    assert len(summary) == MAX_SUMMARY_CHARS + len(TRUNCATION_MARKER)


def test_error_summary():
    assert summarize_error(400, {"error": "bad"}) == 'API returned 400: {"error":"bad"}'

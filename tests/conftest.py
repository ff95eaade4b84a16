"""
Shared fixtures for the Agent Bridge test suite.
"""
from typing import Any, Callable, List, Optional

import httpx
import pytest

from agent_bridge.domains.manifest import Manifest


class FakeTransport:
    """Async ``send`` replacement that records requests."""

    def __init__(self, handler: Optional[Callable[[httpx.Request], Any]] = None):
        self.requests: List[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={"ok": True}))

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.handler(request)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def items_manifest_doc():
    return {
        "name": "inventory",
        "description": "Inventory API",
        "version": "1.2.0",
        "base_url": "https://api.example.com/v1/",
        "auth": {"type": "bearer"},
        "actions": [
            {
                "id": "get_item",
                "description": "Get an item by id",
                "method": "GET",
                "path": "/items/{id}",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "type": "string"}
                ],
            },
            {
                "id": "search_items",
                "description": "Search items",
                "method": "get",
                "path": "/items",
                "parameters": [
                    {"name": "q", "in": "query", "required": True, "type": "string"},
                    {"name": "limit", "in": "query", "type": "integer", "default": 10},
                    {"name": "tags", "in": "query", "type": "array"},
                    {"name": "X-Request-Id", "in": "header", "type": "string"},
                ],
            },
            {
                "id": "create_item",
                "description": "Create an item",
                "method": "POST",
                "path": "/items",
                "confirm": True,
                "parameters": [
                    {"name": "name", "in": "body", "required": True, "type": "string"},
                    {"name": "price", "in": "body", "type": "number"},
                    {"name": "active", "in": "body", "type": "boolean", "default": True},
                ],
            },
            {
                "id": "delete_item",
                "description": "Delete an item",
                "method": "DELETE",
                "path": "/items/{id}",
                "confirm": True,
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "type": "string"}
                ],
            },
        ],
    }


@pytest.fixture
def items_manifest(items_manifest_doc):
    return Manifest.load(items_manifest_doc)


@pytest.fixture
def spotify_manifest():
    return Manifest.load(
        {
            "name": "spotify",
            "description": "Spotify Web API",
            "base_url": "https://api.spotify.com/v1",
            "auth": {
                "type": "oauth2",
                "oauth2": {
                    "authorization_url": "https://accounts.spotify.com/authorize",
                    "token_url": "https://accounts.spotify.com/api/token",
                    "scopes": {"playlist-modify-private": "Modify playlists"},
                },
            },
            "actions": [
                {
                    "id": "create_playlist",
                    "description": "Create a playlist for a user",
                    "method": "POST",
                    "path": "/users/{user_id}/playlists",
                    "confirm": True,
                    "parameters": [
                        {"name": "user_id", "in": "path", "required": True},
                        {"name": "name", "in": "body", "required": True},
                        {"name": "public", "in": "body", "type": "boolean", "default": False},
                    ],
                }
            ],
        }
    )


@pytest.fixture
def gmail_manifest():
    body_params = [
        {"name": name, "in": "body"}
        for name in ("raw", "to", "cc", "bcc", "subject", "body_text", "from", "threadId")
    ]
    return Manifest.load(
        {
            "name": "gmail",
            "description": "Gmail API",
            "base_url": "https://gmail.googleapis.com/gmail/v1",
            "auth": {"type": "bearer"},
            "actions": [
                {
                    "id": "send_message",
                    "description": "Send an email",
                    "method": "POST",
                    "path": "/users/me/messages/send",
                    "parameters": body_params,
                },
                {
                    "id": "create_draft",
                    "description": "Create a draft",
                    "method": "POST",
                    "path": "/users/me/drafts",
                    "parameters": body_params,
                },
            ],
        }
    )

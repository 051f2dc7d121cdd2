"""Shared pytest fixtures for mirkit tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from mirkit.specs.routes import RouteManifest


@pytest.fixture
def counter_document() -> dict[str, Any]:
    """A card with a param-bound title, a state-bound counter and an increment button."""
    return {
        "version": "1.2",
        "metadata": {"name": "Counter Card"},
        "ui": {
            "root": {
                "id": "root",
                "type": "container",
                "children": [
                    {"id": "title", "type": "MdrText", "text": {"$param": "title"}},
                    {"id": "count", "type": "MdrText", "text": {"$state": "count"}},
                    {
                        "id": "inc",
                        "type": "MdrButton",
                        "text": "Add",
                        "events": {"click": {"trigger": "click", "action": "increment"}},
                    },
                ],
            }
        },
        "logic": {
            "props": {"title": {"type": "string", "default": "Hello"}},
            "state": {"count": {"type": "number", "initial": 0}},
        },
    }


@pytest.fixture
def list_document() -> dict[str, Any]:
    """A user list keyed by id with an empty-state node."""
    return {
        "version": "1.2",
        "ui": {
            "root": {
                "id": "root",
                "type": "container",
                "children": [
                    {
                        "id": "users",
                        "type": "ul",
                        "list": {
                            "source": {"$param": "users"},
                            "keyBy": "id",
                            "itemAs": "user",
                            "emptyNodeId": "empty",
                        },
                        "children": [
                            {"id": "user-row", "type": "li", "text": {"$item": "name"}},
                            {"id": "empty", "type": "p", "text": "No users"},
                        ],
                    }
                ],
            }
        },
        "logic": {
            "props": {
                "users": {
                    "type": "array",
                    "default": [{"id": "u1", "name": "Alpha"}, {"id": "u2", "name": "Beta"}],
                }
            }
        },
    }


@pytest.fixture
def route_manifest() -> RouteManifest:
    """Users section with literal, dynamic, wildcard and index children."""
    return RouteManifest.model_validate(
        {
            "version": "1",
            "root": {
                "id": "root",
                "layoutDocId": "app-layout",
                "outletNodeId": "main",
                "children": [
                    {"id": "home", "index": True, "pageDocId": "home-page"},
                    {
                        "id": "users",
                        "segment": "users",
                        "layoutDocId": "users-layout",
                        "outletNodeId": "users-outlet",
                        "children": [
                            {"id": "users-index", "index": True, "pageDocId": "users-page"},
                            {"id": "user-new", "segment": "new", "pageDocId": "user-new-page"},
                            {"id": "user-detail", "segment": ":id", "pageDocId": "user-page"},
                            {"id": "users-rest", "segment": "*", "pageDocId": "users-fallback"},
                        ],
                    },
                ],
            },
        }
    )


@pytest.fixture
def write_json(tmp_path: Path):
    """Write a JSON payload to a file under tmp_path and return its path."""

    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload))
        return path

    return _write

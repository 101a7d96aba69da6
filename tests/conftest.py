"""
Root pytest configuration and shared fixtures.

Provides response-envelope validation, sample seeds/sheets, and isolation
of the process-wide configuration and store singletons.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union
from unittest.mock import MagicMock

import pytest
from mcp.types import TextContent

from studysheet.config import ServerConfig, set_config
from studysheet.core.models import Sheet
from studysheet.core.seed import normalize_seed
from studysheet.core.store import SheetStore, set_store

# Response contract version from responses.py
RESPONSE_CONTRACT_VERSION = "response-v2"


def extract_response_dict(result: Union[Dict[str, Any], TextContent]) -> Dict[str, Any]:
    """Extract dict from tool result, handling both dict and TextContent.

    Tools wrapped with the canonical_tool decorator return TextContent with
    minified JSON. This helper extracts the dict for test assertions.
    """
    if isinstance(result, dict):
        return result
    if isinstance(result, TextContent):
        return json.loads(result.text)
    raise TypeError(
        f"Expected dict or TextContent, got {type(result).__name__}"
    )


def validate_response_envelope(response: Dict[str, Any]) -> bool:
    """Validate that a response dict conforms to response-v2 envelope.

    Raises:
        AssertionError: With detailed message on validation failure
    """
    required_keys = {"success", "data", "error", "meta"}
    missing = required_keys - set(response.keys())
    assert not missing, f"Response missing required keys: {missing}"

    assert isinstance(response["success"], bool), "success must be boolean"
    assert isinstance(response["data"], dict), "data must be dict"
    assert isinstance(response["meta"], dict), "meta must be dict"

    if response["success"]:
        assert response["error"] is None, "error must be null when success=True"
    else:
        assert isinstance(response["error"], str) and response["error"], (
            "error must be non-empty string when success=False"
        )
        assert "error_code" in response["data"], "error responses carry data.error_code"

    assert response["meta"].get("version") == RESPONSE_CONTRACT_VERSION, (
        f"meta.version must be '{RESPONSE_CONTRACT_VERSION}'"
    )

    return True


@pytest.fixture
def assert_response_contract():
    """Fixture for asserting response contract compliance.

    Usage:
        def test_tool_response(assert_response_contract):
            response = my_tool()
            validated = assert_response_contract(response)
            assert validated["data"]["topics"] == []
    """
    def _assert(response: Union[Dict[str, Any], TextContent]) -> Dict[str, Any]:
        response = extract_response_dict(response)
        validate_response_envelope(response)
        return response

    return _assert


@pytest.fixture(autouse=True)
def isolate_globals(monkeypatch):
    """Reset config/store singletons and strip STUDYSHEET_* env vars."""
    import os

    for name in list(os.environ):
        if name.startswith("STUDYSHEET_"):
            monkeypatch.delenv(name, raising=False)
    set_config(None)
    set_store(None)
    yield
    set_config(None)
    set_store(None)


@pytest.fixture
def hierarchical_seed() -> Dict[str, Any]:
    """Two topics, three subtopics, five questions (two solved)."""
    return {
        "topics": [
            {
                "title": "Arrays",
                "subTopics": [
                    {
                        "title": "Basics",
                        "questions": [
                            {"title": "Two Sum", "difficulty": "Easy", "source": "LeetCode"},
                            {"title": "Best Time to Buy and Sell Stock", "solved": True},
                            {"title": "Rotate Array", "difficulty": "Medium"},
                        ],
                    },
                    {
                        "title": "Two Pointers",
                        "questions": [
                            {"title": "Container With Most Water", "difficulty": "Medium"},
                        ],
                    },
                ],
            },
            {
                "title": "Graphs",
                "subTopics": [
                    {
                        "title": "Traversal",
                        "questions": [
                            {
                                "title": "Number of Islands",
                                "difficulty": "Medium",
                                "solved": True,
                                "starred": True,
                                "tags": ["bfs", "dfs"],
                            },
                        ],
                    },
                ],
            },
        ]
    }


@pytest.fixture
def sample_sheet(hierarchical_seed) -> Sheet:
    """Canonical sheet normalized from the hierarchical seed."""
    return normalize_seed(hierarchical_seed)


@pytest.fixture
def seed_file(tmp_path: Path, hierarchical_seed) -> Path:
    path = tmp_path / "seed" / "sheet.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(hierarchical_seed), encoding="utf-8")
    return path


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "state.json"


@pytest.fixture
def store(state_path: Path, seed_file: Path) -> SheetStore:
    """Store seeded from the hierarchical seed, persisting under tmp_path."""
    return SheetStore(state_path, seed_file, backups=False)


@pytest.fixture
def test_config(state_path: Path, seed_file: Path) -> ServerConfig:
    return ServerConfig(
        state_path=state_path,
        seed_path=seed_file,
        backups=False,
        log_level="WARNING",
        server_name="studysheet-test",
        server_version="0.1.0",
    )


@pytest.fixture
def mock_mcp():
    """Create a mock FastMCP server instance that records registered tools."""
    mcp = MagicMock()
    mcp._tools = {}

    def mock_tool(*args, **kwargs):
        def decorator(func):
            name = kwargs.get("name") or func.__name__
            mcp._tools[name] = MagicMock(fn=func)
            return func
        return decorator

    mcp.tool = mock_tool
    return mcp

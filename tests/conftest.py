"""Shared pytest fixtures for MemData MCP tests."""

from __future__ import annotations

import pytest

from memdata_mcp.config import Config

TEST_API_URL = "http://test-api"
TEST_API_KEY = "md_test_key"


@pytest.fixture
def config() -> Config:
    """Configuration pointing at a fake API host."""
    return Config(api_key=TEST_API_KEY, api_url=TEST_API_URL)


@pytest.fixture(autouse=True)
def reset_server_client():
    """Reset the server's shared client between tests."""
    import memdata_mcp.mcp.server as server_module

    server_module._client = None
    yield
    server_module._client = None


@pytest.fixture
def clean_env(monkeypatch):
    """Remove MEMDATA_* variables so tests control configuration."""
    for key in ("MEMDATA_API_KEY", "MEMDATA_API_URL", "MEMDATA_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def identity_payload() -> dict:
    """A successful /identity reply."""
    return {
        "success": True,
        "identity": {
            "agent_name": "MemBrain",
            "identity_summary": "Research assistant for the data team",
            "session_count": 4,
        },
        "last_session": {"summary": "Refactored ingestion", "ended_at": "2026-10-15T18:00:00Z"},
        "working_on": "Migrating the query layer",
        "memory_stats": {
            "total_memories": 42,
            "oldest_memory": "2026-01-02",
            "newest_memory": "2026-10-15",
        },
        "recent_activity": [
            {"source": "notes-a", "date": "2026-10-15"},
            {"source": "notes-b", "date": "2026-10-14"},
            {"source": "notes-a", "date": "2026-10-13"},
            {"source": "notes-c", "date": "2026-10-12"},
        ],
    }

"""Shared fixtures for the genesis test suite."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from genesis.utils.store import JsonStore, ProjectRepository


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "question_model": "gemini-test-pro",
        "synthesis_model": "gemini-test-pro",
        "refine_model": "gemini-test-pro",
        "proactive_model": "gemini-test-flash",
        "engineer_model": "gemini-test-pro",
        "researcher_model": "claude-test",
        "generic_model": "gemini-test-flash",
        "temperature": 0,
        "llm_timeout_seconds": 5,
        "recent_notes_limit": 3,
        "note_excerpt_chars": 40,
        "new_project_status": "IN_PROGRESS",
        "persona_enabled": True,
    }
    with patch("genesis.config._config", test_config):
        yield test_config


def _reply(content: str):
    """Create a mock chat model response object."""
    response = MagicMock()
    response.content = content
    return response


@pytest.fixture
def llm_reply():
    """Factory for mock chat model responses: ``llm_reply("text")``."""
    return _reply


@pytest.fixture
def fake_llm(mock_config):
    """Patch the chat model factory so every call hits one mock model.

    Configure ``fake_llm.ainvoke.return_value`` or ``.side_effect`` per test.
    """
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=_reply("model output"))
    with patch("genesis.utils.llm.build_chat_model", return_value=llm):
        yield llm


@pytest.fixture
def project():
    """Minimal valid Project with an empty ledger."""
    return {
        "id": "p-1",
        "title": "P2P lending app...",
        "description": "P2P lending app for students",
        "whiteboard": "## Mission\nLet students lend to each other.",
        "status": "IN_PROGRESS",
        "notes": [],
    }


@pytest.fixture
def repository(tmp_path):
    return ProjectRepository(JsonStore(tmp_path / "store.json"))

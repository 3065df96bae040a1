"""Shared test fixtures for mowen-mcp."""

import pytest
from unittest.mock import AsyncMock

from mowen_mcp.config import Config
from mowen_mcp.memory import NoteStore
from mowen_mcp.web import ApiResponse


class FakeClient:
    """Stands in for MowenClient; every API call is an AsyncMock."""

    def __init__(self):
        self.post_json = AsyncMock()
        self.upload_form = AsyncMock()
        self.create_note = AsyncMock(return_value="note-1")
        self.edit_note = AsyncMock(return_value=None)
        self.set_note_privacy = AsyncMock(return_value=None)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


def response(status=200, body=None, raw=""):
    return ApiResponse(status_code=status, body=body, raw_body=raw)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def config(tmp_path):
    return Config(api_key="test-key", db_path=tmp_path / "notes.db")


@pytest.fixture
def store(config):
    note_store = NoteStore(config.db_path)
    yield note_store
    note_store.close()

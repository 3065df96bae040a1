"""Tests for mowen_mcp.tools: the four MCP tools."""

import json
from datetime import datetime

import pytest

from mowen_mcp.tools import (
    CreateNoteTool,
    EditNoteTool,
    SearchNoteTool,
    SetNotePrivacyTool,
    create_tools_registry,
    parse_tags,
)
from mowen_mcp.web import ApiError

BLOCKS = json.dumps([
    {"texts": [{"text": "Meeting notes", "bold": True}]},
    {"type": "quote", "texts": [{"text": "ship it"}]},
])


@pytest.fixture
def make_tool(config, store, fake_client):
    def factory(cls):
        return cls(config, store, client_factory=lambda: fake_client)
    return factory


class TestParseTags:
    @pytest.mark.parametrize("value, expected", [
        (None, []),
        ("", []),
        (["a", "b"], ["a", "b"]),
        ('["work", "reading"]', ["work", "reading"]),
        ("['work', 'reading']", ["work", "reading"]),
        ("not a list", []),
        ('{"a": 1}', []),
    ])
    def test_parse_tags(self, value, expected):
        assert parse_tags(value) == expected


class TestCreateNote:
    async def test_success(self, make_tool, fake_client, store):
        tool = make_tool(CreateNoteTool)

        (text,) = await tool.execute({
            "paragraphs": BLOCKS,
            "auto_publish": True,
            "tags": "['work', 'ideas']",
        })

        assert text.startswith("Note created successfully!")
        assert "Note ID: note-1" in text
        assert "Blocks: 2" in text
        assert "Auto publish: True" in text
        assert "Tags: work, ideas" in text

        body, settings = fake_client.create_note.await_args.args
        assert settings == {"autoPublish": True, "tags": ["work", "ideas"]}
        assert [node["type"] for node in body["content"]] == ["paragraph", "paragraph", "quote"]

        (record,) = store.search_by_date(datetime.now().date())
        assert record.note_id == "note-1"
        assert record.content == BLOCKS

    async def test_accepts_decoded_block_list(self, make_tool, store):
        tool = make_tool(CreateNoteTool)
        (text,) = await tool.execute({"paragraphs": json.loads(BLOCKS)})
        assert "Blocks: 2" in text
        (record,) = store.search_by_date(datetime.now().date())
        assert json.loads(record.content) == json.loads(BLOCKS)

    async def test_conversion_error_skips_api(self, make_tool, fake_client, store):
        tool = make_tool(CreateNoteTool)
        bad = json.dumps([{"texts": [{"text": "x", "link": "javascript:alert(1)"}]}])

        (text,) = await tool.execute({"paragraphs": bad})

        assert text.startswith("Failed to convert note content: block 0, span 0:")
        fake_client.create_note.assert_not_awaited()
        assert store.search_by_date(datetime.now().date()) == []

    async def test_api_error_records_nothing(self, make_tool, fake_client, store):
        fake_client.create_note.side_effect = ApiError("Failed to create note", 401, "bad key")
        tool = make_tool(CreateNoteTool)

        (text,) = await tool.execute({"paragraphs": BLOCKS})

        assert text.startswith("Failed to create note:")
        assert "401" in text
        assert store.search_by_date(datetime.now().date()) == []

    async def test_missing_note_id_is_reported_as_unknown(self, make_tool, fake_client):
        fake_client.create_note.return_value = None
        (text,) = await make_tool(CreateNoteTool).execute({"paragraphs": BLOCKS})
        assert "Note ID: unknown" in text

    @pytest.mark.parametrize("value", ["false", "true", 1, None])
    async def test_auto_publish_needs_a_real_boolean(self, make_tool, fake_client, value):
        (text,) = await make_tool(CreateNoteTool).execute({"paragraphs": BLOCKS, "auto_publish": value})

        _, settings = fake_client.create_note.await_args.args
        assert settings["autoPublish"] is False
        assert "Auto publish: False" in text

    async def test_missing_paragraphs(self, make_tool):
        (text,) = await make_tool(CreateNoteTool).execute({})
        assert text.startswith("Error:")

    async def test_missing_api_key(self, config, store):
        config.api_key = None
        tool = CreateNoteTool(config, store)

        (text,) = await tool.execute({"paragraphs": BLOCKS})
        assert text.startswith("Failed to create note:")
        assert "MOWEN_API_KEY" in text


class TestEditNote:
    async def test_success(self, make_tool, fake_client):
        (text,) = await make_tool(EditNoteTool).execute({"note_id": "n-7", "paragraphs": BLOCKS})

        assert text.startswith("Note edited successfully!")
        assert "Note ID: n-7" in text
        note_id, body = fake_client.edit_note.await_args.args
        assert note_id == "n-7"
        assert body["type"] == "doc"

    async def test_requires_note_id(self, make_tool, fake_client):
        (text,) = await make_tool(EditNoteTool).execute({"paragraphs": BLOCKS})
        assert text.startswith("Error:")
        fake_client.edit_note.assert_not_awaited()

    async def test_empty_block_list(self, make_tool, fake_client):
        (text,) = await make_tool(EditNoteTool).execute({"note_id": "n", "paragraphs": "[]"})
        assert text.startswith("Failed to convert note content:")
        fake_client.edit_note.assert_not_awaited()

    async def test_api_error(self, make_tool, fake_client):
        fake_client.edit_note.side_effect = ApiError("Failed to edit note", 404, "no such note")
        (text,) = await make_tool(EditNoteTool).execute({"note_id": "n", "paragraphs": BLOCKS})
        assert text.startswith("Failed to edit note:")


class TestSetNotePrivacy:
    async def test_rule(self, make_tool, fake_client):
        (text,) = await make_tool(SetNotePrivacyTool).execute({
            "note_id": "n-1",
            "privacy_type": "rule",
            "no_share": True,
            "expire_at": 1700000000,
        })

        fake_client.set_note_privacy.assert_awaited_once_with(
            "n-1", {"type": "rule", "rule": {"noShare": True, "expireAt": "1700000000"}}
        )
        assert "Privacy: public with rules" in text
        assert "Sharing forbidden: yes" in text
        assert "Expires at: 1700000000" in text

    async def test_rule_never_expires(self, make_tool):
        (text,) = await make_tool(SetNotePrivacyTool).execute({
            "note_id": "n-1",
            "privacy_type": "rule",
        })
        assert "Sharing forbidden: no" in text
        assert "Expires: never" in text

    async def test_private_has_no_rule(self, make_tool, fake_client):
        (text,) = await make_tool(SetNotePrivacyTool).execute({
            "note_id": "n-1",
            "privacy_type": "private",
            "no_share": True,
        })
        fake_client.set_note_privacy.assert_awaited_once_with("n-1", {"type": "private"})
        assert "Privacy: private" in text
        assert "Expires" not in text

    async def test_string_no_share_is_not_true(self, make_tool, fake_client):
        (text,) = await make_tool(SetNotePrivacyTool).execute({
            "note_id": "n-1",
            "privacy_type": "rule",
            "no_share": "false",
        })
        privacy = fake_client.set_note_privacy.await_args.args[1]
        assert privacy["rule"]["noShare"] is False
        assert "Sharing forbidden: no" in text

    async def test_invalid_type(self, make_tool, fake_client):
        (text,) = await make_tool(SetNotePrivacyTool).execute({
            "note_id": "n-1",
            "privacy_type": "secret",
        })
        assert text.startswith("Error:")
        fake_client.set_note_privacy.assert_not_awaited()

    async def test_api_error(self, make_tool, fake_client):
        fake_client.set_note_privacy.side_effect = ApiError("Failed to set note privacy", 500, "")
        (text,) = await make_tool(SetNotePrivacyTool).execute({
            "note_id": "n-1",
            "privacy_type": "public",
        })
        assert text.startswith("Failed to set note privacy:")


class TestSearchNote:
    async def test_specific_date(self, make_tool, store):
        store.save_note("old", "[old]", created_at=datetime(2024, 3, 1, 10, 0))
        store.save_note("new", "[new]", created_at=datetime(2024, 3, 2, 10, 0))

        (text,) = await make_tool(SearchNoteTool).execute({
            "query_type": "specific_date",
            "specific_date": "2024-03-01",
        })

        assert text.startswith("Found 1 notes:")
        assert "Note old" in text
        assert "Note new" not in text
        assert "Created: 2024-03-01 10:00:00" in text

    async def test_date_range(self, make_tool, store):
        store.save_note("a", "[a]", created_at=datetime(2024, 3, 1, 10, 0))
        store.save_note("b", "[b]", created_at=datetime(2024, 3, 3, 10, 0))

        (text,) = await make_tool(SearchNoteTool).execute({
            "query_type": "date_range",
            "start_date": "2024-03-01",
            "end_date": "2024-03-03",
        })
        assert text.startswith("Found 2 notes:")
        assert text.index("Note b") < text.index("Note a")

    async def test_today_is_default(self, make_tool, store):
        store.save_note("now", "[now]")
        (text,) = await make_tool(SearchNoteTool).execute({})
        assert "Note now" in text

    async def test_long_content_is_truncated(self, make_tool, store):
        store.save_note("long", "x" * 150)
        (text,) = await make_tool(SearchNoteTool).execute({"query_type": "today"})
        assert f"Preview: {'x' * 100}..." in text

    async def test_keyword_filter(self, make_tool, store):
        store.save_note("meet", '[{"texts": [{"text": "Quarterly planning meeting"}]}]')
        store.save_note("shop", '[{"texts": [{"text": "Buy milk and bread"}]}]')

        (text,) = await make_tool(SearchNoteTool).execute({"keyword": "planning"})
        assert "Note meet" in text
        assert "Note shop" not in text

    @pytest.mark.parametrize("threshold", ["high", [60]])
    async def test_non_numeric_threshold(self, make_tool, store, threshold):
        store.save_note("n", "hello world")
        (text,) = await make_tool(SearchNoteTool).execute({"keyword": "hello", "threshold": threshold})
        assert text == "Error: 'threshold' must be a number"

    async def test_null_threshold_uses_default(self, make_tool, store):
        store.save_note("n", "hello world")
        (text,) = await make_tool(SearchNoteTool).execute({"keyword": "hello", "threshold": None})
        assert "Note n" in text

    async def test_numeric_string_threshold(self, make_tool, store):
        store.save_note("n", "hello world")
        (text,) = await make_tool(SearchNoteTool).execute({"keyword": "hellx", "threshold": "100"})
        assert text == "No matching notes found."

    async def test_no_results(self, make_tool):
        (text,) = await make_tool(SearchNoteTool).execute({
            "query_type": "specific_date",
            "specific_date": "1999-01-01",
        })
        assert text == "No matching notes found."

    async def test_incomplete_range(self, make_tool):
        (text,) = await make_tool(SearchNoteTool).execute({
            "query_type": "date_range",
            "start_date": "2024-01-01",
        })
        assert text.startswith("Error:")

    async def test_bad_date(self, make_tool):
        (text,) = await make_tool(SearchNoteTool).execute({
            "query_type": "specific_date",
            "specific_date": "yesterday-ish",
        })
        assert text.startswith("Error:")


def test_registry(config, store):
    names = [tool.name for tool in create_tools_registry(config, store)]
    assert names == ["create_note", "edit_note", "set_note_privacy", "search_note"]

"""
Tools module for the mowen-mcp server.
Contains the note tools exposed to the agent: creating and editing notes,
setting note privacy, and searching notes created through this server.
Each tool is encapsulated in its own class with a JSON schema for its input.
"""

import asyncio
import json
import logging
import sqlite3
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import mcp.types as types
import yaml
from rapidfuzz import fuzz

from .config import Config
from .core import ConversionError, Document, convert_blocks
from .memory import NoteRecord, NoteStore, QUERY_TYPES, resolve_period
from .web import MowenClient, WebError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], MowenClient]

PREVIEW_LENGTH = 100

DEFAULT_THRESHOLD = 60.0

BLOCKS_DESCRIPTION = """
JSON array of content blocks. Blocks are separated by blank lines in the note.

Block types:
1. Paragraph (default): {"texts": [...]}
2. Quote: {"type": "quote", "texts": [...]}
3. Inline note: {"type": "note", "note_id": "<note id>"}
4. File: {"type": "file", "file_type": "image|audio|pdf", "source_type": "local|url", "source_path": "<path or URL>", "metadata": {...}}

Each entry of "texts" is {"text": "...", "bold": true, "highlight": true, "link": "https://..."};
bold, highlight and link are optional. Links must be http(s) URLs.
A local file must exist and its extension must match its file_type.

Example:
[
    {"texts": [{"text": "Plain text "}, {"text": "bold", "bold": true}, {"text": "a link", "link": "https://example.com"}]},
    {"type": "quote", "texts": [{"text": "A quote", "highlight": true}]},
    {"type": "note", "note_id": "VPrWsE_-P0qwrFUOygGs8"},
    {"type": "file", "file_type": "image", "source_type": "local", "source_path": "/path/to/image.jpg", "metadata": {"alt": "description", "align": "center"}},
    {"type": "file", "file_type": "audio", "source_type": "url", "source_path": "https://example.com/audio.mp3", "metadata": {"show_note": "00:00 Intro\\n01:30 Main part"}}
]
"""

PRIVACY_TYPES = {
    "public": "public",
    "private": "private",
    "rule": "public with rules",
}


def parse_tags(value: Any) -> List[str]:
    """
    Read the tag list argument.

    Accepts a list or a JSON array string. Python-style single quoted
    lists are read as YAML flow sequences. Anything else means no tags.
    """
    if not value:
        return []
    if isinstance(value, list):
        return [str(tag) for tag in value]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            try:
                parsed = yaml.safe_load(value)
            except yaml.YAMLError:
                parsed = None
        if isinstance(parsed, list):
            return [str(tag) for tag in parsed]
    logger.warning(f"Ignoring unparsable tags: {value!r}")
    return []


def flag(arguments: Dict[str, Any], name: str) -> bool:
    """Boolean argument; anything but a JSON true counts as false."""
    return arguments.get(name) is True


def block_count(document: Document) -> int:
    """Number of caller blocks in a document, without separators."""
    return sum(1 for node in document.content if not node.is_separator)


class Tool:
    """
    Base class for all tools.
    Each tool should inherit from this class and implement the execute method.
    """

    name: str
    description: str
    input_schema: Dict[str, Any]

    def __init__(self,
                 config: Config,
                 store: NoteStore,
                 client_factory: Optional[ClientFactory] = None):
        self.config = config
        self.store = store
        self.client_factory = client_factory or self._default_client

    def _default_client(self) -> MowenClient:
        return MowenClient(
            self.config.require_api_key(),
            base_url=self.config.base_url,
            timeout=self.config.request_timeout
        )

    def to_mcp_tool(self) -> types.Tool:
        """MCP description of this tool."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema
        )

    async def execute(self, arguments: Dict[str, Any]) -> List[str]:
        raise NotImplementedError


class CreateNoteTool(Tool):
    """Tool for creating new notes."""

    name = "create_note"
    description = (
        "Create a new Mowen note. Supports paragraphs, quotes, images, audio, "
        "PDFs and inline notes. Can publish immediately and attach tags."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "paragraphs": {
                "type": "string",
                "description": BLOCKS_DESCRIPTION
            },
            "auto_publish": {
                "type": "boolean",
                "description": "Publish the note immediately (true) or keep it as a draft (false).",
                "default": False
            },
            "tags": {
                "type": "string",
                "description": "JSON array of tag names, e.g. [\"work\", \"reading\"]."
            }
        },
        "required": ["paragraphs"]
    }

    async def _remember(self, note_id: str, paragraphs: Any) -> None:
        """Record the new note locally. Failures are logged only."""
        content = paragraphs if isinstance(paragraphs, str) else json.dumps(paragraphs, ensure_ascii=False)
        try:
            await asyncio.to_thread(self.store.save_note, note_id, content)
        except (sqlite3.Error, OSError, ValueError) as e:
            logger.error(f"Failed to record note {note_id} locally: {e}")

    async def execute(self, arguments: Dict[str, Any]) -> List[str]:
        paragraphs = arguments.get("paragraphs")
        if not paragraphs:
            return ["Error: 'paragraphs' is required"]

        auto_publish = flag(arguments, "auto_publish")
        tags = parse_tags(arguments.get("tags"))

        try:
            async with self.client_factory() as client:
                document = await convert_blocks(paragraphs, client)
                settings = {"autoPublish": auto_publish, "tags": tags}
                note_id = await client.create_note(document.to_dict(), settings)
        except ConversionError as e:
            logger.warning(f"[CreateNoteTool] Conversion failed: {e}")
            return [f"Failed to convert note content: {e}"]
        except (WebError, ValueError) as e:
            logger.error(f"[CreateNoteTool] Error: {e}")
            return [f"Failed to create note: {e}"]

        note_id = note_id or "unknown"
        await self._remember(note_id, paragraphs)

        logger.info(f"[CreateNoteTool] Created note {note_id}")
        return [
            "Note created successfully!\n\n"
            f"Note ID: {note_id}\n"
            f"Blocks: {block_count(document)}\n"
            f"Auto publish: {auto_publish}\n"
            f"Tags: {', '.join(tags)}"
        ]


class EditNoteTool(Tool):
    """Tool for replacing the content of an existing note."""

    name = "edit_note"
    description = (
        "Edit an existing note. The new blocks completely replace the note's "
        "current content."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "note_id": {
                "type": "string",
                "description": "ID of the note to edit."
            },
            "paragraphs": {
                "type": "string",
                "description": "New content blocks, same format as create_note. Replaces the whole note."
            }
        },
        "required": ["note_id", "paragraphs"]
    }

    async def execute(self, arguments: Dict[str, Any]) -> List[str]:
        note_id = arguments.get("note_id")
        if not note_id:
            return ["Error: 'note_id' is required"]
        paragraphs = arguments.get("paragraphs")
        if not paragraphs:
            return ["Error: 'paragraphs' is required"]

        try:
            async with self.client_factory() as client:
                document = await convert_blocks(paragraphs, client)
                await client.edit_note(note_id, document.to_dict())
        except ConversionError as e:
            logger.warning(f"[EditNoteTool] Conversion failed: {e}")
            return [f"Failed to convert note content: {e}"]
        except (WebError, ValueError) as e:
            logger.error(f"[EditNoteTool] Error: {e}")
            return [f"Failed to edit note: {e}"]

        logger.info(f"[EditNoteTool] Edited note {note_id}")
        return [
            "Note edited successfully!\n\n"
            f"Note ID: {note_id}\n"
            f"Blocks: {block_count(document)}"
        ]


class SetNotePrivacyTool(Tool):
    """Tool for changing who can see a note."""

    name = "set_note_privacy"
    description = (
        "Set a note's privacy: fully public (public), private (private), or "
        "public with rules (rule)."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "note_id": {
                "type": "string",
                "description": "Note ID."
            },
            "privacy_type": {
                "type": "string",
                "enum": list(PRIVACY_TYPES),
                "description": "'public', 'private' or 'rule'."
            },
            "no_share": {
                "type": "boolean",
                "description": "For 'rule': forbid sharing the note.",
                "default": False
            },
            "expire_at": {
                "type": "number",
                "description": "For 'rule': expiry as a Unix timestamp. 0 never expires.",
                "default": 0
            }
        },
        "required": ["note_id", "privacy_type"]
    }

    async def execute(self, arguments: Dict[str, Any]) -> List[str]:
        note_id = arguments.get("note_id")
        if not note_id:
            return ["Error: 'note_id' is required"]

        privacy_type = arguments.get("privacy_type")
        if privacy_type not in PRIVACY_TYPES:
            return ["Error: 'privacy_type' must be 'public', 'private' or 'rule'"]

        no_share = flag(arguments, "no_share")
        try:
            expire_at = int(float(arguments.get("expire_at") or 0))
        except (TypeError, ValueError):
            return ["Error: 'expire_at' must be a Unix timestamp"]

        privacy: Dict[str, Any] = {"type": privacy_type}
        if privacy_type == "rule":
            privacy["rule"] = {"noShare": no_share, "expireAt": str(expire_at)}

        try:
            async with self.client_factory() as client:
                await client.set_note_privacy(note_id, privacy)
        except (WebError, ValueError) as e:
            logger.error(f"[SetNotePrivacyTool] Error: {e}")
            return [f"Failed to set note privacy: {e}"]

        lines = [
            "Note privacy updated!\n",
            f"Note ID: {note_id}",
            f"Privacy: {PRIVACY_TYPES[privacy_type]}"
        ]
        if privacy_type == "rule":
            lines.append(f"Sharing forbidden: {'yes' if no_share else 'no'}")
            lines.append("Expires: never" if expire_at == 0 else f"Expires at: {expire_at}")
        return ["\n".join(lines)]


class SearchNoteTool(Tool):
    """Tool for finding notes created through this server by date."""

    name = "search_note"
    description = (
        "Search notes created through this server by creation date: a specific "
        "date, a date range, today, yesterday, this/last week or this/last month. "
        "Optionally filter by a fuzzy keyword."
    )

    input_schema = {
        "type": "object",
        "properties": {
            "query_type": {
                "type": "string",
                "enum": list(QUERY_TYPES),
                "description": "Query type. Defaults to today.",
                "default": "today"
            },
            "specific_date": {
                "type": "string",
                "description": "YYYY-MM-DD, for specific_date."
            },
            "start_date": {
                "type": "string",
                "description": "YYYY-MM-DD, for date_range."
            },
            "end_date": {
                "type": "string",
                "description": "YYYY-MM-DD, for date_range."
            },
            "keyword": {
                "type": "string",
                "description": "Only return notes whose content fuzzily matches this keyword."
            },
            "threshold": {
                "type": "number",
                "description": "Minimum keyword similarity score (0-100).",
                "default": DEFAULT_THRESHOLD
            }
        }
    }

    @staticmethod
    def _matches(record: NoteRecord, keyword: str, threshold: float) -> bool:
        return fuzz.partial_ratio(keyword.lower(), record.content.lower()) >= threshold

    @staticmethod
    def _format(records: List[NoteRecord]) -> str:
        lines = [f"Found {len(records)} notes:\n"]
        for number, record in enumerate(records, start=1):
            preview = record.content
            if len(preview) > PREVIEW_LENGTH:
                preview = preview[:PREVIEW_LENGTH] + "..."
            lines.append(f"**{number}. Note {record.note_id}**")
            lines.append(f"Created: {record.created_at}")
            lines.append(f"Preview: {preview}")
            if record.summary:
                lines.append(f"Summary: {record.summary}")
            lines.append("")
        return "\n".join(lines)

    async def execute(self, arguments: Dict[str, Any]) -> List[str]:
        try:
            start, end = resolve_period(
                arguments.get("query_type"),
                today=date.today(),
                specific_date=arguments.get("specific_date"),
                start_date=arguments.get("start_date"),
                end_date=arguments.get("end_date")
            )
        except ValueError as e:
            return [f"Error: {e}"]

        threshold = arguments.get("threshold")
        try:
            threshold = DEFAULT_THRESHOLD if threshold is None else float(threshold)
        except (TypeError, ValueError):
            return ["Error: 'threshold' must be a number"]

        try:
            if start == end:
                records = await asyncio.to_thread(self.store.search_by_date, start)
            else:
                records = await asyncio.to_thread(self.store.search_by_date_range, start, end)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"[SearchNoteTool] Error: {e}")
            return [f"Failed to search notes: {e}"]

        keyword = arguments.get("keyword")
        if keyword:
            records = [r for r in records if self._matches(r, keyword, threshold)]

        if not records:
            return ["No matching notes found."]
        return [self._format(records)]


def create_tools_registry(config: Config,
                          store: NoteStore,
                          client_factory: Optional[ClientFactory] = None) -> List[Tool]:
    """Create instances of all available tools."""
    return [
        CreateNoteTool(config, store, client_factory),
        EditNoteTool(config, store, client_factory),
        SetNotePrivacyTool(config, store, client_factory),
        SearchNoteTool(config, store, client_factory)
    ]

"""
Block descriptors sent by the agent.

Blocks arrive as a flat JSON list. Each entry is validated into one of the
block models below before anything touches the network, so a malformed
entry is reported with its position and nothing is uploaded.
"""

import json
import os
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator
)

from .types import (
    BlockKind,
    BlockValidationError,
    EXTENSION_KINDS,
    MediaKind,
    SourceKind
)


def is_http_url(value: str) -> bool:
    """Check that a string is an absolute http(s) URL."""
    parsed = urlparse(value)
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


class TextSpan(BaseModel):
    """A run of text with optional bold, highlight and link annotations."""
    model_config = ConfigDict(extra="ignore")

    text: str = Field(min_length=1)
    bold: bool = False
    highlight: bool = False
    link: Optional[str] = None

    @field_validator("link", mode="before")
    @classmethod
    def _blank_link_is_absent(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("link")
    @classmethod
    def _link_must_be_http(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_http_url(value):
            raise ValueError(f"link must start with http:// or https://, got '{value}'")
        return value


class TextBlock(BaseModel):
    """Plain paragraph."""
    model_config = ConfigDict(extra="ignore")
    kind: ClassVar[BlockKind] = BlockKind.TEXT

    type: Literal["paragraph", "text"] = "paragraph"
    texts: List[TextSpan] = Field(min_length=1)


class QuoteBlock(BaseModel):
    """Paragraph rendered as a quote."""
    model_config = ConfigDict(extra="ignore")
    kind: ClassVar[BlockKind] = BlockKind.QUOTE

    type: Literal["quote"]
    texts: List[TextSpan] = Field(min_length=1)


class NoteBlock(BaseModel):
    """Inline reference to another note."""
    model_config = ConfigDict(extra="ignore")
    kind: ClassVar[BlockKind] = BlockKind.NOTE

    type: Literal["note"]
    note_id: str = Field(min_length=1)


class MediaBlock(BaseModel):
    """Image, audio or pdf attachment, from a local file or a URL."""
    model_config = ConfigDict(extra="ignore")
    kind: ClassVar[BlockKind] = BlockKind.MEDIA

    type: Literal["file", "media"]
    file_type: MediaKind
    source_type: SourceKind
    source_path: str = Field(min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def _check_source(self) -> 'MediaBlock':
        if self.source_type is SourceKind.URL:
            if not is_http_url(self.source_path):
                raise ValueError(
                    f"source_path must be an http(s) URL when source_type is 'url', "
                    f"got '{self.source_path}'"
                )
            return self

        extension = os.path.splitext(self.source_path)[1].lower()
        inferred = EXTENSION_KINDS.get(extension)
        if inferred is None:
            raise ValueError(f"unsupported file extension '{extension or self.source_path}'")
        if inferred is not self.file_type:
            raise ValueError(
                f"file_type is '{self.file_type.value}' but '{extension}' "
                f"is a {inferred.value} file"
            )
        if not os.path.isfile(self.source_path):
            raise ValueError(f"local file not found: '{self.source_path}'")
        return self


Block = Union[TextBlock, QuoteBlock, NoteBlock, MediaBlock]

_BLOCK_ADAPTER: TypeAdapter = TypeAdapter(
    Annotated[Block, Field(discriminator="type")]
)

_UNTYPED = (None, "")


def _describe(error: Dict[str, Any]) -> str:
    """Turn one pydantic error into a short readable reason."""
    message = error.get("msg", "invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    if error.get("type") == "union_tag_invalid":
        tag = (error.get("input") or {}).get("type")
        return f"unrecognized block type '{tag}'"

    # The first location entry is the union tag, not a field
    path = ""
    for part in error.get("loc", ())[1:]:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return f"{path}: {message}" if path else message


def _span_index(error: Dict[str, Any]) -> Optional[int]:
    loc = list(error.get("loc", ()))
    if "texts" in loc:
        position = loc.index("texts") + 1
        if position < len(loc) and isinstance(loc[position], int):
            return loc[position]
    return None


def parse_block(item: Any, index: int) -> Block:
    """Validate a single block, raising BlockValidationError with its position."""
    if not isinstance(item, dict):
        raise BlockValidationError("block must be a JSON object", block_index=index)

    if item.get("type") in _UNTYPED:
        item = {**item, "type": "paragraph"}

    try:
        return _BLOCK_ADAPTER.validate_python(item)
    except ValidationError as e:
        first = e.errors()[0]
        raise BlockValidationError(
            _describe(first),
            block_index=index,
            span_index=_span_index(first)
        ) from e


def parse_blocks(raw: Union[str, List[Any]]) -> List[Block]:
    """
    Parse and validate the agent's block list.

    Args:
        raw: A JSON string or an already decoded list of block objects

    Returns:
        Validated blocks, in the caller's order

    Raises:
        BlockValidationError: On malformed JSON, an empty list, or the
            first malformed block
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BlockValidationError(f"blocks are not valid JSON: {e}") from e

    if not isinstance(raw, list):
        raise BlockValidationError("blocks must be a JSON array")
    if not raw:
        raise BlockValidationError("block list is empty")

    return [parse_block(item, index) for index, item in enumerate(raw)]

# File: mowen_mcp/core/converter.py

"""
Document conversion for mowen-mcp.
Converts the agent's flat block list into the nested note body the Mowen
API expects, uploading attachments along the way.
"""

import logging
from typing import Any, Dict, List, Sequence, Union

from ..web import MowenClient
from .blocks import Block, MediaBlock, NoteBlock, QuoteBlock, TextBlock, parse_blocks
from .document import ContentNode, Document, separator
from .marks import convert_spans
from .media import MediaResolver
from .types import BlockValidationError, ConversionError, MediaKind

logger = logging.getLogger(__name__)

AUDIO_METADATA_KEYS = {"show_note": "show-note"}


def media_attrs(kind: MediaKind, file_id: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
    """
    Attribute mapping for a media node.

    Audio nodes use ``audio-uuid`` and hyphenated metadata keys, images and
    pdfs use ``uuid`` with metadata copied as-is.
    """
    if kind is MediaKind.AUDIO:
        attrs: Dict[str, Any] = {"audio-uuid": file_id}
        for key, value in metadata.items():
            attrs[AUDIO_METADATA_KEYS.get(key, key)] = value
        return attrs

    attrs = {"uuid": file_id}
    attrs.update(metadata)
    return attrs


class DocumentConverter:
    """
    Converts validated blocks into a Document.

    Blocks are processed one at a time in order. The first failing block
    aborts the conversion and nothing is returned for the blocks before it.
    """

    def __init__(self, resolver: MediaResolver):
        self.resolver = resolver

    async def convert_block(self, block: Block, index: int) -> ContentNode:
        """
        Convert one block to its content node.

        Raises:
            ConversionError: Tagged with ``index``
        """
        try:
            if isinstance(block, QuoteBlock):
                return ContentNode(type="quote", content=convert_spans(block.texts))

            if isinstance(block, NoteBlock):
                return ContentNode(type="note", attrs={"uuid": block.note_id})

            if isinstance(block, MediaBlock):
                file_id = await self.resolver.resolve(block)
                logger.debug(f"Block {index}: {block.file_type.value} resolved to {file_id}")
                return ContentNode(
                    type=block.file_type.value,
                    attrs=media_attrs(block.file_type, file_id, block.metadata)
                )

            if isinstance(block, TextBlock):
                return ContentNode(type="paragraph", content=convert_spans(block.texts))

        except ConversionError as e:
            raise e.locate(index)

        raise BlockValidationError(f"unsupported block: {type(block).__name__}", block_index=index)

    async def convert(self, blocks: Sequence[Block]) -> Document:
        """
        Assemble a document from blocks, separating them with empty paragraphs.

        Raises:
            ConversionError: For the first block that fails
        """
        if not blocks:
            raise BlockValidationError("block list is empty")

        nodes: List[ContentNode] = []
        for index, block in enumerate(blocks):
            if index > 0:
                nodes.append(separator())
            nodes.append(await self.convert_block(block, index))

        logger.info(f"Converted {len(blocks)} blocks into {len(nodes)} nodes")
        return Document(content=nodes)


async def convert_blocks(raw: Union[str, List[Any]], client: MowenClient) -> Document:
    """
    Validate the agent's blocks and convert them into a note body.

    All blocks are validated before the first upload is attempted.

    Args:
        raw: JSON string or decoded list of block objects
        client: Open MowenClient used for media uploads

    Returns:
        The converted Document

    Raises:
        ConversionError: BlockValidationError, MediaResolutionError or
            MediaResponseError, tagged with the failing block's index
    """
    blocks = parse_blocks(raw)
    converter = DocumentConverter(MediaResolver(client))
    return await converter.convert(blocks)

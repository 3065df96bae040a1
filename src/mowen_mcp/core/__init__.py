# File: mowen_mcp/core/__init__.py

"""Core components for mowen-mcp: block parsing and document conversion."""

from .types import (
    BlockKind,
    MediaKind,
    SourceKind,
    MowenError,
    ConversionError,
    BlockValidationError,
    MediaResolutionError,
    MediaResponseError
)
from .blocks import (
    Block,
    TextSpan,
    TextBlock,
    QuoteBlock,
    NoteBlock,
    MediaBlock,
    parse_blocks
)
from .document import Document, ContentNode, TextNode, MarkNode
from .marks import convert_spans
from .media import MediaResolver
from .converter import DocumentConverter, convert_blocks

__all__ = [
    # Classes
    'DocumentConverter',
    'MediaResolver',

    # Functions
    'convert_blocks',
    'convert_spans',
    'parse_blocks',

    # Types
    'BlockKind',
    'MediaKind',
    'SourceKind',
    'Block',
    'TextSpan',
    'TextBlock',
    'QuoteBlock',
    'NoteBlock',
    'MediaBlock',
    'Document',
    'ContentNode',
    'TextNode',
    'MarkNode',

    # Exceptions
    'MowenError',
    'ConversionError',
    'BlockValidationError',
    'MediaResolutionError',
    'MediaResponseError'
]

"""Type definitions and errors for the document conversion engine."""

from enum import Enum
from typing import Dict, Optional


class BlockKind(Enum):
    """Kinds of content blocks an agent can send."""
    TEXT = "paragraph"     # plain paragraph, also the untyped default
    QUOTE = "quote"        # quoted paragraph
    NOTE = "note"          # inline reference to another note
    MEDIA = "file"         # image, audio or pdf attachment

class MediaKind(Enum):
    """Attachment categories understood by the remote service."""
    IMAGE = "image"
    AUDIO = "audio"
    PDF = "pdf"

    @property
    def code(self) -> int:
        """Numeric file type used by the upload endpoints."""
        return MEDIA_FILE_CODES[self]

class SourceKind(Enum):
    """Where the bytes of an attachment come from."""
    LOCAL = "local"   # a path on this machine, uploaded by us
    URL = "url"       # a remote URL the service fetches itself

MEDIA_FILE_CODES: Dict[MediaKind, int] = {
    MediaKind.IMAGE: 1,
    MediaKind.AUDIO: 2,
    MediaKind.PDF: 3,
}

EXTENSION_KINDS: Dict[str, MediaKind] = {
    ".jpg": MediaKind.IMAGE,
    ".jpeg": MediaKind.IMAGE,
    ".png": MediaKind.IMAGE,
    ".gif": MediaKind.IMAGE,
    ".bmp": MediaKind.IMAGE,
    ".webp": MediaKind.IMAGE,
    ".mp3": MediaKind.AUDIO,
    ".wav": MediaKind.AUDIO,
    ".aac": MediaKind.AUDIO,
    ".flac": MediaKind.AUDIO,
    ".ogg": MediaKind.AUDIO,
    ".m4a": MediaKind.AUDIO,
    ".pdf": MediaKind.PDF,
}

# Exceptions
class MowenError(Exception):
    """Base exception for mowen-mcp."""
    pass

class ConversionError(MowenError):
    """
    A block could not be turned into a document node.

    Carries the position of the offending block so the caller can fix
    just that entry.
    """
    def __init__(self, reason: str, block_index: Optional[int] = None):
        self.reason = reason
        self.block_index = block_index
        super().__init__(reason)

    def locate(self, block_index: int) -> 'ConversionError':
        """Attach the block position once it is known."""
        self.block_index = block_index
        return self

    def __str__(self) -> str:
        if self.block_index is None:
            return self.reason
        return f"block {self.block_index}: {self.reason}"

class BlockValidationError(ConversionError):
    """Raised when a block is malformed. Detected before any network call."""
    def __init__(
        self,
        reason: str,
        block_index: Optional[int] = None,
        span_index: Optional[int] = None
    ):
        self.span_index = span_index
        super().__init__(reason, block_index)

    def __str__(self) -> str:
        if self.block_index is not None and self.span_index is not None:
            return f"block {self.block_index}, span {self.span_index}: {self.reason}"
        return super().__str__()

class MediaResolutionError(ConversionError):
    """Raised when a prepare or upload call fails or returns a bad status."""
    pass

class MediaResponseError(MediaResolutionError):
    """Raised when an upload succeeded but the response has no file id."""
    pass

__all__ = [
    'BlockKind',
    'MediaKind',
    'SourceKind',
    'MEDIA_FILE_CODES',
    'EXTENSION_KINDS',
    'MowenError',
    'ConversionError',
    'BlockValidationError',
    'MediaResolutionError',
    'MediaResponseError'
]

"""
Output document tree in the remote service's content format.

The tree is a ``doc`` root holding content nodes. Paragraphs and quotes
carry text nodes, every other node kind carries an attribute mapping.
``to_dict`` produces the JSON wire shape, leaving out empty fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MarkNode:
    """A style or link annotation on a run of text."""
    type: str
    attrs: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        return data


@dataclass
class TextNode:
    """A run of literal text with its marks."""
    text: str
    marks: List[MarkNode] = field(default_factory=list)
    type: str = "text"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "text": self.text}
        if self.marks:
            data["marks"] = [mark.to_dict() for mark in self.marks]
        return data


@dataclass
class ContentNode:
    """One top-level node: paragraph, quote, note, image, audio or pdf."""
    type: str
    content: List[TextNode] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_separator(self) -> bool:
        """True for the empty paragraph placed between blocks."""
        return self.type == "paragraph" and not self.content and not self.attrs

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.content:
            data["content"] = [node.to_dict() for node in self.content]
        if self.attrs:
            data["attrs"] = dict(self.attrs)
        return data


def separator() -> ContentNode:
    """Empty paragraph used as spacing between top-level blocks."""
    return ContentNode(type="paragraph")


@dataclass
class Document:
    """Root of a converted note body."""
    content: List[ContentNode] = field(default_factory=list)
    type: str = "doc"

    def append(self, node: ContentNode) -> None:
        self.content.append(node)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "content": [node.to_dict() for node in self.content]
        }

"""Conversion of annotated text spans into text nodes with marks."""

from typing import List, Sequence

from .blocks import TextSpan
from .document import MarkNode, TextNode


def span_marks(span: TextSpan) -> List[MarkNode]:
    """Marks for one span, always in bold, highlight, link order."""
    marks: List[MarkNode] = []
    if span.bold:
        marks.append(MarkNode(type="bold"))
    if span.highlight:
        marks.append(MarkNode(type="highlight"))
    if span.link:
        marks.append(MarkNode(type="link", attrs={"href": span.link}))
    return marks


def convert_spans(spans: Sequence[TextSpan]) -> List[TextNode]:
    """
    Convert spans to text nodes, one node per span in input order.

    Spans are validated when the block is parsed, so this never fails.
    """
    return [TextNode(text=span.text, marks=span_marks(span)) for span in spans]

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Iterator, Protocol

from bs4 import BeautifulSoup, FeatureNotFound, NavigableString, XMLParsedAsHTMLWarning

from .tokens import Segment

__all__ = [
    "TextNode",
    "extract_text_nodes",
    "segment_html",
    "sentence_around",
]

# Text under these tags is never shown as prose.
SKIPPED_TAGS = ("script", "style", "noscript", "textarea", "rt", "rp", "template", "title")

SENTENCE_TERMINATORS = ("。", "！", "？", "．", "!", "?", "\n")


class _Segmenter(Protocol):
    def segment(self, text: str, merge: bool | None = None) -> list[Segment]: ...


@dataclass
class TextNode:
    index: int
    text: str
    parent: str | None
    segments: list[Segment] = field(default_factory=list)


def _soup_from_html(html: str) -> BeautifulSoup:
    for parser in ("lxml", "html.parser"):
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
                return BeautifulSoup(html, parser)
        except FeatureNotFound:
            continue
    return BeautifulSoup(html, "html.parser")


def extract_text_nodes(html: str) -> Iterator[TextNode]:
    """Yield each visible, non-blank text node in document order."""
    soup = _soup_from_html(html)
    index = 0
    for node in soup.find_all(string=True):
        if type(node) is not NavigableString:
            # comments, doctypes, CDATA
            continue
        if node.find_parent(SKIPPED_TAGS) is not None:
            continue
        parent = node.parent
        text = str(node)
        if not text.strip():
            continue
        yield TextNode(index=index, text=text, parent=parent.name if parent else None)
        index += 1


def segment_html(html: str, segmenter: _Segmenter, merge: bool | None = None) -> list[TextNode]:
    """Segment every text node separately; offsets stay relative to the node."""
    nodes: list[TextNode] = []
    for node in extract_text_nodes(html):
        node.segments = segmenter.segment(node.text, merge=merge)
        nodes.append(node)
    return nodes


def _is_terminator_at(text: str, position: int) -> bool:
    return any(text.startswith(term, position) for term in SENTENCE_TERMINATORS)


def sentence_around(text: str, start: int, end: int, max_length: int = 40) -> str:
    """
    Return the sentence containing ``text[start:end]``.

    Sentences longer than ``max_length`` are cut to a window centred on the
    word, with ``...`` marking each trimmed side.
    """
    start = max(0, min(start, len(text)))
    end = max(start, min(end, len(text)))

    sentence_start = 0
    # An empty span sits just after the character it follows.
    scan_from = start - 1 if start == end else start
    for position in range(min(scan_from, len(text) - 1), -1, -1):
        if _is_terminator_at(text, position):
            sentence_start = position + 1
            break
    sentence_end = len(text)
    for position in range(start, len(text)):
        if _is_terminator_at(text, position):
            sentence_end = position + 1
            break

    raw_sentence = text[sentence_start:sentence_end]
    if len(raw_sentence.strip()) <= max_length:
        return raw_sentence.strip()

    word_length = end - start
    word_start = start - sentence_start
    chars_around = max(0, (max_length - word_length) // 2)
    window_start = max(0, word_start - chars_around)
    window_end = min(len(raw_sentence), word_start + word_length + chars_around)

    snippet = raw_sentence[window_start:window_end]
    if window_start > 0:
        snippet = "..." + snippet.lstrip()
    if window_end < len(raw_sentence):
        snippet = snippet.rstrip() + "..."
    return snippet.strip()

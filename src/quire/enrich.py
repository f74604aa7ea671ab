"""Derived metadata computed from rendered HTML: reading time, TOC and excerpt."""

from __future__ import annotations

import html
import math
import re
from typing import Any

from quire.types import Content
from quire.utils import collapse_whitespace, strip_tags

WORDS_PER_MINUTE = 200
DEFAULT_EXCERPT_LENGTH = 160

# h1 is the page title and never appears in the table of contents.
_HEADING_RE = re.compile(r"<h([2-6])\b([^>]*)>(.*?)</h\1\s*>", re.IGNORECASE | re.DOTALL)
_ID_ATTR_RE = re.compile(r"""\bid\s*=\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE)
_PARAGRAPH_RE = re.compile(r"<p\b[^>]*>(.*?)</p\s*>", re.IGNORECASE | re.DOTALL)


def reading_time(body_html: str) -> int:
    """Estimated minutes to read ``body_html``; never less than 1."""
    words = len(strip_tags(body_html, " ").split())
    return max(1, math.floor(words / WORDS_PER_MINUTE))


def table_of_contents(body_html: str) -> list[dict[str, Any]]:
    """Return ``{"level", "text", "id"}`` for every h2-h6 heading that has an id."""
    entries = []
    for match in _HEADING_RE.finditer(body_html or ""):
        id_match = _ID_ATTR_RE.search(match.group(2))
        if id_match is None:
            continue
        anchor = id_match.group(1) if id_match.group(1) is not None else id_match.group(2)
        entries.append(
            {
                "level": int(match.group(1)),
                "text": _text_of(match.group(3)),
                "id": html.unescape(anchor),
            }
        )
    return entries


def truncate(text: str, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Cut ``text`` at a word boundary, appending ``...`` when shortened."""
    if len(text) <= max_length:
        return text
    cut = text[:max_length]
    if " " in cut and not text[max_length].isspace():
        cut = cut.rsplit(" ", 1)[0]
    return cut.rstrip(" ,;:") + "..."


def excerpt(content: Content, max_length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """Excerpt text from explicit metadata, the first paragraph, or the whole body."""
    explicit = content.metadata.get("excerpt")
    if isinstance(explicit, str) and explicit.strip():
        text = collapse_whitespace(explicit)
    else:
        paragraph = _PARAGRAPH_RE.search(content.body or "")
        text = _text_of(paragraph.group(1)) if paragraph else _text_of(content.body, " ")
    return truncate(text, max_length)


def enrich(content: Content, excerpt_length: int = DEFAULT_EXCERPT_LENGTH) -> Content:
    content.metadata["reading_time"] = reading_time(content.body)
    content.metadata["toc"] = table_of_contents(content.body)
    content.metadata["excerpt"] = excerpt(content, excerpt_length)
    return content


def _text_of(fragment: str, separator: str = "") -> str:
    return collapse_whitespace(html.unescape(strip_tags(fragment or "", separator)))

"""Text helpers shared across the pipeline."""

import re
from unicodedata import normalize

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_SEPARATOR_RE = re.compile(r"[\W_]+")


def slugify(text: str, max_len: int = 80) -> str:
    """Convert text to a safe URL-friendly slug.

    Args:
        text: Input text to slugify
        max_len: Maximum length of output slug (default 80)

    Returns:
        Safe slug string suitable for directory names and URLs

    Examples:
        >>> slugify("Hello World")
        'hello-world'
        >>> slugify("Café")
        'café'
        >>> slugify("Yazılım Notları")
        'yazılım-notları'
        >>> slugify("A" * 100, max_len=20)
        'aaaaaaaaaaaaaaaaaaaa'

    """
    # NFKC folds compatibility forms but keeps non-Latin letters
    normalized = normalize("NFKC", str(text)).lower()

    slug = _SEPARATOR_RE.sub("-", normalized).strip("-")

    if not slug:
        return "untitled"

    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")

    return slug


def strip_tags(html: str, replacement: str = "") -> str:
    """Remove HTML tags from ``html``."""
    return _TAG_RE.sub(replacement, html or "")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def plain_text(html: str) -> str:
    """Strip tags and collapse whitespace into single spaces."""
    return collapse_whitespace(strip_tags(html))

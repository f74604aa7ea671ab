"""Strict YAML front matter parsing for content files."""

from __future__ import annotations

from typing import Any

import yaml
from frontmatter.default_handlers import YAMLHandler

_handler = YAMLHandler()


class FrontMatterError(ValueError):
    """Raised when a document has no usable front matter block."""


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split ``text`` into its front matter mapping and body.

    Unlike ``frontmatter.loads`` this is strict: the document must open with a
    ``---`` delimited block and that block must be a YAML mapping (an empty
    block counts as an empty mapping).

    Raises:
        FrontMatterError: If the block is missing, unterminated, unparsable or
            not a mapping.

    """
    text = text.lstrip("\ufeff")
    if not _handler.detect(text):
        msg = "missing front matter (expected a leading '---' block)"
        raise FrontMatterError(msg)

    try:
        raw, body = _handler.split(text)
    except ValueError as exc:
        msg = "unterminated front matter block"
        raise FrontMatterError(msg) from exc

    try:
        data = _handler.load(raw)
    except yaml.YAMLError as exc:
        msg = f"invalid YAML in front matter: {exc}"
        raise FrontMatterError(msg) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"front matter must be a mapping, got {type(data).__name__}"
        raise FrontMatterError(msg)

    return {str(key): value for key, value in data.items()}, body.strip()

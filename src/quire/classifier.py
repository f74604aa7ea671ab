"""Assign content type and language from a file's location."""

from __future__ import annotations

from pathlib import PurePath

from quire.config import SiteConfig
from quire.content_types import ContentTypeRegistry
from quire.types import Content

DEFAULT_CONTENT_TYPE = "pages"


def split_language(relative_path: PurePath, config: SiteConfig) -> tuple[str | None, tuple[str, ...]]:
    """Strip a leading language directory from ``relative_path``.

    Only configured, non-default language codes count as markers, and only when
    more path segments follow them.

        >>> split_language(PurePath("tr/posts/hello.md"), config)
        ('tr', ('posts', 'hello.md'))
        >>> split_language(PurePath("posts/hello.md"), config)
        (None, ('posts', 'hello.md'))
    """
    parts = relative_path.parts
    markers = set(config.language_codes) - {config.default_lang}
    if len(parts) > 1 and parts[0] in markers:
        return parts[0], parts[1:]
    return None, parts


def classify(
    content: Content,
    relative_path: PurePath,
    config: SiteConfig,
    registry: ContentTypeRegistry,
) -> Content:
    """Annotate ``content`` with its type, language and URL prefixes."""
    dir_lang, parts = split_language(relative_path, config)

    if dir_lang is not None:
        lang = dir_lang
    elif content.lang in config.languages:
        lang = content.lang
    else:
        lang = config.default_lang

    content_type = parts[0] if len(parts) > 1 else DEFAULT_CONTENT_TYPE
    definition = registry.get(content_type)

    content.lang = lang
    content.metadata["content_type"] = content_type
    content.metadata["lang_prefix"] = config.language_prefix(lang)
    content.metadata["url_prefix"] = registry.url_prefix(content_type)
    if definition is not None:
        content.metadata["default_layout"] = definition.default_layout
    return content

"""Best-effort content checks that warn but never fail a build."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from quire.content_types import ContentTypeRegistry
from quire.types import Content

logger = logging.getLogger(__name__)


def validate(contents: Sequence[Content], registry: ContentTypeRegistry) -> list[str]:
    """Return (and log) warnings about missing required fields and duplicate slugs."""
    warnings = []

    for content in contents:
        definition = registry.get(content.content_type)
        if definition is None:
            continue
        for name in definition.required_fields:
            if _is_missing(content, name):
                warnings.append(
                    f"{content.source_path}: {content.content_type} content is missing required field '{name}'"
                )

    seen: dict[tuple[str, str, str], list[Content]] = defaultdict(list)
    for content in contents:
        seen[(content.content_type, str(content.lang), content.slug)].append(content)
    for (content_type, lang, slug), duplicates in seen.items():
        if len(duplicates) > 1:
            paths = ", ".join(str(item.source_path) for item in duplicates)
            warnings.append(f"Duplicate slug '{slug}' for {content_type}/{lang}: {paths}")

    for warning in warnings:
        logger.warning(warning)
    return warnings


def _is_missing(content: Content, name: str) -> bool:
    if name in Content.model_fields:
        value = getattr(content, name)
    else:
        value = content.metadata.get(name)
    return value is None or value == "" or value == []

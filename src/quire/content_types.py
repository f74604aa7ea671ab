"""Content type definitions and the per-build registry.

A content type ties a source directory to a URL prefix, a default layout and
the front matter fields every item of that type should carry:

    >>> registry = ContentTypeRegistry.build()
    >>> registry.url_prefix("posts")
    'posts'
    >>> registry.url_prefix("pages")
    ''
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class ContentTypeDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    directory: str
    url_prefix: str
    default_layout: str = "page"
    required_fields: tuple[str, ...] = ("title",)


BUILTIN_CONTENT_TYPES: tuple[ContentTypeDefinition, ...] = (
    ContentTypeDefinition(
        name="posts", directory="posts", url_prefix="posts", default_layout="post", required_fields=("title", "date")
    ),
    ContentTypeDefinition(
        name="notes", directory="notes", url_prefix="notes", default_layout="note", required_fields=("title", "date")
    ),
    ContentTypeDefinition(name="projects", directory="projects", url_prefix="projects"),
    ContentTypeDefinition(name="talks", directory="talks", url_prefix="talks"),
    ContentTypeDefinition(name="pages", directory="pages", url_prefix=""),
)

# Used when a type declares no layout of its own.
DIRECTORY_LAYOUT_FALLBACKS: dict[str, str] = {
    "posts": "post",
    "pages": "page",
    "notes": "post",
    "projects": "page",
    "talks": "page",
}

ContentTypeOverrides = Iterable[ContentTypeDefinition] | Mapping[str, ContentTypeDefinition | Mapping[str, Any]]


class ContentTypeRegistry:
    """Lookup table of content types keyed by directory name."""

    def __init__(self, definitions: Iterable[ContentTypeDefinition]) -> None:
        self._by_directory = {definition.directory: definition for definition in definitions}

    @classmethod
    def build(cls, overrides: ContentTypeOverrides | None = None) -> ContentTypeRegistry:
        """Merge caller-supplied definitions over the built-in table.

        ``overrides`` may be a list of definitions or a mapping of directory to
        a definition (or a plain dict of its fields).
        """
        merged = {definition.directory: definition for definition in BUILTIN_CONTENT_TYPES}
        for definition in _normalize_overrides(overrides):
            merged[definition.directory] = definition
        return cls(merged.values())

    def get(self, directory: str) -> ContentTypeDefinition | None:
        return self._by_directory.get(directory)

    def url_prefix(self, directory: str) -> str:
        """URL prefix for ``directory``; unregistered directories use their own name."""
        definition = self.get(directory)
        return definition.url_prefix if definition is not None else directory

    def __contains__(self, directory: object) -> bool:
        return directory in self._by_directory

    def __iter__(self) -> Iterator[ContentTypeDefinition]:
        return iter(self._by_directory.values())


def _normalize_overrides(overrides: ContentTypeOverrides | None) -> list[ContentTypeDefinition]:
    if not overrides:
        return []
    if isinstance(overrides, Mapping):
        definitions = []
        for directory, value in overrides.items():
            if isinstance(value, ContentTypeDefinition):
                definitions.append(value)
            else:
                fields = {"name": directory, "directory": directory, "url_prefix": directory, **dict(value)}
                definitions.append(ContentTypeDefinition.model_validate(fields))
        return definitions
    return list(overrides)

"""Core data types flowing through the Quire build pipeline."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class RawContent(BaseModel):
    """A parsed-but-unrendered source file."""

    path: Path
    front_matter: dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    filename: str


class Content(BaseModel):
    """One content item.

    Later stages annotate ``metadata`` in place; the record itself is never
    replaced wholesale between classification and rendering.
    """

    title: str
    body: str = ""
    date: dt.date | None = None
    slug: str
    lang: str | None = None
    source_path: Path
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    draft: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.metadata.get("content_type", "pages")

    @property
    def translations(self) -> dict[str, str]:
        value = self.metadata.get("translations")
        return dict(value) if isinstance(value, dict) else {}


class Page(BaseModel):
    """One page of a paginated listing."""

    number: int
    size: int
    items: list[Content] = Field(default_factory=list)
    total_items: int
    total_pages: int
    url: str
    prev_url: str | None = None
    next_url: str | None = None

    @property
    def has_prev(self) -> bool:
        return self.prev_url is not None

    @property
    def has_next(self) -> bool:
        return self.next_url is not None


@dataclass(frozen=True)
class CacheEntry:
    """Last-seen modification time and the pristine Content parsed from it."""

    mtime_ns: int
    content: Content


# Absolute source path -> cache entry.
BuildCache = dict[str, CacheEntry]


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a successful build."""

    files_written: int
    content_count: int
    elapsed: float
    cache: BuildCache = field(default_factory=dict)

"""Output paths, public URLs and pagination for every generated page."""

from __future__ import annotations

import datetime as dt
import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from quire.config import SiteConfig
from quire.content_types import ContentTypeRegistry
from quire.types import Content, Page
from quire.utils import slugify

ARCHIVE_KINDS = ("tags", "categories")


def join_url(*segments: str) -> str:
    """Join URL segments, dropping empty ones: ``("", "posts", "hi")`` -> ``/posts/hi/``."""
    parts = [part.strip("/") for part in segments if part and part.strip("/")]
    return "/" + "/".join(parts) + "/" if parts else "/"


def content_url(content: Content) -> str:
    """Public URL of a classified content item.

    A slug of ``index`` collapses onto its parent directory.
    """
    slug = "" if content.slug == "index" else content.slug
    return join_url(
        content.metadata.get("lang_prefix", ""),
        content.metadata.get("url_prefix", ""),
        slug,
    )


def output_path(output_dir: Path, url: str) -> Path:
    """``/posts/hi/`` -> ``output_dir/posts/hi/index.html``."""
    return output_dir.joinpath(*[part for part in url.split("/") if part], "index.html")


def page_url(base_url: str, number: int) -> str:
    return base_url if number == 1 else join_url(base_url, "page", str(number))


def paginate(items: Sequence[Content], page_size: int, base_url: str) -> list[Page]:
    """Chunk ``items`` into pages; an empty list still yields one empty page."""
    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / page_size))
    pages = []
    for number in range(1, total_pages + 1):
        start = (number - 1) * page_size
        pages.append(
            Page(
                number=number,
                size=page_size,
                items=list(items[start : start + page_size]),
                total_items=total_items,
                total_pages=total_pages,
                url=page_url(base_url, number),
                prev_url=page_url(base_url, number - 1) if number > 1 else None,
                next_url=page_url(base_url, number + 1) if number < total_pages else None,
            )
        )
    return pages


def sort_newest_first(items: Iterable[Content]) -> list[Content]:
    """Newest first by date; undated items last, ties broken by slug."""
    by_slug = sorted(items, key=lambda c: (c.slug, str(c.source_path)))
    return sorted(by_slug, key=lambda c: c.date or dt.date.min, reverse=True)


@dataclass
class IndexRoute:
    """A paginated listing of one content type in one language."""

    content_type: str
    lang: str
    url: str
    items: list[Content] = field(default_factory=list)


@dataclass
class ArchiveRoute:
    """A listing of all content in one language sharing a tag or category."""

    kind: str
    term: str
    lang: str
    url: str
    items: list[Content] = field(default_factory=list)


def type_index_url(config: SiteConfig, registry: ContentTypeRegistry, content_type: str, lang: str) -> str:
    return join_url(config.language_prefix(lang), registry.url_prefix(content_type))


def archive_url(config: SiteConfig, kind: str, term: str, lang: str) -> str:
    return join_url(config.language_prefix(lang), kind, slugify(term))


def plan_type_indexes(
    contents: Sequence[Content],
    config: SiteConfig,
    registry: ContentTypeRegistry,
    content_types: Iterable[str],
) -> list[IndexRoute]:
    """One index per (content type, configured language).

    Types without a URL prefix get no index, and a user-supplied ``index``
    item in a (type, language) pair replaces the generated one.
    """
    groups: dict[tuple[str, str], list[Content]] = defaultdict(list)
    user_indexes = set()
    for content in contents:
        key = (content.content_type, content.lang or config.default_lang)
        if content.slug == "index":
            user_indexes.add(key)
        else:
            groups[key].append(content)

    routes = []
    for content_type in content_types:
        if not registry.url_prefix(content_type):
            continue
        for lang in config.language_codes:
            if (content_type, lang) in user_indexes:
                continue
            routes.append(
                IndexRoute(
                    content_type=content_type,
                    lang=lang,
                    url=type_index_url(config, registry, content_type, lang),
                    items=sort_newest_first(groups.get((content_type, lang), [])),
                )
            )
    return routes


def plan_archives(contents: Sequence[Content], config: SiteConfig, kind: str) -> list[ArchiveRoute]:
    """Archive routes for ``kind`` (``tags`` or ``categories``), one per term and language."""
    # Terms that slugify identically ("Python", "python") share one archive.
    groups: dict[tuple[str, str], list[Content]] = defaultdict(list)
    labels: dict[tuple[str, str], str] = {}
    for content in contents:
        lang = content.lang or config.default_lang
        terms = content.tags if kind == "tags" else content.categories
        for slug, term in {slugify(term): term for term in reversed(terms)}.items():
            key = (lang, slug)
            labels.setdefault(key, term)
            groups[key].append(content)

    order = {code: index for index, code in enumerate(config.language_codes)}
    routes = [
        ArchiveRoute(
            kind=kind,
            term=labels[key],
            lang=key[0],
            url=archive_url(config, kind, labels[key], key[0]),
            items=sort_newest_first(items),
        )
        for key, items in groups.items()
    ]
    return sorted(routes, key=lambda r: (order.get(r.lang, len(order)), r.url))

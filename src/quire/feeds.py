"""Atom and JSON feeds, the XML sitemap and robots.txt."""

from __future__ import annotations

import datetime as dt
import json
from collections.abc import Iterable

from lxml import etree
from pydantic import BaseModel, Field

from quire.config import SiteConfig
from quire.planner import content_url, sort_newest_first
from quire.seo import absolute_url
from quire.types import Content

ATOM_NS = "http://www.w3.org/2005/Atom"
ATOM_NSMAP = {None: ATOM_NS}
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
SITEMAP_NSMAP = {None: SITEMAP_NS}
JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"

# Empty feeds use a fixed timestamp so rebuilds stay byte-identical.
EPOCH = dt.date(1970, 1, 1)


def format_timestamp(value: dt.date) -> str:
    return f"{value.isoformat()}T00:00:00Z"


class FeedEntry(BaseModel):
    id: str
    title: str
    url: str
    published: dt.date
    summary: str = ""
    content_html: str = ""
    categories: list[str] = Field(default_factory=list)
    lang: str | None = None


class Feed(BaseModel):
    id: str
    title: str
    home_url: str
    feed_url: str
    updated: dt.date
    author: str | None = None
    lang: str | None = None
    entries: list[FeedEntry] = Field(default_factory=list)

    @classmethod
    def from_contents(
        cls,
        contents: Iterable[Content],
        config: SiteConfig,
        *,
        title: str,
        home_url: str,
        feed_url: str,
        lang: str | None = None,
    ) -> Feed:
        """Build a feed from dated content, newest first; undated content is skipped."""
        dated = sort_newest_first(content for content in contents if content.date is not None)
        entries = [
            FeedEntry(
                id=absolute_url(config, content_url(content)),
                title=content.title,
                url=absolute_url(config, content_url(content)),
                published=content.date,
                summary=_summary(content),
                content_html=content.body,
                categories=[*content.categories, *content.tags],
                lang=content.lang,
            )
            for content in dated
        ]
        return cls(
            id=absolute_url(config, feed_url),
            title=title,
            home_url=absolute_url(config, home_url),
            feed_url=absolute_url(config, feed_url),
            updated=entries[0].published if entries else EPOCH,
            author=config.author,
            lang=lang,
            entries=entries,
        )


def _summary(content: Content) -> str:
    description = content.metadata.get("description")
    if isinstance(description, str) and description.strip():
        return description.strip()
    return content.metadata.get("excerpt", "")


def atom_xml(feed: Feed) -> bytes:
    """Serialize ``feed`` as an Atom 1.0 document."""
    root = etree.Element(f"{{{ATOM_NS}}}feed", nsmap=ATOM_NSMAP)
    if feed.lang:
        root.set("{http://www.w3.org/XML/1998/namespace}lang", feed.lang)
    _sub(root, "id", feed.id)
    _sub(root, "title", feed.title)
    _sub(root, "updated", format_timestamp(feed.updated))
    etree.SubElement(root, f"{{{ATOM_NS}}}link", href=feed.feed_url, rel="self", type="application/atom+xml")
    etree.SubElement(root, f"{{{ATOM_NS}}}link", href=feed.home_url, rel="alternate", type="text/html")
    if feed.author:
        author = etree.SubElement(root, f"{{{ATOM_NS}}}author")
        _sub(author, "name", feed.author)

    for entry in feed.entries:
        entry_el = etree.SubElement(root, f"{{{ATOM_NS}}}entry")
        _sub(entry_el, "id", entry.id)
        _sub(entry_el, "title", entry.title)
        etree.SubElement(entry_el, f"{{{ATOM_NS}}}link", href=entry.url, rel="alternate", type="text/html")
        _sub(entry_el, "published", format_timestamp(entry.published))
        _sub(entry_el, "updated", format_timestamp(entry.published))
        for term in entry.categories:
            etree.SubElement(entry_el, f"{{{ATOM_NS}}}category", term=term)
        if entry.summary:
            _sub(entry_el, "summary", entry.summary)
        content_el = _sub(entry_el, "content", entry.content_html)
        content_el.set("type", "html")

    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)


def json_feed(feed: Feed) -> str:
    """Serialize ``feed`` as JSON Feed 1.1."""
    data: dict = {
        "version": JSON_FEED_VERSION,
        "title": feed.title,
        "home_page_url": feed.home_url,
        "feed_url": feed.feed_url.removesuffix(".xml") + ".json",
    }
    if feed.lang:
        data["language"] = feed.lang
    if feed.author:
        data["authors"] = [{"name": feed.author}]
    data["items"] = [
        {
            "id": entry.id,
            "url": entry.url,
            "title": entry.title,
            "content_html": entry.content_html,
            "summary": entry.summary,
            "date_published": format_timestamp(entry.published),
            "tags": entry.categories,
            **({"language": entry.lang} if entry.lang else {}),
        }
        for entry in feed.entries
    ]
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


class SitemapEntry(BaseModel):
    url: str
    lastmod: dt.date | None = None


def sitemap_xml(entries: Iterable[SitemapEntry], config: SiteConfig) -> bytes:
    root = etree.Element(f"{{{SITEMAP_NS}}}urlset", nsmap=SITEMAP_NSMAP)
    for entry in entries:
        url_el = etree.SubElement(root, f"{{{SITEMAP_NS}}}url")
        etree.SubElement(url_el, f"{{{SITEMAP_NS}}}loc").text = absolute_url(config, entry.url)
        if entry.lastmod is not None:
            etree.SubElement(url_el, f"{{{SITEMAP_NS}}}lastmod").text = entry.lastmod.isoformat()
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)


def robots_txt(config: SiteConfig) -> str:
    return f"User-agent: *\nAllow: /\n\nSitemap: {config.site_url}/sitemap.xml\n"


def _sub(parent: etree._Element, tag: str, text: str) -> etree._Element:
    element = etree.SubElement(parent, f"{{{ATOM_NS}}}{tag}")
    element.text = text
    return element

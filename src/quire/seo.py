"""SEO head tags: meta/Open Graph, JSON-LD, hreflang and feed discovery."""

from __future__ import annotations

import json
from typing import Any

from markupsafe import Markup, escape

from quire.config import SiteConfig
from quire.types import Content

ARTICLE_TYPES = frozenset({"posts", "notes"})


def absolute_url(config: SiteConfig, url: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return config.site_url + "/" + url.lstrip("/")


def description_for(content: Content | None, site: dict[str, Any]) -> str:
    if content is not None:
        description = content.metadata.get("description")
        if isinstance(description, str) and description.strip():
            return description.strip()
        return content.metadata.get("excerpt", "")
    return site.get("description") or ""


def _meta(attr: str, key: str, value: Any) -> str:
    return f'<meta {attr}="{escape(key)}" content="{escape(value)}">'


def meta_tags(config: SiteConfig, site: dict[str, Any], title: str, url: str, content: Content | None) -> Markup:
    description = description_for(content, site)
    page_url = absolute_url(config, url)
    is_article = content is not None and content.content_type in ARTICLE_TYPES
    tags = [
        _meta("name", "description", description),
        _meta("property", "og:title", title),
        _meta("property", "og:description", description),
        _meta("property", "og:type", "article" if is_article else "website"),
        _meta("property", "og:url", page_url),
        _meta("property", "og:site_name", site.get("title", "")),
        _meta("property", "og:locale", site.get("lang", config.default_lang)),
        _meta("name", "twitter:card", "summary"),
        _meta("name", "twitter:title", title),
        _meta("name", "twitter:description", description),
        f'<link rel="canonical" href="{escape(page_url)}">',
    ]
    if content is not None:
        image = content.metadata.get("image")
        if isinstance(image, str) and image:
            tags.append(_meta("property", "og:image", absolute_url(config, image)))
    if is_article:
        if content.date is not None:
            tags.append(_meta("property", "article:published_time", content.date.isoformat()))
        if site.get("author"):
            tags.append(_meta("property", "article:author", site["author"]))
        tags.extend(_meta("property", "article:section", category) for category in content.categories)
        tags.extend(_meta("property", "article:tag", tag) for tag in content.tags)
    return Markup("\n".join(tags))


def json_ld(config: SiteConfig, site: dict[str, Any], title: str, url: str, content: Content | None) -> Markup:
    """``<script type="application/ld+json">`` describing the page."""
    page_url = absolute_url(config, url)
    if content is None:
        data: dict[str, Any] = {
            "@context": "https://schema.org",
            "@type": "WebSite",
            "name": site.get("title", ""),
            "url": page_url,
        }
        if site.get("description"):
            data["description"] = site["description"]
    elif content.content_type in ARTICLE_TYPES:
        data = {
            "@context": "https://schema.org",
            "@type": "BlogPosting",
            "headline": title,
            "url": page_url,
            "inLanguage": content.lang,
        }
        if content.date is not None:
            data["datePublished"] = content.date.isoformat()
        description = description_for(content, site)
        if description:
            data["description"] = description
        if site.get("author"):
            data["author"] = {"@type": "Person", "name": site["author"]}
        if content.tags:
            data["keywords"] = ", ".join(content.tags)
    else:
        data = {
            "@context": "https://schema.org",
            "@type": "WebPage",
            "name": title,
            "url": page_url,
            "inLanguage": content.lang,
        }
    payload = json.dumps(data, ensure_ascii=False, sort_keys=True).replace("</", "<\\/")
    return Markup(f'<script type="application/ld+json">{payload}</script>')


def hreflang_tags(config: SiteConfig, alternates: list[dict[str, str]]) -> Markup:
    return Markup(
        "\n".join(
            f'<link rel="alternate" hreflang="{escape(alt["hreflang"])}" '
            f'href="{escape(absolute_url(config, alt["href"]))}">'
            for alt in alternates
        )
    )


def feed_links(config: SiteConfig, site: dict[str, Any], lang: str) -> Markup:
    prefix = config.language_prefix(lang)
    base = f"/{prefix}/" if prefix else "/"
    title = escape(site.get("title", ""))
    return Markup(
        f'<link rel="alternate" type="application/atom+xml" title="{title}" '
        f'href="{escape(absolute_url(config, base + "feed.xml"))}">\n'
        f'<link rel="alternate" type="application/feed+json" title="{title}" '
        f'href="{escape(absolute_url(config, base + "feed.json"))}">'
    )

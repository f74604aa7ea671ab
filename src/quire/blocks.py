"""Reusable components ("blocks") callable from templates.

Templates call ``block("name", **params)``; the block receives the page's
render context merged with ``params`` and returns HTML. An unknown name
renders as an empty string.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Mapping
from typing import Any

from markupsafe import Markup, escape

from quire.planner import archive_url, content_url, sort_newest_first

logger = logging.getLogger(__name__)

Block = Callable[[dict[str, Any]], str]


def hero(context: dict[str, Any]) -> str:
    site = context.get("site", {})
    title = context.get("title") or site.get("title", "")
    subtitle = context.get("subtitle") or site.get("description", "")
    parts = [f'<section class="hero"><h1 class="hero-title">{escape(title)}</h1>']
    if subtitle:
        parts.append(f'<p class="hero-subtitle">{escape(subtitle)}</p>')
    parts.append("</section>")
    return "".join(parts)


def toc(context: dict[str, Any]) -> str:
    content = context.get("content")
    entries = content.metadata.get("toc", []) if content is not None else []
    if not entries:
        return ""
    t = context["t"]
    items = "".join(
        f'<li class="toc-level-{entry["level"]}"><a href="#{escape(entry["id"])}">{escape(entry["text"])}</a></li>'
        for entry in entries
    )
    return f'<nav class="toc" aria-label="{escape(t("table_of_contents"))}"><ul>{items}</ul></nav>'


def reading_time(context: dict[str, Any]) -> str:
    content = context.get("content")
    minutes = content.metadata.get("reading_time") if content is not None else None
    if not minutes:
        return ""
    return f'<span class="reading-time">{escape(context["t"]("reading_time", count=minutes))}</span>'


def recent_posts(context: dict[str, Any]) -> str:
    lang = context.get("lang")
    content_type = context.get("content_type", "posts")
    limit = int(context.get("limit", 5))
    candidates = [
        item
        for item in context.get("contents", ())
        if item.lang == lang and item.content_type == content_type and item.date is not None
    ]
    recent = sort_newest_first(candidates)[:limit]
    if not recent:
        return ""
    t = context["t"]
    items = "".join(
        f'<li><a href="{escape(content_url(item))}">{escape(item.title)}</a> '
        f'<time datetime="{item.date.isoformat()}">{escape(t.format_date(item.date))}</time></li>'
        for item in recent
    )
    return f'<section class="recent-posts"><h2>{escape(t("recent_posts"))}</h2><ul>{items}</ul></section>'


def tag_cloud(context: dict[str, Any]) -> str:
    lang = context.get("lang")
    config = context["config"]
    counts = Counter(tag for item in context.get("contents", ()) if item.lang == lang for tag in item.tags)
    if not counts:
        return ""
    items = "".join(
        f'<li><a href="{escape(archive_url(config, "tags", tag, lang))}">{escape(tag)}</a> '
        f'<span class="count">{count}</span></li>'
        for tag, count in sorted(counts.items(), key=lambda pair: (-pair[1], pair[0].lower()))
    )
    return f'<section class="tag-cloud"><h2>{escape(context["t"]("tags"))}</h2><ul>{items}</ul></section>'


def language_switcher(context: dict[str, Any]) -> str:
    alternates = [alt for alt in context.get("alternates", ()) if alt["hreflang"] != "x-default"]
    if len(alternates) < 2:
        return ""
    config = context["config"]
    current = context.get("lang")
    items = []
    for alternate in alternates:
        code = alternate["hreflang"]
        language = config.languages.get(code)
        name = (language.name if language else "") or code
        if code == current:
            items.append(f'<li aria-current="true"><span lang="{escape(code)}">{escape(name)}</span></li>')
        else:
            items.append(
                f'<li><a href="{escape(alternate["href"])}" hreflang="{escape(code)}" '
                f'lang="{escape(code)}">{escape(name)}</a></li>'
            )
    label = escape(context["t"]("languages"))
    return f'<nav class="language-switcher" aria-label="{label}"><ul>{"".join(items)}</ul></nav>'


BUILTIN_BLOCKS: dict[str, Block] = {
    "hero": hero,
    "toc": toc,
    "reading_time": reading_time,
    "recent_posts": recent_posts,
    "tag_cloud": tag_cloud,
    "language_switcher": language_switcher,
}


class BlockRegistry:
    """Name -> block lookup built once per build."""

    def __init__(self, blocks: Mapping[str, Block]) -> None:
        self._blocks = dict(blocks)

    @classmethod
    def build(cls, overrides: Mapping[str, Block] | None = None) -> BlockRegistry:
        return cls({**BUILTIN_BLOCKS, **(overrides or {})})

    def get(self, name: str) -> Block | None:
        return self._blocks.get(name)

    def names(self) -> list[str]:
        return sorted(self._blocks)

    def render(self, name: str, context: Mapping[str, Any], params: Mapping[str, Any]) -> Markup:
        block = self.get(name)
        if block is None:
            logger.debug("Unknown block %r rendered as empty", name)
            return Markup("")
        return Markup(block({**context, **params}))

"""Links between content items: translations, hreflang alternates and prev/next."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from quire.config import SiteConfig
from quire.planner import content_url, sort_newest_first
from quire.types import Content

logger = logging.getLogger(__name__)

X_DEFAULT = "x-default"

ContentKey = tuple[str, str, str]


def auto_link_translations(contents: Sequence[Content]) -> None:
    """Fill in ``translations`` for same-slug content across languages.

    Items sharing a (content type, slug) in more than one language each get a
    ``{lang: slug}`` map of their siblings. Items that already declare a
    non-empty ``translations`` map keep it.
    """
    groups: dict[tuple[str, str], list[Content]] = defaultdict(list)
    for content in contents:
        groups[(content.content_type, content.slug)].append(content)

    for members in groups.values():
        if len({member.lang for member in members}) < 2:
            continue
        for member in members:
            if member.translations:
                continue
            member.metadata["translations"] = {
                str(other.lang): other.slug for other in members if other.lang != member.lang
            }


def build_index(contents: Iterable[Content]) -> dict[ContentKey, Content]:
    """Index content by (content type, language, slug)."""
    return {(content.content_type, str(content.lang), content.slug): content for content in contents}


def resolve_hreflang(contents: Sequence[Content]) -> None:
    """Store ``hreflang_alternates`` on every item that has translations.

    Each alternate is ``{"hreflang": code, "href": url}``. The item itself comes
    first, then each translation that resolves, then ``x-default`` pointing at
    the item when there is more than one entry. Unresolvable translations are
    dropped.
    """
    index = build_index(contents)
    for content in contents:
        translations = content.translations
        if not translations:
            continue

        own_url = content_url(content)
        alternates = [{"hreflang": str(content.lang), "href": own_url}]
        for lang, slug in translations.items():
            if lang == content.lang:
                continue
            target = index.get((content.content_type, lang, slug))
            if target is None:
                logger.debug("Translation %s/%s of %s not found", lang, slug, content.source_path)
                continue
            alternates.append({"hreflang": lang, "href": content_url(target)})

        if len(alternates) > 1:
            alternates.append({"hreflang": X_DEFAULT, "href": own_url})
        content.metadata["hreflang_alternates"] = alternates


def listing_alternates(
    langs_with_content: Iterable[str],
    url_for: Callable[[str], str],
    config: SiteConfig,
) -> list[dict[str, str]]:
    """Alternates for a listing page available in ``langs_with_content``.

    ``x-default`` points at the default language's version and is only added
    when more than one language has content.
    """
    present = set(langs_with_content)
    langs = [code for code in config.language_codes if code in present]
    alternates = [{"hreflang": lang, "href": url_for(lang)} for lang in langs]
    if len(alternates) > 1:
        default = config.default_lang if config.default_lang in present else langs[0]
        alternates.append({"hreflang": X_DEFAULT, "href": url_for(default)})
    return alternates


def link_neighbours(contents: Sequence[Content]) -> None:
    """Set ``prev_content``/``next_content`` within each (type, language) group.

    Only dated content takes part. "Previous" is the older neighbour.
    """
    groups: dict[tuple[str, str], list[Content]] = defaultdict(list)
    for content in contents:
        if content.date is not None:
            groups[(content.content_type, str(content.lang))].append(content)

    for members in groups.values():
        ordered = sort_newest_first(members)
        for position, content in enumerate(ordered):
            newer = ordered[position - 1] if position > 0 else None
            older = ordered[position + 1] if position + 1 < len(ordered) else None
            content.metadata["prev_content"] = _link(older)
            content.metadata["next_content"] = _link(newer)


def _link(content: Content | None) -> dict[str, str] | None:
    if content is None:
        return None
    return {"title": content.title, "url": content_url(content)}

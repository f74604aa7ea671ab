import datetime as dt
from pathlib import Path

from quire.config import SiteConfig
from quire.crosslink import auto_link_translations, link_neighbours, listing_alternates, resolve_hreflang
from quire.types import Content


def make(slug, lang, content_type="posts", translations=None, date=None):
    metadata = {
        "content_type": content_type,
        "url_prefix": content_type if content_type != "pages" else "",
        "lang_prefix": "" if lang == "en" else lang,
    }
    if translations is not None:
        metadata["translations"] = translations
    return Content(
        title=slug.title(), slug=slug, lang=lang, date=date, source_path=Path(f"{slug}.md"), metadata=metadata
    )


def test_same_slug_content_is_linked_both_ways():
    en = make("hello", "en")
    tr = make("hello", "tr")

    auto_link_translations([en, tr])

    assert en.metadata["translations"] == {"tr": "hello"}
    assert tr.metadata["translations"] == {"en": "hello"}


def test_explicit_translations_win_over_auto_linking():
    en = make("hello", "en", translations={"tr": "merhaba"})
    tr = make("hello", "tr")

    auto_link_translations([en, tr])

    assert en.metadata["translations"] == {"tr": "merhaba"}
    assert tr.metadata["translations"] == {"en": "hello"}


def test_empty_explicit_translations_are_filled_in():
    en = make("hello", "en", translations={})
    tr = make("hello", "tr")

    auto_link_translations([en, tr])

    assert en.metadata["translations"] == {"tr": "hello"}


def test_no_linking_across_content_types_or_within_one_language():
    post = make("hello", "en")
    page = make("hello", "tr", content_type="pages")
    other = make("hello", "en", content_type="notes")

    auto_link_translations([post, page, other])

    assert "translations" not in post.metadata
    assert "translations" not in page.metadata
    assert "translations" not in other.metadata


def test_hreflang_lists_self_translations_and_x_default():
    en = make("hello", "en", translations={"tr": "merhaba"})
    tr = make("merhaba", "tr", translations={"en": "hello"})

    resolve_hreflang([en, tr])

    assert en.metadata["hreflang_alternates"] == [
        {"hreflang": "en", "href": "/posts/hello/"},
        {"hreflang": "tr", "href": "/tr/posts/merhaba/"},
        {"hreflang": "x-default", "href": "/posts/hello/"},
    ]
    assert tr.metadata["hreflang_alternates"][0] == {"hreflang": "tr", "href": "/tr/posts/merhaba/"}
    assert tr.metadata["hreflang_alternates"][-1] == {"hreflang": "x-default", "href": "/tr/posts/merhaba/"}


def test_unresolvable_translations_are_dropped_without_x_default():
    en = make("hello", "en", translations={"tr": "missing"})

    resolve_hreflang([en])

    assert en.metadata["hreflang_alternates"] == [{"hreflang": "en", "href": "/posts/hello/"}]


def test_content_without_translations_gets_no_alternates():
    en = make("hello", "en")
    resolve_hreflang([en])
    assert "hreflang_alternates" not in en.metadata


def test_listing_alternates_point_x_default_at_default_language():
    config = SiteConfig.model_validate({"languages": {"en": {}, "tr": {}, "de": {}}})

    alternates = listing_alternates(["tr", "en"], lambda lang: f"/{lang}/tags/x/", config)

    assert alternates == [
        {"hreflang": "en", "href": "/en/tags/x/"},
        {"hreflang": "tr", "href": "/tr/tags/x/"},
        {"hreflang": "x-default", "href": "/en/tags/x/"},
    ]
    assert listing_alternates(["tr"], lambda lang: f"/{lang}/", config) == [{"hreflang": "tr", "href": "/tr/"}]


def test_prev_next_follow_date_order_per_language():
    old = make("old", "en", date=dt.date(2024, 1, 1))
    mid = make("mid", "en", date=dt.date(2024, 2, 1))
    new = make("new", "en", date=dt.date(2024, 3, 1))
    other = make("other", "tr", date=dt.date(2024, 2, 15))

    link_neighbours([new, old, other, mid])

    assert mid.metadata["prev_content"] == {"title": "Old", "url": "/posts/old/"}
    assert mid.metadata["next_content"] == {"title": "New", "url": "/posts/new/"}
    assert old.metadata["prev_content"] is None
    assert new.metadata["next_content"] is None
    assert other.metadata["prev_content"] is None
    assert other.metadata["next_content"] is None

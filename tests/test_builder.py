"""End-to-end builds over small content trees."""

import datetime as dt
import hashlib

import pytest
from defusedxml import ElementTree

from quire import build, clean
from quire.config import SiteConfig
from quire.exceptions import HookError, ParseError, RenderError, SourceNotFoundError
from quire.hooks import HookStage

SITEMAP = "{http://www.sitemaps.org/schemas/sitemap/0.9}"


def sitemap_locs(site):
    root = ElementTree.fromstring((site.output / "sitemap.xml").read_bytes())
    return [url.find(f"{SITEMAP}loc").text for url in root.findall(f"{SITEMAP}url")]


def snapshot(directory):
    return {
        path.relative_to(directory).as_posix(): hashlib.sha256(path.read_bytes()).hexdigest()
        for path in sorted(directory.rglob("*"))
        if path.is_file()
    }


def test_post_and_page_scenario(site):
    site.write("posts/2024-01-15-hello.md", {"title": "Hello", "date": dt.date(2024, 1, 15)}, "Hi there.")
    site.write("pages/about.md", {"title": "About"}, "About me.")

    result = build(site_root=site.root)

    assert "Hello" in site.read("posts/hello/index.html")
    assert "About" in site.read("about/index.html")
    assert "Hello" in site.read("posts/index.html")
    assert "Hello" in site.read("feed.xml")
    locs = sitemap_locs(site)
    assert any(loc.endswith("/posts/hello/") for loc in locs)
    assert any(loc.endswith("/about/") for loc in locs)
    assert result.content_count == 2
    # 2 pages + posts index + root feed (xml, json) + posts feed (xml, json) + sitemap
    assert result.files_written == 8
    assert (site.output / "robots.txt").is_file()
    assert (site.output / "assets" / "css" / "site.css").is_file()


def test_empty_site_writes_feed_and_sitemap(site):
    result = build(site_root=site.root)

    assert result.content_count == 0
    assert result.files_written == 3
    assert (site.output / "feed.xml").is_file()
    assert (site.output / "feed.json").is_file()
    assert (site.output / "sitemap.xml").is_file()


def test_missing_content_directory(tmp_path):
    with pytest.raises(SourceNotFoundError):
        build(site_root=tmp_path)


def test_translations_are_linked_with_hreflang(bilingual):
    bilingual.write("posts/hello.md", {"title": "Hello", "date": dt.date(2024, 1, 1)})
    bilingual.write("tr/posts/hello.md", {"title": "Merhaba", "date": dt.date(2024, 1, 1)})

    build(site_root=bilingual.root)

    for page in ("posts/hello/index.html", "tr/posts/hello/index.html"):
        html = bilingual.read(page)
        assert 'hreflang="en" href="https://example.com/posts/hello/"' in html
        assert 'hreflang="tr" href="https://example.com/tr/posts/hello/"' in html
        assert html.count('hreflang="x-default"') == 1
    assert 'lang="tr"' in bilingual.read("tr/posts/hello/index.html")
    assert "Test Sitesi" in bilingual.read("tr/posts/hello/index.html")


def test_language_prefix_only_for_non_default_language(bilingual):
    bilingual.write("posts/a.md", {"title": "A", "date": dt.date(2024, 1, 1)})
    bilingual.write("tr/posts/b.md", {"title": "B", "date": dt.date(2024, 1, 1)})
    bilingual.write("tr/hakkinda.md", {"title": "Hakkında"})

    build(site_root=bilingual.root)

    assert (bilingual.output / "posts/a/index.html").is_file()
    assert not (bilingual.output / "en").exists()
    assert (bilingual.output / "tr/posts/b/index.html").is_file()
    assert (bilingual.output / "tr/hakkinda/index.html").is_file()
    assert (bilingual.output / "tr/posts/index.html").is_file()
    assert (bilingual.output / "tr/feed.xml").is_file()


def test_drafts_are_skipped_unless_enabled(site):
    site.write("posts/live.md", {"title": "Live", "date": dt.date(2024, 1, 1)})
    site.write("posts/wip.md", {"title": "WIP", "date": dt.date(2024, 1, 2), "draft": True})

    result = build(site_root=site.root)
    assert result.content_count == 1
    assert not (site.output / "posts/wip/index.html").exists()
    assert "WIP" not in site.read("feed.xml")

    result = build(site_root=site.root, drafts=True)
    assert result.content_count == 2
    assert (site.output / "posts/wip/index.html").is_file()


def test_index_is_generated_even_when_all_posts_are_drafts(site):
    site.write("posts/wip.md", {"title": "WIP", "draft": True})

    build(site_root=site.root)

    assert (site.output / "posts/index.html").is_file()


def test_pagination_pages(site):
    for day in range(1, 6):
        site.write(f"posts/p{day}.md", {"title": f"Post {day}", "date": dt.date(2024, 1, day)})

    build(site_root=site.root, posts_per_page=2)

    first = site.read("posts/index.html")
    assert "Post 5" in first and "Post 4" in first and "Post 3" not in first
    assert "Post 1" in site.read("posts/page/3/index.html")
    assert not (site.output / "posts/page/1").exists()
    assert not (site.output / "posts/page/4").exists()


def test_user_index_replaces_generated_index(site):
    site.write("posts/a.md", {"title": "A", "date": dt.date(2024, 1, 1)})
    site.write("posts/index.md", {"title": "My Blog"}, "Hand made.")

    build(site_root=site.root)

    html = site.read("posts/index.html")
    assert "My Blog" in html
    assert "Hand made." in html


def test_root_index_page(site):
    site.write("pages/index.md", {"title": "Welcome", "layout": "home"}, "Hello world.")
    site.write("posts/a.md", {"title": "First post", "date": dt.date(2024, 1, 1)})

    build(site_root=site.root, base_url="https://example.com")

    html = site.read("index.html")
    assert "Hello world." in html
    assert "First post" in html
    assert "https://example.com/" in sitemap_locs(site)


def test_tag_and_category_archives_per_language(bilingual):
    bilingual.write(
        "posts/a.md", {"title": "A", "date": dt.date(2024, 1, 1), "tags": ["python"], "categories": ["dev"]}
    )
    bilingual.write("tr/posts/b.md", {"title": "B", "date": dt.date(2024, 1, 2), "tags": ["python"]})

    build(site_root=bilingual.root)

    assert "Tagged: python" in bilingual.read("tags/python/index.html")
    tr_archive = bilingual.read("tr/tags/python/index.html")
    assert "Etiket: python" in tr_archive
    assert 'hreflang="x-default" href="https://example.com/tags/python/"' in tr_archive
    assert "Category: dev" in bilingual.read("categories/dev/index.html")
    locs = sitemap_locs(bilingual)
    assert "https://example.com/tags/python/" in locs
    assert "https://example.com/tr/tags/python/" in locs


def test_per_type_feeds(site):
    site.write("posts/a.md", {"title": "A", "date": dt.date(2024, 1, 1)})
    site.write("notes/n.md", {"title": "N", "date": dt.date(2024, 1, 2)})
    site.write("pages/about.md", {"title": "About"})

    build(site_root=site.root)

    assert "A" in site.read("feed/posts.xml")
    assert "N" in site.read("feed/notes.xml")
    assert not (site.output / "feed" / "pages.xml").exists()


def test_build_is_deterministic(bilingual):
    bilingual.write("posts/hello.md", {"title": "Hello", "date": dt.date(2024, 1, 1), "tags": ["a"]})
    bilingual.write("tr/posts/hello.md", {"title": "Merhaba", "date": dt.date(2024, 1, 1)})
    bilingual.write("about.md", {"title": "About"})

    build(site_root=bilingual.root)
    first = snapshot(bilingual.output)
    clean(site_root=bilingual.root)
    build(site_root=bilingual.root)

    assert snapshot(bilingual.output) == first


def test_cached_rebuild_keeps_metadata(bilingual):
    bilingual.write("posts/hello.md", {"title": "Hello", "date": dt.date(2024, 1, 1)}, "## Part\n\ntext")
    bilingual.write("tr/posts/hello.md", {"title": "Merhaba", "date": dt.date(2024, 1, 1)})

    first = build(site_root=bilingual.root)
    html_before = bilingual.read("posts/hello/index.html")
    second = build(site_root=bilingual.root, cache=first.cache)

    assert set(second.cache) == set(first.cache)
    assert bilingual.read("posts/hello/index.html") == html_before
    assert 'href="#part"' in html_before


def test_auto_links_do_not_become_explicit_on_cached_rebuild(bilingual):
    bilingual.write("posts/hello.md", {"title": "Hello", "date": dt.date(2024, 1, 1)})
    tr = bilingual.write("tr/posts/hello.md", {"title": "Merhaba", "date": dt.date(2024, 1, 1)})
    first = build(site_root=bilingual.root)

    tr.unlink()
    build(site_root=bilingual.root, cache=first.cache)

    assert 'hreflang="tr"' not in bilingual.read("posts/hello/index.html")


def test_parse_error_stops_the_build(site):
    site.write("posts/good.md", {"title": "Good"})
    site.write_raw("posts/bad.md", "no front matter here")

    with pytest.raises(ParseError) as excinfo:
        build(site_root=site.root)

    assert excinfo.value.path.name == "bad.md"
    assert not (site.output / "sitemap.xml").exists()


class MarkRendered:
    stage = HookStage.AFTER_RENDER

    def run(self, value):
        content, html = value
        return content, html.replace("</body>", f"<!-- {content.slug} --></body>")


class RenameBeforeRender:
    stage = HookStage.BEFORE_RENDER

    def run(self, content):
        content.title = f"[{content.title}]"
        return content


class Explode:
    stage = HookStage.BEFORE_RENDER

    def run(self, content):
        raise ValueError("nope")


def test_render_hooks(site):
    site.write("pages/about.md", {"title": "About"})

    build(site_root=site.root, hooks=[RenameBeforeRender(), MarkRendered()])

    html = site.read("about/index.html")
    assert "[About]" in html
    assert "<!-- about -->" in html


def test_hook_failure_stops_the_build(site):
    site.write("pages/about.md", {"title": "About"})

    with pytest.raises(HookError):
        build(site_root=site.root, hooks=[Explode()])

    assert not (site.output / "about").exists()


def test_render_error_keeps_earlier_files(site):
    layouts = site.root / "themes" / "broken" / "layouts"
    layouts.mkdir(parents=True)
    (layouts / "list.html.jinja2").write_text("{% for x in %}")
    site.write("posts/a.md", {"title": "A", "date": dt.date(2024, 1, 1)})

    with pytest.raises(RenderError):
        build(site_root=site.root, theme="broken")

    assert (site.output / "posts/a/index.html").is_file()
    assert not (site.output / "posts/index.html").exists()


def test_custom_blocks_and_static_files(site):
    (site.root / "static").mkdir()
    (site.root / "static" / "favicon.ico").write_bytes(b"icon")
    layouts = site.root / "themes" / "mine" / "layouts"
    layouts.mkdir(parents=True)
    (layouts / "page.html.jinja2").write_text('{{ block("greeting", name="Ada") }}')
    site.write("pages/about.md", {"title": "About"})

    build(site_root=site.root, theme="mine", blocks={"greeting": lambda ctx: f"<b>Hi {ctx['name']}</b>"})

    assert "<b>Hi Ada</b>" in site.read("about/index.html")
    assert (site.output / "favicon.ico").read_bytes() == b"icon"


def test_clean(site):
    site.write("pages/about.md", {"title": "About"})
    build(site_root=site.root)

    clean(site_root=site.root)
    assert not site.output.exists()

    clean(site_root=site.root)


def test_relative_config_paths_follow_the_site_root(site, tmp_path_factory, monkeypatch):
    elsewhere = tmp_path_factory.mktemp("elsewhere")
    (elsewhere / "output").mkdir()
    (elsewhere / "output" / "keep.txt").write_text("not part of the site")
    monkeypatch.chdir(elsewhere)
    site.write("pages/about.md", {"title": "About"})
    config = SiteConfig.model_validate({"content_dir": "content", "output_dir": "output"})

    build(config, site_root=site.root)
    assert (site.output / "about" / "index.html").is_file()
    assert not (elsewhere / "output" / "about").exists()

    clean(config, site_root=site.root)
    assert not site.output.exists()
    assert (elsewhere / "output" / "keep.txt").is_file()


def test_non_latin_tags_get_their_own_archives(site):
    site.write("posts/a.md", {"title": "A", "date": dt.date(2024, 1, 1), "tags": ["日本", "yazılım"]})
    site.write("posts/b.md", {"title": "B", "date": dt.date(2024, 1, 2), "tags": ["中国"]})

    build(site_root=site.root)

    assert "Tagged: 日本" in site.read("tags/日本/index.html")
    assert "Tagged: 中国" in site.read("tags/中国/index.html")
    assert "Tagged: yazılım" in site.read("tags/yazılım/index.html")
    assert not (site.output / "tags" / "untitled").exists()

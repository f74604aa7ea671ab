"""The build pipeline.

Stages run strictly in order and the first failure propagates to the caller
unchanged; files already written stay on disk:

1. Discover and parse content (reusing the mtime cache)
2. Classify type and language, drop drafts
3. Enrich (reading time, TOC, excerpt)
4. Cross-link translations, hreflang alternates and prev/next
5. Run ``before_render`` hooks, render and write every content page
6. Tag archives, category archives, paginated type indexes
7. Feeds and sitemap

robots.txt, theme assets, static files and external tools follow as
best-effort steps that only log on failure.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections import defaultdict
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from quire.blocks import Block, BlockRegistry
from quire.classifier import classify
from quire.config import SiteConfig, resolve_config
from quire.content_types import ContentTypeOverrides, ContentTypeRegistry
from quire.crosslink import auto_link_translations, link_neighbours, listing_alternates, resolve_hreflang
from quire.enrich import enrich
from quire.exceptions import ConfigError, HookError
from quire.feeds import Feed, SitemapEntry, atom_xml, json_feed, robots_txt, sitemap_xml
from quire.hooks import Hook, HookStage, run_hooks
from quire.i18n import Translator, site_settings
from quire.loader import discover, load_contents
from quire.planner import (
    ARCHIVE_KINDS,
    ArchiveRoute,
    IndexRoute,
    content_url,
    join_url,
    output_path,
    page_url,
    paginate,
    plan_archives,
    plan_type_indexes,
)
from quire.renderer import RenderContext, Renderer
from quire.theme import copy_static, copy_theme_assets, theme_chain
from quire.tools import run_external_tools
from quire.types import BuildCache, BuildResult, Content
from quire.validator import validate

logger = logging.getLogger(__name__)

_ARCHIVE_TITLE_KEYS = {"tags": ("tagged_with", "tag"), "categories": ("category_label", "category")}


class SiteBuilder:
    """Runs one build for a resolved configuration."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        site_root: Path,
        hooks: Sequence[Hook] = (),
        registry: ContentTypeRegistry | None = None,
        blocks: BlockRegistry | None = None,
    ) -> None:
        self.config = config
        self.site_root = site_root
        self.hooks = list(hooks)
        self.registry = registry or ContentTypeRegistry.build()
        self.chain = theme_chain(config)
        self.renderer = Renderer(config, self.chain, blocks or BlockRegistry.build())
        self.files_written = 0
        self._sitemap: list[SitemapEntry] = []
        self._feed_langs: set[str] = set()
        self._translators: dict[str, Translator] = {}

    def run(self, cache: BuildCache | None = None) -> tuple[list[Content], BuildCache]:
        config = self.config
        files = discover(config.content_dir)
        logger.debug("Discovered %d content file(s) in %s", len(files), config.content_dir)

        contents, updated_cache = load_contents(files, cache, self.hooks)
        for path, content in zip(files, contents, strict=True):
            classify(content, path.relative_to(config.content_dir), config, self.registry)
        content_types = list(dict.fromkeys(content.content_type for content in contents))

        if not config.drafts:
            contents = [content for content in contents if not content.draft]

        for content in contents:
            enrich(content, config.excerpt_length)
        auto_link_translations(contents)
        resolve_hreflang(contents)
        link_neighbours(contents)
        validate(contents, self.registry)

        contents = [run_hooks(self.hooks, HookStage.BEFORE_RENDER, content) for content in contents]
        self._feed_langs = {
            content.lang for content in contents if content.date is not None and content.lang != config.default_lang
        }

        self.write_contents(contents)
        for kind in ARCHIVE_KINDS:
            self.write_archives(plan_archives(contents, config, kind), contents)
        self.write_indexes(plan_type_indexes(contents, config, self.registry, content_types), contents)
        self.write_feeds(contents)
        self.write_sitemap(contents)

        self.finish()
        return contents, updated_cache

    def translator(self, lang: str) -> Translator:
        if lang not in self._translators:
            self._translators[lang] = Translator(self.config, lang)
        return self._translators[lang]

    def context(self, lang: str, url: str, title: str, contents: Sequence[Content], **kwargs: Any) -> RenderContext:
        return RenderContext(
            config=self.config,
            site=site_settings(self.config, lang),
            lang=lang,
            t=self.translator(lang),
            url=url,
            page_title=title,
            contents=contents,
            feed_lang=lang if lang in self._feed_langs else self.config.default_lang,
            **kwargs,
        )

    def write(self, path: Path, data: str | bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")
        self.files_written += 1

    def write_contents(self, contents: Sequence[Content]) -> None:
        for content in contents:
            url = content_url(content)
            context = self.context(
                str(content.lang),
                url,
                content.title,
                contents,
                content=content,
                alternates=list(content.metadata.get("hreflang_alternates", [])),
            )
            html = self.renderer.render_content(content, context)
            result = run_hooks(self.hooks, HookStage.AFTER_RENDER, (content, html))
            try:
                _, html = result
            except (TypeError, ValueError) as exc:
                msg = "expected a (content, html) pair"
                raise HookError("after_render", HookStage.AFTER_RENDER.value, msg) from exc
            self.write(output_path(self.config.output_dir, url), html)
        logger.info("Rendered %d content page(s)", len(contents))

    def write_archives(self, routes: Sequence[ArchiveRoute], contents: Sequence[Content]) -> None:
        present: dict[tuple[str, str], list[str]] = defaultdict(list)
        for route in routes:
            present[(route.kind, route.url.rstrip("/").rsplit("/", 1)[-1])].append(route.lang)

        for route in routes:
            t = self.translator(route.lang)
            key, binding = _ARCHIVE_TITLE_KEYS[route.kind]
            archive_slug = route.url.rstrip("/").rsplit("/", 1)[-1]
            alternates = listing_alternates(
                present[(route.kind, archive_slug)],
                lambda lang, kind=route.kind, slug=archive_slug: join_url(
                    self.config.language_prefix(lang), kind, slug
                ),
                self.config,
            )
            page = paginate(route.items, max(1, len(route.items)), route.url)[0]
            context = self.context(
                route.lang, route.url, t(key, **{binding: route.term}), contents, page=page, alternates=alternates
            )
            self.write(output_path(self.config.output_dir, route.url), self.renderer.render_listing(context))
            self._sitemap.append(SitemapEntry(url=route.url))
        logger.debug("Wrote %d archive page(s)", len(routes))

    def write_indexes(self, routes: Sequence[IndexRoute], contents: Sequence[Content]) -> None:
        page_size = self.config.posts_per_page
        pages_by_route = {
            (route.content_type, route.lang): paginate(route.items, page_size, route.url) for route in routes
        }
        bases = {(route.content_type, route.lang): route.url for route in routes}

        for route in routes:
            t = self.translator(route.lang)
            title = t(f"type_{route.content_type}", default=route.content_type.replace("_", " ").title())
            for page in pages_by_route[(route.content_type, route.lang)]:
                langs = [
                    lang
                    for (content_type, lang), pages in pages_by_route.items()
                    if content_type == route.content_type and pages[0].total_items and len(pages) >= page.number
                ]
                alternates = listing_alternates(
                    langs,
                    lambda lang, content_type=route.content_type, number=page.number: page_url(
                        bases[(content_type, lang)], number
                    ),
                    self.config,
                )
                context = self.context(route.lang, page.url, title, contents, page=page, alternates=alternates)
                self.write(output_path(self.config.output_dir, page.url), self.renderer.render_listing(context))
                self._sitemap.append(SitemapEntry(url=page.url))
        logger.debug("Wrote %d index route(s)", len(routes))

    def write_feeds(self, contents: Sequence[Content]) -> None:
        config = self.config
        out = config.output_dir

        root_feed = Feed.from_contents(contents, config, title=config.title, home_url="/", feed_url="/feed.xml")
        self._write_feed(root_feed, out)

        for lang in config.language_codes:
            if lang not in self._feed_langs:
                continue
            home = join_url(config.language_prefix(lang))
            feed = Feed.from_contents(
                [content for content in contents if content.lang == lang],
                config,
                title=site_settings(config, lang)["title"],
                home_url=home,
                feed_url=f"{home}feed.xml",
                lang=lang,
            )
            self._write_feed(feed, out / lang)

        dated_types = list(dict.fromkeys(content.content_type for content in contents if content.date is not None))
        t = self.translator(config.default_lang)
        for content_type in dated_types:
            label = t(f"type_{content_type}", default=content_type.title())
            feed = Feed.from_contents(
                [content for content in contents if content.content_type == content_type],
                config,
                title=f"{config.title} - {label}",
                home_url=join_url(self.registry.url_prefix(content_type)),
                feed_url=f"/feed/{content_type}.xml",
            )
            self._write_feed(feed, out / "feed", stem=content_type)

    def _write_feed(self, feed: Feed, directory: Path, stem: str = "feed") -> None:
        self.write(directory / f"{stem}.xml", atom_xml(feed))
        self.write(directory / f"{stem}.json", json_feed(feed))

    def write_sitemap(self, contents: Sequence[Content]) -> None:
        entries = sorted(
            (SitemapEntry(url=content_url(content), lastmod=content.date) for content in contents),
            key=lambda entry: entry.url,
        )
        self.write(self.config.output_dir / "sitemap.xml", sitemap_xml([*entries, *self._sitemap], self.config))

    def finish(self) -> None:
        """Best-effort steps: failures here are logged, never raised."""
        config = self.config
        try:
            (config.output_dir / "robots.txt").write_text(robots_txt(config), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write robots.txt: %s", exc)
        try:
            copy_theme_assets(self.chain, config.output_dir)
        except (OSError, shutil.Error) as exc:
            logger.warning("Could not copy theme assets: %s", exc)
        try:
            copy_static(config.static_dir, config.output_dir)
        except (OSError, shutil.Error) as exc:
            logger.warning("Could not copy static files: %s", exc)
        run_external_tools(config, self.site_root)


def build(
    config: SiteConfig | None = None,
    *,
    cache: BuildCache | None = None,
    hooks: Sequence[Hook] = (),
    blocks: Mapping[str, Block] | None = None,
    content_types: ContentTypeOverrides | None = None,
    site_root: Path | str | None = None,
    **overrides: Any,
) -> BuildResult:
    """Build the site.

    Args:
        config: A resolved configuration. When omitted it is loaded from
            ``quire.yml`` and ``QUIRE_*`` environment variables in ``site_root``.
        cache: The ``cache`` of a previous :class:`BuildResult`. Files whose
            modification time is unchanged are not re-read.
        hooks: Extension hooks, run in order per stage.
        blocks: Extra or replacement template blocks by name.
        content_types: Extra or replacement content type definitions.
        site_root: Directory relative paths resolve against (default: cwd).
        **overrides: Configuration values that take precedence over everything.

    Returns:
        Counts, elapsed seconds and the cache to pass to the next build.

    Raises:
        QuireError: The first failure of any stage.

    """
    started = time.perf_counter()
    root = Path(site_root) if site_root is not None else Path.cwd()
    config = resolve_config(config, root, **overrides)

    builder = SiteBuilder(
        config,
        site_root=root,
        hooks=hooks,
        registry=ContentTypeRegistry.build(content_types),
        blocks=BlockRegistry.build(blocks),
    )
    contents, updated_cache = builder.run(cache)

    elapsed = time.perf_counter() - started
    logger.info("Built %d file(s) from %d content item(s) in %.2fs", builder.files_written, len(contents), elapsed)
    return BuildResult(
        files_written=builder.files_written,
        content_count=len(contents),
        elapsed=elapsed,
        cache=updated_cache,
    )


def clean(config: SiteConfig | None = None, *, site_root: Path | str | None = None, **overrides: Any) -> None:
    """Remove the output directory. A missing directory is not an error."""
    root = Path(site_root) if site_root is not None else Path.cwd()
    config = resolve_config(config, root, **overrides)
    output_dir = config.output_dir.resolve()

    if output_dir == root.resolve() or output_dir in config.content_dir.resolve().parents:
        msg = f"Refusing to delete {output_dir}: it contains the site or its content"
        raise ConfigError(msg)
    if output_dir.exists():
        shutil.rmtree(output_dir)
        logger.info("Removed %s", output_dir)

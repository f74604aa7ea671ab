"""Two-pass HTML composition: layout template, then the base shell."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape
from markupsafe import Markup

from quire import seo
from quire.blocks import BlockRegistry
from quire.config import SiteConfig
from quire.content_types import DIRECTORY_LAYOUT_FALLBACKS
from quire.exceptions import QuireError, RenderError
from quire.i18n import Translator
from quire.planner import archive_url, content_url
from quire.theme import LAYOUT_SUFFIX, find_layout, layout_dirs
from quire.types import Content, Page
from quire.utils import slugify

logger = logging.getLogger(__name__)

BASE_LAYOUT = "base"
FALLBACK_LAYOUT = "page"
LIST_LAYOUT = "list"


@dataclass
class RenderContext:
    """Everything a template can see for one page."""

    config: SiteConfig
    site: dict[str, Any]
    lang: str
    t: Translator
    url: str
    page_title: str
    content: Content | None = None
    page: Page | None = None
    alternates: list[dict[str, str]] = field(default_factory=list)
    contents: Sequence[Content] = ()
    feed_lang: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        values = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        return {**values, **self.extra}


class Renderer:
    """Renders content and listing pages with the layouts of a theme chain."""

    def __init__(self, config: SiteConfig, chain: list[Path], blocks: BlockRegistry) -> None:
        self.config = config
        self.chain = chain
        self.blocks = blocks
        self.env = Environment(
            loader=FileSystemLoader([str(path) for path in layout_dirs(chain)]),
            autoescape=select_autoescape(enabled_extensions=("html", "jinja2"), default_for_string=True),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["absolute_url"] = lambda url: seo.absolute_url(config, url)
        self.env.filters["slugify"] = slugify
        self.env.globals["content_url"] = content_url
        self.env.globals["archive_url"] = lambda kind, term, lang: archive_url(config, kind, term, lang)

    def select_layout(self, content: Content) -> str:
        """Explicit ``layout`` > type default > directory fallback > ``page``.

        Falls back to ``page`` when the chosen layout is not in the theme chain.
        """
        explicit = content.metadata.get("layout")
        if isinstance(explicit, str) and explicit:
            layout = explicit
        else:
            layout = (
                content.metadata.get("default_layout")
                or DIRECTORY_LAYOUT_FALLBACKS.get(content.content_type)
                or FALLBACK_LAYOUT
            )
        if find_layout(layout, self.chain) is None:
            logger.debug("Layout %r not found, using %r", layout, FALLBACK_LAYOUT)
            return FALLBACK_LAYOUT
        return layout

    def render_content(self, content: Content, context: RenderContext) -> str:
        return self._compose(self.select_layout(content), Markup(content.body), context)

    def render_listing(self, context: RenderContext, layout: str = LIST_LAYOUT) -> str:
        return self._compose(layout, Markup(""), context)

    def _compose(self, layout: str, inner: Markup, context: RenderContext) -> str:
        variables = context.as_dict()
        variables["block"] = self._block_function(variables)
        variables["seo"] = self._seo(context)

        wrapped = self._render_template(layout, {**variables, "inner_content": inner})
        return self._render_template(BASE_LAYOUT, {**variables, "inner_content": Markup(wrapped)})

    def _render_template(self, layout: str, variables: dict[str, Any]) -> str:
        name = f"{layout}{LAYOUT_SUFFIX}"
        try:
            template = self.env.get_template(name)
            return template.render(variables)
        except TemplateError as exc:
            raise RenderError(self._template_path(name), exc.message or type(exc).__name__) from exc
        except QuireError:
            raise
        except Exception as exc:
            raise RenderError(self._template_path(name), f"{type(exc).__name__}: {exc}") from exc

    def _template_path(self, name: str) -> str:
        path = find_layout(name.removesuffix(LAYOUT_SUFFIX), self.chain)
        return str(path) if path is not None else name

    def _block_function(self, variables: dict[str, Any]):
        def block(block_name: str, /, **params: Any) -> Markup:
            return self.blocks.render(block_name, variables, params)

        return block

    def _seo(self, context: RenderContext) -> dict[str, Markup]:
        config = self.config
        return {
            "meta": seo.meta_tags(config, context.site, context.page_title, context.url, context.content),
            "json_ld": seo.json_ld(config, context.site, context.page_title, context.url, context.content),
            "hreflang": seo.hreflang_tags(config, context.alternates),
            "feeds": seo.feed_links(config, context.site, context.feed_lang or config.default_lang),
        }

"""Markdown to HTML rendering."""

from markdown_it import MarkdownIt
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin


def create_markdown() -> MarkdownIt:
    """Build the markdown-it parser used for content bodies.

    Every heading gets an ``id`` so the table of contents can link to it.
    """
    md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
    md.use(anchors_plugin, min_level=1, max_level=6)
    md.use(tasklists_plugin)
    md.use(footnote_plugin)
    return md


_md = create_markdown()


def render_markdown(text: str | None) -> str:
    """Render markdown text to HTML, returning ``""`` for empty input."""
    if not text:
        return ""
    return _md.render(text).strip()

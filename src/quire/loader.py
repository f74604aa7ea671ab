"""Content discovery, parsing and the modification-time cache."""

from __future__ import annotations

import datetime as dt
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from quire.exceptions import ParseError, SourceNotFoundError
from quire.frontmatter import FrontMatterError, split_front_matter
from quire.hooks import Hook, HookStage, run_hooks
from quire.markdown import render_markdown
from quire.types import BuildCache, CacheEntry, Content, RawContent

logger = logging.getLogger(__name__)

CONTENT_SUFFIXES = (".md", ".markdown")
KNOWN_KEYS = frozenset({"title", "date", "slug", "lang", "categories", "tags", "draft"})

_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")
_TRUTHY = {"true", "yes", "on", "1"}


def discover(content_dir: Path) -> list[Path]:
    """Return every content file under ``content_dir`` in a stable order.

    Hidden files and anything inside a hidden directory are skipped.
    """
    if not content_dir.is_dir():
        raise SourceNotFoundError(content_dir)

    files = []
    for path in content_dir.rglob("*"):
        if path.suffix.lower() not in CONTENT_SUFFIXES or not path.is_file():
            continue
        relative = path.relative_to(content_dir)
        if any(part.startswith(".") for part in relative.parts):
            continue
        files.append(path)
    return sorted(files, key=lambda p: p.relative_to(content_dir).as_posix())


def slug_from_filename(filename: str) -> str:
    """``2024-01-15-hello.md`` -> ``hello``."""
    stem = Path(filename).stem
    return _DATE_PREFIX_RE.sub("", stem) or stem


def _read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def parse_raw(path: Path, text: str) -> RawContent:
    try:
        front_matter, body = split_front_matter(text)
    except FrontMatterError as exc:
        raise ParseError(path, str(exc)) from exc
    return RawContent(path=path, front_matter=front_matter, body=body, filename=path.name)


def content_from_raw(raw: RawContent) -> Content:
    """Render the body and map front matter onto a Content record.

    Unknown front matter keys are kept in ``metadata``.
    """
    fm = raw.front_matter
    title = fm.get("title")
    if title is None or (isinstance(title, str) and not title.strip()):
        raise ParseError(raw.path, "missing required field: title")

    slug = fm.get("slug")
    metadata = {key: value for key, value in fm.items() if key not in KNOWN_KEYS}
    if "translations" in metadata:
        metadata["translations"] = _coerce_translations(raw.path, metadata["translations"])

    return Content(
        title=str(title).strip(),
        body=render_markdown(raw.body),
        date=parse_date(fm.get("date")),
        slug=str(slug).strip() if slug else slug_from_filename(raw.filename),
        lang=str(fm["lang"]) if fm.get("lang") else None,
        source_path=raw.path,
        categories=_string_list(fm.get("categories")),
        tags=_string_list(fm.get("tags")),
        draft=_coerce_bool(fm.get("draft", False)),
        metadata=metadata,
    )


def parse_file(path: Path, hooks: Sequence[Hook] = ()) -> Content:
    """Read, parse and render one content file.

    Raises:
        ParseError: If the file cannot be read or its front matter is invalid.
        HookError: If a ``before_parse``/``after_parse`` hook fails.

    """
    try:
        text = _read_source(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(path, f"cannot read file: {exc}") from exc

    raw = run_hooks(hooks, HookStage.BEFORE_PARSE, parse_raw(path, text))
    content = content_from_raw(raw)
    return run_hooks(hooks, HookStage.AFTER_PARSE, content)


def load_contents(
    files: Sequence[Path],
    cache: BuildCache | None = None,
    hooks: Sequence[Hook] = (),
) -> tuple[list[Content], BuildCache]:
    """Parse ``files``, reusing cached records whose mtime is unchanged.

    Returns fresh copies of every Content (safe to annotate) together with the
    cache to hand to the next build. Entries for files that no longer exist
    are dropped.
    """
    previous = cache or {}
    updated: BuildCache = {}
    contents = []
    hits = 0

    for path in files:
        key = str(path.resolve())
        try:
            mtime_ns = path.stat().st_mtime_ns
        except OSError as exc:
            raise ParseError(path, f"cannot stat file: {exc}") from exc

        entry = previous.get(key)
        if entry is not None and entry.mtime_ns == mtime_ns:
            hits += 1
        else:
            entry = CacheEntry(mtime_ns=mtime_ns, content=parse_file(path, hooks))

        updated[key] = entry
        contents.append(entry.content.model_copy(deep=True))

    logger.debug("Loaded %d content file(s), %d from cache", len(contents), hits)
    return contents, updated


def parse_date(value: Any) -> dt.date | None:
    """Coerce a front matter date; anything unparsable becomes ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip()
    try:
        return dt.datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return dt.date.fromisoformat(text[:10])
    except ValueError:
        logger.debug("Ignoring unparsable date %r", value)
        return None


def _string_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return [str(value)]


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def _coerce_translations(path: Path, value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(path, "translations must be a mapping of language code to slug")
    return {str(lang): str(slug) for lang, slug in value.items() if slug is not None}

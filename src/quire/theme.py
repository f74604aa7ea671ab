"""Theme resolution and asset copying.

Themes live under ``themes_dir/<name>/`` with ``layouts/`` and optional
``assets/``. Lookups walk the chain active theme -> parent -> built-in
``default`` and the first match wins.
"""

from __future__ import annotations

import logging
import shutil
from importlib.resources import files
from pathlib import Path

from quire.config import SiteConfig

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"
LAYOUT_SUFFIX = ".html.jinja2"


def builtin_theme_dir() -> Path:
    return Path(str(files("quire").joinpath("themes"))) / DEFAULT_THEME


def theme_chain(config: SiteConfig) -> list[Path]:
    """Ordered, de-duplicated theme roots that exist on disk.

    The packaged default theme always closes the chain, after any user
    directory named ``default``.
    """
    roots: list[Path] = []
    for name in dict.fromkeys([config.theme, config.theme_parent, DEFAULT_THEME]):
        candidate = config.themes_dir / name
        if candidate.is_dir():
            roots.append(candidate)
        elif name != DEFAULT_THEME:
            logger.warning("Theme %r not found in %s", name, config.themes_dir)
    roots.append(builtin_theme_dir())
    return list(dict.fromkeys(roots))


def layout_dirs(chain: list[Path]) -> list[Path]:
    return [root / "layouts" for root in chain if (root / "layouts").is_dir()]


def find_layout(name: str, chain: list[Path]) -> Path | None:
    """First ``<name>.html.jinja2`` found along the chain."""
    for directory in layout_dirs(chain):
        candidate = directory / f"{name}{LAYOUT_SUFFIX}"
        if candidate.is_file():
            return candidate
    return None


def copy_theme_assets(chain: list[Path], output_dir: Path) -> int:
    """Copy ``assets/`` of every theme into ``output_dir/assets``.

    Themes are copied from the end of the chain so the active theme's files
    win. A ``name.min.js`` is published as ``name.js`` in place of its
    unminified sibling.
    """
    destination = output_dir / "assets"
    copied = 0
    for root in reversed(chain):
        source = root / "assets"
        if not source.is_dir():
            continue
        for path in sorted(source.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(source)
            if path.name.endswith(".min.js"):
                relative = relative.with_name(path.name[: -len(".min.js")] + ".js")
            elif path.suffix == ".js" and path.with_name(f"{path.stem}.min.js").is_file():
                continue
            target = destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            copied += 1
    logger.debug("Copied %d theme asset(s)", copied)
    return copied


def copy_static(static_dir: Path, output_dir: Path) -> int:
    """Copy ``static_dir`` verbatim into the output root."""
    if not static_dir.is_dir():
        return 0
    copied = 0
    for path in sorted(static_dir.rglob("*")):
        if path.is_file():
            target = output_dir / path.relative_to(static_dir)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            copied += 1
    logger.debug("Copied %d static file(s)", copied)
    return copied

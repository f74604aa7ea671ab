"""Optional external post-processing tools (Tailwind CSS, Pagefind).

Both are best-effort: a missing binary or a failing run is logged and the
build carries on.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from quire.config import SiteConfig

logger = logging.getLogger(__name__)

TOOL_TIMEOUT_SECONDS = 120


def _run(command: list[str], cwd: Path) -> bool:
    executable = shutil.which(command[0])
    if executable is None:
        logger.warning("%s not found on PATH, skipping", command[0])
        return False
    try:
        subprocess.run(
            [executable, *command[1:]],
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
            timeout=TOOL_TIMEOUT_SECONDS,
        )
    except subprocess.CalledProcessError as exc:
        logger.warning("%s exited with %s: %s", command[0], exc.returncode, (exc.stderr or "").strip())
        return False
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("%s failed: %s", command[0], exc)
        return False
    logger.info("Ran %s", command[0])
    return True


def run_tailwind(config: SiteConfig, site_root: Path) -> bool:
    """Compile ``assets/css/site.css`` in place with the Tailwind CLI."""
    stylesheet = config.output_dir / "assets" / "css" / "site.css"
    if not stylesheet.is_file():
        logger.warning("No stylesheet at %s, skipping Tailwind", stylesheet)
        return False
    return _run(["tailwindcss", "-i", str(stylesheet), "-o", str(stylesheet), "--minify"], site_root)


def run_pagefind(config: SiteConfig, site_root: Path) -> bool:
    """Build a Pagefind search index over the output directory."""
    return _run(["pagefind", "--site", str(config.output_dir)], site_root)


def run_external_tools(config: SiteConfig, site_root: Path) -> None:
    if config.tailwind:
        run_tailwind(config, site_root)
    if config.pagefind:
        run_pagefind(config, site_root)

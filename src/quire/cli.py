"""Command line interface: ``quire build`` and ``quire clean``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from quire.builder import build as run_build
from quire.builder import clean as run_clean
from quire.exceptions import ConfigError, QuireError
from quire.logging_setup import configure_logging

app = typer.Typer(
    name="quire",
    help="Build multilingual static sites from markdown content",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)

SiteRootOption = Annotated[
    Path,
    typer.Option("--site-root", "-C", help="Directory containing quire.yml", file_okay=False),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """Configure logging for every command."""
    configure_logging("DEBUG" if verbose else None)


def _report(exc: QuireError) -> None:
    console.print(f"[red]Error:[/red] {exc}", markup=True, highlight=False)
    if isinstance(exc, ConfigError):
        for error in exc.errors:
            location = ".".join(str(part) for part in error.get("loc", ()))
            console.print(f"  {location}: {error.get('msg', '')}", markup=False, highlight=False)


@app.command()
def build(
    site_root: SiteRootOption = Path(),
    content_dir: Annotated[Path | None, typer.Option("--content", help="Content directory")] = None,
    output_dir: Annotated[Path | None, typer.Option("--output", "-o", help="Output directory")] = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include draft content")] = False,
    base_url: Annotated[str | None, typer.Option("--base-url", help="Public base URL")] = None,
) -> None:
    """Build the site into the output directory."""
    overrides: dict[str, Any] = {}
    if content_dir is not None:
        overrides["content_dir"] = content_dir
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    if drafts:
        overrides["drafts"] = True
    if base_url is not None:
        overrides["base_url"] = base_url

    try:
        result = run_build(site_root=site_root, **overrides)
    except QuireError as exc:
        _report(exc)
        raise typer.Exit(1) from exc

    console.print(
        f"[green]Built {result.files_written} file(s) from {result.content_count} "
        f"content item(s) in {result.elapsed:.2f}s[/green]"
    )


@app.command()
def clean(
    site_root: SiteRootOption = Path(),
    output_dir: Annotated[Path | None, typer.Option("--output", "-o", help="Output directory")] = None,
) -> None:
    """Remove the output directory."""
    overrides: dict[str, Any] = {}
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    try:
        run_clean(site_root=site_root, **overrides)
    except QuireError as exc:
        _report(exc)
        raise typer.Exit(1) from exc
    console.print("[green]Output directory removed[/green]")

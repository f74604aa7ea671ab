"""Quire: a multilingual static site generator."""

from quire.builder import build, clean
from quire.config import ConfigLoader, SiteConfig
from quire.exceptions import ConfigError, HookError, ParseError, QuireError, RenderError, SourceNotFoundError
from quire.types import BuildResult, Content

__version__ = "0.1.0"
__all__ = [
    "BuildResult",
    "ConfigError",
    "ConfigLoader",
    "Content",
    "HookError",
    "ParseError",
    "QuireError",
    "RenderError",
    "SiteConfig",
    "SourceNotFoundError",
    "build",
    "clean",
]

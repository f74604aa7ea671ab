"""Exceptions raised by the Quire build pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class QuireError(Exception):
    """Base exception for all Quire errors."""


class ConfigError(QuireError):
    """Raised when site configuration cannot be loaded or validated."""

    def __init__(self, message: str, errors: Sequence[dict[str, Any]] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)


class SourceNotFoundError(QuireError):
    """Raised when the content directory does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Content directory not found: {path}")


class ParseError(QuireError):
    """Raised when a content file cannot be read or its front matter is invalid."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RenderError(QuireError):
    """Raised when a template fails to evaluate."""

    def __init__(self, template_path: Path | str, reason: str) -> None:
        self.template_path = str(template_path)
        self.reason = reason
        super().__init__(f"Template {template_path} failed: {reason}")


class HookError(QuireError):
    """Raised when an extension hook fails."""

    def __init__(self, hook_name: str, stage: str, reason: str) -> None:
        self.hook_name = hook_name
        self.stage = stage
        self.reason = reason
        super().__init__(f"Hook {hook_name} failed during {stage}: {reason}")

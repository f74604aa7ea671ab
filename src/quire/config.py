"""Site configuration for Quire builds.

Configuration is resolved once per build from four layers (lowest to highest
priority):

1. Built-in defaults
2. ``quire.yml`` in the site root
3. Environment variables (``QUIRE_KEY`` or ``QUIRE_SECTION__KEY``)
4. Runtime overrides passed to :func:`quire.build`
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quire.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("quire.yml", "quire.yaml")
ENV_PREFIX = "QUIRE_"

# Keys replaced wholesale instead of deep-merged across layers.
_ATOMIC_PATHS = {("languages",)}

_PATH_FIELDS = ("content_dir", "output_dir", "static_dir", "themes_dir")


class LanguageSettings(BaseModel):
    """Per-language settings.

    Anything besides ``name`` and ``translations`` is treated as a site-level
    override for pages in that language (e.g. ``title`` or ``date_format``).
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str = ""
    translations: dict[str, Any] = Field(default_factory=dict)

    @property
    def overrides(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class SiteConfig(BaseSettings):
    """Resolved, read-only settings for one build."""

    title: str = Field(default="My Site", description="Site title")
    description: str = Field(default="", description="Site description used in meta tags")
    author: str | None = Field(default=None, description="Default author for feeds and JSON-LD")
    base_url: str = Field(default="http://localhost:4000", description="Public base URL")

    content_dir: Path = Field(default=Path("content"), description="Source content directory")
    output_dir: Path = Field(default=Path("output"), description="Build output directory")
    static_dir: Path = Field(default=Path("static"), description="Static files copied verbatim")
    themes_dir: Path = Field(default=Path("themes"), description="Directory holding custom themes")
    theme: str = Field(default="default", description="Active theme name")
    theme_parent: str = Field(default="default", description="Parent of the active theme")

    default_lang: str = Field(default="en", description="Language served without a URL prefix")
    languages: dict[str, LanguageSettings] = Field(
        default_factory=lambda: {"en": LanguageSettings(name="English")},
        description="Configured languages in display order",
    )

    drafts: bool = Field(default=False, description="Include draft content")
    posts_per_page: int = Field(default=10, ge=1, description="Items per paginated index page")
    excerpt_length: int = Field(default=160, ge=1, description="Maximum excerpt length")

    tailwind: bool = Field(default=False, description="Run the Tailwind CSS CLI after building")
    pagefind: bool = Field(default=False, description="Run Pagefind after building")

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        frozen=True,
    )

    @field_validator("default_lang", mode="before")
    @classmethod
    def _coerce_lang(cls, value: Any) -> str:
        return str(value)

    @model_validator(mode="before")
    @classmethod
    def _ensure_default_language(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        default = str(data.get("default_lang", "en"))
        languages = data.get("languages") or {"en": {"name": "English"}}
        if isinstance(languages, Mapping):
            languages = {str(code): settings or {} for code, settings in languages.items()}
            if default not in languages:
                languages = {default: {"name": default}, **languages}
        data["languages"] = languages
        return data

    @property
    def language_codes(self) -> list[str]:
        return list(self.languages)

    @property
    def site_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.base_url.rstrip("/")

    def language_prefix(self, lang: str) -> str:
        """URL prefix for ``lang``: empty for the default language."""
        return "" if lang == self.default_lang else lang


class ConfigLoader:
    """Loads and validates site configuration.

    Handles YAML file loading and works with SiteConfig (BaseSettings) so that
    environment variable overrides apply automatically.
    """

    def __init__(self, site_root: Path | None = None) -> None:
        self.site_root = site_root if site_root is not None else Path.cwd()

    def load(self, **overrides: Any) -> SiteConfig:
        """Load configuration, applying ``overrides`` last."""
        file_config = self._load_from_file()
        try:
            merged = self._merge_config(
                base=SiteConfig().model_dump(),
                override=file_config,
                env_override_paths=self._collect_env_override_paths(),
            )
            merged = self._merge_config(merged, overrides, env_override_paths=set())
            config = SiteConfig.model_validate(merged)
        except ValidationError as exc:
            msg = f"Invalid site configuration ({exc.error_count()} error(s))"
            raise ConfigError(msg, exc.errors()) from exc

        return self._resolve_paths(config)

    def _resolve_paths(self, config: SiteConfig) -> SiteConfig:
        """Make relative directories absolute against the site root."""
        updates = {}
        for name in _PATH_FIELDS:
            path = Path(getattr(config, name)).expanduser()
            updates[name] = path if path.is_absolute() else (self.site_root / path)
        return config.model_copy(update=updates)

    def _collect_env_override_paths(self) -> set[tuple[str, ...]]:
        """Return the set of config paths defined via environment variables."""
        env_paths: set[tuple[str, ...]] = set()

        for key in os.environ:
            if not key.startswith(ENV_PREFIX):
                continue
            parts = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
            if parts:
                env_paths.add(tuple(parts))

        return env_paths

    def _merge_config(
        self,
        base: dict[str, Any],
        override: Mapping[str, Any],
        env_override_paths: set[tuple[str, ...]],
        current_path: tuple[str, ...] = (),
    ) -> dict[str, Any]:
        """Merge override into base, skipping keys provided via env vars."""
        merged = deepcopy(base)

        for key, value in override.items():
            path = (*current_path, str(key).lower())
            if path in env_override_paths:
                continue

            if (
                path not in _ATOMIC_PATHS
                and isinstance(value, Mapping)
                and isinstance(merged.get(key), Mapping)
            ):
                merged[key] = self._merge_config(merged[key], value, env_override_paths, path)
            else:
                merged[key] = value

        return merged

    def _load_from_file(self) -> dict[str, Any]:
        """Load configuration from ``quire.yml`` in the site root."""
        for filename in CONFIG_FILENAMES:
            config_path = self.site_root / filename
            if config_path.is_file():
                break
        else:
            return {}

        logger.debug("Loading site configuration from %s", config_path)
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {config_path}: {e}"
            raise ConfigError(msg) from e

        if not isinstance(data, dict):
            msg = f"Configuration root must be a mapping (dictionary), got {type(data).__name__}"
            raise ConfigError(msg)
        return data


def resolve_config(
    config: SiteConfig | None = None,
    site_root: Path | None = None,
    **overrides: Any,
) -> SiteConfig:
    """Return the configuration for one build.

    Without ``config`` this loads defaults, ``quire.yml`` and the environment.
    With ``config``, only ``overrides`` are layered on top of it. Relative
    directories are resolved against ``site_root`` either way.
    """
    loader = ConfigLoader(site_root)
    if config is None:
        return loader.load(**overrides)
    if not overrides:
        return loader._resolve_paths(config)
    try:
        updated = SiteConfig.model_validate(loader._merge_config(config.model_dump(), overrides, set()))
    except ValidationError as exc:
        msg = f"Invalid site configuration ({exc.error_count()} error(s))"
        raise ConfigError(msg, exc.errors()) from exc
    return loader._resolve_paths(updated)

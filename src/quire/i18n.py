"""UI string translation, text direction and localized dates.

Translations resolve through this chain, first hit wins:

1. ``translations`` of the requested language in the site configuration
2. ``translations`` of the default language in the site configuration
3. The packaged YAML file for the requested language
4. The packaged YAML file for the default language
5. The key itself
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from functools import lru_cache
from importlib import resources
from typing import Any

import yaml

from quire.config import SiteConfig

logger = logging.getLogger(__name__)

RTL_LANGUAGES = frozenset({"ar", "he", "fa", "ur"})

_PLACEHOLDER_RE = re.compile(r"%\{(\w+)\}")
_SITE_KEYS = ("title", "description", "author", "base_url")


@lru_cache(maxsize=None)
def load_translations(lang: str) -> dict[str, Any]:
    """Load the packaged translation file for ``lang`` (empty if none ships)."""
    resource = resources.files("quire") / "translations" / f"{lang}.yml"
    if not resource.is_file():
        return {}
    data = yaml.safe_load(resource.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        logger.warning("Ignoring translation file for %s: root is not a mapping", lang)
        return {}
    return data


def interpolate(text: str, bindings: dict[str, Any]) -> str:
    """Replace ``%{name}`` placeholders; unknown names are left as-is."""
    return _PLACEHOLDER_RE.sub(
        lambda match: str(bindings[match.group(1)]) if match.group(1) in bindings else match.group(0),
        text,
    )


def text_direction(lang: str) -> str:
    return "rtl" if lang in RTL_LANGUAGES else "ltr"


class Translator:
    """Translation lookups bound to one language of one site."""

    def __init__(self, config: SiteConfig, lang: str) -> None:
        self.config = config
        self.lang = lang

    def _sources(self) -> list[dict[str, Any]]:
        default = self.config.default_lang
        own = self.config.languages.get(self.lang)
        fallback = self.config.languages.get(default)
        return [
            own.translations if own else {},
            fallback.translations if fallback else {},
            load_translations(self.lang),
            load_translations(default),
        ]

    def lookup(self, key: str) -> Any:
        for source in self._sources():
            value = source.get(key)
            if value is not None:
                return value
        return None

    def t(self, key: str, default: str | None = None, **bindings: Any) -> str:
        """Translate ``key``, choosing a plural form when ``count`` is bound."""
        value = self.lookup(key)
        if value is None:
            value = key if default is None else default
        if isinstance(value, dict):
            count = bindings.get("count")
            value = value.get("one") if count == 1 and "one" in value else value.get("other", "")
        return interpolate(str(value), bindings)

    __call__ = t

    @property
    def direction(self) -> str:
        return text_direction(self.lang)

    def format_date(self, value: dt.date | None) -> str:
        """Format ``value`` with the language's ``date_format`` and month names."""
        if value is None:
            return ""
        months = self.lookup("months")
        month_name = months[value.month - 1] if isinstance(months, list) and len(months) == 12 else value.strftime("%B")
        language = self.config.languages.get(self.lang)
        pattern = (language.overrides.get("date_format") if language else None) or self.t(
            "date_format", default="%{month} %{day}, %{year}"
        )
        return interpolate(str(pattern), {"day": value.day, "month": month_name, "year": value.year})


def site_settings(config: SiteConfig, lang: str) -> dict[str, Any]:
    """Site-level values for pages in ``lang``, with per-language overrides applied."""
    settings: dict[str, Any] = {key: getattr(config, key) for key in _SITE_KEYS}
    language = config.languages.get(lang)
    if language is not None:
        settings.update(language.overrides)
    settings["lang"] = lang
    settings["language_name"] = (language.name if language else "") or lang
    settings["direction"] = text_direction(lang)
    return settings

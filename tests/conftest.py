from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from quire.config import ConfigLoader, SiteConfig


@dataclass
class SiteTree:
    """A throwaway site layout under ``tmp_path``."""

    root: Path

    @property
    def content(self) -> Path:
        return self.root / "content"

    @property
    def output(self) -> Path:
        return self.root / "output"

    def write(self, relative: str, front_matter: dict[str, Any] | None = None, body: str = "") -> Path:
        """Write a content file with YAML front matter."""
        path = self.content / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        header = yaml.safe_dump(front_matter or {}, allow_unicode=True, sort_keys=False)
        path.write_text(f"---\n{header}---\n{body}\n", encoding="utf-8")
        return path

    def write_raw(self, relative: str, text: str) -> Path:
        path = self.content / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def read(self, relative: str) -> str:
        return (self.output / relative).read_text(encoding="utf-8")

    def config(self, **overrides: Any) -> SiteConfig:
        return ConfigLoader(self.root).load(**overrides)


@pytest.fixture(autouse=True)
def _clean_quire_env(monkeypatch):
    """Keep QUIRE_* variables from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("QUIRE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def site(tmp_path) -> SiteTree:
    tree = SiteTree(tmp_path)
    tree.content.mkdir()
    return tree


@pytest.fixture
def bilingual(site) -> SiteTree:
    """A site configured for English (default) and Turkish."""
    (site.root / "quire.yml").write_text(
        yaml.safe_dump(
            {
                "title": "Test Site",
                "base_url": "https://example.com",
                "default_lang": "en",
                "languages": {"en": {"name": "English"}, "tr": {"name": "Türkçe", "title": "Test Sitesi"}},
            },
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    return site

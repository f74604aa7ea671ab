import datetime as dt

import pytest

from quire.config import SiteConfig
from quire.i18n import Translator, interpolate, load_translations, site_settings, text_direction


@pytest.fixture
def config():
    return SiteConfig.model_validate(
        {
            "title": "Site",
            "languages": {
                "en": {"name": "English", "translations": {"home": "Start"}},
                "tr": {"name": "Türkçe", "title": "Site TR", "translations": {"read_more": "Devamı..."}},
                "ar": {"name": "العربية"},
            },
        }
    )


def test_packaged_translations_ship_for_english_and_turkish():
    assert load_translations("en")["tags"] == "Tags"
    assert load_translations("tr")["tagged_with"] == "Etiket: %{tag}"
    assert load_translations("xx") == {}


def test_lookup_chain(config):
    tr = Translator(config, "tr")

    assert tr("read_more") == "Devamı..."
    assert tr("home") == "Start"
    assert tr("tags") == load_translations("tr")["tags"]
    assert Translator(config, "ar")("tags") == "Tags"
    assert tr("unknown_key") == "unknown_key"
    assert tr("unknown_key", default="Fallback") == "Fallback"


def test_interpolation_and_plurals(config):
    en = Translator(config, "en")

    assert en("tagged_with", tag="python") == "Tagged: python"
    assert en("items", count=1) == "1 item"
    assert en("items", count=3) == "3 items"
    assert interpolate("%{a} and %{b}", {"a": 1}) == "1 and %{b}"


def test_text_direction():
    assert text_direction("ar") == "rtl"
    assert text_direction("en") == "ltr"


def test_format_date(config):
    date = dt.date(2024, 3, 5)

    assert Translator(config, "en").format_date(date) == "March 5, 2024"
    assert Translator(config, "en").format_date(None) == ""
    assert Translator(config, "tr").format_date(date) == "5 Mart 2024"


def test_site_settings_apply_language_overrides(config):
    settings = site_settings(config, "tr")

    assert settings["title"] == "Site TR"
    assert settings["lang"] == "tr"
    assert settings["language_name"] == "Türkçe"
    assert site_settings(config, "en")["title"] == "Site"
    assert site_settings(config, "ar")["direction"] == "rtl"

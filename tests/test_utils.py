import pytest

from quire.utils import slugify


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello World", "hello-world"),
        ("  Python & Web_Dev!  ", "python-web-dev"),
        ("Café", "café"),
        ("Yazılım Notları", "yazılım-notları"),
        ("日本", "日本"),
        ("ＡＢＣ", "abc"),
        ("!!!", "untitled"),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_distinct_scripts_give_distinct_slugs():
    assert len({slugify("日本"), slugify("中国"), slugify("Русский")}) == 3


def test_slugify_truncates_without_trailing_separator():
    assert slugify("abc def ghi", max_len=4) == "abc"

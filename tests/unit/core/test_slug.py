"""Unit tests for core/utils/slug.py"""

import pytest

from mdblog.core.utils.slug import slugify


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to lowercase hyphenated slug."""
    assert slugify(text) == expected


@pytest.mark.parametrize("text,expected", [
    ("Tom &amp; Jerry", "tom-and-jerry"),
    ("Tom & Jerry", "tom-and-jerry"),
    ("a &lt;b&gt; c", "a-b-c"),
])
def test_slugify_entities_and_ampersand(text, expected):
    """HTML entities are unescaped first and & becomes -and-."""
    assert slugify(text) == expected


def test_slugify_inline_code():
    """Inline code markup is reduced to its text."""
    assert slugify("Using <code>ngrx/store</code> today") == "using-ngrx-store-today"


@pytest.mark.parametrize("text,expected", [
    ("Crème brûlée", "creme-brulee"),
    ("Señor Niño", "senor-nino"),
    ("Façade", "facade"),
    ("Straße", "strase"),
])
def test_slugify_transliterates_diacritics(text, expected):
    """Accented letters fold to their ASCII base letter."""
    assert slugify(text) == expected


def test_slugify_strips_commas_and_periods():
    """Commas and periods vanish instead of becoming hyphens."""
    assert slugify("Version 1.2, released") == "version-12-released"


def test_slugify_drops_non_ascii_word_characters():
    """Characters without a transliteration are removed."""
    assert slugify("日本語") == ""


def test_slugify_preserves_hyphens():
    """slugify keeps existing hyphens intact."""
    assert slugify("already-slugified") == "already-slugified"


def test_slugify_strips_leading_trailing_hyphens():
    """slugify strips leading/trailing hyphens from result."""
    assert not slugify("!leading").startswith("-")
    assert not slugify("trailing ?").endswith("-")


@pytest.mark.parametrize("text", [
    "Hello World",
    "Tom &amp; Jerry's <code>API</code>",
    "  Crème,  brûlée. ",
    "--weird__input--",
    "日本語 and more",
])
def test_slugify_is_idempotent(text):
    """slugify is a fixed point on its own output."""
    once = slugify(text)
    assert slugify(once) == once


def test_slugify_is_deterministic():
    """Repeated calls return identical output."""
    text = "Deterministic: Ünïcödé & <code>code</code>"
    assert len({slugify(text) for _ in range(20)}) == 1

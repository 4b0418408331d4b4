"""Unit tests for core/markdown/highlight.py"""

import re

import pytest
from pygments.styles import get_style_by_name
from pygments.token import Token

from mdblog.core.markdown.highlight import (
    Highlighter,
    Palette,
    get_lexer,
    parse_code_info,
    parse_line_spec,
    theme_css,
)
from mdblog.core.utils.hashing import md5


TEN_LINES = "\n".join(f"const v{i} = {i};" for i in range(1, 11))


@pytest.fixture(name="highlighter", scope="module")
def highlighter_fixture():
    return Highlighter("monokai", "/icons")


# --- info string parsing ---

@pytest.mark.parametrize("spec,expected", [
    ("3", {3}),
    ("2-4", {2, 3, 4}),
    ("2,4-6", {2, 4, 5, 6}),
    ("x,3,", {3}),
])
def test_parse_line_spec(spec, expected):
    """Single lines and ranges expand; malformed parts are skipped."""
    assert parse_line_spec(spec) == expected


@pytest.mark.parametrize("info,language,filename,lines", [
    ("ts", "ts", "", set()),
    ("ts{2,4-6}", "ts", "", {2, 4, 5, 6}),
    ("ts:app.ts", "ts", "app.ts", set()),
    ("ts{1}:app.ts", "ts", "app.ts", {1}),
    ("ts:app.ts{1}", "ts", "app.ts", {1}),
    ("", "txt", "", set()),
])
def test_parse_code_info(info, language, filename, lines):
    """Line spec and filename are optional and order-independent after the language."""
    parsed = parse_code_info(info)
    assert (parsed.language, parsed.filename, parsed.highlight_lines) == (language, filename, lines)


def test_get_lexer_resolves_aliases():
    """Short aliases map to full Pygments lexer names."""
    assert "TypeScript" in get_lexer("ts").name
    assert "C#" in get_lexer("cs").name


def test_get_lexer_unknown_language_falls_back():
    """Unknown languages use the plain text lexer instead of raising."""
    assert get_lexer("definitely-not-a-language").name == "Text only"


# --- palette ---

def test_palette_lookup_is_case_insensitive():
    """Colours match regardless of case."""
    palette = Palette({"F8F8F2": "text"})
    assert palette.lookup("f8f8f2") == "text"
    assert palette.lookup("F8F8F2") == "text"


@pytest.mark.parametrize("color", ["123456", "", None])
def test_palette_lookup_falls_back_to_unknown(color):
    """Unmatched or missing colours map to the unknown variable."""
    assert Palette({"f8f8f2": "text"}).lookup(color) == "unknown"


def test_palette_from_style_covers_styled_tokens():
    """Every colour the style defines resolves to a symbolic name."""
    style = get_style_by_name("monokai")
    palette = Palette.from_style(style)
    assert len(palette) > 0
    for ttype in (Token.Keyword, Token.Name.Function, Token.Literal.String, Token.Comment):
        assert palette.lookup(style.style_for_token(ttype)["color"]) != "unknown"


# --- rendering ---

def test_highlight_line_ranges(highlighter):
    """ts{2,4-6} on a 10-line block marks four lines and dims the rest."""
    html = highlighter.highlight(TEN_LINES, "ts{2,4-6}")
    assert '<code class="dim">' in html
    assert html.count('<div class="highlight">') == 4
    assert html.count("<div>") == 6
    lines = re.findall(r'<div(?: class="([^"]*)")?><span', html)
    assert [i for i, cls in enumerate(lines, start=1) if cls == "highlight"] == [2, 4, 5, 6]


def test_highlight_without_line_spec_is_not_dimmed(highlighter):
    html = highlighter.highlight("a = 1", "python")
    assert "<code>" in html
    assert 'class="dim"' not in html


def test_highlight_content_id_is_md5(highlighter):
    """The pre id and copy button reference the content hash."""
    source = "print('hi')"
    html = highlighter.highlight(source, "python")
    content_id = md5(source)
    assert html.startswith(f'<pre id="{content_id}" aria-hidden="true" tabindex="-1">')
    assert f'data-ref="{content_id}"' in html


def test_highlight_is_deterministic(highlighter):
    """Identical input renders identical markup."""
    assert highlighter.highlight(TEN_LINES, "ts{3}") == highlighter.highlight(TEN_LINES, "ts{3}")


def test_highlight_heading_bar(highlighter):
    """The heading shows the language icon, filename, and copy button."""
    html = highlighter.highlight("x", "ts:app.ts")
    assert '<img class="code-icon" src="/icons/ts.svg" alt="" />' in html
    assert '<span class="file-name">app.ts</span>' in html
    assert "content_paste</button>" in html


def test_highlight_unknown_language_icon_and_passthrough(highlighter):
    """Unknown languages render as plain text with the default icon."""
    html = highlighter.highlight("fn main() {}", "nosuchlang")
    assert "/icons/code-purple.svg" in html
    assert "fn main() {}" in html


def test_highlight_escapes_html(highlighter):
    """& < > and double quotes are escaped inside spans."""
    html = highlighter.highlight('<a href="x">&</a>', "txt")
    assert "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;" in html


def test_highlight_marks_empty_lines(highlighter):
    """Empty lines keep a placeholder span so they occupy space."""
    html = highlighter.highlight("a\n\nb", "txt")
    assert '<div class="empty"><span> </span></div>' in html
    assert html.count("<div") == 4  # heading + three lines


def test_highlight_uses_css_variables(highlighter):
    """Spans reference palette variables rather than literal colours."""
    html = highlighter.highlight("const a = 'x';", "ts")
    colors = re.findall(r'style="color: ([^"]+)"', html)
    assert colors
    assert all(c.startswith("var(--syntax-") for c in colors)


def test_highlight_variables_exist_in_theme(highlighter):
    """Every variable the highlighter emits is defined by the theme CSS."""
    css = theme_css("dark", "monokai")
    html = highlighter.highlight("def f(x):\n    return x  # done", "python")
    for name in set(re.findall(r"var\(--syntax-([a-z-]+)\)", html)):
        assert f"--syntax-{name}:" in css


def test_highlighter_as_markdown_it_option(highlighter):
    """The instance is callable with markdown-it's (content, lang, attrs) signature."""
    assert highlighter("x", "txt", "") == highlighter.highlight("x", "txt")


# --- theme css ---

def test_theme_css_scope_and_variables():
    css = theme_css("light", "friendly")
    assert css.startswith("html.light {\n")
    assert "\t--syntax-unknown:" in css
    assert "\t--syntax-keyword:" in css
    assert "\t--code-background:" in css
    assert css.rstrip().endswith("}")

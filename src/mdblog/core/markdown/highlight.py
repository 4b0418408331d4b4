"""Pygments-backed code highlighting with palette-indirected colours.

Token colours are not emitted literally: each colour computed by the active
Pygments style is mapped back to the token type that defines it, and the span
references ``var(--syntax-<type>)``. The same HTML can then be re-themed by
swapping the CSS produced by :func:`theme_css`.
"""

import re
from dataclasses import dataclass, field

from markdown_it.common.utils import escapeHtml
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.style import StyleMeta
from pygments.styles import get_style_by_name
from pygments.token import _TokenType
from pygments.util import ClassNotFound

from mdblog.core.utils.hashing import md5


LANGUAGE_ALIASES = {
    "cs": "csharp",
    "yml": "yaml",
    "sv": "html",
    "ts": "typescript",
    "txt": "text",
    "ps": "powershell",
    "sh": "bash",
    "md": "markdown",
}

LANGUAGE_ICONS = {
    "bash": "shell",
    "sh": "shell",
    "html": "code-purple",
    "sv": "code-purple",
    "js": "code-purple",
    "ts": "ts",
    "json": "brackets-purple",
    "css": "code-purple",
    "txt": "text",
    "graphql": "code-purple",
    "yml": "yaml",
    "yaml": "yaml",
    "diff": "text",
    "cs": "csharp",
    "sql": "database",
    "svelte": "svelte",
    "ps": "shell",
    "xml": "brackets-purple",
    "md": "markdown",
}
DEFAULT_ICON = "code-purple"
UNKNOWN_VAR = "unknown"

LINE_SPEC_RE = re.compile(r"\{([^}]+)\}")


@dataclass
class CodeInfo:
    """Parsed fence info string: ``<lang>{<lines>}:<filename>``."""
    language: str
    filename: str = ""
    highlight_lines: set[int] = field(default_factory=set)


def parse_line_spec(spec: str) -> set[int]:
    """Expand ``2,4-6`` into {2, 4, 5, 6}; malformed parts are ignored."""
    lines: set[int] = set()
    for part in spec.split(","):
        bounds = part.strip().split("-")
        try:
            low = int(bounds[0])
            high = int(bounds[1]) if len(bounds) > 1 and bounds[1].strip() else low
        except ValueError:
            continue
        lines.update(range(low, high + 1))
    return lines


def parse_code_info(info: str) -> CodeInfo:
    """Split an info string into language, optional filename and highlighted lines."""
    info = (info or "").strip() or "txt"
    cut = [i for i in (info.find("{"), info.find(":")) if i != -1]
    language = info[:min(cut)].strip() if cut else info
    filename = ""
    if ":" in info:
        filename = LINE_SPEC_RE.sub("", info[info.index(":") + 1:]).strip()
    highlight_lines: set[int] = set()
    for m in LINE_SPEC_RE.finditer(info):
        highlight_lines |= parse_line_spec(m.group(1))
    return CodeInfo(language=language or "txt", filename=filename, highlight_lines=highlight_lines)


def css_name(ttype: _TokenType) -> str:
    """Token.Name.Function -> 'name-function'; the root token is 'text'."""
    return "-".join(part.lower() for part in ttype) or "text"


class Palette:
    """Reverse lookup from a style's literal colours to symbolic CSS variable names."""

    def __init__(self, names: dict[str, str]):
        self._names = {color.lower(): name for color, name in names.items()}

    @classmethod
    def from_style(cls, style: StyleMeta) -> "Palette":
        """Map every colour the style defines to the first token type defining it."""
        names: dict[str, str] = {}
        for ttype in style.styles:
            color = style.style_for_token(ttype)["color"]
            if color:
                names.setdefault(color.lower(), css_name(ttype))
        return cls(names)

    def lookup(self, color: str | None) -> str:
        if not color:
            return UNKNOWN_VAR
        return self._names.get(color.lower(), UNKNOWN_VAR)

    def __len__(self) -> int:
        return len(self._names)


def _resolve(style: StyleMeta, ttype: _TokenType) -> _TokenType:
    """Walk up to the nearest token type the style knows about."""
    while not style.styles_token(ttype) and ttype.parent is not None:
        ttype = ttype.parent
    return ttype


def get_lexer(language: str) -> Lexer:
    """Lexer for a (possibly aliased) language; unknown languages fall back to plain text."""
    name = LANGUAGE_ALIASES.get(language, language)
    try:
        return get_lexer_by_name(name, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False, ensurenl=False)


class Highlighter:
    """Render fenced code as line-per-div markup with copy-button affordances."""

    def __init__(self, style: str = "monokai", icon_path: str = "/images/languages"):
        self.style = get_style_by_name(style)
        self.palette = Palette.from_style(self.style)
        self.icon_path = icon_path.rstrip("/")
        self._vars: dict[_TokenType, str] = {}

    def __call__(self, content: str, lang: str, attrs: str = "") -> str:
        """markdown-it ``highlight`` option signature."""
        return self.highlight(content, lang)

    def css_var(self, ttype: _TokenType) -> str:
        if ttype not in self._vars:
            color = self.style.style_for_token(_resolve(self.style, ttype))["color"]
            self._vars[ttype] = f"var(--syntax-{self.palette.lookup(color)})"
        return self._vars[ttype]

    def tokenize(self, source: str, language: str) -> list[list[tuple[str, str]]]:
        """Return source lines, each a list of (css_var, text) spans."""
        lines: list[list[tuple[str, str]]] = [[]]
        for ttype, value in get_lexer(language).get_tokens(source):
            css = self.css_var(ttype)
            for i, part in enumerate(value.split("\n")):
                if i:
                    lines.append([])
                if part:
                    lines[-1].append((css, part))
        return lines

    def highlight(self, source: str, language: str) -> str:
        info = parse_code_info(language)
        content_id = md5(source)
        lines = self.tokenize(source, info.language)
        heading = self.render_heading(info, content_id)
        code = self.render_lines(lines, info.highlight_lines)
        return f'<pre id="{content_id}" aria-hidden="true" tabindex="-1">{heading}{code}</pre>'

    def render_heading(self, info: CodeInfo, content_id: str) -> str:
        icon = LANGUAGE_ICONS.get(info.language, DEFAULT_ICON)
        parts = [f'<img class="code-icon" src="{self.icon_path}/{icon}.svg" alt="" />']
        if info.filename:
            parts.append(f'<span class="file-name">{escapeHtml(info.filename)}</span>')
        parts.append(
            f'<button class="copy-code material-symbols-outlined" data-ref="{content_id}">content_paste</button>'
        )
        return f'<div class="code-heading">{" ".join(parts)}</div>'

    @staticmethod
    def render_lines(lines: list[list[tuple[str, str]]], highlight_lines: set[int]) -> str:
        html = ['<code class="dim">' if highlight_lines else "<code>"]
        for number, spans in enumerate(lines, start=1):
            classes = []
            if number in highlight_lines:
                classes.append("highlight")
            if not spans:
                classes.append("empty")
            html.append(f'<div class="{" ".join(classes)}">' if classes else "<div>")
            if spans:
                html.extend(f'<span style="color: {css}">{escapeHtml(text)}</span>' for css, text in spans)
            else:
                html.append("<span> </span>")
            html.append("</div>")
        html.append("</code>")
        return "".join(html)


def theme_css(scope: str, style_name: str) -> str:
    """CSS custom properties for every token type of a Pygments style, scoped to ``html.<scope>``."""
    style = get_style_by_name(style_name)
    declarations: dict[str, str] = {}
    for ttype, definition in style:
        color = definition["color"]
        declarations.setdefault(css_name(ttype), f"#{color}" if color else "inherit")
    declarations.setdefault(UNKNOWN_VAR, declarations.get("text", "inherit"))

    body = [f"\t--syntax-{name}: {value};" for name, value in declarations.items()]
    body.append(f"\t--code-background: {style.background_color};")
    body.append(f"\t--code-highlight: {style.highlight_color};")
    return f"html.{scope} {{\n" + "\n".join(body) + "\n}\n"

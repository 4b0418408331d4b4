"""Post renderer: markdown-it with directive extensions and per-node overrides.

Per-post state lives in the markdown-it ``env`` dict so one parser instance
can render posts concurrently:

    slug            the post being rendered (self-links are not recorded)
    assets_dir      folder relative images resolve against
    ids             IdSequence for code-group tab ids
    outgoing_slugs  filled by link_open
    toc             filled by the heading_anchors core rule
"""

import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml, unescapeAll
from markdown_it.renderer import RendererHTML
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from mdblog.config import Settings
from mdblog.core.markdown.code_group import CodeGroup
from mdblog.core.markdown.custom_block import CustomBlock
from mdblog.core.markdown.extensions import CLOSE_FENCE, use_extensions
from mdblog.core.markdown.highlight import Highlighter
from mdblog.core.models import RenderResult, TocEntry
from mdblog.core.utils.ids import IdSequence
from mdblog.core.utils.slug import slugify


TRACKED_HOSTS = frozenset({
    "docs.microsoft.com",
    "social.technet.microsoft.com",
    "azure.microsoft.com",
    "techcommunity.microsoft.com",
    "social.msdn.microsoft.com",
    "devblogs.microsoft.com",
    "developer.microsoft.com",
    "channel9.msdn.com",
    "gallery.technet.microsoft.com",
    "cloudblogs.microsoft.com",
    "technet.microsoft.com",
    "msdn.microsoft.com",
    "blogs.msdn.microsoft.com",
    "blogs.technet.microsoft.com",
    "learn.microsoft.com",
})
TRACKING_PARAM = "WT.mc_id"

IMAGE_EXT_RE = re.compile(r"\.(png|jpg|jpeg)$")
ANCHOR_OVERRIDE_RE = re.compile(r"\s*\{#([^}]+)\}\s*$")
LEADING_TABS_RE = re.compile(r"^\t+", re.MULTILINE)
BREAKS = ("softbreak", "hardbreak")


@dataclass(frozen=True)
class SiteOptions:
    """Site-wide values the link and image overrides need."""
    blog_path: str = "blog"
    creator_id: str = ""
    favicon_service: str = "https://v1.indieweb-avatar.11ty.dev"
    image_format: str = "webp"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SiteOptions":
        return cls(
            blog_path=settings.blog_path.strip("/"),
            creator_id=settings.creator_id,
            favicon_service=settings.favicon_service.rstrip("/"),
            image_format=settings.image_format,
        )


# --- link and image helpers ---

def rewrite_post_link(href: str, blog_path: str) -> str:
    """``../other-post/index.md`` -> ``/blog/other-post``."""
    return href.replace("../", f"/{blog_path}/", 1).replace("/index.md", "", 1)


def append_creator_id(link: str, creator_id: str) -> str:
    """Add the tracking parameter for allow-listed documentation hosts only."""
    if not creator_id:
        return link
    try:
        parts = urlsplit(link)
    except ValueError:
        return link
    if parts.hostname not in TRACKED_HOSTS:
        return link
    query = parse_qsl(parts.query, keep_blank_values=True) + [(TRACKING_PARAM, creator_id)]
    return urlunsplit(parts._replace(query=urlencode(query)))


def favicon_style(link: str, service: str) -> Optional[str]:
    """Inline style pointing at the avatar service for the link's origin; None if there is no origin."""
    try:
        parts = urlsplit(link)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    origin = f"{parts.scheme}://{parts.netloc}"
    return f"--favicon: url({service}/{quote(origin, safe='')})"


def asset_path(href: str, assets_dir: str, image_format: str) -> str:
    """Map a post-relative image to ``/<last four path segments>`` in the compressed format.

    ``..`` left over after normalizing, as with an empty assets_dir, is dropped.
    """
    path = posixpath.normpath(posixpath.join(Path(assets_dir).as_posix(), href))
    segments = [s for s in path.split("/") if s not in ("", ".", "..")]
    return "/" + IMAGE_EXT_RE.sub(f".{image_format}", "/".join(segments[-4:]))


def expand_leading_tabs(text: str) -> str:
    return LEADING_TABS_RE.sub(lambda m: "  " * len(m.group(0)), text)


# --- core rules ---

def _split_lines(children: list[Token]) -> list[list[Token]]:
    lines: list[list[Token]] = [[]]
    for child in children:
        if child.type in BREAKS:
            lines.append([])
        else:
            lines[-1].append(child)
    return lines


def _heading_source(children: list[Token]) -> str:
    """Heading text with inline code kept as markup, the form slugify expects."""
    parts = []
    for child in children:
        if child.type == "text":
            parts.append(child.content)
        elif child.type == "code_inline":
            parts.append(f"<code>{child.content}</code>")
        elif child.type in BREAKS:
            parts.append(" ")
    return "".join(parts)


def _plain_text(children: list[Token]) -> str:
    parts = []
    for child in children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in BREAKS:
            parts.append(" ")
        elif child.children:
            parts.append(_plain_text(child.children))
    return "".join(parts).strip()


def _pop_anchor_override(inline: Token) -> Optional[str]:
    """Strip a trailing ``{#custom-id}`` from the heading text and return the id."""
    if not inline.children or inline.children[-1].type != "text":
        return None
    last = inline.children[-1]
    m = ANCHOR_OVERRIDE_RE.search(last.content)
    if not m:
        return None
    last.content = last.content[:m.start()]
    inline.content = ANCHOR_OVERRIDE_RE.sub("", inline.content)
    return m.group(1).strip()


def heading_anchors(state: StateCore) -> None:
    """Compute heading fragments and collect the table of contents.

    Repeated heading text yields repeated fragments; hand-written links rely on them.
    """
    toc = state.env.setdefault("toc", [])
    tokens = state.tokens
    for i, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        inline, close = tokens[i + 1], tokens[i + 2]
        level = int(token.tag[1])
        fragment = _pop_anchor_override(inline)
        if fragment is None:
            fragment = slugify(_heading_source(inline.children or []))
        if level == 1 or not fragment:
            continue
        token.meta["fragment"] = close.meta["fragment"] = fragment
        toc.append(TocEntry(description=_plain_text(inline.children or []), level=level, slug=fragment))


def paragraph_blocks(state: StateCore) -> None:
    """Unwrap image-only paragraphs and turn ``:::name ... :::`` paragraphs into fallback blocks."""
    tokens = state.tokens
    out: list[Token] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.type != "paragraph_open":
            out.append(token)
            i += 1
            continue

        inline, close = tokens[i + 1], tokens[i + 2]
        children = inline.children or []
        lines = _split_lines(children)
        text_lines = inline.content.split("\n")

        if len(text_lines) >= 2 and text_lines[0].startswith(":::") and text_lines[-1].strip() == CLOSE_FENCE:
            words = text_lines[0][3:].split()
            fallback = Token("custom_block_fallback", "div", 0)
            fallback.block = True
            fallback.map = token.map
            fallback.level = token.level
            fallback.meta = {"class": words[0] if words else "", "lines": lines[1:-1]}
            out.append(fallback)
            i += 3
            continue

        visible = [c for c in children if c.type not in BREAKS]
        if len(visible) == 1 and visible[0].type == "image":
            token.hidden = close.hidden = True
        out.extend((token, inline, close))
        i += 3
    state.tokens = out


# --- renderer ---

class PostRenderer(RendererHTML):
    """HTML renderer with blog-specific node overrides."""

    def fence(self, tokens, idx, options, env) -> str:
        token = tokens[idx]
        info = unescapeAll(token.info).strip() if token.info else ""
        source = token.content[:-1] if token.content.endswith("\n") else token.content
        return options.highlight(source, info or "txt", "") + "\n"

    def code_block(self, tokens, idx, options, env) -> str:
        source = tokens[idx].content
        return options.highlight(source[:-1] if source.endswith("\n") else source, "txt", "") + "\n"

    def code_inline(self, tokens, idx, options, env) -> str:
        return f"<code>{escapeHtml(tokens[idx].content)}</code>"

    def heading_open(self, tokens, idx, options, env) -> str:
        token = tokens[idx]
        fragment = token.meta.get("fragment")
        if not fragment:
            return f"<{token.tag}>"
        fragment = escapeHtml(fragment)
        return f'<{token.tag} id="{fragment}">\n<a href="#{fragment}" class="anchor mark-hover" tabindex="-1">'

    def heading_close(self, tokens, idx, options, env) -> str:
        token = tokens[idx]
        if not token.meta.get("fragment"):
            return f"</{token.tag}>\n"
        return f'</a>\n<span class="material-symbols-outlined">link</span>\n</{token.tag}>\n'

    def link_open(self, tokens, idx, options, env) -> str:
        site: SiteOptions = options["site"]
        token = tokens[idx]
        link = rewrite_post_link(str(token.attrGet("href") or ""), site.blog_path)
        internal = link.startswith("/")

        attrs = [f'href="{escapeHtml(append_creator_id(link, site.creator_id))}"']
        title = token.attrGet("title")
        if title:
            attrs.append(f'title="{escapeHtml(str(title))}"')
        if not internal and not link.startswith("#"):
            attrs.append('rel="external"')

        if internal:
            slug = urlsplit(link).path.split("/")[-1]
            if slug and slug != env.get("slug") and slug != site.blog_path:
                env.setdefault("outgoing_slugs", []).append(slug)
        else:
            style = favicon_style(link, site.favicon_service)
            if style:
                attrs.append("data-with-favicon")
                attrs.append(f"style='{style}'")
        return f'<a class="mark mark-hover" {" ".join(attrs)}>'

    def image(self, tokens, idx, options, env) -> str:
        token = tokens[idx]
        src = str(token.attrGet("src") or "")
        if not src.startswith("http"):
            src = asset_path(src, env.get("assets_dir", ""), options["site"].image_format)
        caption = self.renderInlineAsText(token.children or [], options, env)
        return (
            f'<figure><img src="{escapeHtml(src)}" alt="" loading="lazy"/>'
            f"<figcaption>{escapeHtml(caption)}</figcaption></figure>"
        )

    def custom_block_fallback(self, tokens, idx, options, env) -> str:
        token = tokens[idx]
        paragraphs = [self.renderInline(line, options, env).strip() for line in token.meta["lines"]]
        body = "".join(f"<p>{p}</p>" for p in paragraphs if p)
        return f'<div class="custom-block {escapeHtml(token.meta["class"])}">{body}</div>\n'


def make_parser(settings: Optional[Settings] = None) -> MarkdownIt:
    """Build the post parser: extensions, core rules, and the themed highlighter."""
    settings = settings or Settings()
    md = MarkdownIt(
        "gfm-like",
        options_update={
            "linkify": False,
            "highlight": Highlighter(settings.dark_theme, settings.icon_path),
            "site": SiteOptions.from_settings(settings),
        },
        renderer_cls=PostRenderer,
    )
    use_extensions(md, [CodeGroup(), CustomBlock()])
    md.core.ruler.push("heading_anchors", heading_anchors)
    md.core.ruler.push("paragraph_blocks", paragraph_blocks)
    return md


def render_markdown(
    md: MarkdownIt,
    body: str,
    slug: str = "",
    assets_dir: str | Path = "",
    ids: Optional[IdSequence] = None,
) -> RenderResult:
    """Render a post body; returns the HTML with the collected TOC and outgoing slugs."""
    env = {
        "slug": slug,
        "assets_dir": str(assets_dir),
        "ids": ids if ids is not None else IdSequence(),
        "outgoing_slugs": [],
        "toc": [],
    }
    html = md.render(expand_leading_tabs(body), env)
    return RenderResult(html=html, toc=env["toc"], outgoing_slugs=env["outgoing_slugs"])

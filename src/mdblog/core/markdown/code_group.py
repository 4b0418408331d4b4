"""Tabbed code groups: ``:::code-group`` wrapping several fenced code blocks"""

import re
from typing import Optional

from markdown_it.common.utils import escapeHtml

from mdblog.core.markdown.extensions import BlockExtension, BlockMatch, fence_sections
from mdblog.core.utils.ids import IdSequence


TITLE_RE = re.compile(r"\[title=([^\]]*)\]")


def split_fences(lines: list[str]) -> list[tuple[str, list[str]]]:
    """Return (info, body_lines) for each fenced block; text between fences is ignored.

    A fence left open at the end of the group still yields its lines.
    """
    blocks: list[tuple[str, list[str]]] = []
    info: Optional[str] = None
    body: list[str] = []
    for line in lines:
        stripped = line.strip()
        if info is None:
            if stripped.startswith("```"):
                info, body = stripped.lstrip("`").strip(), []
        elif stripped.startswith("```") and not stripped.strip("`"):
            blocks.append((info, body))
            info = None
        else:
            body.append(line)
    if info is not None:
        blocks.append((info, body))
    return blocks


def parse_tab_info(info: str) -> tuple[str, str]:
    """``ts[title=app.ts]`` -> ('ts', 'app.ts'); the title is empty when absent."""
    bracket = info.find("[")
    lang = info[:bracket] if bracket != -1 else info
    m = TITLE_RE.search(info)
    return lang.strip(), m.group(1) if m else ""


class CodeGroup(BlockExtension):
    name = "code_group"
    start_re = re.compile(r"^:::code-group$", re.MULTILINE)

    def try_consume(self, src: str) -> Optional[BlockMatch]:
        lines = src.split("\n")
        if not self.start_re.match(lines[0]):
            return None
        section = next(fence_sections(lines, self.start_re), None)
        if section is None:
            return None

        start, end = section
        fences = split_fences(lines[start + 1:end])
        if not fences:
            return None

        codeblocks = []
        for info, body in fences:
            lang, title = parse_tab_info(info)
            codeblocks.append({"lang": lang, "title": title, "code": "\n".join(body)})
        return BlockMatch(
            raw="\n".join(lines[start:end + 1]),
            line_count=end + 1,
            meta={"codeblocks": codeblocks},
        )

    def commit(self, match: BlockMatch, env: dict) -> None:
        ids: IdSequence = env.setdefault("ids", IdSequence())
        for codeblock in match.meta["codeblocks"]:
            codeblock["id"] = ids.next()

    def render(self, renderer, tokens, idx, options, env) -> str:
        codeblocks = tokens[idx].meta["codeblocks"]
        tabs = "".join(
            f'<button data-id="{c["id"]}" class="code-group-tab{" active" if i == 0 else ""}">'
            f'{escapeHtml(c["title"])}</button>'
            for i, c in enumerate(codeblocks)
        )
        panels = "".join(
            f'<div data-id="{c["id"]}" class="code-group-code"{"" if i == 0 else " hidden"}>'
            f'{options.highlight(c["code"], c["lang"], "")}</div>'
            for i, c in enumerate(codeblocks)
        )
        return (
            '<div class="code-group">\n'
            f'<div class="code-group-tabs">{tabs}</div>\n'
            f'{panels}\n'
            '</div>\n'
        )

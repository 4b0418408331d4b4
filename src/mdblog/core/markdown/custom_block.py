"""Admonition blocks: ``:::warning`` ... ``:::``"""

import re
from typing import Optional

from mdblog.core.markdown.extensions import BlockExtension, BlockMatch, fence_sections


ADMONITION_TYPES = ("danger", "warning", "info", "success", "note", "ai", "tip")

# icon -> (css class, display title)
ADMONITION_STYLES = {
    "danger":  ("danger", "Alert"),
    "warning": ("warning", "Warning"),
    "info":    ("info", "Note"),
    "note":    ("info", "Note"),
    "ai":      ("info-ai", "AI Note"),
    "success": ("success", "Congratulations"),
    "tip":     ("tip", "Tip"),
}


class CustomBlock(BlockExtension):
    name = "custom_block"
    start_re = re.compile(rf"^:::({'|'.join(ADMONITION_TYPES)})$", re.MULTILINE)

    def try_consume(self, src: str) -> Optional[BlockMatch]:
        lines = src.split("\n")
        if not self.start_re.match(lines[0]):
            return None
        section = next(fence_sections(lines, self.start_re), None)
        if section is None:
            return None

        start, end = section
        icon = self.start_re.match(lines[start]).group(1)
        return BlockMatch(
            raw="\n".join(lines[start:end + 1]),
            line_count=end + 1,
            meta={"icon": icon, "text": "\n".join(lines[start + 1:end])},
            body=(start + 1, end),
        )

    def render(self, renderer, tokens, idx, options, env) -> str:
        token = tokens[idx]
        if token.nesting == -1:
            return "</div>\n"
        css_class, title = ADMONITION_STYLES[token.meta["icon"]]
        return (
            f'<div class="custom-block {css_class}">\n'
            f'<div class="custom-block-title">{title}</div>\n'
        )

"""Pluggable block-level grammar extensions for markdown-it.

An extension answers three questions: where the next possible match starts
(``match_start``), whether the source at the current line is a complete
match (``try_consume``), and how its tokens render (``render``). Extensions
are registered as an ordered list of block rules consulted before fenced
code, so they can also interrupt paragraphs.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.token import Token


CLOSE_FENCE = ":::"


@dataclass
class BlockMatch:
    """A successful ``try_consume``.

    ``body`` is a (first, last) half-open line span, relative to the opening
    line, re-tokenized as nested block content between ``<name>_open`` and
    ``<name>_close`` tokens. Without a body a single ``<name>`` token is emitted.
    """
    raw: str
    line_count: int
    meta: dict[str, Any] = field(default_factory=dict)
    body: Optional[tuple[int, int]] = None


def fence_sections(lines: Sequence[str], start_re: re.Pattern) -> Iterator[tuple[int, int]]:
    """Yield (start, end) line pairs of complete ``:::`` fences in a single pass.

    The first bare ``:::`` after an opener closes it, so same-type nesting is not supported.
    """
    start = -1
    for i, line in enumerate(lines):
        if start < 0 and start_re.match(line):
            start = i
        elif start >= 0 and line == CLOSE_FENCE:
            yield start, i
            start = -1


class BlockExtension:
    """Base class for fenced directive extensions."""

    name: str = ""
    start_re: re.Pattern  # compiled with re.MULTILINE, anchored to a whole line

    def match_start(self, src: str) -> Optional[int]:
        """Index of the next line in src that could open this block, else None."""
        m = self.start_re.search(src)
        return m.start() if m else None

    def try_consume(self, src: str) -> Optional[BlockMatch]:
        raise NotImplementedError

    def commit(self, match: BlockMatch, env: dict) -> None:
        """Called once a match is accepted outside silent mode, before tokens are pushed."""

    def render(self, renderer, tokens: Sequence[Token], idx: int, options, env: dict) -> str:
        raise NotImplementedError


def _line(state: StateBlock, line: int) -> str:
    """Source text of a line with the enclosing container's indentation removed."""
    start = state.bMarks[line] + min(state.tShift[line], state.blkIndent)
    return state.src[start:state.eMarks[line]]


def _block_rule(ext: BlockExtension):
    def rule(state: StateBlock, startLine: int, endLine: int, silent: bool) -> bool:
        if state.sCount[startLine] - state.blkIndent >= 4:
            return False
        if ext.match_start(_line(state, startLine)) != 0:
            return False

        src = "\n".join(_line(state, line) for line in range(startLine, endLine))
        match = ext.try_consume(src)
        if match is None:
            return False
        if silent:
            return True
        ext.commit(match, state.env)

        end = startLine + match.line_count
        if match.body is None:
            token = state.push(ext.name, "div", 0)
            token.meta = match.meta
            token.map = [startLine, end]
            token.block = True
        else:
            token = state.push(f"{ext.name}_open", "div", 1)
            token.meta = match.meta
            token.map = [startLine, end]
            token.block = True

            old_parent, old_line_max = state.parentType, state.lineMax
            state.parentType = "container"
            state.lineMax = startLine + match.body[1]
            state.md.block.tokenize(state, startLine + match.body[0], startLine + match.body[1])
            state.parentType, state.lineMax = old_parent, old_line_max

            token = state.push(f"{ext.name}_close", "div", -1)
            token.block = True

        state.line = end
        return True

    return rule


def _render_rule(ext: BlockExtension):
    def rule(renderer, tokens, idx, options, env):
        return ext.render(renderer, tokens, idx, options, env)

    return rule


def use_extensions(md: MarkdownIt, extensions: Sequence[BlockExtension]) -> MarkdownIt:
    """Register extensions in priority order ahead of the fenced-code rule."""
    for ext in extensions:
        md.block.ruler.before(
            "fence", ext.name, _block_rule(ext),
            {"alt": ["paragraph", "reference", "blockquote", "list"]},
        )
        for suffix in ("", "_open", "_close"):
            md.add_render_rule(ext.name + suffix, _render_rule(ext))
    return md

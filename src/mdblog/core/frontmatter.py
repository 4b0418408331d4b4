"""Front-matter splitting and validation for post sources"""

import re
from typing import Any

import yaml
from pydantic import ValidationError

from mdblog.core.models import FrontMatter


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*(?:\n|$)', re.DOTALL)


class FrontMatterError(ValueError):
    """A post's YAML header is missing, unparseable, or lacks required keys."""


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with the YAML header removed; ({}, text) when absent."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise FrontMatterError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise FrontMatterError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():]


def parse_frontmatter(text: str) -> tuple[FrontMatter, str]:
    """Split and validate a post's header. A post without one cannot be rendered."""
    data, body = split_frontmatter(text)
    if not data:
        raise FrontMatterError("Missing YAML frontmatter")
    try:
        return FrontMatter.model_validate(data), body
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise FrontMatterError(f"Invalid frontmatter fields: {', '.join(missing)}") from e

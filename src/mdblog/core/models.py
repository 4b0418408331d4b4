"""Post, metadata, and render-result models for the content pipeline"""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, field_validator


class TocEntry(BaseModel):
    """An anchored heading, in document order."""
    description: str
    level: int
    slug: str


class LinkRef(BaseModel):
    slug: str
    title: str


class Translation(BaseModel):
    language: str
    url: Optional[str] = None
    author: Optional[str] = None
    profile: Optional[str] = None


class Series(BaseModel):
    name: str


class SeriesPost(BaseModel):
    slug: str
    title: str
    date: date
    order: int
    current: bool


class FrontMatter(BaseModel):
    """Required and optional keys of a post's YAML header."""
    title: str
    slug: str
    description: str
    date: date
    tags: str | list[str] | None
    translations: list[Translation] = []
    series: Optional[Series] = None

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        """YAML yields datetimes for timestamped values; keep only the calendar date."""
        if isinstance(value, datetime):
            return value.date()
        return value


class PostMetadata(BaseModel):
    title: str
    slug: str
    description: str
    date: date
    modified: date
    tags: list[str] = []
    canonical: str
    banner: str
    author: str = ""
    translations: list[Translation] = []
    toc: list[TocEntry] = []
    outgoing_slugs: list[str] = []     # raw link targets recorded while rendering
    outgoing_links: list[LinkRef] = []  # resolved after every post is parsed
    incoming_links: list[LinkRef] = []
    series: Optional[Series] = None
    series_posts: list[SeriesPost] = []


class Post(BaseModel):
    """One rendered article; link and series fields are valid only after the batch pass."""
    html: str
    tldr: str = ""
    metadata: PostMetadata


@dataclass
class RenderResult:
    """Rendered body plus the per-post state collected by the renderer."""
    html: str
    toc: list[TocEntry] = field(default_factory=list)
    outgoing_slugs: list[str] = field(default_factory=list)


@dataclass
class PostSource:
    """A discovered post directory: index.md plus optional tldr.md."""
    folder: Path
    index: Path
    tldr: Optional[Path] = None

    @property
    def mtime(self) -> float:
        """Latest modification time across the post's source files."""
        paths = [p for p in (self.index, self.tldr) if p is not None]
        return max(p.stat().st_mtime for p in paths)

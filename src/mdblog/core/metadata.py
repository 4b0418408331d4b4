"""Metadata normalization: tags, translations, derived URLs and modified dates"""

import logging
import subprocess
from collections import Counter
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from mdblog.config import Settings
from mdblog.core.models import FrontMatter, PostMetadata, RenderResult, Translation


logger = logging.getLogger(__name__)

TAG_SPELLINGS = {
    "typescript": "TypeScript",
    "ngrx": "NgRx",
}
LANGUAGE_NAMES = {
    "es": "Español",
    "ru": "Russian",
}
INDEX_EXCLUDED_TAGS = {"redux", "developerexperience", "csharp"}
INDEX_TAG_SPELLINGS = {"dotnet": ".NET"}
MAX_INDEX_TAGS = 15


def normalize_tags(tags: str | list[str] | None) -> list[str]:
    """Split a comma-separated string or list into capitalized tags with canonical spellings."""
    if tags is None:
        return []
    raw = tags.split(",") if isinstance(tags, str) else [str(t) for t in tags]
    normalized = []
    for tag in raw:
        tag = tag.strip()
        if not tag:
            continue
        tag = TAG_SPELLINGS.get(tag.lower(), tag[0].upper() + tag[1:])
        normalized.append(tag)
    return normalized


def resolve_translations(translations: list[Translation]) -> list[Translation]:
    """Replace known language codes with display names; unknown codes pass through."""
    return [
        t.model_copy(update={"language": LANGUAGE_NAMES.get(t.language, t.language)})
        for t in translations
    ]


def last_modified(path: Path, dev: bool = False) -> Optional[date]:
    """Date of the last commit touching path, or None in dev mode or when git has no answer."""
    if dev:
        return None
    try:
        result = subprocess.run(
            ["git", "log", "-1", "--format=%cI", "--", path.name],
            cwd=path.parent,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug("git unavailable for %s: %s", path, e)
        return None
    stamp = result.stdout.strip()
    if result.returncode != 0 or not stamp:
        logger.debug("No commit history for %s", path)
        return None
    try:
        return datetime.fromisoformat(stamp).date()
    except ValueError:
        logger.debug("Unparseable commit date %r for %s", stamp, path)
        return None


def site_url(settings: Settings, *segments: str) -> str:
    """Join base path, blog path and segments; ``/blog/x`` when base_path is empty."""
    parts = [settings.base_path.rstrip("/"), settings.blog_path.strip("/"), *segments]
    return "/".join(parts)


def build_metadata(
    fm: FrontMatter,
    rendered: RenderResult,
    settings: Settings,
    source: Optional[Path] = None,
    ) -> PostMetadata:
    """Combine front matter, render output and settings into a PostMetadata."""
    modified = last_modified(source, settings.dev) if source is not None else None
    return PostMetadata(
        title=fm.title,
        slug=fm.slug,
        description=fm.description,
        date=fm.date,
        modified=modified or fm.date,
        tags=normalize_tags(fm.tags),
        canonical=site_url(settings, fm.slug),
        banner=site_url(settings, fm.slug, "images", "banner.png"),
        author=settings.author,
        translations=resolve_translations(fm.translations),
        toc=rendered.toc,
        outgoing_slugs=rendered.outgoing_slugs,
        series=fm.series,
    )


def order_tags(tags: list[str]) -> list[str]:
    """Most frequent tags first (ties by name, descending), capped for the site index."""
    counts = Counter(
        INDEX_TAG_SPELLINGS.get(tag.lower(), tag)
        for tag in tags
        if tag.lower() not in INDEX_EXCLUDED_TAGS
    )
    ranked = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    return [tag for tag, _ in ranked[:MAX_INDEX_TAGS]]

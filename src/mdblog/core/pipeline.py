"""Batch orchestration: discover post folders, parse them concurrently, then link them"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from markdown_it import MarkdownIt
from sqlmodel import Session

from mdblog.config import Settings
from mdblog.core.frontmatter import FrontMatterError, parse_frontmatter, split_frontmatter
from mdblog.core.graph import add_post_links, add_series_information
from mdblog.core.markdown.renderer import make_parser, render_markdown
from mdblog.core.metadata import build_metadata
from mdblog.core.models import Post, PostSource
from mdblog.core.utils.ids import IdSequence
from mdblog.crud.cache import get_cached, put_cached, render_fingerprint


logger = logging.getLogger(__name__)

MD_SUFFIX = ".md"
POST_FILE = "index.md"
TLDR_FILE = "tldr.md"
SKIP_DIRS = {"node_modules"}


def discover_post_dirs(root: Path) -> list[tuple[Path, list[Path]]]:
    """Group markdown files under root by directory, sorted by directory then name."""
    groups: dict[Path, list[Path]] = {}
    for p in sorted(root.rglob(f"*{MD_SUFFIX}")):
        if SKIP_DIRS.intersection(p.relative_to(root).parts):
            continue
        groups.setdefault(p.parent, []).append(p)
    return sorted(groups.items())


def post_source(files: list[Path]) -> Optional[PostSource]:
    """PostSource for a directory's files, or None when it has no index.md."""
    by_name = {p.name: p for p in files}
    index = by_name.get(POST_FILE)
    if index is None:
        return None
    return PostSource(folder=index.parent, index=index, tldr=by_name.get(TLDR_FILE))


def parse_post(
    files: list[Path],
    md: MarkdownIt,
    settings: Settings,
    ids: Optional[IdSequence] = None,
    ) -> Optional[Post]:
    """Render one post folder. Front-matter problems raise FrontMatterError."""
    source = post_source(files)
    if source is None:
        return None
    ids = ids if ids is not None else IdSequence()

    fm, body = parse_frontmatter(source.index.read_text(encoding="utf-8"))
    rendered = render_markdown(md, body, slug=fm.slug, assets_dir=source.folder, ids=ids)

    tldr = ""
    if source.tldr is not None:
        _, tldr_body = split_frontmatter(source.tldr.read_text(encoding="utf-8"))
        tldr = render_markdown(md, tldr_body, slug=fm.slug, assets_dir=source.folder, ids=ids).html

    return Post(html=rendered.html, tldr=tldr, metadata=build_metadata(fm, rendered, settings, source.index))


def _parse_checked(files: list[Path], md: MarkdownIt, settings: Settings, position: int) -> Optional[Post]:
    try:
        return parse_post(files, md, settings, IdSequence.for_post(position))
    except FrontMatterError:
        raise
    except Exception as e:
        raise RuntimeError(f"Failed to parse {files[0].parent}: {e}") from e


def _fingerprint(settings: Settings, position: int) -> str:
    """Cache fingerprint for the post at position; a moved post no longer matches its old id range."""
    return render_fingerprint(settings, IdSequence.for_post(position).start)


async def read_posts(
    root: Path,
    settings: Settings,
    md: Optional[MarkdownIt] = None,
    session: Optional[Session] = None,
    ) -> list[Post]:
    """Parse every post under root, newest first, with links and series filled in.

    Uncached posts are parsed concurrently in worker threads. Code-group ids
    come from a range reserved by the post's position in discovery order, so
    output does not depend on scheduling. When a session is given, fresh
    cache entries replace parsing and new renders are stored; the cache is
    only touched from this coroutine. An entry is only reused when it was
    rendered with the same settings and the same id range.
    """
    md = md or make_parser(settings)
    groups = discover_post_dirs(root)
    logger.info("Reading %d folder(s) under %s", len(groups), root)

    posts: list[Optional[Post]] = [None] * len(groups)
    pending: list[tuple[int, list[Path], PostSource]] = []
    hits = 0
    for position, (folder, files) in enumerate(groups):
        source = post_source(files)
        if source is None:
            continue
        if session is not None:
            cached = get_cached(session, folder.name, source.mtime, _fingerprint(settings, position))
            if cached is not None:
                logger.debug("Cache hit: %s", folder.name)
                posts[position] = cached
                hits += 1
                continue
        pending.append((position, files, source))

    results = await asyncio.gather(
        *(asyncio.to_thread(_parse_checked, files, md, settings, position) for position, files, _ in pending),
        return_exceptions=True,
    )

    for (position, _, source), result in zip(pending, results):
        if isinstance(result, FrontMatterError):
            if not settings.skip_invalid:
                raise RuntimeError(f"Failed to parse {source.index}: {result}") from result
            logger.warning("Skipping %s: %s", source.index, result)
            continue
        if isinstance(result, BaseException):
            raise result
        posts[position] = result
        if session is not None and result is not None:
            put_cached(session, source.folder.name, result, source.mtime, _fingerprint(settings, position))
    if session is not None:
        session.commit()

    parsed = sorted((p for p in posts if p is not None), key=lambda p: p.metadata.date, reverse=True)
    add_post_links(parsed)
    add_series_information(parsed)
    logger.info("Read %d post(s), %d from cache", len(parsed), hits)
    return parsed

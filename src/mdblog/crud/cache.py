"""Get/put access to rendered posts, invalidated by source modification time and render inputs"""

import json
from datetime import datetime
from typing import Optional

from sqlmodel import Session

from mdblog.config import Settings
from mdblog.core.models import Post, PostMetadata
from mdblog.core.utils.hashing import md5
from mdblog.crud.models import CachedPost


# Settings that change a post's HTML or metadata. light_theme only affects the CSS files.
RENDER_FIELDS = (
    "base_path", "blog_path", "author", "creator_id", "dark_theme",
    "icon_path", "favicon_service", "image_format", "dev",
)


def render_fingerprint(settings: Settings, id_base: int = 0) -> str:
    """Digest of everything besides the source files that a cached render depends on."""
    inputs = {name: getattr(settings, name) for name in RENDER_FIELDS}
    inputs["id_base"] = id_base
    return md5(json.dumps(inputs, sort_keys=True))


def is_fresh(stored: float, current: float) -> bool:
    """An entry is valid iff its timestamp is set and not older than the source."""
    return stored != 0 and stored >= current


def get_cached(session: Session, slug: str, mtime: float, fingerprint: str = "") -> Optional[Post]:
    """Return the cached post for slug, or None when missing, stale, or rendered from other inputs."""
    entry = session.get(CachedPost, slug)
    if entry is None or not is_fresh(entry.modified, mtime) or entry.fingerprint != fingerprint:
        return None
    return Post(html=entry.html, tldr=entry.tldr, metadata=PostMetadata.model_validate(entry.meta))


def put_cached(session: Session, slug: str, post: Post, mtime: float, fingerprint: str = "") -> CachedPost:
    """Insert or replace the entry for slug. The caller commits."""
    entry = session.get(CachedPost, slug)
    if entry is None:
        entry = CachedPost(slug=slug, html=post.html)
    entry.html = post.html
    entry.tldr = post.tldr
    entry.meta = post.metadata.model_dump(mode="json")
    entry.modified = mtime
    entry.fingerprint = fingerprint
    entry.updated_at = datetime.now()
    session.add(entry)
    return entry

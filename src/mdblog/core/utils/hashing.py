"""Content hashing for stable DOM identifiers"""

import hashlib


def md5(content: str) -> str:
    """Return hex-encoded MD5 of content; used as a content-addressed anchor id, not for security."""
    return hashlib.md5(content.encode("utf-8")).hexdigest()

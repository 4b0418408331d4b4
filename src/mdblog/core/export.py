"""Export: write rendered posts, the site index, and theme CSS to the output directory"""

import json
from pathlib import Path

from mdblog.config import Settings
from mdblog.core.markdown.highlight import theme_css
from mdblog.core.metadata import order_tags
from mdblog.core.models import Post


INDEX_FILE = "index.json"
# Fields the listing page never reads
INDEX_EXCLUDE = {"toc", "outgoing_slugs"}


def build_index(posts: list[Post]) -> dict:
    """Listing payload: metadata without per-post detail, plus the ordered tag cloud."""
    entries = []
    for post in posts:
        entry = post.metadata.model_dump(mode="json", exclude=INDEX_EXCLUDE)
        entry["tldr"] = bool(post.tldr)
        entries.append(entry)
    tags = order_tags([tag for post in posts for tag in post.metadata.tags])
    return {"metadata": entries, "tags": tags}


def write_themes(output_dir: Path, settings: Settings) -> list[Path]:
    """Write ``dark.theme.css`` and ``light.theme.css``. Returns the written paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for scope, style in (("dark", settings.dark_theme), ("light", settings.light_theme)):
        path = output_dir / f"{scope}.theme.css"
        path.write_text(theme_css(scope, style), encoding="utf-8")
        written.append(path)
    return written


def write_site(posts: list[Post], output_dir: Path, settings: Settings) -> list[Path]:
    """Write one JSON file per post, the index, and the theme CSS.

    Layout:
      output_dir / blog_path / {slug}.json
      output_dir / blog_path / index.json
      output_dir / {dark,light}.theme.css
    """
    blog_dir = output_dir / settings.blog_path.strip("/")
    blog_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for post in posts:
        path = blog_dir / f"{post.metadata.slug}.json"
        path.write_text(post.model_dump_json(indent=2), encoding="utf-8")
        written.append(path)

    index_path = blog_dir / INDEX_FILE
    index_path.write_text(json.dumps(build_index(posts), indent=2, ensure_ascii=False), encoding="utf-8")
    written.append(index_path)

    written.extend(write_themes(output_dir, settings))
    return written

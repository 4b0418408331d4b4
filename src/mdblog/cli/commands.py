"""CLI command implementations"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdblog.config import Settings, load_config
from mdblog.core.export import write_site, write_themes
from mdblog.core.frontmatter import FrontMatterError, split_frontmatter
from mdblog.core.markdown.renderer import make_parser, render_markdown
from mdblog.core.pipeline import read_posts
from mdblog.crud.database import init_db, make_engine, reset_db
from mdblog.log import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def _flag(value: bool) -> Optional[bool]:
    """Only an explicitly set flag overrides config; False means 'not given'."""
    return True if value else None


def build_cmd(
    path: Annotated[Optional[str], typer.Argument(help="Directory holding one folder per post (default: content_dir)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    base_path: Annotated[Optional[str], typer.Option("--base-path", help="Site origin for canonical URLs")] = None,
    no_cache: Annotated[bool, typer.Option("--no-cache", help="Render every post, ignoring the post cache")] = False,
    dev: Annotated[bool, typer.Option("--dev", help="Skip git lookups for modified dates")] = False,
    skip_invalid: Annotated[bool, typer.Option("--skip-invalid", help="Skip posts with broken front matter")] = False,
    ):
    """Render every post under PATH to JSON, plus the site index and theme CSS."""
    settings = _settings(overrides={
        "output_dir": out, "base_path": base_path,
        "use_cache": False if no_cache else None,
        "dev": _flag(dev), "skip_invalid": _flag(skip_invalid),
    })
    root = Path(path or settings.content_dir)
    if not root.is_dir():
        _fail(f"Not a directory: {root}")

    try:
        md = make_parser(settings)
    except ValueError as e:
        _fail("Invalid theme", e)

    # --- parse ---
    try:
        if settings.use_cache:
            engine = make_engine(settings.db_url)
            init_db(engine)
            with Session(engine) as session:
                posts = asyncio.run(read_posts(root, settings, md, session))
        else:
            posts = asyncio.run(read_posts(root, settings, md))
    except RuntimeError as e:
        _fail(str(e))

    # --- export ---
    output_dir = Path(settings.output_dir)
    try:
        write_site(posts, output_dir, settings)
    except OSError as e:
        _fail("Export failed", e)
    for post in posts:
        typer.echo(f"  {post.metadata.slug}")
    typer.echo(f"Built {len(posts)} post(s) to {output_dir}/")


def render_cmd(
    file: Annotated[Path, typer.Argument(help="Markdown file to render", exists=True, dir_okay=False)],
    ):
    """Render a single markdown file and print the HTML."""
    settings = _settings()
    try:
        fm, body = split_frontmatter(file.read_text(encoding="utf-8"))
    except FrontMatterError as e:
        _fail(str(e))
    try:
        md = make_parser(settings)
    except ValueError as e:
        _fail("Invalid theme", e)
    result = render_markdown(md, body, slug=str(fm.get("slug", "")), assets_dir=file.parent)
    typer.echo(result.html, nl=False)


def theme_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    ):
    """Write the dark and light syntax theme CSS files."""
    settings = _settings(overrides={"output_dir": out})
    try:
        written = write_themes(Path(settings.output_dir), settings)
    except ValueError as e:
        _fail("Invalid theme", e)
    for p in written:
        typer.echo(f"  {p}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate the post cache")] = False,
    ):
    """Initialize the post cache. Use --reset to clear existing entries."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing cache cleared.")
    else:
        init_db(engine)
    typer.echo(f"Post cache initialized at: {settings.db_url}")

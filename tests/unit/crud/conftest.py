"""Shared fixtures for crud unit tests"""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdblog.core.models import LinkRef, Post, PostMetadata, TocEntry
from mdblog.crud.models import CachedPost  # noqa: F401


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="post")
def post_fixture():
    """A rendered post with nested metadata worth round-tripping."""
    return Post(
        html="<h2 id=\"intro\">Intro</h2>",
        tldr="<p>short</p>",
        metadata=PostMetadata(
            title="Cached",
            slug="cached",
            description="A cached post",
            date=date(2024, 4, 1),
            modified=date(2024, 4, 2),
            tags=["TypeScript"],
            canonical="/blog/cached",
            banner="/blog/cached/images/banner.png",
            toc=[TocEntry(description="Intro", level=2, slug="intro")],
            outgoing_slugs=["other"],
            outgoing_links=[LinkRef(slug="other", title="Other")],
        ),
    )

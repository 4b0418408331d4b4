"""Shared fixtures for core unit tests"""

from datetime import date

import pytest

from mdblog.config import Settings
from mdblog.core.markdown.renderer import make_parser, render_markdown
from mdblog.core.models import Post, PostMetadata, Series


SAMPLE_POST = """\
---
title: Sample Post
slug: sample-post
description: A post used across tests
date: 2024-05-01
tags: typescript, testing
---

## Getting started

:::warning
Be careful
:::

```ts{2}:app.ts
const a = 1;
const b = 2;
```
"""


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(dev=True)


@pytest.fixture(name="md")
def md_fixture(settings):
    return make_parser(settings)


@pytest.fixture(name="render")
def render_fixture(md):
    """Render a markdown body with the shared parser; keyword args go to render_markdown."""
    def _render(body: str, **kwargs):
        return render_markdown(md, body, **kwargs)
    return _render


@pytest.fixture(name="make_post")
def make_post_fixture():
    """Factory for minimal Posts with only the fields graph passes look at."""
    def _make(slug, title=None, outgoing=(), series=None, day=1):
        when = date(2024, 1, day)
        return Post(html="", metadata=PostMetadata(
            title=title or slug.title(),
            slug=slug,
            description="",
            date=when,
            modified=when,
            canonical=f"/blog/{slug}",
            banner=f"/blog/{slug}/images/banner.png",
            outgoing_slugs=list(outgoing),
            series=Series(name=series) if series else None,
        ))
    return _make

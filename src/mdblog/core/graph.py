"""Batch passes over the full post set: link graph and series membership.

Both passes mutate post metadata in place and are only meaningful once every
post has been parsed.
"""

from mdblog.core.models import LinkRef, Post, SeriesPost


def add_post_links(posts: list[Post]) -> None:
    """Fill incoming_links and outgoing_links from each post's outgoing_slugs.

    Entries are unique per slug and follow the order of ``posts``. Slugs that
    match no post are dropped.
    """
    outgoing = {p.metadata.slug: set(p.metadata.outgoing_slugs) for p in posts}
    for post in posts:
        slug = post.metadata.slug
        seen_in: set[str] = set()
        seen_out: set[str] = set()
        for other in posts:
            ref = LinkRef(slug=other.metadata.slug, title=other.metadata.title)
            if slug in outgoing[other.metadata.slug] and ref.slug not in seen_in:
                seen_in.add(ref.slug)
                post.metadata.incoming_links.append(ref)
            if ref.slug in outgoing[slug] and ref.slug not in seen_out:
                seen_out.add(ref.slug)
                post.metadata.outgoing_links.append(ref)


def add_series_information(posts: list[Post]) -> None:
    """Give each series member the ordered list of its series, oldest first."""
    by_series: dict[str, list[Post]] = {}
    for post in posts:
        if post.metadata.series:
            by_series.setdefault(post.metadata.series.name, []).append(post)

    for members in by_series.values():
        members = sorted(members, key=lambda p: p.metadata.date)
        for post in members:
            post.metadata.series_posts = [
                SeriesPost(
                    slug=p.metadata.slug,
                    title=p.metadata.title,
                    date=p.metadata.date,
                    order=i,
                    current=p.metadata.slug == post.metadata.slug,
                )
                for i, p in enumerate(members, start=1)
            ]

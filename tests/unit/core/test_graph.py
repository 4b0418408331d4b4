"""Unit tests for core/graph.py"""

from mdblog.core.graph import add_post_links, add_series_information
from mdblog.core.models import LinkRef


def test_links_are_symmetric(make_post):
    """If A links to B, B lists A as incoming and A lists B as outgoing."""
    a = make_post("a", "Post A", outgoing=["b"])
    b = make_post("b", "Post B")
    add_post_links([a, b])
    assert a.metadata.outgoing_links == [LinkRef(slug="b", title="Post B")]
    assert b.metadata.incoming_links == [LinkRef(slug="a", title="Post A")]
    assert a.metadata.incoming_links == []
    assert b.metadata.outgoing_links == []


def test_repeated_links_collapse(make_post):
    a = make_post("a", outgoing=["b", "b", "b"])
    b = make_post("b")
    add_post_links([a, b])
    assert len(a.metadata.outgoing_links) == 1
    assert len(b.metadata.incoming_links) == 1


def test_dangling_slugs_are_dropped(make_post):
    """Links to posts that do not exist produce no entries and no error."""
    a = make_post("a", outgoing=["missing", "b"])
    b = make_post("b")
    add_post_links([a, b])
    assert [ref.slug for ref in a.metadata.outgoing_links] == ["b"]


def test_links_follow_post_order(make_post):
    """Entries appear in the order posts were given."""
    hub = make_post("hub", outgoing=["c", "a", "b"])
    a, b, c = make_post("a", outgoing=["hub"]), make_post("b", outgoing=["hub"]), make_post("c", outgoing=["hub"])
    add_post_links([a, b, c, hub])
    assert [ref.slug for ref in hub.metadata.outgoing_links] == ["a", "b", "c"]
    assert [ref.slug for ref in hub.metadata.incoming_links] == ["a", "b", "c"]


def test_symmetry_over_many_posts(make_post):
    posts = [
        make_post("a", outgoing=["b", "c"]),
        make_post("b", outgoing=["c"]),
        make_post("c", outgoing=["a", "nowhere"]),
        make_post("d"),
    ]
    add_post_links(posts)
    by_slug = {p.metadata.slug: p for p in posts}
    for post in posts:
        for link in post.metadata.outgoing_links:
            incoming = by_slug[link.slug].metadata.incoming_links
            assert post.metadata.slug in [ref.slug for ref in incoming]


# --- series ---

def test_series_members_ordered_by_date(make_post):
    third = make_post("third", series="Deep Dive", day=20)
    first = make_post("first", series="Deep Dive", day=1)
    other = make_post("other", series="Other", day=5)
    second = make_post("second", series="Deep Dive", day=10)
    loose = make_post("loose")
    add_series_information([third, first, other, second, loose])

    series = second.metadata.series_posts
    assert [(s.slug, s.order) for s in series] == [("first", 1), ("second", 2), ("third", 3)]
    assert [s.current for s in series] == [False, True, False]
    assert [s.slug for s in other.metadata.series_posts] == ["other"]
    assert loose.metadata.series_posts == []

"""Unit tests for core/aggregate.py"""

from pathlib import PurePosixPath

from mdsite.config import Settings
from mdsite.core.aggregate import (
    build_aggregates, build_category_pages, build_feed, build_index, page_context, sort_posts,
)
from mdsite.core.layouts import TemplateRenderer
from mdsite.core.models import Layout
from mdsite.core.parse import parse_text
from mdsite.core.paths import output_path_for


def _post(converter, settings, path, date, title, extra=""):
    doc = parse_text(f"---\ntitle: {title}\ndate: {date}\n{extra}---\nFirst paragraph of {title}.\n", path, kind="post")
    doc = converter.convert(doc)
    doc.output_path = output_path_for(doc, settings)
    return doc


def test_sort_posts_newest_first(converter, settings):
    """Posts dated 2022-04-27 and 2021-10-15: the 2022 post is listed first."""
    older = _post(converter, settings, "_posts/a.md", "2021-10-15", "Older")
    newer = _post(converter, settings, "_posts/b.md", "2022-04-27", "Newer")
    assert [p.title for p in sort_posts([older, newer])] == ["Newer", "Older"]


def test_sort_posts_ties_by_source_path(converter, settings):
    b = _post(converter, settings, "_posts/b.md", "2022-01-01", "B")
    a = _post(converter, settings, "_posts/a.md", "2022-01-01", "A")
    c = _post(converter, settings, "_posts/c.md", "2022-01-01", "C")
    assert [p.title for p in sort_posts([c, b, a])] == ["A", "B", "C"]


def test_page_context_fields(converter, settings):
    doc = _post(converter, settings, "_posts/x.md", "2022-04-27", "X", "tags: [a]\n")
    ctx = page_context(doc)
    assert ctx["title"] == "X"
    assert ctx["url"] == "/2022/04/27/x.html"
    assert ctx["tags"] == ["a"]
    assert ctx["excerpt"] == "<p>First paragraph of X.</p>"
    assert ctx["source_path"] == "_posts/x.md"


def test_build_index_lists_in_order(converter, settings):
    posts = [
        _post(converter, settings, "_posts/old.md", "2021-10-15", "Old"),
        _post(converter, settings, "_posts/new.md", "2022-04-27", "New"),
    ]
    path, html = build_index(posts, TemplateRenderer({}), settings)
    assert path == PurePosixPath("index.html")
    assert html.index("New") < html.index("Old")
    assert '<a href="/2022/04/27/new.html">New</a>' in html


def test_build_index_escapes_titles(converter, settings):
    posts = [_post(converter, settings, "_posts/x.md", "2022-01-01", "'A <b> & C'")]
    _, html = build_index(posts, TemplateRenderer({}), settings)
    assert "A &lt;b&gt; &amp; C" in html


def test_build_index_wrapped_by_layout(converter):
    settings = Settings(site_title="Blog", index_layout="home")
    layouts = {"home": Layout(name="home", template="<main count={{ posts | length }}>{{ content }}</main>")}
    posts = [_post(converter, settings, "_posts/x.md", "2022-01-01", "X")]
    _, html = build_index(posts, TemplateRenderer(layouts, {"title": "Blog"}), settings)
    assert html.startswith("<main count=1><ul class=\"post-index\">")


def test_build_category_pages(converter):
    settings = Settings(site_title="Blog", category_pages=True)
    posts = [
        _post(converter, settings, "_posts/a.md", "2022-01-01", "A", "categories: [Rust, Databases]\n"),
        _post(converter, settings, "_posts/b.md", "2022-02-01", "B", "category: Rust\n"),
    ]
    pages = dict(build_category_pages(posts, TemplateRenderer({}), settings))
    assert sorted(str(p) for p in pages) == ["categories/databases/index.html", "categories/rust/index.html"]
    rust = pages[PurePosixPath("categories/rust/index.html")]
    assert rust.index(">B<") < rust.index(">A<")


def test_build_feed_uses_newest_post_date(converter, settings):
    posts = [
        _post(converter, settings, "_posts/old.md", "2021-10-15", "Old"),
        _post(converter, settings, "_posts/new.md", "2022-04-27", "New"),
    ]
    path, xml = build_feed(posts, TemplateRenderer({}, {"title": "Test Blog", "base_url": "https://blog.example"}), settings)
    assert path == PurePosixPath("feed.xml")
    assert "<updated>2022-04-27T00:00:00Z</updated>" in xml
    assert "<id>https://blog.example/2022/04/27/new.html</id>" in xml
    assert "&lt;p&gt;First paragraph of New.&lt;/p&gt;" in xml


def test_build_feed_limit(converter):
    settings = Settings(site_title="Blog", feed_limit=1)
    posts = [
        _post(converter, settings, "_posts/old.md", "2021-10-15", "Old"),
        _post(converter, settings, "_posts/new.md", "2022-04-27", "New"),
    ]
    _, xml = build_feed(posts, TemplateRenderer({}), settings)
    assert xml.count("<entry>") == 1


def test_build_aggregates_respects_settings(converter):
    settings = Settings(site_title="Blog", feed_path=None)
    pages = build_aggregates([], TemplateRenderer({}), settings)
    assert [str(p) for p, _ in pages] == ["index.html"]


def test_build_aggregates_without_index(converter):
    """A home page owns index_path, so only the feed is generated."""
    settings = Settings(site_title="Blog")
    pages = build_aggregates([], TemplateRenderer({}), settings, index=False)
    assert [str(p) for p, _ in pages] == ["feed.xml"]


def test_build_category_pages_unsluggable_name(converter):
    settings = Settings(site_title="Blog", category_pages=True)
    posts = [_post(converter, settings, "_posts/a.md", "2022-01-01", "A", "category: '!!!'\n")]
    pages = dict(build_category_pages(posts, TemplateRenderer({}), settings))
    assert list(pages) == [PurePosixPath("categories/uncategorized/index.html")]

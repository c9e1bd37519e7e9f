"""Aggregate pages: chronological post index, per-category listings, and the Atom feed"""

from datetime import datetime
from pathlib import PurePosixPath
from typing import Any

from mdsite.config import Settings
from mdsite.core.layouts import TemplateRenderer
from mdsite.core.models import Document
from mdsite.core.utils.slug import slugify


INDEX_TEMPLATE = """\
<ul class="post-index">
{%- for post in posts %}
  <li><time datetime="{{ post.date | date }}">{{ post.date | date }}</time> <a href="{{ post.url }}">{{ post.title | e }}</a></li>
{%- endfor %}
</ul>
"""

FEED_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>{{ site.title | e }}</title>
  <link href="{{ site.base_url }}/"/>
  <link rel="self" href="{{ feed_url }}"/>
  <id>{{ site.base_url }}/</id>
  <updated>{{ updated }}</updated>
{%- if site.author %}
  <author><name>{{ site.author | e }}</name></author>
{%- endif %}
{%- for post in posts %}
  <entry>
    <title>{{ post.title | e }}</title>
    <link href="{{ post.url | absolute_url }}"/>
    <id>{{ post.url | absolute_url }}</id>
    <updated>{{ post.date | date("%Y-%m-%dT%H:%M:%SZ") }}</updated>
    <summary type="html">{{ post.excerpt | e }}</summary>
  </entry>
{%- endfor %}
</feed>
"""


def page_context(doc: Document) -> dict[str, Any]:
    """Template-facing view of a document: its metadata plus derived fields."""
    ctx = dict(doc.metadata)
    ctx.update(
        title=doc.title,
        date=doc.date,
        slug=doc.slug,
        url=doc.url,
        kind=doc.kind,
        categories=doc.categories,
        tags=doc.tags,
        excerpt=doc.excerpt or "",
        source_path=str(doc.source_path),
    )
    return ctx


def sort_posts(posts: list[Document]) -> list[Document]:
    """Publish date descending; ties broken by source path ascending."""
    by_path = sorted(posts, key=lambda d: d.source_path.as_posix())
    return sorted(by_path, key=lambda d: d.date or datetime.min, reverse=True)


def render_listing(posts: list[Document], renderer: TemplateRenderer, layout: str | None,
                   page: dict[str, Any]) -> str:
    """Render the built-in post list, wrapped by layout (which also receives `posts`)."""
    entries = [page_context(p) for p in posts]
    body = renderer.render_string(INDEX_TEMPLATE, posts=entries, page=page)
    return renderer.render(body, layout, page, source=page.get("url", "<index>"), posts=entries)


def build_index(posts: list[Document], renderer: TemplateRenderer,
                settings: Settings) -> tuple[PurePosixPath, str]:
    path = PurePosixPath(settings.index_path)
    page = {"title": settings.site_title, "url": f"/{path}", "kind": "index"}
    return path, render_listing(sort_posts(posts), renderer, settings.index_layout, page)


def build_category_pages(posts: list[Document], renderer: TemplateRenderer,
                         settings: Settings) -> list[tuple[PurePosixPath, str]]:
    """One listing per category at <category_dir>/<slug>/index.html."""
    by_category: dict[str, list[Document]] = {}
    for post in posts:
        for category in post.categories:
            by_category.setdefault(category, []).append(post)

    pages = []
    for category in sorted(by_category):
        path = PurePosixPath(settings.category_dir) / slugify(category, default="uncategorized") / "index.html"
        page = {"title": category, "url": f"/{path}", "kind": "category", "category": category}
        pages.append((path, render_listing(sort_posts(by_category[category]), renderer, settings.index_layout, page)))
    return pages


def build_feed(posts: list[Document], renderer: TemplateRenderer,
               settings: Settings) -> tuple[PurePosixPath, str]:
    """Atom feed of the newest posts; `updated` is the newest post date, never the clock."""
    path = PurePosixPath(settings.feed_path)
    recent = sort_posts(posts)[:settings.feed_limit]
    newest = recent[0].date if recent else datetime(1970, 1, 1)
    text = renderer.render_string(
        FEED_TEMPLATE,
        posts=[page_context(p) for p in recent],
        updated=newest.strftime("%Y-%m-%dT%H:%M:%SZ"),
        feed_url=renderer.env.filters["absolute_url"](str(path)),
    )
    return path, text


def build_aggregates(posts: list[Document], renderer: TemplateRenderer, settings: Settings,
                     index: bool = True) -> list[tuple[PurePosixPath, str]]:
    """Every generated page for this build, in a fixed order.

    index=False leaves out the post index when an authored home page owns it.
    """
    pages = [build_index(posts, renderer, settings)] if index else []
    if settings.category_pages:
        pages.extend(build_category_pages(posts, renderer, settings))
    if settings.feed_path:
        pages.append(build_feed(posts, renderer, settings))
    return pages


def aggregate_paths(settings: Settings) -> set[PurePosixPath]:
    """Output paths reserved for generated pages that are known before any post is read."""
    paths = {PurePosixPath(settings.index_path)}
    if settings.feed_path:
        paths.add(PurePosixPath(settings.feed_path))
    return paths

"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import CONFIG_FILE
from mdsite.core.models import BuildReport, Site
from mdsite.core.pipeline import SiteBuilder, list_posts, load_site
from mdsite.core.utils.logs import setup_logging
from mdsite.errors import BuildError, SiteError


STARTER_CONFIG = """\
site_title: My Blog
base_url: https://example.com
description: ""
author: ""
output_dir: _site
default_layout: default
index_layout: default
# An index.md next to this file replaces the generated post index;
# its layout sees the same `posts` list.
feed_path: feed.xml
"""

STARTER_LAYOUTS = {
    "default.html": """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{% if page.title and page.title != site.title %}{{ page.title | e }} | {% endif %}{{ site.title | e }}</title>
  <link rel="alternate" type="application/atom+xml" href="{{ 'feed.xml' | absolute_url }}">
</head>
<body>
  <header><a href="{{ '/' | absolute_url }}">{{ site.title | e }}</a></header>
  <main>
{{ content }}
  </main>
</body>
</html>
""",
    "post.html": """\
---
layout: default
---
<article>
  <h1>{{ page.title | e }}</h1>
  <time datetime="{{ page.date | date }}">{{ page.date | date("%B %d, %Y") }}</time>
{{ content }}
</article>
""",
}


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _site(config: Optional[Path], overrides: dict = None) -> Site:
    """Load the site with standard CLI error handling."""
    try:
        return load_site(config, overrides=overrides)
    except SiteError as e:
        _fail(str(e))


def _echo_skipped(report: BuildReport) -> None:
    for item in report.skipped:
        typer.echo(f"  skipped: {item.source_path}: {item.reason}", err=True)


def build_cmd(
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Site config file")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Treat per-document failures as fatal")] = False,
    clean: Annotated[bool, typer.Option("--clean", help="Remove the output directory first")] = False,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Threads for per-document work")] = None,
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--no-drafts", help="Publish documents marked as drafts")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    ):
    """Build the site: parse -> convert -> render -> write, plus index and feed."""
    setup_logging(verbose)
    site = _site(config, overrides={"output_dir": out, "workers": workers, "include_drafts": drafts})
    try:
        report = SiteBuilder(site, strict=strict, clean=clean).build()
    except BuildError as e:
        _echo_skipped(e.report)
        _fail(str(e))
    except SiteError as e:
        _fail("Build failed", e)

    for page in report.pages:
        typer.echo(f"  {page}")
    _echo_skipped(report)
    typer.echo(
        f"Build complete - "
        f"{len(report.pages)} page(s), "
        f"{len(report.aggregates)} generated, "
        f"{len(report.assets)} asset(s), "
        f"{report.written} written, "
        f"{report.unchanged} unchanged, "
        f"{len(report.skipped)} skipped"
    )


def list_cmd(
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Site config file")] = None,
    ):
    """List posts in index order (newest first)."""
    site = _site(config)
    try:
        posts = list_posts(site)
    except SiteError as e:
        _fail("List failed", e)
    if not posts:
        typer.echo("No posts found.")
        raise typer.Exit(1)
    for post in posts:
        typer.echo(f"{post.date:%Y-%m-%d}  {post.title}  -> {post.output_path}")


def init_cmd(
    path: Annotated[Path, typer.Argument(help="Site directory to initialize")] = Path("."),
    ):
    """Write a starter config.yaml and layouts; existing files are left alone."""
    files = {Path(CONFIG_FILE): STARTER_CONFIG}
    files.update({Path("_layouts") / name: text for name, text in STARTER_LAYOUTS.items()})
    (path / "_posts").mkdir(parents=True, exist_ok=True)
    for rel, text in files.items():
        dest = path / rel
        if dest.exists():
            typer.echo(f"  exists: {rel}")
            continue
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(text, encoding="utf-8")
        typer.echo(f"  created: {rel}")
    typer.echo(f"Site initialized at: {path}")

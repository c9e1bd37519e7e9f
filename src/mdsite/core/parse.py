"""Source discovery and front matter parsing"""

import fnmatch
import logging
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from mdsite.core.models import Document, Site
from mdsite.core.utils.dates import date_from_filename, parse_date
from mdsite.errors import ParseError


logger = logging.getLogger(__name__)

DELIMITER = '---'
MD_EXTENSIONS = {'.md', '.markdown', '.mdx'}


def split_front_matter(text: str, source: str = '<string>') -> tuple[dict[str, Any], str]:
    """Return (metadata, body) with the leading `---` block removed.

    Without a leading delimiter line the metadata is empty and the body is
    the whole text, untouched.
    """
    text = text.lstrip('\ufeff')
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip('\r\n') != DELIMITER:
        return {}, text

    for i in range(1, len(lines)):
        if lines[i].rstrip('\r\n') == DELIMITER:
            block = ''.join(lines[1:i])
            body = ''.join(lines[i + 1:])
            break
    else:
        raise ParseError("Unterminated front matter block", source, line=1)

    try:
        meta = yaml.safe_load(block) if block.strip() else {}
    except (yaml.YAMLError, ValueError) as e:
        # PyYAML raises a bare ValueError for impossible timestamps (2022-02-30)
        raise ParseError(f"Invalid YAML front matter: {e}", source) from e
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ParseError(f"Invalid front matter: expected a mapping, got {type(meta).__name__}", source)
    return meta, body


def parse_text(text: str, source_path: PurePosixPath | str, kind: str = 'page') -> Document:
    """Parse document text into a Document; posts must carry a publish date."""
    source_path = PurePosixPath(source_path)
    metadata, body = split_front_matter(text, str(source_path))

    if kind == 'post' and metadata.get('date') is None:
        prefix = date_from_filename(source_path.name)
        if prefix is None:
            raise ParseError("Post has no date (front matter or YYYY-MM-DD- filename prefix)", source_path)
        metadata['date'] = prefix
    if metadata.get('date') is not None:
        try:
            parse_date(metadata['date'])
        except ValueError as e:
            raise ParseError(f"Invalid date: {e}", source_path) from e

    return Document(source_path=source_path, metadata=metadata, raw_body=body, kind=kind)


def _kind_for(rel: PurePosixPath, site: Site) -> str:
    posts = PurePosixPath(site.settings.posts_dir)
    return 'post' if rel.parts[:len(posts.parts)] == posts.parts else 'page'


def parse_file(path: Path, site: Site) -> Document:
    """Read and parse a single source file under site.source_dir."""
    rel = PurePosixPath(path.resolve().relative_to(site.source_dir).as_posix())
    try:
        with open(path, encoding='utf-8', newline='') as fh:
            text = fh.read()
    except UnicodeDecodeError as e:
        raise ParseError(f"Not valid UTF-8: {e}", rel) from e
    return parse_text(text, rel, _kind_for(rel, site))


def _excluded(path: Path, site: Site) -> bool:
    """True for hidden, underscore-prefixed (except posts), config, layout, output, or excluded paths."""
    source = site.source_dir
    if path == site.config_path or path.is_relative_to(site.output_dir) or path.is_relative_to(site.layouts_dir):
        return True
    rel = PurePosixPath(path.relative_to(source).as_posix())
    posts = PurePosixPath(site.settings.posts_dir)
    for i, part in enumerate(rel.parts):
        if part.startswith('.'):
            return True
        if part.startswith('_') and rel.parts[:i + 1] != posts.parts[:i + 1]:
            return True
    rel_str = rel.as_posix()
    return any(
        fnmatch.fnmatch(rel_str, pattern) or fnmatch.fnmatch(rel.name, pattern)
        for pattern in site.settings.exclude
    )


def discover_sources(site: Site) -> tuple[list[Path], list[Path]]:
    """Return sorted (documents, static assets) under site.source_dir."""
    source = site.source_dir
    if not source.is_dir():
        return [], []
    documents, assets = [], []
    for p in sorted(source.rglob('*')):
        if not p.is_file() or _excluded(p, site):
            continue
        (documents if p.suffix.lower() in MD_EXTENSIONS else assets).append(p)
    logger.debug("Discovered %d document(s) and %d asset(s) in %s", len(documents), len(assets), source)
    return documents, assets

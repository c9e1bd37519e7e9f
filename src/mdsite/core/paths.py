"""Output path assignment: a pure function of source path, metadata, and settings"""

from pathlib import PurePosixPath

from mdsite.config import Settings
from mdsite.core.models import Document
from mdsite.core.utils.slug import slugify
from mdsite.errors import ParseError


def _normalize(path: str, source: PurePosixPath) -> PurePosixPath:
    """Make a permalink relative, map trailing '/' to index.html, and forbid '..'."""
    directory = path.endswith('/')
    rel = PurePosixPath(path.strip('/') or 'index.html')
    if '..' in rel.parts:
        raise ParseError(f"Output path escapes the output directory: {path}", source)
    if directory and path.strip('/'):
        rel = rel / 'index.html'
    return rel


def output_path_for(doc: Document, settings: Settings) -> PurePosixPath:
    """Return the document's output path relative to the output directory.

    A `permalink` metadata value wins; posts use settings.permalink; pages
    mirror their source path with an .html suffix.
    """
    if doc.metadata.get('permalink'):
        return _normalize(str(doc.metadata['permalink']), doc.source_path)

    if doc.kind == 'post':
        published = doc.date
        categories = doc.categories
        path = settings.permalink.format(
            year=f"{published.year:04d}",
            month=f"{published.month:02d}",
            day=f"{published.day:02d}",
            slug=doc.slug,
            stem=doc.source_path.stem,
            category=slugify(categories[0], default="uncategorized") if categories else '',
        )
        return _normalize(path.replace('//', '/'), doc.source_path)

    return doc.source_path.with_suffix('.html')

"""Build-time data models: documents, layouts, the site aggregate, and the build report"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from mdsite.config import CONFIG_FILE, Settings
from mdsite.core.utils.dates import date_from_filename, parse_date
from mdsite.core.utils.slug import slugify


@dataclass
class Document:
    """One source document; rebuilt from disk on every build."""
    source_path:   PurePosixPath         # relative to the site's source_dir
    metadata:      dict[str, Any]
    raw_body:      str                   # body only (front matter stripped)
    kind:          str = "page"          # "post" or "page"
    rendered_body: Optional[str] = None  # HTML, set by the markup converter
    excerpt:       Optional[str] = None
    output_path:   Optional[PurePosixPath] = None

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or self.source_path.stem)

    @property
    def date(self) -> Optional[datetime]:
        value = self.metadata.get("date")
        return parse_date(value) if value is not None else None

    @property
    def slug(self) -> str:
        """Explicit `slug` metadata, else the file stem without a YYYY-MM-DD- prefix."""
        stem = self.source_path.stem
        if date_from_filename(stem):
            stem = stem[11:]
        fallback = slugify(stem, default="index")
        if self.metadata.get("slug"):
            return slugify(self.metadata["slug"], default=fallback)
        return fallback

    @property
    def layout(self) -> Optional[str]:
        value = self.metadata.get("layout")
        return str(value) if value else None

    @property
    def categories(self) -> list[str]:
        return _as_list(self.metadata.get("categories") or self.metadata.get("category"))

    @property
    def tags(self) -> list[str]:
        return _as_list(self.metadata.get("tags"))

    @property
    def is_draft(self) -> bool:
        return self.metadata.get("draft") is True or self.metadata.get("published") is False

    @property
    def url(self) -> str:
        return f"/{self.output_path}" if self.output_path else ""


def _as_list(value: Any) -> list[str]:
    """Normalize a list or whitespace/comma separated string into a list of strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v)]
    return [v for v in str(value).replace(",", " ").split() if v]


@dataclass(frozen=True)
class Layout:
    """A named template; `parent` forms an acyclic chain of wrapping layouts."""
    name:     str
    template: str
    parent:   Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)
    path:     Optional[Path] = None


@dataclass
class Site:
    """Global configuration plus the documents built during the current run."""
    settings:    Settings
    root:        Path
    config_file: Optional[Path] = None
    documents:   list[Document] = field(default_factory=list)

    @property
    def source_dir(self) -> Path:
        return (self.root / self.settings.source_dir).resolve()

    @property
    def output_dir(self) -> Path:
        return (self.root / self.settings.output_dir).resolve()

    @property
    def layouts_dir(self) -> Path:
        return (self.root / self.settings.layouts_dir).resolve()

    @property
    def config_path(self) -> Path:
        return (self.config_file or self.root / CONFIG_FILE).resolve()

    @property
    def posts(self) -> list[Document]:
        return [d for d in self.documents if d.kind == "post"]

    def context(self) -> dict[str, Any]:
        """Template-facing view of the site configuration."""
        s = self.settings
        return {
            "title": s.site_title,
            "base_url": s.base_url.rstrip("/"),
            "description": s.description,
            "author": s.author,
        }


@dataclass(frozen=True)
class SkippedDocument:
    source_path: str
    reason:      str


@dataclass
class BuildReport:
    pages:      list[PurePosixPath] = field(default_factory=list)
    aggregates: list[PurePosixPath] = field(default_factory=list)
    assets:     list[PurePosixPath] = field(default_factory=list)
    skipped:    list[SkippedDocument] = field(default_factory=list)
    written:    int = 0
    unchanged:  int = 0

    @property
    def ok(self) -> bool:
        return not self.skipped

    def skip(self, source_path, reason: str) -> None:
        self.skipped.append(SkippedDocument(str(source_path), reason))

"""Site build orchestration: discover -> parse -> convert -> render -> aggregate -> write"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Iterable

from mdsite.config import CONFIG_FILE, load_config
from mdsite.core.aggregate import aggregate_paths, build_aggregates, page_context, sort_posts
from mdsite.core.convert import MarkupConverter
from mdsite.core.export import clean_output_dir, copy_asset, write_text
from mdsite.core.layouts import TemplateRenderer, load_layouts
from mdsite.core.models import BuildReport, Document, Site
from mdsite.core.parse import discover_sources, parse_file
from mdsite.core.paths import output_path_for
from mdsite.errors import BuildError, ConfigError, LayoutNotFoundError, ParseError, RenderError


logger = logging.getLogger(__name__)

# Errors local to one document: logged, reported, and the document skipped.
DOCUMENT_ERRORS = (ParseError, RenderError, LayoutNotFoundError)


def load_site(config_path: Path = None, overrides: dict[str, Any] = None) -> Site:
    """Load settings from config_path and anchor relative directories at its parent."""
    config_path = Path(config_path or CONFIG_FILE).resolve()
    settings = load_config(config_path, overrides)
    return Site(settings=settings, root=config_path.parent, config_file=config_path)


class SiteBuilder:
    """Builds a Site into its output directory; one instance per configuration."""

    def __init__(self, site: Site, strict: bool = False, clean: bool = False):
        self.site = site
        self.settings = site.settings
        self.strict = strict
        self.clean = clean
        self.converter = MarkupConverter(self.settings.markup)

    def _map(self, fn: Callable, items: list) -> list:
        """Apply fn to items, in parallel when configured; results keep input order."""
        if self.settings.workers <= 1 or len(items) <= 1:
            return [fn(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
            return list(pool.map(fn, items))

    def _is_home(self, doc: Document) -> bool:
        """An authored page at index_path replaces the generated post index."""
        return doc.kind == "page" and doc.output_path == PurePosixPath(self.settings.index_path)

    def _reserved(self, path: PurePosixPath) -> bool:
        """True for output paths owned by generated pages."""
        if path in aggregate_paths(self.settings):
            return True
        if self.settings.category_pages:
            prefix = PurePosixPath(self.settings.category_dir).parts
            return path.parts[:len(prefix)] == prefix
        return False

    def render_document(self, path: Path, renderer: TemplateRenderer) -> tuple[Document, str | None] | None:
        """Parse, convert, place, and render one source file. None for unpublished drafts.

        The home page comes back unrendered (text None); its layouts need the
        full post list, which is only known once every document is parsed.
        """
        doc = parse_file(path, self.site)
        if doc.is_draft and not self.settings.include_drafts:
            logger.debug("Skipping draft %s", doc.source_path)
            return None
        doc = self.converter.convert(doc)
        doc.output_path = output_path_for(doc, self.settings)
        if self._is_home(doc):
            return doc, None
        return doc, self._render_layout(doc, renderer)

    def _render_layout(self, doc: Document, renderer: TemplateRenderer, **extra: Any) -> str:
        layout = doc.layout or self.settings.default_layout
        return renderer.render(doc.rendered_body, layout, page_context(doc), source=str(doc.source_path), **extra)

    def _try_render(self, renderer: TemplateRenderer) -> Callable:
        def run(path: Path):
            try:
                return self.render_document(path, renderer)
            except DOCUMENT_ERRORS as e:
                return e
        return run

    def build(self) -> BuildReport:
        """Run a full build and return the report.

        Raises ConfigError on structural failures and BuildError when strict
        and any document failed; nothing is written in either case.
        """
        site = self.site
        if site.output_dir == site.source_dir:
            raise ConfigError("output_dir must differ from source_dir")

        report = BuildReport()
        renderer = TemplateRenderer(load_layouts(site.layouts_dir), site.context())
        sources, assets = discover_sources(site)
        results = self._map(self._try_render(renderer), sources)

        site.documents = []
        outputs: dict[PurePosixPath, str] = {}
        claimed: dict[PurePosixPath, str] = {}
        home: Document | None = None
        for path, outcome in zip(sources, results):
            rel = path.relative_to(site.source_dir).as_posix()
            if outcome is None:
                continue
            if isinstance(outcome, Exception):
                logger.warning("Skipping %s: %s", rel, outcome)
                report.skip(rel, str(outcome))
                continue
            doc, text = outcome
            if doc.output_path in claimed:
                reason = f"output path {doc.output_path} already produced by {claimed[doc.output_path]}"
            elif self._reserved(doc.output_path) and not self._is_home(doc):
                reason = f"output path {doc.output_path} is reserved for a generated page"
            else:
                claimed[doc.output_path] = rel
                site.documents.append(doc)
                report.pages.append(doc.output_path)
                if text is None:
                    home = doc
                else:
                    outputs[doc.output_path] = text
                continue
            logger.warning("Skipping %s: %s", rel, reason)
            report.skip(rel, reason)

        if home is not None and not self._render_home(home, renderer, outputs, report):
            home = None

        if self.strict and report.skipped:
            raise BuildError(report)

        aggregates = build_aggregates(site.posts, renderer, self.settings, index=home is None)
        for out_path, text in aggregates:
            outputs[out_path] = text
            report.aggregates.append(out_path)

        asset_map: list[tuple[Path, PurePosixPath]] = []
        for path in assets:
            rel = PurePosixPath(path.relative_to(site.source_dir).as_posix())
            if rel in outputs:
                logger.warning("Skipping asset %s: output path already produced by a page", rel)
                report.skip(rel, f"output path {rel} already produced by a page")
                continue
            asset_map.append((path, rel))
            report.assets.append(rel)

        if self.clean:
            clean_output_dir(site.output_dir, site.root)
        self._write(outputs.items(), asset_map, report)
        logger.info(
            "Built %d page(s), %d generated page(s), %d asset(s); %d skipped",
            len(report.pages), len(report.aggregates), len(report.assets), len(report.skipped),
        )
        return report

    def _render_home(self, home: Document, renderer: TemplateRenderer,
                     outputs: dict[PurePosixPath, str], report: BuildReport) -> bool:
        """Render the home page with `posts` in its layout context; False if it failed."""
        posts = [page_context(p) for p in sort_posts(self.site.posts)]
        try:
            outputs[home.output_path] = self._render_layout(home, renderer, posts=posts)
            return True
        except DOCUMENT_ERRORS as e:
            rel = home.source_path.as_posix()
            logger.warning("Skipping %s: %s", rel, e)
            report.skip(rel, str(e))
            self.site.documents.remove(home)
            report.pages.remove(home.output_path)
            return False

    def _write(self, outputs: Iterable[tuple[PurePosixPath, str]],
               assets: list[tuple[Path, PurePosixPath]], report: BuildReport) -> None:
        out = self.site.output_dir
        changes = [write_text(out, rel, text) for rel, text in outputs]
        changes += [copy_asset(src, out, rel) for src, rel in assets]
        report.written = sum(changes)
        report.unchanged = len(changes) - report.written


def build_site(config_path: Path = None, strict: bool = False, clean: bool = False,
               overrides: dict[str, Any] = None) -> BuildReport:
    """Load the site config and run a full build."""
    return SiteBuilder(load_site(config_path, overrides), strict=strict, clean=clean).build()


def list_posts(site: Site) -> list[Document]:
    """Parse and convert every post (no layouts) and return them in index order.

    Posts that fail to parse are logged and left out.
    """
    posts = []
    converter = MarkupConverter(site.settings.markup)
    sources, _ = discover_sources(site)
    for path in sources:
        try:
            doc = parse_file(path, site)
            if doc.kind != "post" or (doc.is_draft and not site.settings.include_drafts):
                continue
            doc = converter.convert(doc)
        except ParseError as e:
            logger.warning("Skipping %s: %s", path, e)
            continue
        doc.output_path = output_path_for(doc, site.settings)
        posts.append(doc)
    return sort_posts(posts)

"""Named layouts: loading, parent-chain resolution, and Jinja2 rendering"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, Template, TemplateError, TemplateSyntaxError

from mdsite.core.parse import split_front_matter
from mdsite.core.models import Layout
from mdsite.core.utils.dates import parse_date
from mdsite.core.utils.slug import slugify
from mdsite.errors import ConfigError, LayoutCycleError, LayoutNotFoundError, ParseError, RenderError


logger = logging.getLogger(__name__)

LAYOUT_SUFFIXES = {'.html', '.htm', '.xml'}


def load_layouts(layouts_dir: Path) -> dict[str, Layout]:
    """Load every layout file in layouts_dir, keyed by file stem.

    A layout's own front matter may name a parent with `layout:`.
    """
    if not layouts_dir.is_dir():
        logger.debug("No layouts directory at %s", layouts_dir)
        return {}
    layouts: dict[str, Layout] = {}
    for path in sorted(layouts_dir.iterdir()):
        if not path.is_file() or path.suffix.lower() not in LAYOUT_SUFFIXES:
            continue
        if path.stem in layouts:
            raise ConfigError(f"Duplicate layout name '{path.stem}' in {layouts_dir}")
        try:
            meta, template = split_front_matter(path.read_text(encoding='utf-8'), str(path))
        except ParseError as e:
            raise ConfigError(f"Invalid layout {path.name}: {e.message}") from e
        parent = meta.get('layout')
        layouts[path.stem] = Layout(
            name=path.stem,
            template=template,
            parent=str(parent) if parent else None,
            metadata=meta,
            path=path,
        )
    return layouts


def resolve_chain(name: str, layouts: dict[str, Layout]) -> list[Layout]:
    """Walk name -> parent -> ... and return the layouts innermost first.

    Raises LayoutNotFoundError for a missing link and LayoutCycleError when
    any layout is reached twice.
    """
    chain: list[Layout] = []
    seen: list[str] = []
    current, referrer = name, None
    while current is not None:
        if current in seen:
            raise LayoutCycleError(seen + [current])
        layout = layouts.get(current)
        if layout is None:
            raise LayoutNotFoundError(current, referrer)
        seen.append(current)
        chain.append(layout)
        current, referrer = layout.parent, current
    return chain


def format_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    """Jinja filter: format a date, datetime, or ISO string."""
    if value is None or value == "":
        return ""
    if not isinstance(value, (date, datetime)):
        value = parse_date(value)
    return value.strftime(fmt)


class TemplateRenderer:
    """Composes rendered bodies with their layout chain."""

    def __init__(self, layouts: dict[str, Layout], site_context: dict[str, Any] = None):
        self.layouts = layouts
        self.site = site_context or {}
        self.env = Environment(autoescape=False, keep_trailing_newline=True)
        self.env.filters["date"] = format_date
        self.env.filters["slugify"] = slugify
        self.env.filters["absolute_url"] = self._absolute_url
        self._compiled: dict[str, Template] = {}
        for name, layout in layouts.items():
            try:
                self._compiled[name] = self.env.from_string(layout.template)
            except TemplateSyntaxError as e:
                raise ConfigError(f"Layout '{name}' line {e.lineno}: {e.message}") from e
        self.validate()

    def _absolute_url(self, path: str) -> str:
        base = str(self.site.get("base_url", "")).rstrip("/")
        return f"{base}/{str(path).lstrip('/')}"

    def validate(self) -> None:
        """Check every chain; cycles abort, missing parents only warn."""
        for name in sorted(self.layouts):
            try:
                resolve_chain(name, self.layouts)
            except LayoutNotFoundError as e:
                logger.warning("Layout '%s' is unusable: %s", name, e)

    def resolve(self, name: str) -> list[Layout]:
        return resolve_chain(name, self.layouts)

    def render_string(self, template: str, **context: Any) -> str:
        """Render a standalone template string with the site context."""
        return self.env.from_string(template).render(site=self.site, **context)

    def render(self, content: str, layout_name: str | None, page: dict[str, Any] = None,
               source: str = '<string>', **extra: Any) -> str:
        """Wrap content with layout_name and each of its parents, innermost first."""
        if layout_name is None:
            return content
        for layout in self.resolve(layout_name):
            try:
                content = self._compiled[layout.name].render(
                    content=content, page=page or {}, site=self.site, layout=layout.metadata, **extra
                )
            except (TemplateError, ValueError, TypeError) as e:
                raise RenderError(f"Layout '{layout.name}': {e}", source) from e
        return content

"""Site configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from mdsite.errors import ConfigError


CONFIG_FILE = "config.yaml"

# Fields that may be set from MDSITE_<FIELD> environment variables (scalars only).
ENV_FIELDS = (
    "site_title", "base_url", "description", "author",
    "source_dir", "output_dir", "layouts_dir", "posts_dir",
    "default_layout", "index_layout", "permalink", "feed_path",
    "feed_limit", "include_drafts", "category_pages", "workers",
)


class MarkupOptions(BaseModel):
    preset:      Literal["commonmark", "default", "zero", "gfm-like", "js-default"] = "gfm-like"
    linkify:     bool = Field(default=False, description="Autolink bare URLs (needs linkify-it-py)")
    typographer: bool = Field(default=False, description="Smart quotes and dashes")
    html:        bool = Field(default=True,  description="Allow raw HTML in sources")


class Settings(BaseModel):
    site_title:     str
    base_url:       str = ""
    description:    str = ""
    author:         str = ""
    source_dir:     str = Field(default=".",        description="Directory scanned for documents")
    output_dir:     str = Field(default="_site",    description="Directory receiving rendered output")
    layouts_dir:    str = Field(default="_layouts", description="Directory of named layout templates")
    posts_dir:      str = Field(default="_posts",   description="Directory (relative to source_dir) holding dated posts")
    default_layout: Optional[str] = Field(default=None, description="Layout for documents that name none")
    permalink:      str = Field(default="{year}/{month}/{day}/{slug}.html", description="Output path pattern for posts")
    index_path:     str = "index.html"
    index_layout:   Optional[str] = Field(default=None, description="Layout wrapping the post index")
    category_pages: bool = False
    category_dir:   str = "categories"
    feed_path:      Optional[str] = Field(default="feed.xml", description="Atom feed path; null disables")
    feed_limit:     int = Field(default=20, ge=1)
    include_drafts: bool = False
    exclude:        list[str] = Field(default_factory=lambda: ["README.md", "LICENSE*"])
    workers:        int = Field(default=1, ge=1, le=32, description="Threads used for per-document work")
    markup:         MarkupOptions = Field(default_factory=MarkupOptions)

    @field_validator("permalink")
    @classmethod
    def _check_permalink(cls, value: str) -> str:
        try:
            value.format(year="2000", month="01", day="01", slug="s", stem="s", category="c")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"unknown placeholder in permalink: {e}") from e
        return value


def load_config(path: Path = None, overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    path = Path(path or CONFIG_FILE)
    if not path.is_file():
        raise ConfigError(f"Missing site config: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")

    for name in ENV_FIELDS:
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid {path.name}: {e}") from e

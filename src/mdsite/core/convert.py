"""Markdown body to HTML conversion with markdown-it"""

import re
import threading
from dataclasses import replace

from markdown_it import MarkdownIt

from mdsite.config import MarkupOptions
from mdsite.core.models import Document
from mdsite.core.utils.tokens import heading_level, inline_text
from mdsite.errors import ParseError


FENCE_RE = re.compile(r'^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$')


def _make_parser(options: MarkupOptions) -> MarkdownIt:
    """Build a MarkdownIt instance for the configured preset and options."""
    md = MarkdownIt(options.preset, options_update={
        "linkify": options.linkify,
        "typographer": options.typographer,
        "html": options.html,
    })
    if options.typographer:
        md.enable(["replacements", "smartquotes"])
    return md


def check_fences(text: str, source: str = '<string>') -> None:
    """Raise ParseError if a fenced code block is opened but never closed.

    Fences are indented at most three spaces; deeper lines belong to an
    indented code block. A closing fence uses the opening character, is at
    least as long, and has no info string. Backtick info strings may not
    contain backticks.
    """
    opened: tuple[str, int, int] | None = None   # (char, length, line number)
    for lineno, line in enumerate(text.splitlines(), start=1):
        m = FENCE_RE.match(line)
        if not m:
            continue
        fence, info = m.group('fence'), m.group('info')
        if opened is None:
            if fence[0] == '`' and '`' in info:
                continue
            opened = (fence[0], len(fence), lineno)
        elif fence[0] == opened[0] and len(fence) >= opened[1] and not info.strip():
            opened = None
    if opened is not None:
        raise ParseError(f"Unterminated code fence opened with {opened[0] * opened[1]}", source, line=opened[2])


class MarkupConverter:
    """Converts Document bodies to HTML; stateless apart from the parser config."""

    def __init__(self, options: MarkupOptions = None):
        self.options = options or MarkupOptions()
        self._local = threading.local()

    @property
    def md(self) -> MarkdownIt:
        """Per-thread parser; markdown-it compiles its rule cache lazily."""
        md = getattr(self._local, "md", None)
        if md is None:
            md = self._local.md = _make_parser(self.options)
        return md

    def render(self, text: str, source: str = '<string>') -> str:
        """Return HTML for a markdown string."""
        check_fences(text, source)
        return self.md.render(text)

    def convert(self, doc: Document) -> Document:
        """Return a copy of doc with rendered_body, excerpt, and a fallback title."""
        source = str(doc.source_path)
        check_fences(doc.raw_body, source)
        env: dict = {}
        tokens = self.md.parse(doc.raw_body, env)
        html = self.md.renderer.render(tokens, self.md.options, env)

        metadata = dict(doc.metadata)
        if not metadata.get('title'):
            title = _first_heading(tokens)
            if title:
                metadata['title'] = title

        excerpt = doc.metadata.get('excerpt')
        if excerpt is None:
            excerpt = self._first_paragraph(tokens, env)
        return replace(doc, metadata=metadata, rendered_body=html, excerpt=str(excerpt))

    def _first_paragraph(self, tokens: list, env: dict) -> str:
        """Render the first top-level paragraph, or '' if there is none."""
        for i, tok in enumerate(tokens):
            if tok.type == 'paragraph_open' and tok.level == 0:
                end = next(j for j in range(i, len(tokens)) if tokens[j].type == 'paragraph_close')
                return self.md.renderer.render(tokens[i:end + 1], self.md.options, env).strip()
        return ''


def _first_heading(tokens: list) -> str | None:
    """Text of the first level-1 heading, if any."""
    for i, tok in enumerate(tokens):
        if heading_level(tok) == 1 and i + 1 < len(tokens):
            return inline_text(tokens[i + 1]) or None
    return None

"""Slug generation for output paths and category pages"""

import re


_UNSAFE = re.compile(r'[^\w\s-]')
_SEPARATORS = re.compile(r'[\s_-]+')


def slugify(text, default: str = '') -> str:
    """Lowercase, hyphen-separated URL segment for text.

    Titles, file stems and category names all pass through here. When nothing
    URL-safe remains (`"!!!"`, `""`), default is returned so a path segment
    never collapses to nothing.
    """
    slug = _SEPARATORS.sub('-', _UNSAFE.sub('', str(text).lower())).strip('-')
    return slug or default

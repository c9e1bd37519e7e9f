"""Root test configuration: a throwaway site tree per test"""

import os
from pathlib import Path

import pytest


BASE_CONFIG = """\
site_title: Test Blog
base_url: https://blog.example
"""

DEFAULT_LAYOUT = """\
<html><title>{{ page.title }}</title><body>
{{ content }}
</body></html>
"""

POST_LAYOUT = """\
---
layout: default
---
<article data-date="{{ page.date | date }}">
{{ content }}
</article>
"""


def _write(root: Path, rel: str, text: str) -> Path:
    """Write text under root, creating parent directories."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture(name="write")
def write_fixture():
    """Helper: write(root, rel, text) creates a file and its parent directories."""
    return _write


@pytest.fixture(name="site_root")
def site_root_fixture(tmp_path):
    """A minimal site: config.yaml plus `default` and `post` layouts."""
    _write(tmp_path, "config.yaml", BASE_CONFIG)
    _write(tmp_path, "_layouts/default.html", DEFAULT_LAYOUT)
    _write(tmp_path, "_layouts/post.html", POST_LAYOUT)
    return tmp_path


@pytest.fixture(autouse=True)
def clear_mdsite_env(monkeypatch):
    """Keep MDSITE_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("MDSITE_"):
            monkeypatch.delenv(name)

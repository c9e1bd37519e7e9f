"""Shared fixtures for core unit tests"""

import pytest

from mdsite.config import MarkupOptions, Settings
from mdsite.core.convert import MarkupConverter


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

```python
print("hello")
```
"""

SAMPLE_FM_MD = """\
---
title: Test Doc
slug: test-doc
tags: [a, b]
---

# Title

Body content.
"""


@pytest.fixture(name="converter")
def converter_fixture():
    return MarkupConverter(MarkupOptions())


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(site_title="Test Blog", base_url="https://blog.example")


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_fm_md")
def sample_fm_md_fixture():
    return SAMPLE_FM_MD

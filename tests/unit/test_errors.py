"""Unit tests for errors.py"""

from mdsite.errors import ConfigError, LayoutCycleError, LayoutNotFoundError, ParseError, SiteError


def test_parse_error_names_source_and_line():
    e = ParseError("bad fence", "_posts/x.md", line=4)
    assert str(e) == "_posts/x.md:4: bad fence"
    assert e.source == "_posts/x.md"


def test_layout_errors_are_config_errors():
    assert issubclass(LayoutNotFoundError, ConfigError)
    assert issubclass(LayoutCycleError, ConfigError)
    assert issubclass(ConfigError, SiteError)


def test_layout_cycle_message():
    assert str(LayoutCycleError(["a", "b", "a"])) == "Layout cycle detected: a -> b -> a"

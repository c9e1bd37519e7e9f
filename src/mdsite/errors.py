"""Build error taxonomy: per-document vs structural failures"""

from pathlib import PurePath


class SiteError(Exception):
    """Base exception for all mdsite errors."""


class ParseError(SiteError):
    """Malformed front matter or markup in a single document. The document is skipped."""

    def __init__(self, message: str, source: PurePath | str, line: int | None = None):
        self.message = message
        self.source = str(source)
        self.line = line
        where = f"{self.source}:{line}" if line is not None else self.source
        super().__init__(f"{where}: {message}")


class RenderError(SiteError):
    """A layout failed while rendering one document. The document is skipped."""

    def __init__(self, message: str, source: PurePath | str):
        self.message = message
        self.source = str(source)
        super().__init__(f"{self.source}: {message}")


class ConfigError(SiteError):
    """Structural misconfiguration; aborts the build unless a subclass says otherwise."""


class LayoutNotFoundError(ConfigError):
    """A named layout (or one of its parents) does not exist. Fatal for that document only."""

    def __init__(self, name: str, referrer: str | None = None):
        self.name = name
        self.referrer = referrer
        if referrer:
            super().__init__(f"Layout '{name}' (parent of '{referrer}') not found")
        else:
            super().__init__(f"Layout '{name}' not found")


class LayoutCycleError(ConfigError):
    """A layout chain reaches the same layout twice."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(f"Layout cycle detected: {' -> '.join(chain)}")


class BuildError(SiteError):
    """Strict build aborted because at least one document failed."""

    def __init__(self, report):
        self.report = report
        super().__init__(f"{len(report.skipped)} document(s) failed in strict mode")

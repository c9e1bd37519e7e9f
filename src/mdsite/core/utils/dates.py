"""Publish-date normalization for front matter values"""

import re
from datetime import date, datetime, timezone
from typing import Any


FILENAME_DATE_RE = re.compile(r'^(\d{4}-\d{2}-\d{2})-')


def parse_date(value: Any) -> datetime:
    """Return a naive UTC datetime for a YAML date, datetime, or ISO string.

    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        return parse_date(datetime.fromisoformat(value.strip()))
    raise ValueError(f"not a date: {value!r}")


def date_from_filename(name: str) -> str | None:
    """Return the YYYY-MM-DD prefix of a Jekyll-style post filename, if any."""
    m = FILENAME_DATE_RE.match(name)
    return m.group(1) if m else None

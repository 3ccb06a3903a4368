"""Date keys and paths.

A calendar date has three string forms:

- canonical key ``YYYY-MM-DD`` (what callers see)
- hierarchical path ``YYYY/MM/DD`` (local storage key suffix)
- entry file path ``YYYY/MM/DD.txt`` (remote file, relative to the journal root)

Parsing never returns a wrong date: impossible dates such as month 13 or
February 30 are rejected rather than rolled over.
"""

from __future__ import annotations

import calendar
import re
from datetime import date

from daybook.core.exceptions import InvalidPathError

DEFAULT_EXTENSION = ".txt"

_KEY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_PATH_RE = re.compile(r"^(\d{4})/(\d{2})/(\d{2})$")


def _build(year: str, month: str, day: str) -> date | None:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def date_to_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def key_to_date(key: str) -> date | None:
    """Parse ``YYYY-MM-DD``. Returns None for anything malformed."""
    match = _KEY_RE.match(key.strip()) if isinstance(key, str) else None
    if not match:
        return None
    return _build(*match.groups())


def date_to_path(d: date) -> str:
    return f"{d.year:04d}/{d.month:02d}/{d.day:02d}"


def path_to_date(path: str) -> date | None:
    """Parse ``YYYY/MM/DD``. Returns None for anything malformed."""
    match = _PATH_RE.match(path) if isinstance(path, str) else None
    if not match:
        return None
    return _build(*match.groups())


def entry_file_path(d: date, extension: str = DEFAULT_EXTENSION) -> str:
    return f"{date_to_path(d)}{extension}"


def parse_entry_file_path(path: str, extension: str = DEFAULT_EXTENSION) -> date:
    """Parse the trailing ``YYYY/MM/DD.txt`` of a remote path.

    Raises:
        InvalidPathError: The path does not end in the date pattern, or it
            names a date that does not exist.
    """
    pattern = re.compile(r"(\d{4})/(\d{2})/(\d{2})" + re.escape(extension) + r"$")
    match = pattern.search(path)
    if not match:
        raise InvalidPathError(f"Invalid path format: {path}")
    parsed = _build(*match.groups())
    if parsed is None:
        raise InvalidPathError(f"Path does not name a calendar date: {path}")
    return parsed


def month_prefix(year: int, month: int) -> str:
    """Hierarchical prefix for one month, e.g. ``2024/03/``. Month is 1-based."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    return f"{year:04d}/{month:02d}/"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]

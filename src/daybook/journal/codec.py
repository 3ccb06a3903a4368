"""Entry codec: JournalEntry <-> YAML text.

The stored form is a YAML mapping with optional ``text`` and ``tags``
fields. Only non-default fields are written, and empty entries encode to
``None`` (nothing to persist).
"""

from __future__ import annotations

from typing import Any

import yaml
from loguru import logger

from daybook.core.exceptions import DecodeError

from .models import EMPTY_ENTRY, JournalEntry

# Unicode line breaks a YAML reader folds unless they are escaped
_UNICODE_BREAKS = ("\x85", "\u2028", "\u2029")


class _EntryDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if any(ch in data for ch in _UNICODE_BREAKS):
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_str(data)


_EntryDumper.add_representer(str, _represent_str)


def entry_from_mapping(data: Any) -> JournalEntry:
    """Build an entry from an already-parsed document, dropping bad fields."""
    if not isinstance(data, dict):
        return EMPTY_ENTRY

    text = data.get("text")
    if not isinstance(text, str):
        text = ""

    raw_tags = data.get("tags")
    tags = [t for t in raw_tags if isinstance(t, str)] if isinstance(raw_tags, list) else []

    return JournalEntry(text=text, tags=tags)


def entry_to_mapping(entry: JournalEntry) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if entry.text:
        result["text"] = entry.text
    if entry.tags:
        result["tags"] = list(entry.tags)
    return result


def decode_strict(raw: str) -> JournalEntry:
    """Parse stored content.

    Raises:
        DecodeError: The content is not parseable YAML.
    """
    try:
        data = yaml.safe_load(raw) if raw else None
    except (yaml.YAMLError, ValueError) as e:
        raise DecodeError(f"Malformed entry content: {e}") from e
    return entry_from_mapping(data)


def decode(raw: str) -> JournalEntry:
    """Parse stored content, degrading to an empty entry instead of raising."""
    try:
        return decode_strict(raw)
    except DecodeError as e:
        logger.warning(str(e))
        return EMPTY_ENTRY


def encode(entry: JournalEntry) -> str | None:
    """Serialize an entry, or return None when it is empty."""
    if entry.is_empty:
        return None
    return yaml.dump(
        entry_to_mapping(entry),
        Dumper=_EntryDumper,
        allow_unicode=True,
        default_flow_style=False,
        sort_keys=False,
        width=float("inf"),
    )

"""User-facing journal exports.

Read-only views over :meth:`JournalStore.export_all`: JSON records, a
quoted CSV with a text preview, and a human-readable block format.
None of these take part in sync.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone

from loguru import logger

from daybook.core.exceptions import DecodeError, InvalidPathError

from .codec import decode_strict
from .config import ExportConfig
from .dates import date_to_key, parse_entry_file_path
from .models import JournalEntry
from .store import JournalStore

EXPORT_FORMATS = ("json", "csv", "text")

_MIME_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "text": "text/plain",
}

Record = tuple[str, str]


def mime_type_for(fmt: str) -> str:
    return _MIME_TYPES.get(fmt, "text/plain")


def _parsed_records(records: list[Record], extension: str) -> list[tuple[str, str, JournalEntry | None]]:
    """Resolve each record to (date key, raw, entry). Unparseable paths are dropped."""
    parsed = []
    for path, raw in records:
        try:
            day = parse_entry_file_path(path, extension)
        except InvalidPathError:
            logger.warning(f"Skipping export of unrecognised path: {path}")
            continue
        try:
            entry = decode_strict(raw)
        except DecodeError:
            entry = None
        parsed.append((date_to_key(day), raw, entry))
    return parsed


def export_as_json(records: list[Record], extension: str = ".txt") -> str:
    data = []
    for key, raw, entry in _parsed_records(records, extension):
        if entry is None:
            data.append({"date": key, "text": raw, "tags": []})
        else:
            data.append({"date": key, "text": entry.text, "tags": list(entry.tags)})
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_as_csv(records: list[Record], config: ExportConfig | None = None, extension: str = ".txt") -> str:
    config = config or ExportConfig()
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Date", "Text Preview", "Tags"])
    for key, raw, entry in _parsed_records(records, extension):
        text = entry.text if entry is not None else raw
        tags = config.tag_separator.join(entry.tags) if entry is not None else ""
        writer.writerow([key, text[: config.preview_length], tags])
    return buffer.getvalue().rstrip("\n")


def export_as_text(
    records: list[Record],
    config: ExportConfig | None = None,
    extension: str = ".txt",
    exported_at: datetime | None = None,
) -> str:
    config = config or ExportConfig()
    exported_at = exported_at or datetime.now(timezone.utc)
    lines = [f"# {config.title}", f"# Exported: {exported_at.isoformat()}", ""]
    for key, raw, _entry in _parsed_records(records, extension):
        lines.append(f"- date: {key}")
        lines.append("  content: |")
        lines.extend(f"    {line}" for line in raw.rstrip("\n").split("\n"))
        lines.append("")
    return "\n".join(lines)


async def export_journal(store: JournalStore, fmt: str, config: ExportConfig | None = None) -> str:
    """Render the whole journal in ``fmt`` (one of :data:`EXPORT_FORMATS`)."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format '{fmt}'. Expected one of: {', '.join(EXPORT_FORMATS)}")

    records = await store.export_all()
    extension = store.config.file_extension
    if fmt == "json":
        return export_as_json(records, extension)
    if fmt == "csv":
        return export_as_csv(records, config, extension)
    return export_as_text(records, config, extension)

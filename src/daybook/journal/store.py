"""Local journal store.

Maps calendar dates to entries on top of a key-value
:class:`~daybook.core.storage.StorageBackend`, and maintains the derived
tag index (``allTags``).

Layout::

    journal:2024/03/05   -> YAML entry (only ever non-empty)
    allTags              -> {"work": 12, "health": 3}

The tag index is never authoritative. Every ``save`` rebuilds it from a full
scan of the entry records, so it always equals what a fresh tally would give.
Read paths degrade to empty results on storage or decode failures; write
paths raise.
"""

from __future__ import annotations

import asyncio
import json
from collections import Counter
from contextlib import asynccontextmanager
from datetime import date

from loguru import logger

from daybook.core.exceptions import DecodeError
from daybook.core.storage import StorageBackend, StorageError

from .codec import decode_strict, encode
from .config import StoreConfig
from .dates import date_to_key, date_to_path, entry_file_path, month_prefix, parse_entry_file_path, path_to_date
from .models import EMPTY_ENTRY, JournalEntry


class JournalStore:
    """Dated journal entries over a key-value backend.

    Concurrent saves to the same date are serialized; saves to different
    dates run independently. Tag index rebuilds are serialized so the final
    index reflects the last write.

    Example::

        store = JournalStore(LocalStorage("~/.daybook-data/storage"))
        await store.save(date(2024, 3, 5), JournalEntry("Met Alice", ["work"]))
        entry = await store.load(date(2024, 3, 5))
    """

    def __init__(self, storage: StorageBackend, config: StoreConfig | None = None):
        self.storage = storage
        self.config = config or StoreConfig()
        self._date_locks: dict[str, asyncio.Lock] = {}
        self._date_lock_users: dict[str, int] = {}
        self._index_lock = asyncio.Lock()

    # -- keys ---------------------------------------------------------------

    def _key(self, day: date) -> str:
        return f"{self.config.key_prefix}{date_to_path(day)}"

    def _date_from_key(self, key: str) -> date | None:
        return path_to_date(key[len(self.config.key_prefix) :])

    @asynccontextmanager
    async def _date_lock(self, key: str):
        """Hold the per-date lock; it is dropped once nobody holds or awaits it."""
        lock = self._date_locks.setdefault(key, asyncio.Lock())
        self._date_lock_users[key] = self._date_lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._date_lock_users[key] -= 1
            if not self._date_lock_users[key]:
                del self._date_lock_users[key]
                del self._date_locks[key]

    async def _entry_keys(self, prefix: str = "") -> list[str]:
        full_prefix = f"{self.config.key_prefix}{prefix}"
        return [key async for key in self.storage.list_keys(full_prefix)]

    async def _entry_dates(self) -> list[date]:
        dates = []
        for key in await self._entry_keys():
            day = self._date_from_key(key)
            if day is None:
                logger.debug(f"Skipping malformed journal key: {key}")
                continue
            dates.append(day)
        return dates

    # -- entries ------------------------------------------------------------

    async def load(self, day: date) -> JournalEntry:
        """Return the entry for ``day``; empty when absent or unreadable."""
        key = self._key(day)
        try:
            raw = await self.storage.get(key)
        except StorageError as e:
            logger.error(f"Error loading entry {key}: {e}")
            return EMPTY_ENTRY

        if raw is None:
            return EMPTY_ENTRY
        try:
            return decode_strict(raw)
        except DecodeError as e:
            logger.warning(f"Treating unreadable entry {key} as empty: {e}")
            return EMPTY_ENTRY

    async def save(self, day: date, entry: JournalEntry) -> None:
        """Persist ``entry`` for ``day`` and reconcile the tag index.

        An empty entry deletes the record; deleting an absent record is a no-op.

        Raises:
            StorageError: The backend failed to write or delete, or a record
                could not be re-read while rebuilding the tag index.
        """
        key = self._key(day)
        raw = encode(entry)
        async with self._date_lock(key):
            try:
                if raw is None:
                    await self.storage.delete(key)
                else:
                    await self.storage.set(key, raw)
            except StorageError as e:
                logger.error(f"Error saving entry {key}: {e}")
                raise

        await self.rebuild_tag_index()

    async def list_entry_dates(self) -> set[str]:
        """Canonical ``YYYY-MM-DD`` keys of every stored entry (unordered)."""
        return {date_to_key(day) for day in await self._entry_dates()}

    async def list_entries_for_month(self, year: int, month: int) -> dict[int, JournalEntry]:
        """Entries of one month keyed by day of month. ``month`` is 1-based."""
        entries: dict[int, JournalEntry] = {}
        for key in await self._entry_keys(month_prefix(year, month)):
            day = self._date_from_key(key)
            if day is None:
                continue
            entry = await self.load(day)
            if not entry.is_empty:
                entries[day.day] = entry
        return entries

    async def get_entries_with_tag(self, tag: str) -> list[tuple[date, JournalEntry]]:
        """Entries carrying ``tag``, newest first."""
        results = []
        for day in await self._entry_dates():
            entry = await self.load(day)
            if entry.has_tag(tag):
                results.append((day, entry))
        results.sort(key=lambda item: item[0], reverse=True)
        return results

    # -- tag index ----------------------------------------------------------

    async def get_tag_index(self) -> dict[str, int]:
        """The persisted tag -> count index, or ``{}`` if never built."""
        try:
            raw = await self.storage.get(self.config.tag_index_key)
        except StorageError as e:
            logger.error(f"Error reading tag index: {e}")
            return {}
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed tag index: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(tag): count for tag, count in data.items() if isinstance(count, int)}

    async def compute_tag_index(self) -> dict[str, int]:
        """Tally tags across every stored entry without persisting.

        Unreadable records count as untagged.

        Raises:
            StorageError: A record could not be read.
        """
        counts: Counter[str] = Counter()
        for day in sorted(await self._entry_dates()):
            key = self._key(day)
            raw = await self.storage.get(key)
            if raw is None:
                continue
            try:
                entry = decode_strict(raw)
            except DecodeError as e:
                logger.warning(f"Counting unreadable entry {key} as untagged: {e}")
                continue
            counts.update(entry.tags)
        return dict(counts)

    async def rebuild_tag_index(self) -> dict[str, int]:
        """Recompute the tag index from a full scan and persist it."""
        async with self._index_lock:
            try:
                index = await self.compute_tag_index()
                await self.storage.set(self.config.tag_index_key, json.dumps(index))
            except StorageError as e:
                logger.error(f"Error updating tag index: {e}")
                raise
        return index

    # -- sync surface -------------------------------------------------------

    async def export_all(self) -> list[tuple[str, str]]:
        """Every stored record as ``(YYYY/MM/DD.txt, raw content)``, oldest first."""
        records = []
        for key in sorted(await self._entry_keys()):
            day = self._date_from_key(key)
            if day is None:
                logger.warning(f"Not exporting malformed journal key: {key}")
                continue
            content = await self.storage.get(key)
            if content:
                records.append((entry_file_path(day, self.config.file_extension), content))
        return records

    async def import_record(self, path: str, raw: str) -> None:
        """Store content fetched from a remote ``YYYY/MM/DD.txt`` file.

        Goes through :meth:`save`, so an empty remote entry deletes the
        local record and the tag index is reconciled.

        Raises:
            InvalidPathError: ``path`` does not name a valid date file.
            DecodeError: ``raw`` is not parseable.
            StorageError: The backend failed to write.
        """
        day = parse_entry_file_path(path, self.config.file_extension)
        entry = decode_strict(raw)
        await self.save(day, entry)

    async def clear_all(self) -> int:
        """Remove every entry and the tag index. Returns entries removed."""
        keys = await self._entry_keys()
        removed = await self.storage.delete_many(keys)
        await self.storage.delete(self.config.tag_index_key)
        logger.info(f"Cleared {removed} journal entries")
        return removed

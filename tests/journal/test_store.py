"""Tests for daybook.journal.store."""

import asyncio
import json
from datetime import date

import pytest

from daybook.core.exceptions import DecodeError, InvalidPathError
from daybook.core.storage import MemoryStorage, StorageError
from daybook.journal.codec import encode
from daybook.journal.config import StoreConfig
from daybook.journal.models import EMPTY_ENTRY, JournalEntry
from daybook.journal.store import JournalStore

MARCH_5 = date(2024, 3, 5)


class FailingStorage(MemoryStorage):
    async def set(self, key, value):
        raise StorageError("disk full")

    async def get(self, key):
        raise StorageError("unreadable")


class UnreadableKeysStorage(MemoryStorage):
    """Memory storage whose reads of selected keys fail."""

    def __init__(self):
        super().__init__()
        self.unreadable: set[str] = set()

    async def get(self, key):
        if key in self.unreadable:
            raise StorageError(f"cannot read {key}")
        return await super().get(key)


# -- Load / save ---------------------------------------------------------


class TestLoadSave:
    async def test_load_missing_is_empty(self, store):
        assert await store.load(MARCH_5) == EMPTY_ENTRY

    async def test_read_after_write(self, store, storage):
        entry = JournalEntry(text="Met Alice", tags=["work"])
        await store.save(MARCH_5, entry)
        assert await store.load(MARCH_5) == entry
        assert await storage.get("journal:2024/03/05") == encode(entry)

    async def test_empty_save_deletes(self, store, storage):
        await store.save(MARCH_5, JournalEntry(text="x"))
        await store.save(MARCH_5, JournalEntry(text="  "))
        assert await storage.get("journal:2024/03/05") is None
        assert await store.list_entry_dates() == set()

    async def test_delete_absent_is_noop(self, store):
        await store.save(MARCH_5, EMPTY_ENTRY)
        await store.save(MARCH_5, EMPTY_ENTRY)
        assert await store.load(MARCH_5) == EMPTY_ENTRY
        assert await store.get_tag_index() == {}

    async def test_unreadable_record_loads_empty(self, storage, store):
        await storage.set("journal:2024/03/05", "text: [unclosed")
        assert await store.load(MARCH_5) == EMPTY_ENTRY

    async def test_storage_failure_on_load_is_empty(self):
        store = JournalStore(FailingStorage())
        assert await store.load(MARCH_5) == EMPTY_ENTRY

    async def test_storage_failure_on_save_raises(self):
        store = JournalStore(FailingStorage())
        with pytest.raises(StorageError):
            await store.save(MARCH_5, JournalEntry(text="x"))

    async def test_custom_key_prefix(self, storage):
        store = JournalStore(storage, StoreConfig(key_prefix="j/"))
        await store.save(MARCH_5, JournalEntry(text="x"))
        assert await storage.get("j/2024/03/05") is not None


# -- Listing -------------------------------------------------------------


class TestListing:
    async def test_list_entry_dates(self, store, storage):
        await store.save(date(2024, 3, 5), JournalEntry(text="a"))
        await store.save(date(2023, 12, 31), JournalEntry(text="b"))
        await storage.set("journal:garbage", "text: c\n")
        assert await store.list_entry_dates() == {"2024-03-05", "2023-12-31"}

    async def test_month_listing(self, store):
        await store.save(date(2024, 3, 1), JournalEntry(text="first"))
        await store.save(date(2024, 3, 31), JournalEntry(text="last"))
        await store.save(date(2024, 4, 1), JournalEntry(text="april"))

        march = await store.list_entries_for_month(2024, 3)
        assert set(march) == {1, 31}
        assert march[31].text == "last"
        assert await store.list_entries_for_month(2024, 5) == {}

    async def test_entries_with_tag_newest_first(self, store):
        await store.save(date(2024, 1, 1), JournalEntry(text="a", tags=["work"]))
        await store.save(date(2024, 2, 1), JournalEntry(text="b", tags=["home"]))
        await store.save(date(2024, 3, 1), JournalEntry(text="c", tags=["Work"]))

        results = await store.get_entries_with_tag("WORK")
        assert [d for d, _ in results] == [date(2024, 3, 1), date(2024, 1, 1)]


# -- Tag index -----------------------------------------------------------


class TestTagIndex:
    async def test_index_tracks_saves(self, store, storage):
        await store.save(date(2024, 1, 1), JournalEntry(text="a", tags=["work", "health"]))
        await store.save(date(2024, 1, 2), JournalEntry(text="b", tags=["work"]))
        assert await store.get_tag_index() == {"work": 2, "health": 1}
        assert json.loads(await storage.get("allTags")) == {"work": 2, "health": 1}

    async def test_index_after_tag_removal(self, store):
        await store.save(MARCH_5, JournalEntry(text="a", tags=["work"]))
        await store.save(MARCH_5, JournalEntry(text="a"))
        assert await store.get_tag_index() == {}

    async def test_index_after_delete(self, store):
        await store.save(MARCH_5, JournalEntry(text="a", tags=["work"]))
        await store.save(MARCH_5, EMPTY_ENTRY)
        assert await store.get_tag_index() == {}

    async def test_index_matches_fresh_tally(self, store):
        await store.save(date(2024, 1, 1), JournalEntry(tags=["a", "b"]))
        await store.save(date(2024, 1, 2), JournalEntry(tags=["b", "c"]))
        await store.save(date(2024, 1, 1), JournalEntry(tags=["c"]))
        assert await store.get_tag_index() == await store.compute_tag_index() == {"b": 1, "c": 2}

    async def test_malformed_index_reads_empty(self, store, storage):
        await storage.set("allTags", "not json")
        assert await store.get_tag_index() == {}
        await storage.set("allTags", "[1, 2]")
        assert await store.get_tag_index() == {}

    async def test_rebuild_repairs_stale_index(self, store, storage):
        await storage.set("journal:2024/03/05", encode(JournalEntry(tags=["work"])))
        await storage.set("allTags", json.dumps({"stale": 9}))
        assert await store.rebuild_tag_index() == {"work": 1}
        assert await store.get_tag_index() == {"work": 1}

    async def test_concurrent_saves_keep_index_consistent(self, store):
        days = [date(2024, 5, d) for d in range(1, 11)]
        await asyncio.gather(
            *(store.save(d, JournalEntry(text=str(d), tags=["daily", f"d{d.day}"])) for d in days)
        )
        index = await store.get_tag_index()
        assert index == await store.compute_tag_index()
        assert index["daily"] == 10

    async def test_concurrent_saves_same_date(self, store):
        await asyncio.gather(*(store.save(MARCH_5, JournalEntry(text=f"v{i}", tags=[f"t{i}"])) for i in range(5)))
        entry = await store.load(MARCH_5)
        assert entry.text.startswith("v")
        assert await store.get_tag_index() == {entry.tags[0]: 1}

    async def test_date_locks_released(self, store):
        await asyncio.gather(*(store.save(MARCH_5, JournalEntry(text=f"v{i}")) for i in range(3)))
        await store.save(date(2024, 3, 6), JournalEntry(text="x"))
        assert store._date_locks == {}
        assert store._date_lock_users == {}

    async def test_unreadable_record_fails_save(self):
        storage = UnreadableKeysStorage()
        store = JournalStore(storage)
        await store.save(date(2024, 1, 1), JournalEntry(text="a", tags=["work"]))
        storage.unreadable.add("journal:2024/01/01")

        with pytest.raises(StorageError):
            await store.save(date(2024, 1, 2), JournalEntry(text="b", tags=["work"]))

        # the stale index is kept rather than replaced by a short count
        assert json.loads(await storage.get("allTags")) == {"work": 1}
        storage.unreadable.clear()
        assert await store.rebuild_tag_index() == {"work": 2}

    async def test_undecodable_record_counts_as_untagged(self, store, storage):
        await store.save(date(2024, 1, 1), JournalEntry(text="a", tags=["work"]))
        await storage.set("journal:2024/01/02", "tags: [unclosed")
        assert await store.rebuild_tag_index() == {"work": 1}


# -- Export / import -----------------------------------------------------


class TestExportImport:
    async def test_export_all(self, store):
        await store.save(date(2024, 3, 5), JournalEntry(text="b"))
        await store.save(date(2024, 1, 2), JournalEntry(text="a"))
        records = await store.export_all()
        assert [path for path, _ in records] == ["2024/01/02.txt", "2024/03/05.txt"]
        assert records[0][1] == encode(JournalEntry(text="a"))

    async def test_export_skips_malformed_keys(self, store, storage):
        await storage.set("journal:oops", "text: x\n")
        assert await store.export_all() == []

    async def test_import_record(self, store):
        await store.import_record("2024/03/05.txt", "text: A\ntags:\n- work\n")
        assert await store.load(MARCH_5) == JournalEntry(text="A", tags=["work"])
        assert await store.get_tag_index() == {"work": 1}

    async def test_import_empty_deletes(self, store):
        await store.save(MARCH_5, JournalEntry(text="local"))
        await store.import_record("2024/03/05.txt", "")
        assert await store.list_entry_dates() == set()

    async def test_import_invalid_path(self, store):
        with pytest.raises(InvalidPathError):
            await store.import_record("random.txt", "text: x\n")

    async def test_import_impossible_date(self, store):
        with pytest.raises(InvalidPathError):
            await store.import_record("2024/02/30.txt", "text: x\n")

    async def test_import_malformed_content_keeps_local(self, store):
        await store.save(MARCH_5, JournalEntry(text="local"))
        with pytest.raises(DecodeError):
            await store.import_record("2024/03/05.txt", "text: [unclosed")
        assert (await store.load(MARCH_5)).text == "local"

    async def test_export_then_import_into_fresh_store(self, store):
        await store.save(date(2024, 1, 1), JournalEntry(text="a", tags=["x"]))
        await store.save(date(2024, 1, 2), JournalEntry(text="b"))

        other = JournalStore(MemoryStorage())
        for path, raw in await store.export_all():
            await other.import_record(path, raw)
        assert await other.list_entry_dates() == await store.list_entry_dates()
        assert await other.get_tag_index() == {"x": 1}

    async def test_clear_all(self, store, storage):
        await store.save(date(2024, 1, 1), JournalEntry(text="a", tags=["x"]))
        await store.save(date(2024, 1, 2), JournalEntry(text="b"))
        await storage.set("lastSyncTime", "2024-01-01T00:00:00+00:00")

        assert await store.clear_all() == 2
        assert await store.list_entry_dates() == set()
        assert await storage.get("allTags") is None
        assert await storage.get("lastSyncTime") is not None

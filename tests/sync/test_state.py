"""Tests for daybook.sync.state."""

from datetime import datetime, timezone

from daybook.core.storage import MemoryStorage
from daybook.sync.state import AUTO_SYNC_KEY, LAST_SYNC_KEY, SettingsStore, SyncState


class TestSyncState:
    def test_defaults(self):
        state = SyncState()
        assert not state.syncing
        assert not state.is_connected("onedrive")
        assert state.last_sync_time is None

    def test_syncing(self):
        state = SyncState()
        state.in_flight.add("onedrive")
        assert state.syncing


class TestSettingsStore:
    async def test_last_sync_time_round_trip(self):
        storage = MemoryStorage()
        settings = SettingsStore(storage)
        when = datetime(2024, 3, 5, 12, 30, tzinfo=timezone.utc)

        await settings.set_last_sync_time(when)

        assert await storage.get(LAST_SYNC_KEY) == "2024-03-05T12:30:00+00:00"
        assert await settings.get_last_sync_time() == when

    async def test_last_sync_time_missing(self):
        assert await SettingsStore(MemoryStorage()).get_last_sync_time() is None

    async def test_last_sync_time_z_suffix(self):
        settings = SettingsStore(MemoryStorage({LAST_SYNC_KEY: "2024-03-05T12:30:00.000Z"}))
        assert await settings.get_last_sync_time() == datetime(2024, 3, 5, 12, 30, tzinfo=timezone.utc)

    async def test_naive_time_is_utc(self):
        settings = SettingsStore(MemoryStorage({LAST_SYNC_KEY: "2024-03-05T12:30:00"}))
        assert (await settings.get_last_sync_time()).tzinfo is timezone.utc

    async def test_malformed_time(self):
        settings = SettingsStore(MemoryStorage({LAST_SYNC_KEY: "yesterday"}))
        assert await settings.get_last_sync_time() is None

    async def test_auto_sync(self):
        storage = MemoryStorage()
        settings = SettingsStore(storage)
        assert await settings.get_auto_sync_enabled() is False

        await settings.set_auto_sync_enabled(True)
        assert await storage.get(AUTO_SYNC_KEY) == "true"
        assert await settings.get_auto_sync_enabled() is True

        await settings.set_auto_sync_enabled(False)
        assert await settings.get_auto_sync_enabled() is False

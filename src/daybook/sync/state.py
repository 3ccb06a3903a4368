"""Sync status and persisted sync settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from daybook.core.storage import StorageBackend, StorageError

from .providers.base import RemoteIdentity

LAST_SYNC_KEY = "lastSyncTime"
AUTO_SYNC_KEY = "autoSyncEnabled"


@dataclass
class SyncResult:
    """Counts from one full sync against one provider."""

    uploaded: int = 0
    downloaded: int = 0


@dataclass
class SyncState:
    """Live sync status, owned and mutated by the orchestrator only.

    Attributes:
        connected: Provider name -> whether a credential was obtainable at
            the last connection check.
        identities: Provider name -> account info of connected providers.
        in_flight: Providers with a sync currently running.
        last_sync_time: When the last successful sync finished.
        last_error: Message of the last failed sync, cleared when a new one starts.
    """

    connected: dict[str, bool] = field(default_factory=dict)
    identities: dict[str, RemoteIdentity | None] = field(default_factory=dict)
    in_flight: set[str] = field(default_factory=set)
    last_sync_time: datetime | None = None
    last_error: str | None = None

    @property
    def syncing(self) -> bool:
        return bool(self.in_flight)

    def is_connected(self, name: str) -> bool:
        return self.connected.get(name, False)


class SettingsStore:
    """Sync settings kept next to the journal in the key-value store."""

    def __init__(self, storage: StorageBackend):
        self.storage = storage

    async def get_last_sync_time(self) -> datetime | None:
        try:
            raw = await self.storage.get(LAST_SYNC_KEY)
        except StorageError as e:
            logger.error(f"Error reading {LAST_SYNC_KEY}: {e}")
            return None
        if not raw:
            return None
        try:
            parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Ignoring malformed {LAST_SYNC_KEY}: {raw!r}")
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    async def set_last_sync_time(self, when: datetime) -> None:
        await self.storage.set(LAST_SYNC_KEY, when.isoformat())

    async def get_auto_sync_enabled(self) -> bool:
        try:
            raw = await self.storage.get(AUTO_SYNC_KEY)
        except StorageError as e:
            logger.error(f"Error reading {AUTO_SYNC_KEY}: {e}")
            return False
        return raw == "true"

    async def set_auto_sync_enabled(self, enabled: bool) -> None:
        await self.storage.set(AUTO_SYNC_KEY, "true" if enabled else "false")

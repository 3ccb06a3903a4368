"""Sync orchestrator.

Drives a full sync per provider: every local record is uploaded, then
every remote entry file is downloaded and imported. Both phases run
record-by-record and stop at the first failure. There is no merge and no
version check; the last writer wins in both directions.

Several providers can sync concurrently via :meth:`SyncOrchestrator.sync_all`.
They share only the journal store, whose per-key writes are atomic.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import datetime, timezone

from loguru import logger

from daybook.core.exceptions import SyncError, SyncInProgressError
from daybook.journal.store import JournalStore

from .providers.base import RemoteProvider
from .state import SettingsStore, SyncResult, SyncState


class SyncOrchestrator:
    """Bidirectional sync between a :class:`JournalStore` and remote providers.

    Args:
        store: The local journal.
        settings: Where ``lastSyncTime`` is persisted.
        providers: Provider adapters, keyed by their ``name``.
    """

    def __init__(self, store: JournalStore, settings: SettingsStore, providers: Iterable[RemoteProvider]):
        self.store = store
        self.settings = settings
        self.providers: dict[str, RemoteProvider] = {p.name: p for p in providers}
        self.state = SyncState(connected={name: False for name in self.providers})

    def _provider(self, name: str) -> RemoteProvider:
        try:
            return self.providers[name]
        except KeyError:
            raise SyncError(f"Unknown provider '{name}'", provider=name) from None

    async def check_connections(self) -> dict[str, bool]:
        """Refresh connection flags and identities for every provider. Never raises."""
        names = list(self.providers)
        flags = await asyncio.gather(*(self.providers[n].is_connected() for n in names))

        for name, connected in zip(names, flags):
            self.state.connected[name] = connected
            self.state.identities[name] = await self.providers[name].get_identity() if connected else None

        last_sync = await self.settings.get_last_sync_time()
        if last_sync is not None:
            self.state.last_sync_time = last_sync
        return dict(self.state.connected)

    async def _upload_phase(self, provider: RemoteProvider) -> int:
        uploaded = 0
        for path, content in await self.store.export_all():
            await provider.upload(path, content)
            uploaded += 1
        logger.debug(f"{provider.name}: uploaded {uploaded} entries")
        return uploaded

    async def _download_phase(self, provider: RemoteProvider) -> int:
        downloaded = 0
        for remote_file in await provider.list_journal_files():
            content = await provider.download(remote_file.identifier)
            await self.store.import_record(remote_file.path, content)
            downloaded += 1
        logger.debug(f"{provider.name}: downloaded {downloaded} entries")
        return downloaded

    async def full_sync(self, name: str) -> SyncResult:
        """Upload everything, then download everything, for one provider.

        Raises:
            SyncInProgressError: A sync for this provider is already running.
            SyncError: Any phase failed; the cause is chained.
        """
        provider = self._provider(name)
        if name in self.state.in_flight:
            raise SyncInProgressError(f"{name} sync already in progress", provider=name)

        self.state.in_flight.add(name)
        self.state.last_error = None
        logger.info(f"Starting {name} sync")
        try:
            uploaded = await self._upload_phase(provider)
            downloaded = await self._download_phase(provider)
            now = datetime.now(timezone.utc)
            await self.settings.set_last_sync_time(now)
        except Exception as e:
            message = str(e) or type(e).__name__
            self.state.last_error = message
            logger.error(f"{name} sync failed: {message}")
            raise SyncError(message, provider=name) from e
        finally:
            self.state.in_flight.discard(name)

        self.state.last_sync_time = now
        logger.info(f"{name} sync finished: {uploaded} up, {downloaded} down")
        return SyncResult(uploaded=uploaded, downloaded=downloaded)

    async def sync_all(self) -> dict[str, SyncResult]:
        """Sync every connected provider concurrently.

        All providers run to completion. If any failed, the whole call fails
        with a :class:`SyncError` naming each failure; results of the
        providers that succeeded are kept on ``SyncError.results``.
        """
        names = [name for name in self.providers if self.state.is_connected(name)]
        if not names:
            logger.info("No connected providers to sync")
            return {}

        outcomes = await asyncio.gather(*(self.full_sync(n) for n in names), return_exceptions=True)

        results: dict[str, SyncResult] = {}
        failures: dict[str, Exception] = {}
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, Exception):
                failures[name] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results[name] = outcome

        if failures:
            message = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
            self.state.last_error = message
            raise SyncError(message, results=results, failures=failures)
        return results

"""Service construction.

Everything the front end needs is built once, here, and handed around
explicitly: the storage backend, the journal store, search, sync settings
and the sync orchestrator with its providers.
"""

from __future__ import annotations

from dataclasses import dataclass

from daybook.core.config import Config
from daybook.core.secrets import SecretsManager
from daybook.core.storage import LocalStorage, StorageBackend
from daybook.journal.config import StoreConfig
from daybook.journal.search import JournalSearcher
from daybook.journal.store import JournalStore
from daybook.sync.credentials import ConnectorTokenSource, CredentialCache, StaticTokenSource, TokenSource
from daybook.sync.orchestrator import SyncOrchestrator
from daybook.sync.providers import GoogleDriveProvider, OneDriveProvider, RemoteProvider
from daybook.sync.state import SettingsStore

# provider name -> connector name on the connections API
CONNECTOR_NAMES = {
    GoogleDriveProvider.name: "google-drive",
    OneDriveProvider.name: "onedrive",
}


@dataclass
class Services:
    config: Config
    storage: StorageBackend
    journal: JournalStore
    searcher: JournalSearcher
    settings: SettingsStore
    sync: SyncOrchestrator


def create_token_source(name: str, config: Config, secrets: SecretsManager) -> TokenSource:
    """Static token from secrets if present, otherwise the connections API.

    ``sync.<name>.auth: static`` makes the static token mandatory.

    Raises:
        SecretNotFoundError: ``auth`` is ``static`` and no access token is configured.
    """
    if config.get(f"sync.{name}.auth", "auto") == "static":
        return StaticTokenSource(secrets.require(f"{name}.access_token"))
    static_token = secrets.get(f"{name}.access_token")
    if static_token:
        return StaticTokenSource(static_token)
    return ConnectorTokenSource(
        hostname=config.get("sync.connectors_hostname") or secrets.get("connectors.hostname"),
        identity_token=secrets.get("connectors.identity_token"),
        connector_name=CONNECTOR_NAMES[name],
    )


def create_providers(config: Config, secrets: SecretsManager) -> list[RemoteProvider]:
    root_folder = config.get("journal.root_folder")
    extension = config.get("journal.file_extension")
    providers: list[RemoteProvider] = []
    for provider_cls in (GoogleDriveProvider, OneDriveProvider):
        name = provider_cls.name
        if not config.get_bool(f"sync.{name}.enabled", True):
            continue
        credentials = CredentialCache(create_token_source(name, config, secrets), name=name)
        providers.append(provider_cls(credentials, root_folder=root_folder, extension=extension))
    return providers


def create_services(
    config: Config,
    secrets: SecretsManager,
    storage: StorageBackend | None = None,
    providers: list[RemoteProvider] | None = None,
) -> Services:
    """Wire up all services from config. ``storage``/``providers`` override the defaults."""
    storage = storage or LocalStorage(base_path=config.get("paths.storage_dir"))
    journal = JournalStore(storage, StoreConfig(file_extension=config.get("journal.file_extension", ".txt")))
    settings = SettingsStore(storage)
    if providers is None:
        providers = create_providers(config, secrets)
    return Services(
        config=config,
        storage=storage,
        journal=journal,
        searcher=JournalSearcher(journal),
        settings=settings,
        sync=SyncOrchestrator(journal, settings, providers),
    )

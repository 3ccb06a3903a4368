"""Cloud sync: provider adapters, credentials and the sync orchestrator."""

from .credentials import AccessToken, ConnectorTokenSource, CredentialCache, StaticTokenSource
from .orchestrator import SyncOrchestrator
from .state import SettingsStore, SyncResult, SyncState

__all__ = [
    "AccessToken",
    "ConnectorTokenSource",
    "CredentialCache",
    "SettingsStore",
    "StaticTokenSource",
    "SyncOrchestrator",
    "SyncResult",
    "SyncState",
]

"""
Daybook exception hierarchy.

All daybook exceptions inherit from DaybookError, making it easy for callers
to catch library-level errors while still distinguishing specific failure modes.
Storage errors live in :mod:`daybook.core.storage.base` and share the same root.
"""


class DaybookError(Exception):
    """Base exception class for all daybook errors."""


class ConfigurationError(DaybookError):
    """Raised for configuration errors (missing keys, invalid values)."""


class SecretNotFoundError(DaybookError):
    """Raised when a required secret cannot be found in any provider."""


class AuthenticationError(DaybookError):
    """Raised when a provider credential cannot be acquired or has expired."""


class APIError(DaybookError):
    """Raised for remote API communication errors."""


class UploadError(APIError):
    """Raised when a provider rejects or fails an upload."""


class DownloadError(APIError):
    """Raised when a provider returns a non-success response for a download."""


class DecodeError(DaybookError):
    """Raised when stored entry content cannot be parsed."""


class InvalidPathError(DaybookError):
    """Raised when a remote path does not name a valid ``YYYY/MM/DD.txt`` date."""


class SyncError(DaybookError):
    """Raised when a sync cycle fails.

    Attributes:
        provider: Name of the failing provider, if a single one.
        results: Per-provider results that did succeed (``sync_all`` only).
        failures: Per-provider exceptions (``sync_all`` only).
    """

    def __init__(self, message: str, provider: str | None = None, results=None, failures=None):
        super().__init__(message)
        self.provider = provider
        self.results = dict(results or {})
        self.failures = dict(failures or {})


class SyncInProgressError(SyncError):
    """Raised when a sync is requested for a provider that is already syncing."""

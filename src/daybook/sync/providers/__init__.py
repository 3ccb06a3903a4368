"""Cloud file providers: Google Drive and OneDrive."""

from .base import RemoteFile, RemoteIdentity, RemoteProvider
from .google_drive import GoogleDriveProvider
from .onedrive import OneDriveProvider

__all__ = [
    "GoogleDriveProvider",
    "OneDriveProvider",
    "RemoteFile",
    "RemoteIdentity",
    "RemoteProvider",
]

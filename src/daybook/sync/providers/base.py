"""Remote provider contract.

A provider is a hierarchical cloud file store with one fixed journal root
folder (``Daybook/Journal`` by default). Entry files mirror the local
``YYYY/MM/DD`` layout, one ``DD.txt`` per non-empty entry, holding the same
YAML as local storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from loguru import logger

from daybook.core.exceptions import AuthenticationError
from daybook.sync.credentials import CredentialCache

DEFAULT_ROOT_FOLDER = "Daybook/Journal"
DEFAULT_EXTENSION = ".txt"


@dataclass(frozen=True)
class RemoteFile:
    """An entry file found under the journal root.

    Attributes:
        path: Path relative to the journal root, e.g. ``2024/03/05.txt``.
        file_id: Provider file id, for id-addressed providers.
    """

    path: str
    file_id: str | None = None

    @property
    def identifier(self) -> str:
        """What :meth:`RemoteProvider.download` expects for this file."""
        return self.file_id or self.path


@dataclass(frozen=True)
class RemoteIdentity:
    email: str = ""
    display_name: str = ""


class RemoteProvider(ABC):
    """Uniform adapter over a cloud file API.

    Subclasses implement folder resolution, upload, download and listing.
    ``is_connected`` and ``get_identity`` never raise.
    """

    name: str = "remote"

    def __init__(
        self,
        credentials: CredentialCache,
        root_folder: str = DEFAULT_ROOT_FOLDER,
        extension: str = DEFAULT_EXTENSION,
    ):
        self.credentials = credentials
        self.root_folder = root_folder.strip("/")
        self.extension = extension

    async def is_connected(self) -> bool:
        """True when a bearer credential can be obtained right now."""
        try:
            await self.credentials.get_token()
        except AuthenticationError as e:
            logger.debug(f"{self.name} not connected: {e}")
            return False
        return True

    async def get_identity(self) -> RemoteIdentity | None:
        """Best-effort account lookup; None on any failure."""
        try:
            return await self._fetch_identity()
        except Exception as e:
            logger.debug(f"{self.name} identity lookup failed: {e}")
            return None

    def _split(self, relative_path: str) -> tuple[list[str], str]:
        """``2024/03/05.txt`` -> (["2024", "03"], "05.txt")."""
        parts = [p for p in relative_path.strip("/").split("/") if p]
        if not parts:
            raise ValueError("Empty remote path")
        return parts[:-1], parts[-1]

    def _is_entry_file(self, name: str) -> bool:
        return name.endswith(self.extension)

    @abstractmethod
    async def _fetch_identity(self) -> RemoteIdentity | None: ...

    @abstractmethod
    async def ensure_folder(self, path: str) -> str:
        """Find or create a nested folder path; return the provider's handle."""

    @abstractmethod
    async def upload(self, relative_path: str, content: str) -> None:
        """Write ``content`` at ``relative_path`` under the journal root.

        Overwrites an existing file in place; never creates a duplicate.

        Raises:
            UploadError: The provider rejected the write.
            AuthenticationError: No credential available.
        """

    @abstractmethod
    async def download(self, identifier: str) -> str:
        """Fetch a file's content.

        Raises:
            DownloadError: Non-success response.
            AuthenticationError: No credential available.
        """

    @abstractmethod
    async def list_journal_files(self) -> list[RemoteFile]:
        """Depth-first walk of the journal root collecting entry files.

        Best-effort: a failure partway through returns what was collected,
        so an absent file is never proof that it does not exist remotely.
        """

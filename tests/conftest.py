"""Shared test fixtures for daybook."""

import asyncio
import os
import tempfile

import pytest

from daybook.core.exceptions import DownloadError, UploadError
from daybook.core.storage import MemoryStorage
from daybook.journal.store import JournalStore
from daybook.sync.credentials import CredentialCache, StaticTokenSource
from daybook.sync.providers.base import RemoteFile, RemoteIdentity, RemoteProvider


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
            "storage_dir": os.path.join(tmp_dir, "data", "storage"),
            "log_dir": os.path.join(tmp_dir, "data", "logs"),
        },
        "journal": {"root_folder": "Notes/Daily"},
        "sync": {"onedrive": {"enabled": False}},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return JournalStore(storage)


class InMemoryProvider(RemoteProvider):
    """Remote provider over a dict of ``relative path -> content``."""

    def __init__(self, name: str, files: dict[str, str] | None = None, connected: bool = True):
        super().__init__(CredentialCache(StaticTokenSource("tok" if connected else None), name=name))
        self.name = name
        self.files = dict(files or {})
        self.uploads: list[str] = []
        self.downloads: list[str] = []
        self.fail_upload: set[str] = set()
        self.fail_download: set[str] = set()
        self.gate: asyncio.Event | None = None

    async def _fetch_identity(self):
        return RemoteIdentity(email=f"{self.name}@example.com", display_name=self.name.title())

    async def ensure_folder(self, path):
        return path

    async def upload(self, relative_path, content):
        if self.gate is not None:
            await self.gate.wait()
        if relative_path in self.fail_upload:
            raise UploadError(f"{self.name} upload of {relative_path} failed: HTTP 500")
        self.uploads.append(relative_path)
        self.files[relative_path] = content

    async def download(self, identifier):
        if identifier in self.fail_download or identifier not in self.files:
            raise DownloadError(f"Failed to download file: {identifier}")
        self.downloads.append(identifier)
        return self.files[identifier]

    async def list_journal_files(self):
        await self.credentials.get_token()
        return [RemoteFile(path=path) for path in sorted(self.files)]


@pytest.fixture
def make_provider():
    """Factory for in-memory remote providers."""
    return InMemoryProvider

"""
Abstract base class for key-value storage backends.

Values are text. Every single-key operation is atomic: a reader never
observes a partially written value.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from daybook.core.exceptions import DaybookError


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    def __init__(self, **config):
        self.config = config

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored at ``key``, or None if absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` at ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if deleted, False if it didn't exist."""

    @abstractmethod
    def list_keys(self, prefix: str = "") -> AsyncIterator[str]:
        """Iterate over keys, optionally filtered by prefix."""

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def delete_many(self, keys: list[str]) -> int:
        """Delete several keys one at a time. Returns the number removed."""
        removed = 0
        for key in keys:
            if await self.delete(key):
                removed += 1
        return removed


class StorageError(DaybookError):
    """Base exception for storage errors."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a storage key is malformed or doesn't exist."""


class StoragePermissionError(StorageError):
    """Raised when storage operation is not permitted."""

"""In-memory storage backend. Nothing survives the process."""

from collections.abc import AsyncIterator

from .base import StorageBackend


class MemoryStorage(StorageBackend):
    """Dict-backed storage, handy for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None, **config):
        super().__init__(**config)
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def list_keys(self, prefix: str = "") -> AsyncIterator[str]:
        # Snapshot so callers may mutate while iterating
        for key in sorted(self._data):
            if key.startswith(prefix):
                yield key

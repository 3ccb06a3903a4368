"""
Local filesystem storage backend.

One file per key under ``base_path``. Keys are percent-encoded into
relative paths (``journal:2024/03/05`` -> ``journal%3A2024/03/05``) and
writes land in a temp file that is then renamed over the target.
"""

import os
import uuid
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import quote, unquote

import aiofiles
import aiofiles.os

from .base import StorageBackend, StorageError, StorageKeyError, StoragePermissionError

_TEMP_PREFIX = ".~"


class LocalStorage(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(self, base_path: str = "~/.daybook-data/storage", **config):
        super().__init__(**config)
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, key: str) -> Path:
        """Resolve a storage key to an absolute path under ``base_path``.

        Rejects empty keys, null bytes, backslashes and any key whose
        encoded form would escape ``base_path``.
        """
        raw_key = key.strip()
        if not raw_key:
            raise StorageKeyError("Storage key cannot be empty.")
        if "\x00" in raw_key:
            raise StorageKeyError("Storage key cannot contain null bytes.")
        if "\\" in raw_key:
            raise StorageKeyError("Storage key cannot contain backslashes. Use '/' separators.")

        parts = raw_key.split("/")
        if any(part in ("", ".", "..") or part.startswith(_TEMP_PREFIX) for part in parts):
            raise StoragePermissionError(f"Unsafe storage key '{key}'.")

        full_path = (self.base_path / quote(raw_key, safe="/")).resolve()
        try:
            full_path.relative_to(self.base_path)
        except ValueError as e:
            raise StoragePermissionError(f"Unsafe storage key '{key}': path traversal is not allowed.") from e
        return full_path

    async def get(self, key: str) -> str | None:
        path = self._get_full_path(key)
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        path = self._get_full_path(key)
        tmp_path = path.with_name(f"{_TEMP_PREFIX}{path.name}.{uuid.uuid4().hex}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(value)
            await aiofiles.os.replace(tmp_path, path)
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot write to {path}: {e}") from e
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

    async def delete(self, key: str) -> bool:
        path = self._get_full_path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot delete {path}: {e}") from e
        return True

    async def list_keys(self, prefix: str = "") -> AsyncIterator[str]:
        for root, _dirs, files in os.walk(self.base_path):
            for file in files:
                if file.startswith(_TEMP_PREFIX):
                    continue
                full_path = Path(root) / file
                key = unquote(full_path.relative_to(self.base_path).as_posix())
                if prefix and not key.startswith(prefix):
                    continue
                yield key


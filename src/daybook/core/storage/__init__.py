"""
Key-value storage backends for daybook.

Provides an async get/set/delete/list-keys interface with per-key atomic
writes, and two implementations: an in-memory dict and the local filesystem.
"""

from .base import (
    StorageBackend,
    StorageError,
    StorageKeyError,
    StoragePermissionError,
)
from .local import LocalStorage
from .memory import MemoryStorage

__all__ = [
    "LocalStorage",
    "MemoryStorage",
    "StorageBackend",
    "StorageError",
    "StorageKeyError",
    "StoragePermissionError",
]

"""Journal entries, their local store, search and export.

Provides the JournalEntry model, the YAML entry codec, date key helpers,
the key-value backed JournalStore with its derived tag index, and a
linear substring/tag searcher.
"""

from .codec import decode, encode
from .config import ExportConfig, StoreConfig
from .models import EMPTY_ENTRY, JournalEntry
from .search import JournalSearcher, SearchResult
from .store import JournalStore

__all__ = [
    "EMPTY_ENTRY",
    "ExportConfig",
    "JournalEntry",
    "JournalSearcher",
    "JournalStore",
    "SearchResult",
    "StoreConfig",
    "decode",
    "encode",
]

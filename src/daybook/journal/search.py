"""Search over the local journal.

A full linear scan: every stored date is loaded and filtered by a
case-insensitive substring and a tag intersection. Journal-sized data
(a few thousand entries) keeps this cheap enough to run per keystroke.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .dates import key_to_date
from .models import JournalEntry, normalize_tags
from .store import JournalStore


@dataclass(frozen=True)
class SearchResult:
    """A matching entry and its date."""

    date: date
    entry: JournalEntry

    def __iter__(self):
        # Allows ``for day, entry in results``
        return iter((self.date, self.entry))


def matches(entry: JournalEntry, query: str, tags: Iterable[str] = ()) -> bool:
    """True when ``entry`` contains ``query`` and carries every tag in ``tags``."""
    if query and query.lower() not in entry.text.lower():
        return False
    return all(tag in entry.tags for tag in normalize_tags(tags))


class JournalSearcher:
    """Substring + tag filter over a :class:`JournalStore`.

    Example::

        searcher = JournalSearcher(store)
        results = await searcher.search("gym", tags={"health"})
    """

    def __init__(self, store: JournalStore):
        self.store = store

    async def search(self, query: str = "", tags: Iterable[str] = ()) -> list[SearchResult]:
        """Return matching entries, newest first.

        Args:
            query: Case-insensitive substring of the entry text. Empty matches all.
            tags: Tags that must all be present. Empty matches all.
        """
        wanted = normalize_tags(tags)
        results = []
        for key in await self.store.list_entry_dates():
            day = key_to_date(key)
            if day is None:
                continue
            entry = await self.store.load(day)
            if matches(entry, query, wanted):
                results.append(SearchResult(date=day, entry=entry))

        results.sort(key=lambda r: r.date, reverse=True)
        return results

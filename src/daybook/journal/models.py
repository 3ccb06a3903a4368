"""Core data models for the journal.

An entry is the free text and tag set recorded for one calendar date.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


def normalize_tags(tags: Iterable[str]) -> tuple[str, ...]:
    """Trim, lower-case and de-duplicate tags, keeping first-seen order.

    Blank tags are dropped.
    """
    seen: dict[str, None] = {}
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return tuple(seen)


@dataclass(frozen=True)
class JournalEntry:
    """One date's journal content.

    Attributes:
        text: Free text of the entry.
        tags: Ordered, lower-case, duplicate-free tags.
    """

    text: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise ValueError("Entry text must be a string")
        if isinstance(self.tags, str):
            raise ValueError("Entry tags must be a sequence of strings, not a string")
        object.__setattr__(self, "tags", normalize_tags(self.tags))

    @property
    def is_empty(self) -> bool:
        """True when there is nothing worth persisting."""
        return self.text.strip() == "" and not self.tags

    def has_tag(self, tag: str) -> bool:
        return tag.strip().lower() in self.tags

    def with_tag(self, tag: str) -> JournalEntry:
        return JournalEntry(text=self.text, tags=(*self.tags, tag))

    def without_tag(self, tag: str) -> JournalEntry:
        target = tag.strip().lower()
        return JournalEntry(text=self.text, tags=tuple(t for t in self.tags if t != target))

    def __repr__(self) -> str:
        preview = self.text[:50] + "..." if len(self.text) > 50 else self.text
        return f"JournalEntry(text='{preview}', tags={list(self.tags)})"


EMPTY_ENTRY = JournalEntry()

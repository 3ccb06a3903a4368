"""Tests for daybook.journal.search."""

from datetime import date

import pytest

from daybook.journal.models import JournalEntry
from daybook.journal.search import JournalSearcher, SearchResult, matches


@pytest.fixture
async def searcher(store):
    await store.save(date(2024, 1, 1), JournalEntry(text="Met Alice", tags=["work"]))
    await store.save(date(2024, 1, 2), JournalEntry(text="Gym", tags=["health"]))
    await store.save(date(2024, 1, 3), JournalEntry(text="Lunch with alice after gym", tags=["work", "health"]))
    return JournalSearcher(store)


class TestMatches:
    def test_substring_case_insensitive(self):
        assert matches(JournalEntry(text="Met Alice"), "alice")
        assert not matches(JournalEntry(text="Met Alice"), "bob")

    def test_all_tags_required(self):
        entry = JournalEntry(text="x", tags=["work"])
        assert matches(entry, "", ["WORK"])
        assert not matches(entry, "", ["work", "health"])

    def test_empty_filters_match_everything(self):
        assert matches(JournalEntry(text="anything"), "", [])


class TestJournalSearcher:
    async def test_query_only(self, searcher):
        results = await searcher.search("alice")
        assert [r.date for r in results] == [date(2024, 1, 3), date(2024, 1, 1)]

    async def test_query_and_tag(self, searcher):
        results = await searcher.search("alice", tags={"work"})
        assert [r.date for r in results] == [date(2024, 1, 3), date(2024, 1, 1)]

    async def test_tag_only(self, searcher):
        results = await searcher.search("", tags={"health"})
        assert [r.entry.text for r in results] == ["Lunch with alice after gym", "Gym"]

    async def test_no_match(self, searcher):
        assert await searcher.search("gym", tags={"travel"}) == []

    async def test_empty_filters_return_all_newest_first(self, searcher):
        results = await searcher.search()
        assert [r.date.day for r in results] == [3, 2, 1]

    async def test_results_unpack(self, searcher):
        day, entry = (await searcher.search("Gym", tags=["health"]))[-1]
        assert day == date(2024, 1, 2)
        assert entry.text == "Gym"

    async def test_empty_store(self, store):
        assert await JournalSearcher(store).search("x") == []


def test_search_result_is_frozen():
    result = SearchResult(date=date(2024, 1, 1), entry=JournalEntry(text="x"))
    with pytest.raises(AttributeError):
        result.date = date(2024, 1, 2)

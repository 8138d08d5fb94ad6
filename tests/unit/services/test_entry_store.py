"""Unit tests for EntryStore."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from moodjournal.services.entry_store import EntryStore, calendar_day


class TestCalendarDay:
    @pytest.mark.unit
    def test_uses_local_timezone(self):
        """23:30 UTC is already the next day in Tokyo."""
        when = datetime(2026, 2, 10, 23, 30, tzinfo=timezone.utc)

        assert calendar_day(when, ZoneInfo("UTC")) == date(2026, 2, 10)
        assert calendar_day(when, ZoneInfo("Asia/Tokyo")) == date(2026, 2, 11)


class TestEntryStore:
    """Tests for ordering and day lookups."""

    @pytest.mark.unit
    def test_initial_entries_are_sorted(self, make_entry):
        store = EntryStore(
            ZoneInfo("UTC"),
            [make_entry(days_ago=0, entry_id="c"), make_entry(days_ago=5, entry_id="a")],
        )

        assert [e.id for e in store.snapshot()] == ["a", "c"]

    @pytest.mark.unit
    def test_append_keeps_ascending_order(self, make_entry):
        store = EntryStore(ZoneInfo("UTC"))
        store.append(make_entry(days_ago=0, entry_id="c"))
        store.append(make_entry(days_ago=4, entry_id="a"))
        store.append(make_entry(days_ago=2, entry_id="b"))

        assert [e.id for e in store.snapshot()] == ["a", "b", "c"]
        assert len(store) == 3

    @pytest.mark.unit
    def test_snapshot_is_immutable_copy(self, make_entry):
        store = EntryStore(ZoneInfo("UTC"))
        store.append(make_entry(entry_id="a"))

        snapshot = store.snapshot()
        store.append(make_entry(days_ago=1, entry_id="b"))

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1

    @pytest.mark.unit
    def test_entry_for_returns_most_recent_of_day(self, make_entry):
        store = EntryStore(ZoneInfo("UTC"))
        store.append(make_entry(hour=8, entry_id="early"))
        store.append(make_entry(hour=20, entry_id="late"))
        store.append(make_entry(days_ago=1, entry_id="yesterday"))

        today = make_entry().date.date()
        assert store.entry_for(today).id == "late"
        assert len(store.entries_on(today)) == 2

    @pytest.mark.unit
    def test_entry_for_empty_day(self, make_entry):
        store = EntryStore(ZoneInfo("UTC"), [make_entry(days_ago=1)])

        assert store.entry_for(date(2026, 2, 11)) is None

    @pytest.mark.unit
    def test_remove_by_id(self, make_entry):
        store = EntryStore(
            ZoneInfo("UTC"),
            [make_entry(days_ago=1, entry_id="a"), make_entry(entry_id="b")],
        )

        removed = store.remove(["a", "missing"])

        assert removed == 1
        assert [e.id for e in store.snapshot()] == ["b"]

    @pytest.mark.unit
    def test_replace_all_and_clear(self, make_entry):
        store = EntryStore(ZoneInfo("UTC"), [make_entry(entry_id="old")])

        store.replace_all([make_entry(entry_id="y"), make_entry(days_ago=3, entry_id="x")])
        assert [e.id for e in store.snapshot()] == ["x", "y"]

        store.clear()
        assert store.snapshot() == ()

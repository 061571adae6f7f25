"""Tests for the journal entry store.

**Feature: capital-journal**
"""

import itertools
import json
import sqlite3
import tempfile
from datetime import date
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError as PydanticValidationError

from capjournal.db.store import CONFIG_KEY, ENTRIES_KEY, DataStore
from capjournal.exceptions import EntryNotFoundError, ErrorCategory, NoPendingChangeError
from capjournal.journal import AddOutcome, Journal, UpdateOutcome, sanitize_entry
from capjournal.models import AppConfig, TradeEntry


def counter_ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


@pytest.fixture
def temp_store():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield DataStore(Path(tmpdir) / "journal.db")


@pytest.fixture
def journal(temp_store: DataStore) -> Journal:
    return Journal(temp_store, id_factory=counter_ids())


class TestAddEntry:
    def test_created(self, journal: Journal):
        outcome = journal.add_entry(date(2024, 1, 2), 1100, trade_count=3, notes="gap up")

        assert outcome is AddOutcome.CREATED
        assert len(journal.entries) == 1
        entry = journal.entries[0]
        assert entry.id == "id1"
        assert entry.final_capital == 1100
        assert entry.trade_count == 3
        assert entry.notes == "gap up"

    def test_conflict_leaves_store_unchanged(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)
        before = list(journal.entries)

        outcome = journal.add_entry(date(2024, 1, 2), 1200)

        assert outcome is AddOutcome.CONFLICT
        assert journal.entries == before
        assert journal.pending_overwrite is not None
        assert journal.pending_overwrite.fields.final_capital == 1200

    def test_confirm_overwrite_keeps_id(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100, notes="first")
        journal.add_entry(date(2024, 1, 2), 1200, notes="second")

        updated = journal.confirm_overwrite()

        assert updated.id == "id1"
        assert len(journal.entries) == 1
        assert journal.entries[0].final_capital == 1200
        assert journal.entries[0].notes == "second"
        assert journal.pending_overwrite is None

    def test_discard_pending_overwrite(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)
        journal.add_entry(date(2024, 1, 2), 1200)

        journal.discard_pending()

        assert journal.pending_overwrite is None
        assert journal.entries[0].final_capital == 1100

    def test_merge_into_override_day(self, journal: Journal):
        override = TradeEntry(id="manual", date=date(2024, 1, 2), final_capital=0, initial_capital=5000)
        journal.import_data([override], AppConfig())

        outcome = journal.add_entry(date(2024, 1, 2), 5200, trade_count=2)

        assert outcome is AddOutcome.MERGED
        assert journal.pending_overwrite is None
        merged = journal.entries[0]
        assert merged.id == "manual"
        assert merged.initial_capital == 5000
        assert merged.final_capital == 5200
        assert merged.trade_count == 2

    def test_confirm_overwrite_after_date_freed(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)
        journal.add_entry(date(2024, 1, 2), 1200)
        journal.request_delete("id1")
        journal.confirm_delete()

        updated = journal.confirm_overwrite()

        assert journal.entries == [updated]
        assert updated.final_capital == 1200

    def test_confirm_without_pending(self, journal: Journal):
        with pytest.raises(NoPendingChangeError) as exc_info:
            journal.confirm_overwrite()
        assert exc_info.value.category is ErrorCategory.STATE

    @given(days=st.lists(st.integers(min_value=0, max_value=60), min_size=1, max_size=30))
    @settings(max_examples=25)
    def test_one_entry_per_date(self, days):
        """
        *For any* sequence of adds, the store never holds two entries for
        the same date.
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            journal = Journal(DataStore(Path(tmpdir) / "j.db"), id_factory=counter_ids())
            for offset in days:
                journal.add_entry(date.fromordinal(date(2024, 1, 1).toordinal() + offset), 1000)

            dates = [e.date for e in journal.entries]
            assert len(dates) == len(set(dates)) == len(set(days))


class TestUpdateEntry:
    def test_plain_update(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)

        outcome = journal.update_entry("id1", date(2024, 1, 3), 1150, deposit=50, notes="moved")

        assert outcome is UpdateOutcome.UPDATED
        entry = journal.get_entry("id1")
        assert entry.date == date(2024, 1, 3)
        assert entry.final_capital == 1150
        assert entry.deposit == 50

    def test_same_date_is_not_a_collision(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)

        assert journal.update_entry("id1", date(2024, 1, 2), 1300) is UpdateOutcome.UPDATED

    def test_collision_is_staged(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)
        journal.add_entry(date(2024, 1, 3), 1200)
        before = list(journal.entries)

        outcome = journal.update_entry("id1", date(2024, 1, 3), 1250)

        assert outcome is UpdateOutcome.COLLISION
        assert journal.entries == before
        assert journal.pending_update.collision_id == "id2"

    def test_confirm_update_removes_colliding_entry(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)
        journal.add_entry(date(2024, 1, 3), 1200)
        journal.update_entry("id1", date(2024, 1, 3), 1250)

        updated = journal.confirm_update()

        assert journal.entries == [updated]
        assert updated.id == "id1"
        assert updated.date == date(2024, 1, 3)
        assert updated.final_capital == 1250

    def test_update_unknown_entry(self, journal: Journal):
        with pytest.raises(EntryNotFoundError):
            journal.update_entry("nope", date(2024, 1, 2), 100)

    def test_confirm_update_without_pending(self, journal: Journal):
        with pytest.raises(NoPendingChangeError):
            journal.confirm_update()


class TestDeleteEntry:
    def test_request_then_confirm(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)
        journal.add_entry(date(2024, 1, 3), 1200)

        staged = journal.request_delete("id1")
        assert staged.id == "id1"
        assert len(journal.entries) == 2

        journal.confirm_delete()
        assert [e.id for e in journal.entries] == ["id2"]
        assert journal.pending_delete is None

    def test_request_unknown(self, journal: Journal):
        with pytest.raises(EntryNotFoundError) as exc_info:
            journal.request_delete("missing")
        assert exc_info.value.category is ErrorCategory.NOT_FOUND

    def test_confirm_without_request(self, journal: Journal):
        with pytest.raises(NoPendingChangeError):
            journal.confirm_delete()


class TestPersistence:
    def test_changes_survive_reload(self, temp_store: DataStore):
        journal = Journal(temp_store, id_factory=counter_ids())
        journal.add_entry(date(2024, 1, 2), 1100, notes="saved")
        journal.set_initial_capital(900)

        reloaded = Journal(temp_store)

        assert reloaded.entries == journal.entries
        assert reloaded.config.total_initial_capital == 900

    def test_stored_format_uses_camel_case(self, journal: Journal, temp_store: DataStore):
        journal.add_entry(date(2024, 1, 2), 1100, trade_count=4)

        stored = json.loads(temp_store.get_value(ENTRIES_KEY))

        assert stored[0]["finalCapital"] == 1100
        assert stored[0]["tradeCount"] == 4
        assert stored[0]["date"] == "2024-01-02"
        assert "initialCapital" not in stored[0]

    def test_corrupt_entries_start_empty(self, temp_store: DataStore):
        temp_store.set_value(ENTRIES_KEY, "[{broken")

        assert Journal(temp_store).entries == []

    def test_non_list_entries_start_empty(self, temp_store: DataStore):
        temp_store.save_json(ENTRIES_KEY, {"date": "2024-01-02"})

        assert Journal(temp_store).entries == []

    def test_invalid_config_falls_back(self, temp_store: DataStore):
        temp_store.save_json(CONFIG_KEY, {"totalInitialCapital": "lots"})

        assert Journal(temp_store).config == AppConfig()

    def test_legacy_entries_get_ids(self, temp_store: DataStore):
        temp_store.save_json(
            ENTRIES_KEY,
            [{"date": "2024-01-02", "finalCapital": 1100, "deposit": None, "notes": None}],
        )

        journal = Journal(temp_store, id_factory=counter_ids())

        assert journal.entries[0].id == "id1"
        assert journal.entries[0].deposit == 0
        assert journal.entries[0].notes == ""
        assert json.loads(temp_store.get_value(ENTRIES_KEY))[0]["id"] == "id1"


class TestBulkAndConfig:
    def test_import_replaces_everything(self, journal: Journal):
        journal.add_entry(date(2024, 1, 2), 1100)

        journal.import_data(
            [{"date": "2024-02-01", "finalCapital": 2000}],
            AppConfig(total_initial_capital=1500),
        )

        assert len(journal.entries) == 1
        assert journal.entries[0].date == date(2024, 2, 1)
        assert journal.entries[0].id
        assert journal.config.total_initial_capital == 1500

    def test_reset(self, journal: Journal, temp_store: DataStore):
        journal.add_entry(date(2024, 1, 2), 1100)
        journal.set_initial_capital(5000)

        journal.reset()

        assert journal.entries == []
        assert journal.config == AppConfig()
        assert temp_store.get_keys() == []

    def test_month_start_capital(self, journal: Journal):
        journal.set_month_start_capital("2024-03", 7200)
        journal.set_month_start_capital("2024-04", 8000)
        journal.clear_month_start_capital("2024-03")

        assert journal.config.monthly_start_capitals == {"2024-04": 8000}

    def test_snapshot_reflects_config(self, journal: Journal):
        journal.set_initial_capital(1000)
        journal.add_entry(date(2024, 1, 2), 1100)

        snap = journal.snapshot()

        assert snap.days[0].pl_daily_dollar == pytest.approx(100)
        assert snap.stats.current_capital == 1100


class TestSanitizeEntry:
    def test_keeps_existing_id(self):
        entry = sanitize_entry({"id": "x", "date": "2024-01-02", "finalCapital": 10})

        assert entry.id == "x"

    def test_null_trade_count(self):
        entry = sanitize_entry(
            {"id": "x", "date": "2024-01-02", "finalCapital": 10, "tradeCount": None},
        )

        assert entry.trade_count == 0


class TestNonFiniteAmounts:
    """
    **Feature: capital-journal, Property: Zero Guard**

    NaN and infinite amounts never reach the store, so no derived percent
    can become NaN or infinite.
    """

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_add_entry_rejects(self, journal: Journal, amount):
        with pytest.raises(PydanticValidationError):
            journal.add_entry(date(2024, 1, 2), amount)

        assert journal.entries == []

    def test_add_entry_rejects_non_finite_deposit(self, journal: Journal):
        with pytest.raises(PydanticValidationError):
            journal.add_entry(date(2024, 1, 2), 1000, deposit=float("inf"))

    def test_config_setters_reject(self, journal: Journal):
        with pytest.raises(PydanticValidationError):
            journal.set_initial_capital(float("nan"))
        with pytest.raises(PydanticValidationError):
            journal.set_month_start_capital("2024-01", float("inf"))

        assert journal.config == AppConfig()

    def test_stored_nan_entries_discarded_on_load(self, temp_store: DataStore):
        temp_store.set_value(
            ENTRIES_KEY, '[{"id": "a", "date": "2024-01-02", "finalCapital": NaN}]'
        )

        assert Journal(temp_store).entries == []

    def test_stored_nan_config_falls_back(self, temp_store: DataStore):
        temp_store.set_value(CONFIG_KEY, '{"totalInitialCapital": Infinity}')

        assert Journal(temp_store).config == AppConfig()


class TestResetStorageFailure:
    def test_reset_clears_memory_when_store_fails(self, journal: Journal, monkeypatch):
        journal.add_entry(date(2024, 1, 2), 1100)

        def broken_delete(key):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(journal.store, "delete_value", broken_delete)

        journal.reset()

        assert journal.entries == []
        assert journal.config == AppConfig()

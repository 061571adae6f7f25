"""Persistence for CapJournal."""

from capjournal.db.store import CONFIG_KEY, ENTRIES_KEY, DataStore

__all__ = ["DataStore", "ENTRIES_KEY", "CONFIG_KEY"]

"""Entry store for CapJournal.

Holds the raw entry list and the capital configuration, enforces the
one-entry-per-date rule on writes, and persists every successful change
through the DataStore.

Writes that would replace existing data (a second entry for the same date,
an edit moving onto an occupied date, a deletion) are staged and only
applied once confirmed.
"""

import logging
import sqlite3
import uuid
from datetime import date
from datetime import date as date_type
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from capjournal.db.store import CONFIG_KEY, ENTRIES_KEY, DataStore
from capjournal.engine.pipeline import Snapshot, build_snapshot
from capjournal.exceptions import EntryNotFoundError, NoPendingChangeError
from capjournal.models import AppConfig, TradeEntry

logger = logging.getLogger(__name__)

# Legacy records may carry null for these instead of omitting them.
_NULLABLE_DEFAULTS = ("deposit", "withdrawal", "tradeCount", "trade_count", "notes")


def new_entry_id() -> str:
    """Generate a unique entry identifier."""
    return uuid.uuid4().hex


def sanitize_entry(raw: dict[str, Any], id_factory: Callable[[], str] = new_entry_id) -> TradeEntry:
    """Normalize a stored or imported record into a TradeEntry.

    Missing ids are generated and null optional fields fall back to
    their defaults.

    Args:
        raw: Record as decoded from JSON.
        id_factory: Source of fresh ids.

    Returns:
        A fully populated entry.

    Raises:
        pydantic.ValidationError: If the record cannot be coerced.
    """
    data = {k: v for k, v in raw.items() if not (k in _NULLABLE_DEFAULTS and v is None)}
    if not data.get("id"):
        data["id"] = id_factory()
    return TradeEntry.model_validate(data)


class EntryFields(BaseModel):
    """The user-editable fields of an entry."""

    final_capital: float
    deposit: float = Field(default=0.0, ge=0)
    withdrawal: float = Field(default=0.0, ge=0)
    notes: str = ""
    trade_count: int = Field(default=0, ge=0)

    model_config = {"frozen": True, "allow_inf_nan": False}


class PendingOverwrite(BaseModel):
    date: date_type
    fields: EntryFields

    model_config = {"frozen": True}


class PendingUpdate(BaseModel):
    entry_id: str
    new_date: date
    fields: EntryFields
    collision_id: str

    model_config = {"frozen": True}


class AddOutcome(str, Enum):
    CREATED = "created"
    MERGED = "merged"
    CONFLICT = "conflict"


class UpdateOutcome(str, Enum):
    UPDATED = "updated"
    COLLISION = "collision"


class Journal:
    """The user's journal: entries, config and staged changes."""

    def __init__(self, store: DataStore, id_factory: Callable[[], str] = new_entry_id):
        """Load the journal from a data store.

        Args:
            store: Persistence backend.
            id_factory: Source of fresh entry ids.
        """
        self.store = store
        self._new_id = id_factory
        self.entries: list[TradeEntry] = self._load_entries()
        self.config: AppConfig = self._load_config()
        self.pending_overwrite: Optional[PendingOverwrite] = None
        self.pending_update: Optional[PendingUpdate] = None
        self.pending_delete: Optional[str] = None

    # ==================== Loading / saving ====================

    def _load_entries(self) -> list[TradeEntry]:
        raw = self.store.load_json(ENTRIES_KEY, default=[])
        if not isinstance(raw, list):
            logger.warning("Stored entries are not a list; starting empty")
            return []

        missing_ids = any(not (isinstance(r, dict) and r.get("id")) for r in raw)
        try:
            entries = [sanitize_entry(r, self._new_id) for r in raw]
        except (PydanticValidationError, TypeError, AttributeError) as e:
            logger.warning("Discarding unreadable stored entries: %s", e)
            return []

        if missing_ids:
            logger.info("Assigned ids to legacy entries")
            self.entries = entries
            self._save_entries()
        return entries

    def _load_config(self) -> AppConfig:
        raw = self.store.load_json(CONFIG_KEY)
        if raw is None:
            return AppConfig()
        try:
            return AppConfig.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning("Discarding unreadable stored config: %s", e)
            return AppConfig()

    def _save_entries(self) -> None:
        try:
            self.store.save_json(
                ENTRIES_KEY,
                [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in self.entries],
            )
        except sqlite3.Error:
            logger.exception("Failed to save entries")

    def _save_config(self) -> None:
        try:
            self.store.save_json(CONFIG_KEY, self.config.model_dump(mode="json", by_alias=True))
        except sqlite3.Error:
            logger.exception("Failed to save config")

    # ==================== Lookups ====================

    def find_by_date(self, entry_date: date) -> Optional[TradeEntry]:
        return next((e for e in self.entries if e.date == entry_date), None)

    def get_entry(self, entry_id: str) -> TradeEntry:
        """Get an entry by id.

        Raises:
            EntryNotFoundError: If no entry has this id.
        """
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise EntryNotFoundError(entry_id)

    def _replace(self, entry_id: str, updated: TradeEntry) -> None:
        self.entries = [updated if e.id == entry_id else e for e in self.entries]

    def snapshot(self) -> Snapshot:
        """Run the derivation pipeline over the current state."""
        return build_snapshot(self.entries, self.config)

    # ==================== Add / overwrite ====================

    def add_entry(
        self,
        entry_date: date,
        final_capital: float,
        deposit: float = 0.0,
        withdrawal: float = 0.0,
        notes: str = "",
        trade_count: int = 0,
    ) -> AddOutcome:
        """Record the closing capital for a date.

        A date that already has an entry with a manual initial-capital
        override is merged silently. A date that has a plain entry is
        staged as a conflict and left untouched until confirm_overwrite().

        Returns:
            What happened to the store.
        """
        fields = EntryFields(
            final_capital=final_capital,
            deposit=deposit,
            withdrawal=withdrawal,
            notes=notes,
            trade_count=trade_count,
        )
        existing = self.find_by_date(entry_date)

        if existing is None:
            entry = TradeEntry(id=self._new_id(), date=entry_date, **fields.model_dump())
            self.entries = [*self.entries, entry]
            self._save_entries()
            logger.debug("Added entry %s for %s", entry.id, entry_date)
            return AddOutcome.CREATED

        if existing.has_override:
            self._replace(existing.id, existing.model_copy(update=fields.model_dump()))
            self._save_entries()
            logger.debug("Merged entry for %s into override day", entry_date)
            return AddOutcome.MERGED

        self.pending_overwrite = PendingOverwrite(date=entry_date, fields=fields)
        return AddOutcome.CONFLICT

    def confirm_overwrite(self) -> TradeEntry:
        """Apply the staged add to the existing entry for its date.

        The entry keeps its id and any initial-capital override.

        Raises:
            NoPendingChangeError: If nothing is staged.
        """
        pending = self.pending_overwrite
        if pending is None:
            raise NoPendingChangeError("overwrite")
        self.pending_overwrite = None

        existing = self.find_by_date(pending.date)
        if existing is None:
            # The date was freed in the meantime; record it as a new entry.
            updated = TradeEntry(id=self._new_id(), date=pending.date, **pending.fields.model_dump())
            self.entries = [*self.entries, updated]
        else:
            updated = existing.model_copy(update=pending.fields.model_dump())
            self._replace(existing.id, updated)
        self._save_entries()
        return updated

    def discard_pending(self) -> None:
        """Drop every staged change."""
        self.pending_overwrite = None
        self.pending_update = None
        self.pending_delete = None

    # ==================== Update ====================

    def update_entry(
        self,
        entry_id: str,
        new_date: date,
        new_capital: float,
        deposit: float = 0.0,
        withdrawal: float = 0.0,
        notes: str = "",
        trade_count: int = 0,
    ) -> UpdateOutcome:
        """Edit an entry, possibly moving it to another date.

        Moving onto a date held by a different entry is a collision: the
        edit is staged until confirm_update() removes the other entry.

        Raises:
            EntryNotFoundError: If no entry has this id.
        """
        entry = self.get_entry(entry_id)
        fields = EntryFields(
            final_capital=new_capital,
            deposit=deposit,
            withdrawal=withdrawal,
            notes=notes,
            trade_count=trade_count,
        )

        collision = next(
            (e for e in self.entries if e.date == new_date and e.id != entry_id), None
        )
        if collision is not None:
            self.pending_update = PendingUpdate(
                entry_id=entry_id, new_date=new_date, fields=fields, collision_id=collision.id
            )
            return UpdateOutcome.COLLISION

        self._replace(entry_id, entry.model_copy(update={"date": new_date, **fields.model_dump()}))
        self._save_entries()
        return UpdateOutcome.UPDATED

    def confirm_update(self) -> TradeEntry:
        """Apply the staged edit, removing the entry it collided with.

        Raises:
            NoPendingChangeError: If nothing is staged.
            EntryNotFoundError: If the edited entry no longer exists.
        """
        pending = self.pending_update
        if pending is None:
            raise NoPendingChangeError("update")
        self.pending_update = None

        entry = self.get_entry(pending.entry_id)
        updated = entry.model_copy(update={"date": pending.new_date, **pending.fields.model_dump()})
        self.entries = [
            updated if e.id == pending.entry_id else e
            for e in self.entries
            if e.id != pending.collision_id
        ]
        self._save_entries()
        return updated

    # ==================== Delete ====================

    def request_delete(self, entry_id: str) -> TradeEntry:
        """Stage an entry for deletion.

        Raises:
            EntryNotFoundError: If no entry has this id.
        """
        entry = self.get_entry(entry_id)
        self.pending_delete = entry_id
        return entry

    def confirm_delete(self) -> None:
        """Permanently remove the staged entry.

        Raises:
            NoPendingChangeError: If nothing is staged.
        """
        entry_id = self.pending_delete
        if entry_id is None:
            raise NoPendingChangeError("delete")
        self.pending_delete = None
        self.entries = [e for e in self.entries if e.id != entry_id]
        self._save_entries()

    # ==================== Bulk operations ====================

    def import_data(self, entries: list[Any], config: AppConfig) -> None:
        """Replace the whole journal with imported data.

        Args:
            entries: TradeEntry objects or raw records; raw records without
                an id are given a fresh one.
            config: Configuration to install.
        """
        self.entries = [
            e if isinstance(e, TradeEntry) else sanitize_entry(e, self._new_id)
            for e in entries
        ]
        self.config = config
        self.discard_pending()
        self._save_entries()
        self._save_config()
        logger.info("Imported %d entries", len(self.entries))

    def reset(self) -> None:
        """Clear all entries and restore the default config."""
        self.entries = []
        self.config = AppConfig()
        self.discard_pending()
        try:
            self.store.delete_value(ENTRIES_KEY)
            self.store.delete_value(CONFIG_KEY)
        except sqlite3.Error:
            logger.exception("Failed to clear stored journal")
        logger.info("Journal reset")

    # ==================== Config ====================

    def set_config(self, config: AppConfig) -> None:
        self.config = config
        self._save_config()

    def _updated_config(self, **changes: Any) -> AppConfig:
        # model_copy does not validate
        return AppConfig.model_validate({**self.config.model_dump(), **changes})

    def set_initial_capital(self, capital: float) -> None:
        """Set the capital baseline.

        Raises:
            pydantic.ValidationError: If capital is NaN or infinite.
        """
        self.set_config(self._updated_config(total_initial_capital=capital))

    def set_month_start_capital(self, month: str, capital: float) -> None:
        """Pin the start capital of a YYYY-MM month."""
        starts = {**self.config.monthly_start_capitals, month: capital}
        self.set_config(self._updated_config(monthly_start_capitals=starts))

    def clear_month_start_capital(self, month: str) -> None:
        starts = {k: v for k, v in self.config.monthly_start_capitals.items() if k != month}
        self.set_config(self._updated_config(monthly_start_capitals=starts))

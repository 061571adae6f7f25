"""SQLite data store for CapJournal.

The journal keeps two JSON documents, the entry list and the capital
configuration, under string keys in a single key/value table.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

ENTRIES_KEY = "trading_entries"
CONFIG_KEY = "trading_config"


class DataStore:
    """SQLite-backed key/value store for JSON blobs."""

    REQUIRED_TABLES = ["storage"]

    def __init__(self, db_path: Path):
        """Initialize the data store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Raw values ====================

    def get_value(self, key: str) -> Optional[str]:
        """Get the raw text stored under a key.

        Args:
            key: Storage key.

        Returns:
            Stored text, or None if the key is absent.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM storage WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_value(self, key: str, value: str) -> None:
        """Store text under a key, replacing any previous value.

        Args:
            key: Storage key.
            value: Text to store.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO storage (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def delete_value(self, key: str) -> None:
        """Remove a key."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM storage WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def get_keys(self) -> list[str]:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM storage ORDER BY key")
            return [row["key"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== JSON documents ====================

    def load_json(self, key: str, default: Any = None) -> Any:
        """Load and decode a JSON document.

        Corrupt documents are logged and replaced by the default rather
        than raised.

        Args:
            key: Storage key.
            default: Value returned when the key is absent or unreadable.

        Returns:
            Decoded document or default.
        """
        raw = self.get_value(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Discarding corrupt data under %r: %s", key, e)
            return default

    def save_json(self, key: str, document: Any) -> None:
        """Encode and store a JSON document."""
        self.set_value(key, json.dumps(document))

"""Persistent key-value storage for the followed users."""

import json
import logging
import sqlite3

logger = logging.getLogger(__name__)

USERS_NAMESPACE = "last_fm_notifier_users"


class BrainStore:
    """Load and save a single mapping kept under one namespace."""

    def load(self) -> dict:
        raise NotImplementedError

    def save(self, mapping: dict) -> None:
        raise NotImplementedError


class MemoryBrain(BrainStore):
    """Keep the mapping in memory only."""

    def __init__(self, initial: dict | None = None):
        self._data = dict(initial or {})

    def load(self) -> dict:
        return dict(self._data)

    def save(self, mapping: dict) -> None:
        self._data = dict(mapping)


class SQLiteBrain(BrainStore):
    """Store the mapping as JSON in a SQLite database."""

    def __init__(self, db_path: str, namespace: str = USERS_NAMESPACE):
        self.db_path = db_path
        self.namespace = namespace
        self.init_db()

    def get_db_connection(self):
        """Get SQLite database connection."""
        return sqlite3.connect(self.db_path)

    def init_db(self):
        """Initialize database with table if it doesn't exist."""
        conn = self.get_db_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS brain (
                namespace TEXT PRIMARY KEY,
                data TEXT NOT NULL
            )
        """)
        conn.commit()
        conn.close()

    def load(self) -> dict:
        conn = self.get_db_connection()
        cursor = conn.cursor()
        cursor.execute("SELECT data FROM brain WHERE namespace = ?", (self.namespace,))
        row = cursor.fetchone()
        conn.close()
        if row is None:
            return {}
        try:
            data = json.loads(row[0])
        except ValueError:
            logger.error(f"Stored data for {self.namespace} is not valid JSON, starting empty")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, mapping: dict) -> None:
        conn = self.get_db_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT OR REPLACE INTO brain (namespace, data) VALUES (?, ?)",
                (self.namespace, json.dumps(mapping)),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

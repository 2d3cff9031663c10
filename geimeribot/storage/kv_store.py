"""Durable key -> JSON store with optional expiry, backed by the SQLite database"""
import json
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from .database import Database
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc

logger = setup_logger(__name__)


class KVStore:
    """Key-value store holding JSON documents"""

    def __init__(self, database: Database, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the store

        Args:
            database: Database whose kv_store table holds the values
            clock: Returns the current naive UTC time (used for expiry)
        """
        self.database = database
        self._clock = clock or now_utc

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value for a key, or None if missing or expired"""
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT value, expires_at FROM kv_store WHERE key = ?", (key,))
            row = cursor.fetchone()
            if row is None:
                return None
            if row['expires_at'] and datetime.fromisoformat(row['expires_at']) <= self._clock():
                cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                conn.commit()
                logger.debug(f"Expired key removed: {key}")
                return None
            return json.loads(row['value'])

    def put(self, key: str, value: Any, ttl_seconds: Optional[int] = None):
        """Store a JSON-serializable value, optionally expiring after ttl_seconds"""
        expires_at = None
        if ttl_seconds is not None:
            expires_at = (self._clock() + timedelta(seconds=ttl_seconds)).isoformat()
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT OR REPLACE INTO kv_store (key, value, expires_at)
                VALUES (?, ?, ?)
            """, (key, json.dumps(value), expires_at))
            conn.commit()

    def delete(self, key: str):
        """Remove a key"""
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()

    def prune_expired(self) -> int:
        """Remove all expired keys, returning how many were removed"""
        with self.database.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                DELETE FROM kv_store
                WHERE expires_at IS NOT NULL AND expires_at <= ?
            """, (self._clock().isoformat(),))
            conn.commit()
            return cursor.rowcount

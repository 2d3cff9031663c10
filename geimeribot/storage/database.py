"""SQLite database operations"""
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from .models import PlaytimeSession

# A session stays open while the user has been seen within this window
SESSION_GAP = timedelta(minutes=3)


def iso_week_year(dt: datetime) -> tuple:
    """Return (ISO week, ISO year) for a datetime"""
    iso = dt.isocalendar()
    return iso[1], iso[0]


class Database:
    """SQLite database manager for playtime sessions and the key-value table"""

    def __init__(self, db_path: str = "data/bot.db"):
        """Initialize database connection"""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create tables if they don't exist"""
        with self.connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS playtimes (
                    username TEXT NOT NULL,
                    game_name TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    last_seen TEXT NOT NULL,
                    total_minutes INTEGER NOT NULL DEFAULT 1,
                    week INTEGER NOT NULL,
                    year INTEGER NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at TEXT
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_playtimes_lookup
                ON playtimes(username, game_name, week, year, last_seen)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_playtimes_week
                ON playtimes(week, year)
            """)

            conn.commit()

    @contextmanager
    def connection(self):
        """Get database connection with context manager"""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def record_playing(self, username: str, game_name: str, now: datetime) -> bool:
        """
        Count one minute of play for a user.

        Extends the latest session for the same user, game, week and year if
        it was seen within the session gap, otherwise opens a new session.

        Returns:
            True if an existing session was extended
        """
        week, year = iso_week_year(now)
        now_iso = now.isoformat()
        last_seen_limit = (now - SESSION_GAP).isoformat()

        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT start_time FROM playtimes
                WHERE username = ? AND game_name = ? AND week = ? AND year = ? AND last_seen >= ?
                ORDER BY last_seen DESC LIMIT 1
            """, (username, game_name, week, year, last_seen_limit))
            existing = cursor.fetchone()

            if existing:
                cursor.execute("""
                    UPDATE playtimes SET last_seen = ?, total_minutes = total_minutes + 1
                    WHERE username = ? AND game_name = ? AND week = ? AND year = ? AND start_time = ?
                """, (now_iso, username, game_name, week, year, existing['start_time']))
            else:
                cursor.execute("""
                    INSERT INTO playtimes
                    (username, game_name, start_time, last_seen, total_minutes, week, year)
                    VALUES (?, ?, ?, ?, 1, ?, ?)
                """, (username, game_name, now_iso, now_iso, week, year))
            conn.commit()
            return existing is not None

    def get_sessions(self, week: int, year: int, username: Optional[str] = None) -> List[PlaytimeSession]:
        """Get all sessions of a week, optionally for one user"""
        query = "SELECT * FROM playtimes WHERE week = ? AND year = ?"
        params: list = [week, year]
        if username:
            query += " AND username = ?"
            params.append(username)
        query += " ORDER BY start_time ASC"
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return [self._row_to_session(row) for row in cursor.fetchall()]

    def get_top_players(self, week: int, year: int, limit: int = 10) -> List[sqlite3.Row]:
        """Users with the most minutes in a week (columns: username, total)"""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT username, SUM(total_minutes) AS total
                FROM playtimes
                WHERE week = ? AND year = ?
                GROUP BY username
                ORDER BY total DESC LIMIT ?
            """, (week, year, limit))
            return cursor.fetchall()

    def get_game_totals(self, week: int, year: int) -> List[sqlite3.Row]:
        """Minutes per user and game (columns: username, game_name, total)"""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT username, game_name, SUM(total_minutes) AS total
                FROM playtimes
                WHERE week = ? AND year = ?
                GROUP BY username, game_name
                ORDER BY username, total DESC
            """, (week, year))
            return cursor.fetchall()

    def get_longest_sessions(self, week: int, year: int) -> List[sqlite3.Row]:
        """Longest single session per user (columns: username, max_session, game_name)"""
        # SQLite returns the bare game_name column from the row holding the MAX
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT username, MAX(total_minutes) AS max_session, game_name
                FROM playtimes
                WHERE week = ? AND year = ?
                GROUP BY username
            """, (week, year))
            return cursor.fetchall()

    def _row_to_session(self, row: sqlite3.Row) -> PlaytimeSession:
        """Convert database row to PlaytimeSession object"""
        return PlaytimeSession(
            username=row['username'],
            game_name=row['game_name'],
            start_time=datetime.fromisoformat(row['start_time']),
            last_seen=datetime.fromisoformat(row['last_seen']),
            total_minutes=row['total_minutes'],
            week=row['week'],
            year=row['year']
        )

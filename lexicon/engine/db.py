"""Database layer for the Lexicon vocabulary vault."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

from .models import VocabularyItem
from ..utils.clock import format_timestamp

logger = logging.getLogger(__name__)

# Search history entries kept for the search bar
SEARCH_HISTORY_LIMIT = 5


class Database:
    """SQLite store for saved words and search history."""

    def __init__(self, path: str):
        """Initialize database connection.

        Args:
            path: Path to SQLite database file
        """
        self.path = path
        self._ensure_path_exists()
        self.conn = sqlite3.connect(path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._setup_database()

    def _ensure_path_exists(self) -> None:
        """Ensure the database directory exists."""
        db_path = Path(self.path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

    def _setup_database(self) -> None:
        """Set up database with WAL mode and create tables."""
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.create_tables()

    def create_tables(self) -> None:
        """Create necessary tables if they don't exist."""
        schema = """
        CREATE TABLE IF NOT EXISTS favorites (
            word_key TEXT PRIMARY KEY,
            position INTEGER NOT NULL,
            data JSON NOT NULL
        );

        CREATE TABLE IF NOT EXISTS search_history (
            term_key TEXT PRIMARY KEY,
            term TEXT NOT NULL,
            searched_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_favorites_position ON favorites(position);
        """

        self.conn.executescript(schema)
        self.conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()

    def get_favorites(self) -> List[VocabularyItem]:
        """Return the saved collection in display order."""
        rows = self.conn.execute(
            "SELECT data FROM favorites ORDER BY position"
        ).fetchall()
        return [VocabularyItem.from_dict(json.loads(row["data"])) for row in rows]

    def replace_favorites(self, items: Iterable[VocabularyItem]) -> None:
        """Replace the whole collection in one transaction.

        Duplicate words (case-insensitive) keep their first occurrence.
        """
        rows = []
        seen = set()
        for item in items:
            if item.key in seen:
                continue
            seen.add(item.key)
            rows.append((item.key, len(rows), json.dumps(item.to_dict(), ensure_ascii=False)))

        with self.conn:
            self.conn.execute("DELETE FROM favorites")
            self.conn.executemany(
                "INSERT INTO favorites (word_key, position, data) VALUES (?, ?, ?)",
                rows
            )
        logger.debug("Stored %d favorites", len(rows))

    def add_favorite(self, item: VocabularyItem) -> None:
        """Insert ``item`` at the front of the collection, replacing any same word."""
        with self.conn:
            self.conn.execute("DELETE FROM favorites WHERE word_key = ?", (item.key,))
            row = self.conn.execute("SELECT MIN(position) AS first FROM favorites").fetchone()
            position = row["first"] - 1 if row["first"] is not None else 0
            self.conn.execute(
                "INSERT INTO favorites (word_key, position, data) VALUES (?, ?, ?)",
                (item.key, position, json.dumps(item.to_dict(), ensure_ascii=False))
            )

    def remove_favorite(self, word: str) -> bool:
        """Remove a word from the collection. Returns True if it was there."""
        with self.conn:
            cursor = self.conn.execute(
                "DELETE FROM favorites WHERE word_key = ?", (word.casefold(),)
            )
        return cursor.rowcount > 0

    def record_search(self, term: str, now: datetime) -> None:
        """Remember a search term, most recent first, without duplicates."""
        term = term.strip()
        if not term:
            return

        with self.conn:
            self.conn.execute(
                """INSERT OR REPLACE INTO search_history (term_key, term, searched_at)
                   VALUES (?, ?, ?)""",
                (term.casefold(), term, format_timestamp(now))
            )
            # Keep only the newest entries
            self.conn.execute(
                """DELETE FROM search_history WHERE term_key NOT IN (
                       SELECT term_key FROM search_history
                       ORDER BY searched_at DESC, rowid DESC LIMIT ?
                   )""",
                (SEARCH_HISTORY_LIMIT,)
            )

    def recent_searches(self, limit: int = SEARCH_HISTORY_LIMIT) -> List[str]:
        """Most recent search terms first."""
        rows = self.conn.execute(
            "SELECT term FROM search_history ORDER BY searched_at DESC, rowid DESC LIMIT ?",
            (limit,)
        ).fetchall()
        return [row["term"] for row in rows]

    def clear_search_history(self) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM search_history")

"""
db.py
Local key/value storage in SQLite (session, data blob, GitHub token).
Best-effort: failures are logged, never raised to the caller.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

USER_KEY = "khs_user"
DATA_KEY = "khs_data"
TOKEN_KEY = "github_token"
SETUP_SEEN_KEY = "khs_github_setup"


class LocalStore:
    def __init__(self, db_file: Path | str):
        self.db_file = Path(db_file)
        self._ready = False

    @contextmanager
    def get_conn(self):
        conn = sqlite3.connect(self.db_file, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _create_tables(self) -> None:
        if self._ready:
            return
        with self.get_conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
        self._ready = True

    def save(self, key: str, value) -> bool:
        try:
            payload = json.dumps(value, ensure_ascii=False)
            self._create_tables()
            now = datetime.now(timezone.utc).isoformat(timespec="seconds")
            with self.get_conn() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store(key, value, updated_at) VALUES(?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                    """,
                    (key, payload, now),
                )
            return True
        except (TypeError, ValueError, sqlite3.Error) as e:
            logger.error("Error saving %r to local storage: %s", key, e)
            return False

    def load(self, key: str, default=None):
        try:
            self._create_tables()
            with self.get_conn() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
            if row is None:
                return default
            return json.loads(row["value"])
        except (ValueError, sqlite3.Error) as e:
            logger.error("Error loading %r from local storage: %s", key, e)
            return default

    def delete(self, key: str) -> None:
        try:
            self._create_tables()
            with self.get_conn() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as e:
            logger.error("Error removing %r from local storage: %s", key, e)

"""SQLite-backed persistence for the profile and the completion ledger."""
from __future__ import annotations

import json
import logging
import shutil
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from .errors import TransientIOError

LOGGER = logging.getLogger(__name__)

PROFILE_KEY = "userProfile"
COMPLETED_SESSIONS_KEY = "completedSessions"

# Keys whose JSON array is exposed to callers as a set.
_SET_KEYS = frozenset({COMPLETED_SESSIONS_KEY})


class Storage:
    """Key/value store wrapped around SQLite.

    Reads fall back to the caller's default and writes report failure as
    ``False``; neither raises.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_conn(self) -> Iterable[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise TransientIOError(f"Cannot open {self.db_path}: {exc}") from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            LOGGER.exception("Database operation failed")
            raise TransientIOError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._get_conn() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    def load(self, key: str, default: Any = None) -> Any:
        try:
            with self._get_conn() as conn:
                cur = conn.cursor()
                cur.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
                row = cur.fetchone()
        except TransientIOError:
            LOGGER.error("Error reading key %r, using default", key)
            return default
        if row is None:
            return default
        try:
            value = json.loads(row[0])
        except ValueError:
            LOGGER.error("Stored value for %r is not valid JSON, using default", key)
            return default
        if key in _SET_KEYS:
            if isinstance(value, list) and all(isinstance(item, str) for item in value):
                return set(value)
            LOGGER.warning("Stored value for %r is not a list of keys, using default", key)
            return default
        return value

    def save(self, key: str, value: Any) -> bool:
        if isinstance(value, (set, frozenset)):
            value = sorted(value)
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError):
            LOGGER.exception("Cannot serialise value for %r", key)
            return False
        try:
            with self._get_conn() as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, payload, datetime.now().isoformat(timespec="seconds")),
                )
        except TransientIOError:
            LOGGER.error("Error writing key %r", key)
            return False
        LOGGER.debug("Saved %s", key)
        return True

    def load_profile(self, default: dict) -> dict:
        """Return the stored profile document, or ``default`` if its shape is wrong."""
        data = self.load(PROFILE_KEY, default)
        if not isinstance(data, dict) or not isinstance(data.get("preferences"), dict):
            LOGGER.warning("Invalid userProfile structure, using default")
            return default
        return data

    def clear(self) -> bool:
        try:
            with self._get_conn() as conn:
                conn.execute("DELETE FROM kv_store")
        except TransientIOError:
            LOGGER.error("Failed to clear stored data")
            return False
        LOGGER.info("Cleared all stored data in %s", self.db_path)
        return True

    def backup_database(self) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        target = self.db_path.with_name(f"{self.db_path.stem}-backup-{timestamp}{self.db_path.suffix}")
        shutil.copy2(self.db_path, target)
        LOGGER.info("Database backed up to %s", target)
        return target

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from sunvoy_client.application.ports.session_store_port import SessionStorePort
from sunvoy_client.domain.errors import StorageError
from sunvoy_client.domain.model import CookieRecord, Session

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS session_cookie (
  domain TEXT NOT NULL,
  path TEXT NOT NULL,
  name TEXT NOT NULL,
  value TEXT NOT NULL,
  expires INTEGER,
  secure INTEGER NOT NULL DEFAULT 0,
  http_only INTEGER NOT NULL DEFAULT 0,
  PRIMARY KEY (domain, path, name)
);
"""


class SQLiteSessionStore(SessionStorePort):
    """SQLite-backed session store. One row per cookie, replaced wholesale on save.

    File path configurable; creates schema on first use.
    """

    def __init__(self, db_path: str = ".sunvoy_session.sqlite") -> None:
        self._path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path)
        try:
            conn.executescript(SCHEMA)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def load(self) -> Session | None:
        if not self._path.exists():
            logger.info("No previous session found at %s", self._path)
            return None
        try:
            with closing(self._connect()) as conn:
                rows = conn.execute(
                    "SELECT domain, path, name, value, expires, secure, http_only FROM session_cookie"
                ).fetchall()
        except sqlite3.Error as e:
            logger.warning("Session database %s unusable, ignoring it: %s", self._path, e)
            return None
        if not rows:
            return None
        records = [
            CookieRecord(
                domain=domain,
                path=path,
                name=name,
                value=value,
                expires=expires,
                secure=bool(secure),
                http_only=bool(http_only),
            )
            for domain, path, name, value, expires, secure, http_only in rows
        ]
        logger.info("Loaded saved session cookies (%d) from %s", len(records), self._path)
        return Session(records)

    def save(self, session: Session) -> None:
        rows = [
            (c.domain, c.path, c.name, c.value, c.expires, int(c.secure), int(c.http_only))
            for c in session.snapshot()
        ]
        try:
            with closing(self._connect()) as conn, conn:
                conn.execute("DELETE FROM session_cookie")
                conn.executemany(
                    "INSERT INTO session_cookie (domain, path, name, value, expires, secure, http_only)"
                    " VALUES (?, ?, ?, ?, ?, ?, ?)",
                    rows,
                )
        except sqlite3.Error as e:
            raise StorageError(f"could not write session database {self._path}: {e}") from e
        logger.info("Session cookies saved to %s", self._path)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"could not remove session database {self._path}: {e}") from e

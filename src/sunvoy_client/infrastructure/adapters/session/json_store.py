from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from sunvoy_client.application.ports.session_store_port import SessionStorePort
from sunvoy_client.domain.errors import StorageError
from sunvoy_client.domain.model import CookieRecord, Session

logger = logging.getLogger(__name__)


class JsonFileSessionStore(SessionStorePort):
    """Session snapshot as a JSON document: one record per cookie.

    Layout::

        {"saved_at": "...", "cookies": [{"domain": ..., "path": ..., "name": ...,
                                         "value": ..., "expires": ..., ...}]}

    Writes go through a temp file + rename so a crash never leaves half a file.
    """

    def __init__(self, path: str | os.PathLike[str] = "cookiejar.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        if not self._path.exists():
            logger.info("No previous session found at %s", self._path)
            return None
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            records = [CookieRecord.from_dict(item) for item in raw["cookies"]]
        except OSError as e:
            logger.warning("Session file %s unreadable: %s", self._path, e)
            return None
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Session file %s is corrupt, ignoring it: %s", self._path, e)
            return None
        logger.info("Loaded saved session cookies (%d) from %s", len(records), self._path)
        return Session(records)

    def save(self, session: Session) -> None:
        doc = {
            "saved_at": datetime.now(UTC).isoformat(),
            "cookies": [c.to_dict() for c in session.snapshot()],
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".cookiejar-", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(doc, fh, indent=2)
                os.replace(tmp, self._path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"could not write session file {self._path}: {e}") from e
        logger.info("Session cookies saved to %s", self._path)

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"could not remove session file {self._path}: {e}") from e

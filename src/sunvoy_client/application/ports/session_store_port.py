from __future__ import annotations

from typing import Protocol

from sunvoy_client.domain.model import Session


class SessionStorePort(Protocol):
    """Abstract persistence for the session cookie snapshot."""

    def load(self) -> Session | None:
        """
        Returns:
            the restored session, or None when nothing usable is stored
            (missing, unreadable and corrupt snapshots all count as absent)
        """
        ...

    def save(self, session: Session) -> None:
        """Persist a snapshot of the session's cookies. Raises StorageError on I/O failure."""
        ...

    def clear(self) -> None:
        """Drop the persisted snapshot, if any."""
        ...

from __future__ import annotations

from sunvoy_client.application.ports.session_store_port import SessionStorePort
from sunvoy_client.domain.model import CookieRecord, Session


class InMemorySessionStore(SessionStorePort):
    """Simple in-memory store for development. Not persistent."""

    def __init__(self) -> None:
        self._cookies: tuple[CookieRecord, ...] | None = None

    def load(self) -> Session | None:
        if self._cookies is None:
            return None
        return Session(self._cookies)

    def save(self, session: Session) -> None:
        self._cookies = session.snapshot()

    def clear(self) -> None:
        self._cookies = None

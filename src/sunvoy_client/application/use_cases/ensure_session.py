from __future__ import annotations

import logging
from dataclasses import dataclass

from sunvoy_client.application.ports.http_client_port import HttpClientPort
from sunvoy_client.application.ports.login_port import LoginPort
from sunvoy_client.application.ports.session_store_port import SessionStorePort
from sunvoy_client.domain.errors import SessionNotReadyError, StorageError, SunvoyError
from sunvoy_client.domain.model import Credentials, LoginState, Session, SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsureSessionResult:
    status: str  # "ALREADY_ACTIVE" | "REFRESHED" | "ERROR"
    state: SessionState
    message: str
    error: SunvoyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "EnsureSessionResult":
        if self.error is not None:
            raise self.error
        return self


class SessionManager:
    """Owns one Session: restores it, probes it, logs in again when needed.

    The cookie jar lives in `http`; `session` mirrors it as plain records so it
    can be persisted through `store` without touching the transport.
    """

    def __init__(
        self,
        http: HttpClientPort,
        store: SessionStorePort,
        consumer: LoginPort,
        credentials: Credentials,
    ) -> None:
        self.http = http
        self.store = store
        self.consumer = consumer
        self.credentials = credentials
        self.session = Session()

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def login_state(self) -> LoginState:
        return self.consumer.state

    @property
    def transport(self) -> HttpClientPort:
        """Authenticated transport handle; only available once the session is established."""
        if not self.session.is_authenticated:
            raise SessionNotReadyError("session is not authenticated; call ensure_session() first")
        return self.http

    def restore(self) -> bool:
        """Load the stored snapshot into the transport. True if anything was restored."""
        stored = self.store.load()
        if stored is None or stored.is_empty:
            return False
        self.http.clear_cookies()
        self.http.set_cookies(stored.cookies)
        self.session = Session(stored.cookies, SessionState.UNAUTHENTICATED)
        return True

    def is_session_valid(self) -> bool:
        valid = self.consumer.validate_session()
        if valid:
            self.session.mark_authenticated()
        else:
            self.session.invalidate()
        return valid

    def login(self) -> EnsureSessionResult:
        """Run the login machine from scratch and persist the new session on success."""
        self.http.clear_cookies()
        self.session = Session()
        try:
            self.consumer.login(self.credentials)
        except SunvoyError as e:
            logger.error("Login failed: %s", e)
            self.session.invalidate()
            return EnsureSessionResult("ERROR", self.session.state, f"Login failed: {e}", error=e)

        self.session = Session(self.http.dump_cookies(), SessionState.AUTHENTICATED)
        self._persist()
        return EnsureSessionResult("REFRESHED", self.session.state, "Session refreshed via login")

    def ensure_session(self) -> EnsureSessionResult:
        if self.session.is_authenticated:
            return EnsureSessionResult("ALREADY_ACTIVE", self.session.state, "Session already established")
        if self.restore():
            if self.is_session_valid():
                logger.info("Reusing stored session")
                return EnsureSessionResult("ALREADY_ACTIVE", self.session.state, "Valid session from store")
            logger.info("Stored session rejected, logging in fresh")
        else:
            logger.info("No usable stored session, logging in fresh")
        return self.login()

    def _persist(self) -> None:
        try:
            self.store.save(self.session)
        except StorageError as e:
            # The live session stays usable; the next run simply logs in again.
            logger.warning("Could not persist session: %s", e)

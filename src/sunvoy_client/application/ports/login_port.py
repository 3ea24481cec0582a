from __future__ import annotations

from typing import Protocol

from sunvoy_client.domain.model import Credentials, LoginState


class LoginPort(Protocol):
    """Drives the nonce/credentials login against the web host and probes the session."""

    state: LoginState

    def login(self, credentials: Credentials) -> None: ...
    def validate_session(self) -> bool: ...

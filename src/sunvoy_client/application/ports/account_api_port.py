from __future__ import annotations

from typing import Any, Protocol

from sunvoy_client.domain.model import SignedPayload


class AccountApiPort(Protocol):
    """Protected endpoints reachable once the session is authenticated."""

    def fetch_token_page(self) -> str: ...
    def fetch_settings(self, payload: SignedPayload) -> Any: ...
    def list_users(self) -> Any: ...

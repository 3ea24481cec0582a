from __future__ import annotations


class SunvoyError(Exception):
    """Base class for every failure surfaced by the client."""


class StorageError(SunvoyError):
    """Session snapshot could not be written (or read back in a usable way)."""


class NonceNotFoundError(SunvoyError):
    """Login page did not carry the expected nonce field."""


class LoginFailedError(SunvoyError):
    """Login POST answered with anything other than the expected redirect."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"login rejected with status {status}")
        self.status = status
        self.body = body


class NetworkError(SunvoyError):
    """Transport-level failure (DNS, connect, timeout, protocol)."""


class UpstreamDataError(SunvoyError):
    """Upstream answered, but not with the data we expected."""


class ReservedTokenError(UpstreamDataError):
    """Token map carries a key the signing protocol reserves for itself."""

    def __init__(self, key: str) -> None:
        super().__init__(f"token key {key!r} is reserved by the signing protocol")
        self.key = key


class SessionNotReadyError(SunvoyError):
    """Authenticated transport requested before a session was established."""

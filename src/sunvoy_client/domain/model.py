from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sunvoy_client.domain.errors import UpstreamDataError

# =========================
# Value Objects
# =========================
TokenMap = dict[str, str]


@dataclass(frozen=True)
class Credentials:
    identifier: str
    secret: str

    def __repr__(self) -> str:
        return f"Credentials(identifier={self.identifier!r}, secret='***')"


@dataclass(frozen=True)
class CookieRecord:
    """One persisted cookie. `expires` is a Unix timestamp, None for session cookies."""

    domain: str
    path: str
    name: str
    value: str
    expires: int | None = None
    secure: bool = False
    http_only: bool = False

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.domain, self.path, self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "path": self.path,
            "name": self.name,
            "value": self.value,
            "expires": self.expires,
            "secure": self.secure,
            "http_only": self.http_only,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CookieRecord":
        if not isinstance(data, Mapping):
            raise TypeError(f"cookie record must be an object, got {type(data).__name__}")
        expires = data.get("expires")
        return cls(
            domain=str(data["domain"]),
            path=str(data.get("path") or "/"),
            name=str(data["name"]),
            value=str(data["value"]),
            expires=int(expires) if expires is not None else None,
            secure=bool(data.get("secure", False)),
            http_only=bool(data.get("http_only", False)),
        )


@dataclass(frozen=True)
class SignedPayload:
    canonical_string: str
    signature: str
    timestamp: int

    @property
    def body(self) -> str:
        """Form-encoded request body: canonical string plus the checkcode."""
        return f"{self.canonical_string}&checkcode={self.signature}"


# =========================
# Session
# =========================
class SessionState(str, Enum):
    EMPTY = "EMPTY"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED = "AUTHENTICATED"


class LoginState(str, Enum):
    NO_SESSION = "NO_SESSION"
    FETCHING_NONCE = "FETCHING_NONCE"
    NONCE_READY = "NONCE_READY"
    LOGIN_SUBMITTED = "LOGIN_SUBMITTED"
    AUTHENTICATED = "AUTHENTICATED"
    LOGIN_FAILED = "LOGIN_FAILED"


class Session:
    """Cookie collection keyed by (domain, path, name) plus its auth state."""

    def __init__(self, cookies: Iterable[CookieRecord] = (), state: SessionState | None = None) -> None:
        self._cookies: dict[tuple[str, str, str], CookieRecord] = {}
        for cookie in cookies:
            self._cookies[cookie.key] = cookie
        if state is None:
            state = SessionState.UNAUTHENTICATED if self._cookies else SessionState.EMPTY
        self.state = state

    @property
    def cookies(self) -> list[CookieRecord]:
        return list(self._cookies.values())

    @property
    def is_empty(self) -> bool:
        return not self._cookies

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def snapshot(self) -> tuple[CookieRecord, ...]:
        return tuple(sorted(self._cookies.values(), key=lambda c: c.key))

    def mark_authenticated(self) -> None:
        self.state = SessionState.AUTHENTICATED

    def invalidate(self) -> None:
        self.state = SessionState.UNAUTHENTICATED if self._cookies else SessionState.EMPTY

    def __len__(self) -> int:
        return len(self._cookies)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self.snapshot() == other.snapshot()

    def __repr__(self) -> str:
        return f"Session(state={self.state.value}, cookies={len(self)})"


# =========================
# Entities
# =========================
USER_FIELDS = ("id", "firstName", "lastName", "email")


@dataclass(frozen=True)
class User:
    id: str
    first_name: str
    last_name: str
    email: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_api(cls, data: Any) -> "User":
        if not isinstance(data, Mapping):
            raise UpstreamDataError(f"expected a user object, got {type(data).__name__}")
        missing = [name for name in USER_FIELDS if data.get(name) in (None, "")]
        if missing:
            raise UpstreamDataError(f"user object missing fields: {', '.join(missing)}")
        return cls(
            id=str(data["id"]),
            first_name=str(data["firstName"]),
            last_name=str(data["lastName"]),
            email=str(data["email"]),
            raw=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }


@dataclass(frozen=True)
class AccountSnapshot:
    current_user: User
    users: list[User]

    def to_records(self) -> list[dict[str, Any]]:
        """Listed users followed by the authenticated user."""
        return [u.to_dict() for u in self.users] + [self.current_user.to_dict()]

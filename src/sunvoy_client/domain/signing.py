from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Callable, Mapping
from urllib.parse import quote

from sunvoy_client.domain.errors import ReservedTokenError
from sunvoy_client.domain.model import SignedPayload

RESERVED_KEYS = ("timestamp", "checkcode")
DEFAULT_SIGNING_SECRET = "mys3cr3t"


def canonicalize(params: Mapping[str, str]) -> str:
    """Sorted `key=value` pairs joined by `&`, values percent-encoded.

    Only `A-Za-z0-9-_.~` survive unencoded; a space becomes `%20`.
    """
    return "&".join(f"{key}={quote(params[key], safe='-_.~')}" for key in sorted(params))


def compute_checkcode(message: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha1)
    return digest.hexdigest().upper()


class RequestSigner:
    """Builds the signed settings payload expected by the API host.

    Signing is a pure function of (tokens, timestamp, secret); the clock is
    only consulted when no timestamp is passed in.
    """

    def __init__(self, secret: str = DEFAULT_SIGNING_SECRET, *, clock: Callable[[], float] = time.time) -> None:
        self._secret = secret
        self._clock = clock

    def sign(self, tokens: Mapping[str, str], timestamp: int | None = None) -> SignedPayload:
        for key in RESERVED_KEYS:
            if key in tokens:
                raise ReservedTokenError(key)
        if timestamp is None:
            timestamp = int(self._clock())
        params = dict(tokens)
        params["timestamp"] = str(timestamp)
        canonical = canonicalize(params)
        return SignedPayload(
            canonical_string=canonical,
            signature=compute_checkcode(canonical, self._secret),
            timestamp=timestamp,
        )

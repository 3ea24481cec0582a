from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol
import json

from sunvoy_client.domain.model import CookieRecord


class HttpResponse:
    def __init__(
        self,
        status_code: int,
        text: str,
        url: str,
        headers: Mapping[str, str],
        *,
        raw: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.text = text
        self.url = url
        self.headers = dict(headers)
        self._raw = raw

    @property
    def is_redirect(self) -> bool:
        return self.status_code in (301, 302, 303, 307, 308)

    def json(self) -> Any:
        if self._raw is not None and hasattr(self._raw, "json"):
            return self._raw.json()
        return json.loads(self.text)


class HttpClientPort(Protocol):
    """Minimal HTTP client abstraction with an inspectable cookie jar.

    Implementations raise `NetworkError` for transport failures and return
    every HTTP status (including 4xx/5xx) as a response.
    """

    def get(
        self, url: str, *, headers: Mapping[str, str] | None = None, allow_redirects: bool = True
    ) -> HttpResponse: ...
    def post(
        self,
        url: str,
        *,
        data: Mapping[str, Any] | None = None,
        content: str | None = None,
        headers: Mapping[str, str] | None = None,
        allow_redirects: bool = True,
    ) -> HttpResponse: ...
    def set_cookies(self, cookies: Iterable[CookieRecord]) -> None: ...
    def dump_cookies(self) -> list[CookieRecord]: ...
    def clear_cookies(self) -> None: ...

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from http.cookiejar import Cookie
from typing import Any

import httpx

from sunvoy_client.application.ports.http_client_port import HttpClientPort, HttpResponse
from sunvoy_client.domain.errors import NetworkError
from sunvoy_client.domain.model import CookieRecord

logger = logging.getLogger(__name__)


def _is_http_only(cookie: Cookie) -> bool:
    # cookiejar keeps nonstandard attribute names as the server spelled them
    return any(name.lower() == "httponly" for name in getattr(cookie, "_rest", {}))


def _to_record(cookie: Cookie) -> CookieRecord:
    return CookieRecord(
        domain=cookie.domain,
        path=cookie.path or "/",
        name=cookie.name,
        value=cookie.value or "",
        expires=cookie.expires,
        secure=bool(cookie.secure),
        http_only=_is_http_only(cookie),
    )


def _to_cookie(record: CookieRecord) -> Cookie:
    rest = {"HttpOnly": None} if record.http_only else {}
    return Cookie(
        version=0,
        name=record.name,
        value=record.value,
        port=None,
        port_specified=False,
        domain=record.domain,
        domain_specified=record.domain.startswith("."),
        domain_initial_dot=record.domain.startswith("."),
        path=record.path,
        path_specified=True,
        secure=record.secure,
        expires=record.expires,
        discard=record.expires is None,
        comment=None,
        comment_url=None,
        rest=rest,
    )


class HttpxClient(HttpClientPort):
    def __init__(self, timeout: float = 30.0, *, transport: httpx.BaseTransport | None = None) -> None:
        """HTTP client adapter backed by a persistent httpx.Client.

        - Persists cookies across requests automatically (cookie jar)
        - Exposes dump_cookies/set_cookies as full cookie records for persistence
        - Maps every httpx transport failure onto NetworkError

        Args:
            timeout (float, optional): Timeout for requests. Defaults to 30.0.
            transport (httpx.BaseTransport | None, optional): Custom transport, used by tests.
        """
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
                "User-Agent": "sunvoy-client/0.1 httpx",
            },
        )

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None,
        allow_redirects: bool,
        **kwargs: Any,
    ) -> HttpResponse:
        logger.debug("%s %s | cookies: %s", method, url, [c.name for c in self._client.cookies.jar])
        try:
            resp = self._client.request(
                method,
                url,
                headers=headers,
                follow_redirects=allow_redirects,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e
        logger.debug("%s %s -> %s", method, url, resp.status_code)
        return HttpResponse(resp.status_code, resp.text, str(resp.url), resp.headers, raw=resp)

    def get(self, url: str, *, headers: Mapping[str, str] | None = None, allow_redirects: bool = True) -> HttpResponse:
        """Gets the given URL.

        Args:
            url (str): URL to get.
            headers (Mapping[str, str] | None, optional): Headers to include. Defaults to None.
            allow_redirects (bool, optional): Whether to allow redirects. Defaults to True.

        Returns:
            HttpResponse: Response from the server.
        """
        return self._send("GET", url, headers=headers, allow_redirects=allow_redirects)

    def post(
        self,
        url: str,
        *,
        data: Mapping[str, Any] | None = None,
        content: str | None = None,
        headers: Mapping[str, str] | None = None,
        allow_redirects: bool = True,
    ) -> HttpResponse:
        """Posts data to the given URL.

        Args:
            url (str): URL to post to.
            data (Mapping[str, Any] | None, optional): Form fields, encoded by httpx. Defaults to None.
            content (str | None, optional): Pre-encoded body, sent as-is. Defaults to None.
            headers (Mapping[str, str] | None, optional): Headers to include. Defaults to None.
            allow_redirects (bool, optional): Whether to allow redirects. Defaults to True.

        Returns:
            HttpResponse: Response from the server.
        """
        if data is not None and content is not None:
            raise ValueError("pass either data or content, not both")
        kwargs: dict[str, Any] = {}
        if data is not None:
            kwargs["data"] = dict(data)
        if content is not None:
            kwargs["content"] = content.encode("utf-8")
        return self._send("POST", url, headers=headers, allow_redirects=allow_redirects, **kwargs)

    def set_cookies(self, cookies: Iterable[CookieRecord]) -> None:
        """Loads cookie records into the client's jar.

        Args:
            cookies (Iterable[CookieRecord]): Cookies to set.
        """
        for record in cookies:
            self._client.cookies.jar.set_cookie(_to_cookie(record))

    def dump_cookies(self) -> list[CookieRecord]:
        """Dumps cookies from the client.

        Returns:
            list[CookieRecord]: Every cookie currently in the jar.
        """
        return [_to_record(c) for c in self._client.cookies.jar]

    def clear_cookies(self) -> None:
        self._client.cookies.clear()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

from __future__ import annotations

import logging
from typing import Any

from sunvoy_client.application.ports.account_api_port import AccountApiPort
from sunvoy_client.application.ports.http_client_port import HttpClientPort, HttpResponse
from sunvoy_client.domain.errors import UpstreamDataError
from sunvoy_client.domain.model import SignedPayload
from sunvoy_client.infrastructure.adapters.sunvoy.login_consumer import (
    SETTINGS_API_PATH,
    SUNVOY_API_BASE,
    SUNVOY_BASE,
)

logger = logging.getLogger(__name__)

TOKENS_PATH = "/settings/tokens"
USERS_PATH = "/api/users"


class SunvoyAccountApi(AccountApiPort):
    """Protected Sunvoy endpoints. Expects `http` to carry an authenticated cookie jar."""

    def __init__(self, http: HttpClientPort, *, base_url: str = SUNVOY_BASE, api_url: str = SUNVOY_API_BASE) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_url = api_url.rstrip("/")

    def _expect_ok(self, resp: HttpResponse, what: str) -> None:
        if resp.status_code != 200:
            logger.error("%s -> status=%s", what, resp.status_code)
            raise UpstreamDataError(f"{what} answered {resp.status_code}")

    def _json(self, resp: HttpResponse, what: str) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamDataError(f"{what} did not return JSON: {e}") from e

    def fetch_token_page(self) -> str:
        url = f"{self.base_url}{TOKENS_PATH}"
        resp = self.http.get(url, headers={"Referer": f"{self.base_url}/settings"})
        self._expect_ok(resp, "token page")
        return resp.text

    def fetch_settings(self, payload: SignedPayload) -> Any:
        url = f"{self.api_url}{SETTINGS_API_PATH}"
        resp = self.http.post(
            url,
            content=payload.body,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
                "Origin": self.base_url,
                "Referer": f"{self.base_url}/",
            },
        )
        self._expect_ok(resp, "signed settings request")
        return self._json(resp, "signed settings request")

    def list_users(self) -> Any:
        url = f"{self.base_url}{USERS_PATH}"
        resp = self.http.post(url, headers={"Accept": "application/json"})
        self._expect_ok(resp, "user list")
        return self._json(resp, "user list")

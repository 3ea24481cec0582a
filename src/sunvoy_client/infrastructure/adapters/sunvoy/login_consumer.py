from __future__ import annotations

import logging

from bs4 import BeautifulSoup  # type: ignore[import-untyped]

from sunvoy_client.application.ports.http_client_port import HttpClientPort
from sunvoy_client.application.ports.login_port import LoginPort
from sunvoy_client.domain.errors import LoginFailedError, NetworkError, NonceNotFoundError
from sunvoy_client.domain.model import Credentials, LoginState

logger = logging.getLogger(__name__)

SUNVOY_BASE = "https://challenge.sunvoy.com"
SUNVOY_API_BASE = "https://api.challenge.sunvoy.com"
LOGIN_PATH = "/login"
SETTINGS_API_PATH = "/api/settings"
LOGIN_SUCCESS_STATUS = 302


class SunvoyLoginConsumer(LoginPort):
    """
    Nonce + credentials login against the Sunvoy web host.

    NO_SESSION -> FETCHING_NONCE -> NONCE_READY -> LOGIN_SUBMITTED
    -> AUTHENTICATED | LOGIN_FAILED
    """

    def __init__(self, http: HttpClientPort, *, base_url: str = SUNVOY_BASE, api_url: str = SUNVOY_API_BASE) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.state = LoginState.NO_SESSION

    @property
    def login_url(self) -> str:
        return f"{self.base_url}{LOGIN_PATH}"

    def login(self, credentials: Credentials) -> None:
        self.state = LoginState.NO_SESSION
        nonce = self._fetch_nonce()
        self._submit_credentials(credentials, nonce)

    def _fetch_nonce(self) -> str:
        """Step 1: GET the login page and read the hidden nonce input."""
        self.state = LoginState.FETCHING_NONCE
        logger.info("Fetching login page %s", self.login_url)
        try:
            resp = self.http.get(self.login_url)
        except NetworkError:
            self.state = LoginState.LOGIN_FAILED
            raise
        if resp.status_code != 200:
            self.state = LoginState.LOGIN_FAILED
            raise NonceNotFoundError(f"login page answered {resp.status_code}")

        soup = BeautifulSoup(resp.text, "html.parser")
        field = soup.find("input", attrs={"name": "nonce"})
        nonce = field.get("value") if field else None
        if not nonce:
            self.state = LoginState.LOGIN_FAILED
            raise NonceNotFoundError("nonce field not found in login page")
        self.state = LoginState.NONCE_READY
        logger.debug("Nonce ready (%s...)", nonce[:4])
        return nonce

    def _submit_credentials(self, credentials: Credentials, nonce: str) -> None:
        """Step 2: POST the form; only an unfollowed 302 means success."""
        payload = {
            "username": credentials.identifier,
            "password": credentials.secret,
            "nonce": nonce,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Origin": self.base_url,
            "Referer": self.login_url,
        }
        self.state = LoginState.LOGIN_SUBMITTED
        logger.info("Logging in as %s", credentials.identifier)
        try:
            resp = self.http.post(self.login_url, data=payload, headers=headers, allow_redirects=False)
        except NetworkError:
            self.state = LoginState.LOGIN_FAILED
            raise

        if resp.status_code != LOGIN_SUCCESS_STATUS:
            self.state = LoginState.LOGIN_FAILED
            logger.error("Login failed: status=%s", resp.status_code)
            raise LoginFailedError(resp.status_code, resp.text)

        # The redirect target is not inspected; any 302 counts as success.
        if resp.is_redirect:
            logger.debug("Login redirect -> %s", resp.headers.get("location", resp.headers.get("Location", "-")))
        self.state = LoginState.AUTHENTICATED
        logger.info("Login successful")

    # ---------- Validation ----------
    def validate_session(self) -> bool:
        """Probe an authenticated endpoint; 200 means the cookies are still accepted."""
        if not self.http.dump_cookies():
            logger.debug("Validation skipped: cookie jar empty")
            return False
        try:
            resp = self.http.post(f"{self.api_url}{SETTINGS_API_PATH}", allow_redirects=False)
        except NetworkError as e:
            logger.warning("Session probe failed: %s", e)
            return False
        logger.info("Session probe -> status=%s", resp.status_code)
        return resp.status_code == 200

from __future__ import annotations

import logging
from collections.abc import Callable

from sunvoy_client.application.ports.account_api_port import AccountApiPort
from sunvoy_client.application.ports.http_client_port import HttpClientPort
from sunvoy_client.application.ports.token_extractor_port import TokenExtractorPort
from sunvoy_client.application.use_cases.ensure_session import SessionManager
from sunvoy_client.domain.errors import UpstreamDataError
from sunvoy_client.domain.model import AccountSnapshot, User
from sunvoy_client.domain.signing import RequestSigner

logger = logging.getLogger(__name__)


class FetchAccountDataUseCase:
    """Ensures a session, then pulls the user list and the signed current-user settings."""

    def __init__(
        self,
        manager: SessionManager,
        api_factory: Callable[[HttpClientPort], AccountApiPort],
        extractor: TokenExtractorPort,
        signer: RequestSigner,
    ) -> None:
        self.manager = manager
        self.api_factory = api_factory
        self.extractor = extractor
        self.signer = signer

    def execute(self) -> AccountSnapshot:
        self.manager.ensure_session().raise_for_error()
        api = self.api_factory(self.manager.transport)

        raw_users = api.list_users()
        if not isinstance(raw_users, list):
            raise UpstreamDataError(f"user list is not an array ({type(raw_users).__name__})")
        users = [User.from_api(item) for item in raw_users]
        logger.info("Fetched %d users", len(users))

        tokens = self.extractor.extract(api.fetch_token_page())
        if not tokens:
            raise UpstreamDataError("token page carried no hidden tokens")
        payload = self.signer.sign(tokens)
        current = User.from_api(api.fetch_settings(payload))
        logger.info("Fetched current user %s", current.email)
        return AccountSnapshot(current_user=current, users=users)

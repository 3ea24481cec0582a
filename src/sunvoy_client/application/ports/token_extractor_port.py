from __future__ import annotations

from typing import Protocol

from sunvoy_client.domain.model import TokenMap


class TokenExtractorPort(Protocol):
    """Turns a fetched settings page into the token map that gets signed."""

    def extract(self, html: str) -> TokenMap: ...

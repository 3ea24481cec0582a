from __future__ import annotations

import logging

from bs4 import BeautifulSoup  # type: ignore[import-untyped]

from sunvoy_client.application.ports.token_extractor_port import TokenExtractorPort
from sunvoy_client.domain.model import TokenMap

logger = logging.getLogger(__name__)


def _is_hidden(value: str | None) -> bool:
    return bool(value) and value.strip().lower() == "hidden"


class HiddenInputTokenExtractor(TokenExtractorPort):
    """Collects `id -> value` from every hidden input on a page.

    Inputs missing either attribute (or carrying an empty one) are skipped;
    settings pages include a few decorative hidden fields.
    """

    def extract(self, html: str) -> TokenMap:
        soup = BeautifulSoup(html or "", "html.parser")
        tokens: TokenMap = {}
        for inp in soup.find_all("input", attrs={"type": _is_hidden}):
            field_id = inp.get("id")
            value = inp.get("value")
            if not field_id or not value:
                continue
            if field_id in tokens:
                logger.debug("Duplicate hidden input id=%s ignored", field_id)
                continue
            tokens[field_id] = value
        logger.debug("Extracted %d hidden tokens: %s", len(tokens), sorted(tokens))
        return tokens

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from sunvoy_client.domain.model import Credentials

# Load .env if present
load_dotenv()


@dataclass(frozen=True)
class Settings:
    email: str = os.getenv("SUNVOY_EMAIL", "demo@example.org")
    password: str = os.getenv("SUNVOY_PASSWORD", "test")
    base_url: str = os.getenv("SUNVOY_BASE_URL", "https://challenge.sunvoy.com").rstrip("/")
    api_url: str = os.getenv("SUNVOY_API_URL", "https://api.challenge.sunvoy.com").rstrip("/")
    signing_secret: str = os.getenv("SUNVOY_SIGNING_SECRET", "mys3cr3t")
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "30"))
    session_file: str = os.getenv("SESSION_FILE", "cookiejar.json")
    session_backend: str = os.getenv("SESSION_BACKEND", "json")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def credentials(self) -> Credentials:
        return Credentials(identifier=self.email, secret=self.password)


settings = Settings()

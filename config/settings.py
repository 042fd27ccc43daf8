from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. The Gemini key is never
    sent to the client; a missing key is not checked at startup, upstream
    calls simply fail per request.
    """

    def __init__(self) -> None:
        self.gemini_api_key: Optional[str] = os.getenv("GEMINI_API_KEY")
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self.gemini_api_base: str = os.getenv(
            "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1"
        ).rstrip("/")
        # None means the upstream call may hang as long as the upstream does
        self.upstream_timeout: Optional[float] = _optional_float("UPSTREAM_TIMEOUT")
        self.port: int = int(os.getenv("PORT", "5000"))
        self.cors_origins: List[str] = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
        self.max_body_bytes: int = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024 * 1024)))
        self.chat_backend_url: str = os.getenv(
            "CHAT_BACKEND_URL", "http://localhost:5000/api/chat"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

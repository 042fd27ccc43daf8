from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from config.settings import Settings, get_settings
from relay.errors import UpstreamMalformed, UpstreamUnavailable


logger = logging.getLogger(__name__)


class GeminiClient:
    """One-shot caller for the Gemini ``generateContent`` REST endpoint.

    The API key travels as the ``key`` query parameter. No retries; a
    transport failure or a non-object body is raised as an upstream error.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.settings.gemini_api_base}/models/{self.settings.gemini_model}:generateContent"

    def generate(self, contents: List[Dict[str, Any]]) -> Dict[str, Any]:
        body = {"contents": contents}
        params = {"key": self.settings.gemini_api_key or ""}

        try:
            with httpx.Client(timeout=self.settings.upstream_timeout, transport=self._transport) as client:
                response = client.post(self.endpoint, params=params, json=body)
        except httpx.HTTPError as exc:
            # str(exc) may carry the request URL, and with it the key
            raise UpstreamUnavailable(f"Gemini API call failed: {type(exc).__name__}") from exc

        if response.is_error:
            logger.warning(
                "Gemini API returned status=%s for model=%s",
                response.status_code,
                self.settings.gemini_model,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamMalformed(
                f"Gemini API returned non-JSON body (status={response.status_code})"
            ) from exc

        if not isinstance(data, dict):
            raise UpstreamMalformed(f"Gemini API returned {type(data).__name__}, expected object")
        return data

from __future__ import annotations

from typing import Optional

import httpx

from config.settings import get_settings
from relay.schemas import ChatReply, ChatRequest


class ClientNetworkFailure(Exception):
    """The relay could not be reached or answered with something unreadable."""


class RelayClient:
    """Posts one chat turn to the relay and decodes its ``{reply}`` body.

    Error statuses from the relay still carry a reply string, so 400 and 500
    responses decode like a 200.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url or get_settings().chat_backend_url
        self._transport = transport

    async def send(self, request: ChatRequest) -> ChatReply:
        body = request.model_dump(by_alias=True, exclude_none=True)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(self.url, json=body)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ClientNetworkFailure(f"Relay request to {self.url} failed: {exc}") from exc

        if not isinstance(data, dict):
            raise ClientNetworkFailure(f"Relay returned {type(data).__name__}, expected object")
        reply = data.get("reply")
        return ChatReply(reply=reply if isinstance(reply, str) else "")

from __future__ import annotations

"""Errors raised while relaying a chat turn.

Every error carries the HTTP status it maps to and the reply string shown to
the user. Upstream details stay in the server log.
"""

from typing import Optional

SERVER_ERROR_REPLY = "⚠️ Server error"
MISSING_INPUT_REPLY = "Please send a message or image."


class RelayError(Exception):
    status_code: int = 500
    reply: str = SERVER_ERROR_REPLY

    def __init__(self, message: str, *, reply: Optional[str] = None) -> None:
        super().__init__(message)
        if reply is not None:
            self.reply = reply


class BadRequest(RelayError):
    """The caller sent nothing usable: no text, no image, or a broken image."""

    status_code = 400
    reply = MISSING_INPUT_REPLY


class UpstreamError(RelayError):
    """Talking to the Gemini API failed. Always surfaced as a generic 500."""


class UpstreamUnavailable(UpstreamError):
    pass


class UpstreamMalformed(UpstreamError):
    pass

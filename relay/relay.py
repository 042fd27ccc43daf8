from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from relay.errors import BadRequest, UpstreamMalformed
from relay.schemas import ChatReply, ImagePayload
from relay.upstream.gemini import GeminiClient


logger = logging.getLogger(__name__)

NO_RESPONSE_REPLY = "⚠️ No response from Gemini API"
BLOCKED_REPLY_PREFIX = "⚠️ Blocked by safety: "
MALFORMED_IMAGE_REPLY = "⚠️ Unsupported or malformed image. Please attach a valid image file."


def validate_image(image: ImagePayload) -> None:
    """Reject an attachment that would reach Gemini as broken inline data."""
    if not image.mime_type.lower().startswith("image/"):
        raise BadRequest(
            f"Unsupported image MIME type: {image.mime_type!r}",
            reply=MALFORMED_IMAGE_REPLY,
        )
    if not image.data:
        raise BadRequest("Image data is empty", reply=MALFORMED_IMAGE_REPLY)
    try:
        base64.b64decode(image.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BadRequest("Image data is not valid base64", reply=MALFORMED_IMAGE_REPLY) from exc


def build_parts(message: Optional[str], image: Optional[ImagePayload]) -> List[Dict[str, Any]]:
    parts: List[Dict[str, Any]] = []
    if message:
        parts.append({"text": message})
    if image is not None:
        parts.append({"inline_data": {"mime_type": image.mime_type, "data": image.data}})
    return parts


def build_contents(message: Optional[str], image: Optional[ImagePayload]) -> List[Dict[str, Any]]:
    return [{"role": "user", "parts": build_parts(message, image)}]


def _candidate_text(data: Dict[str, Any]) -> Optional[str]:
    candidates = data.get("candidates")
    if not candidates:
        return None
    if not isinstance(candidates, list) or not isinstance(candidates[0], dict):
        raise UpstreamMalformed("Gemini candidates have an unexpected shape")

    content = candidates[0].get("content") or {}
    if not isinstance(content, dict):
        raise UpstreamMalformed("Gemini candidate content is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise UpstreamMalformed("Gemini candidate parts is not a list")
    if not parts:
        return None

    fragments = []
    for part in parts:
        if not isinstance(part, dict):
            raise UpstreamMalformed("Gemini candidate part is not an object")
        text = part.get("text") or ""
        if not isinstance(text, str):
            raise UpstreamMalformed("Gemini candidate part text is not a string")
        fragments.append(text)
    return "".join(fragments).strip()


def _block_reason(data: Dict[str, Any]) -> Optional[str]:
    feedback = data.get("promptFeedback")
    if not isinstance(feedback, dict):
        return None
    reason = feedback.get("blockReason")
    return str(reason) if reason else None


def extract_reply(data: Dict[str, Any]) -> str:
    """Turn a ``generateContent`` response into the user-facing reply.

    A safety block wins over any candidate text. Missing or empty candidate
    text falls back to ``NO_RESPONSE_REPLY``.
    """
    reason = _block_reason(data)
    if reason:
        return f"{BLOCKED_REPLY_PREFIX}{reason}"
    return _candidate_text(data) or NO_RESPONSE_REPLY


def exchange(
    message: Optional[str],
    image: Optional[ImagePayload],
    client: Optional[GeminiClient] = None,
) -> ChatReply:
    if not message and image is None:
        raise BadRequest("Neither message nor image supplied")
    if image is not None:
        validate_image(image)

    logger.info(
        "Relaying turn: message_len=%s image=%s",
        len(message or ""),
        image.mime_type if image is not None else None,
    )
    client = client or GeminiClient()
    data = client.generate(build_contents(message, image))
    reply = extract_reply(data)
    logger.info("Gemini replied with %s chars", len(reply))
    return ChatReply(reply=reply)

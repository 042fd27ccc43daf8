from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from client.images import ImageAttachment, read_image
from client.transport import ClientNetworkFailure, RelayClient
from client.voice import RecognizerFactory, ReplyVoice, Speaker, VoiceCapture
from relay.schemas import ChatRequest, ChatTurn


logger = logging.getLogger(__name__)

GREETING = "Hello! I'm your AI Chat Assistant 🤖"
IMAGE_ONLY_CONTENT = "(sent an image)"
EMPTY_REPLY = "⚠️ No response"
UNREACHABLE_REPLY = "⚠️ Failed to reach server."


class ChatSession:
    """In-memory chat transcript plus the composer state of one client.

    Only ``send_message`` suspends (while awaiting the relay); the ``sending``
    flag makes any second send during that window a no-op.
    """

    def __init__(
        self,
        relay: Optional[RelayClient] = None,
        recognizer_factory: Optional[RecognizerFactory] = None,
        speaker: Optional[Speaker] = None,
    ) -> None:
        self.relay = relay or RelayClient()
        self.messages: List[ChatTurn] = [ChatTurn(role="bot", content=GREETING)]
        self.input_text = ""
        self.image: Optional[ImageAttachment] = None
        self.file_input: Optional[str] = None
        self.sending = False
        self.voice_on = False
        self.voice = VoiceCapture(recognizer_factory, self.append_transcript)
        self.reply_voice = ReplyVoice(speaker)

    def set_input(self, text: str) -> None:
        self.input_text = text

    def append_transcript(self, transcript: str) -> None:
        self.input_text = f"{self.input_text} {transcript}" if self.input_text else transcript

    def pick_image(self, path: Union[str, Path]) -> ImageAttachment:
        self.image = read_image(path)
        self.file_input = str(path)
        return self.image

    def clear_image(self) -> None:
        self.image = None

    def start_listening(self) -> bool:
        return self.voice.start()

    def stop_listening(self) -> None:
        self.voice.stop()

    async def on_key_down(self, key: str, shift: bool = False) -> None:
        if key == "Enter" and not shift:
            await self.send_message()

    async def send_message(self) -> None:
        if self.sending:
            return
        text = self.input_text.strip()
        if not text and self.image is None:
            return

        image = self.image
        user_turn = ChatTurn(
            role="user",
            content=text or IMAGE_ONLY_CONTENT,
            image_url=image.preview_url if image is not None else None,
        )
        self.messages.append(user_turn)
        self.input_text = ""
        self.sending = True

        try:
            request = ChatRequest(
                message=user_turn.content,
                image=image.to_payload() if image is not None else None,
            )
            reply = await self.relay.send(request)
            bot_text = reply.reply or EMPTY_REPLY
            self.messages.append(ChatTurn(role="bot", content=bot_text))
            if self.voice_on:
                self.reply_voice.speak(bot_text)
        except ClientNetworkFailure as e:
            logger.error("Chat send failed: %s", e)
            self.messages.append(ChatTurn(role="bot", content=UNREACHABLE_REPLY))
        finally:
            self.sending = False
            self.clear_image()
            self.file_input = None

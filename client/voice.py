from __future__ import annotations

"""Voice input and spoken replies for the chat client.

Both the speech recognizer and the synthesizer are platform handles owned
here explicitly. Each recognizer reports through its own
``RecognizerListener``; ``on_result``, ``on_end`` and ``on_error`` are each a
transition back to NotListening, and events from a recognizer that is no
longer the active one are ignored.
"""

import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel


logger = logging.getLogger(__name__)


class SpeechUnsupported(RuntimeError):
    """No speech recognizer is available on this platform."""


class RecognizerOptions(BaseModel):
    lang: str = "en-US"
    interim_results: bool = False
    max_alternatives: int = 1


class Recognizer:
    """Handle to one running recognition. Platform adapters subclass this."""

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class RecognizerListener:
    """Event sink handed to exactly one recognizer."""

    def __init__(self, capture: "VoiceCapture") -> None:
        self._capture = capture

    def on_result(self, transcript: str) -> None:
        self._capture._handle_result(self, transcript)

    def on_end(self) -> None:
        self._capture._release(self)

    def on_error(self, error: Any = None) -> None:
        logger.info("Speech recognition ended with error: %s", error)
        self._capture._release(self)


RecognizerFactory = Callable[[RecognizerListener, RecognizerOptions], Recognizer]


class VoiceCapture:
    def __init__(
        self,
        factory: Optional[RecognizerFactory],
        on_transcript: Callable[[str], None],
        options: Optional[RecognizerOptions] = None,
    ) -> None:
        self._factory = factory
        self._on_transcript = on_transcript
        self.options = options or RecognizerOptions()
        self._recognizer: Optional[Recognizer] = None
        self._listener: Optional[RecognizerListener] = None

    @property
    def listening(self) -> bool:
        return self._recognizer is not None

    def start(self) -> bool:
        """Begin listening. Returns False when a recognizer is already active."""
        if self._factory is None:
            raise SpeechUnsupported("Speech Recognition not supported on this platform.")
        if self._recognizer is not None:
            return False

        listener = RecognizerListener(self)
        recognizer = self._factory(listener, self.options)
        self._recognizer, self._listener = recognizer, listener
        try:
            recognizer.start()
        except Exception:
            self._recognizer, self._listener = None, None
            raise
        return True

    def stop(self) -> None:
        recognizer = self._recognizer
        self._recognizer, self._listener = None, None
        if recognizer is not None:
            recognizer.stop()

    def _handle_result(self, listener: RecognizerListener, transcript: str) -> None:
        if listener is not self._listener:
            return
        self._release(listener)
        if transcript:
            self._on_transcript(transcript)

    def _release(self, listener: RecognizerListener) -> None:
        if listener is self._listener:
            self._recognizer, self._listener = None, None


class Speaker:
    """Speech synthesizer handle. Platform adapters subclass this."""

    def cancel(self) -> None:
        raise NotImplementedError

    def speak(self, text: str, rate: float = 1.0, pitch: float = 1.0) -> None:
        raise NotImplementedError


class ReplyVoice:
    def __init__(self, speaker: Optional[Speaker] = None, rate: float = 1.0, pitch: float = 1.0) -> None:
        self.speaker = speaker
        self.rate = rate
        self.pitch = pitch

    def speak(self, text: str) -> None:
        if self.speaker is None:
            return
        try:
            # one utterance at a time
            self.speaker.cancel()
            self.speaker.speak(text, rate=self.rate, pitch=self.pitch)
        except Exception:
            logger.exception("Speaking reply failed")

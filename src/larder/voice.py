"""
Larder - Voice bridge.

Adapts speech-recognition events to assistant turns. Interim transcripts
are only remembered (for display); a final transcript becomes a new turn.
Cancelling before the final transcript arrives discards it.
"""

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from larder.models import DispatchResult

logger = logging.getLogger(__name__)

TurnHandler = Callable[[str], Awaitable[DispatchResult]]

ERROR_MESSAGES = {
    "no-speech": "No speech detected - try again",
    "audio-capture": "Microphone is not available",
    "not-allowed": "Microphone permission was denied",
    "network": "Network error occurred",
    "service-not-allowed": "Service is not allowed",
}


class TranscriptEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transcript: str
    is_final: bool = Field(default=False, alias="isFinal")


class VoiceBridge:
    """
    One capture session's worth of transcript handling.

    Call `start()` when capture begins. Feed every recognizer event to
    `on_result` / `on_error`.
    """

    def __init__(self, handle_turn: TurnHandler):
        self._handle_turn = handle_turn
        self.listening = False
        self.interim: str = ""
        self.last_error: str | None = None

    def start(self) -> None:
        self.listening = True
        self.interim = ""
        self.last_error = None

    def cancel(self) -> None:
        """Stop capture; a transcript still in flight is dropped."""
        if self.listening:
            logger.info("Voice capture cancelled")
        self.listening = False
        self.interim = ""

    async def on_result(self, event: TranscriptEvent) -> DispatchResult | None:
        """
        Handle one recognizer result.

        Returns the turn's result for a final, non-empty transcript, else None.
        """
        if not self.listening:
            logger.debug("Ignoring transcript received after cancel")
            return None

        if not event.is_final:
            self.interim = event.transcript
            return None

        self.listening = False
        self.interim = ""
        text = event.transcript.strip()
        if not text:
            return None
        return await self._handle_turn(text)

    def on_error(self, error: str) -> str | None:
        """
        Handle a recognizer error and stop listening.

        Returns a user-facing message, or None for "aborted" (the user
        stopped capture themselves).
        """
        self.listening = False
        self.interim = ""
        if error == "aborted":
            return None

        message = ERROR_MESSAGES.get(error, f"Error: {error}")
        logger.warning(f"Speech recognition error: {error}")
        self.last_error = message
        return message

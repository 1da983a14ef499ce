"""Suggestion service protocol and response contracts.

Defines the interface shared by the HTTP gateway and the in-process mock.
Field names match the service's JSON wire format.
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class StartResponse:
    """Response from start."""

    message: str


@dataclass
class VoiceResponse:
    """Response from voice.

    Attributes:
        transcribed_text: The partner's transcribed utterance
        options: First candidate tokens for the reply (may be empty)
    """

    transcribed_text: str
    options: list[str] = field(default_factory=list)


@dataclass
class SelectResponse:
    """Response from select.

    Attributes:
        current_sentence: Authoritative sentence after appending the choice
        options: Next candidate tokens (may be empty)
    """

    current_sentence: str
    options: list[str] = field(default_factory=list)


@dataclass
class EndResponse:
    """Response from end."""

    final_sentence: str


class SuggestionService(Protocol):
    """Interface for the remote transcription/suggestion service.

    All operations raise TransportError on failure.
    """

    async def start(self, context: str, role: str | None = None) -> StartResponse:
        """Initialize composition state for a context and role."""
        ...

    async def voice(self, audio: bytes) -> VoiceResponse:
        """Transcribe a partner utterance and return first candidates."""
        ...

    async def select(self, choice: str) -> SelectResponse:
        """Append a token and return the updated sentence and candidates."""
        ...

    async def end(self) -> EndResponse:
        """Finalize and clear the current sentence."""
        ...


__all__ = [
    "EndResponse",
    "SelectResponse",
    "StartResponse",
    "SuggestionService",
    "VoiceResponse",
]

"""Speech output protocol.

Defines the interface for speaking a finished sentence aloud.
"""

from typing import Protocol


class SpeechOutput(Protocol):
    """Interface for fire-and-forget speech output.

    ``speak`` returns as soon as speech has been triggered; callers never
    wait for playback to finish.
    """

    def speak(self, text: str) -> None:
        """Start speaking text.

        Args:
            text: Sentence to speak

        Raises:
            RuntimeError: If speech cannot be started
        """
        ...

    def stop(self) -> None:
        """Stop any ongoing speech.

        Safe to call even if nothing is being spoken.
        """
        ...

    @property
    def is_available(self) -> bool:
        """Return True if the output device can be used."""
        ...


__all__ = ["SpeechOutput"]

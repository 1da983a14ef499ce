"""Mock speech output for testing.

Provides a controllable mock implementation for unit and integration testing.
"""


class MockSpeechOutput:
    """Mock speech output for testing.

    Records every sentence instead of speaking it.
    """

    def __init__(self) -> None:
        """Initialize mock speech output."""
        self._spoken_texts: list[str] = []
        self._fail_next: RuntimeError | None = None

    def speak(self, text: str) -> None:
        """Record text that would be spoken."""
        if self._fail_next is not None:
            error, self._fail_next = self._fail_next, None
            raise error
        self._spoken_texts.append(text)

    def stop(self) -> None:
        """Stop mock speech."""

    def fail_next(self, message: str = "Speech device unavailable") -> None:
        """Make the next speak() call raise RuntimeError."""
        self._fail_next = RuntimeError(message)

    @property
    def is_available(self) -> bool:
        """Mock output is always available."""
        return True

    @property
    def call_count(self) -> int:
        """Get number of speak calls."""
        return len(self._spoken_texts)

    @property
    def spoken_texts(self) -> list[str]:
        """Get list of spoken texts."""
        return self._spoken_texts.copy()

    def clear(self) -> None:
        """Reset mock state."""
        self._spoken_texts.clear()


__all__ = ["MockSpeechOutput"]

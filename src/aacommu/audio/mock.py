"""Mock audio recorder for testing.

Provides a mock implementation of AudioRecorder that can be used for
testing without requiring actual audio hardware.
"""

import wave
from pathlib import Path

from .recorder import CaptureError, encode_wav


class MockAudioRecorder:
    """Mock recorder for testing.

    Can simulate a recording from:
    - Silence (a short silent clip)
    - WAV files (returned as-is)
    - Custom PCM data (wrapped in a WAV container)

    Implements the AudioRecorder protocol.
    """

    def __init__(self, sample_rate: int = 16000, channels: int = 1) -> None:
        """Initialize mock recorder.

        Args:
            sample_rate: Sample rate in Hz
            channels: Number of audio channels
        """
        self._sample_rate = sample_rate
        self._channels = channels
        self._clip: bytes | None = None
        self._is_recording = False
        self._start_error: CaptureError | None = None
        self._start_count = 0

    def set_audio_file(self, path: Path | str) -> None:
        """Use a WAV file as the next recording.

        Raises:
            FileNotFoundError: If file doesn't exist
            wave.Error: If the file is not a valid WAV file
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        with wave.open(str(path), "rb") as wf:
            wf.getnframes()
        self._clip = path.read_bytes()

    def set_audio_data(self, pcm: bytes) -> None:
        """Use raw PCM data as the next recording."""
        self._clip = encode_wav(pcm, self._sample_rate, self._channels)

    def deny_access(self, message: str = "Microphone permission denied") -> None:
        """Make the next start() fail as if the device were unavailable."""
        self._start_error = CaptureError(message)

    def start(self) -> None:
        """Start mock recording."""
        if self._start_error is not None:
            error, self._start_error = self._start_error, None
            raise error
        self._is_recording = True
        self._start_count += 1

    def stop(self) -> bytes:
        """Stop mock recording and return the clip."""
        if not self._is_recording:
            raise CaptureError("Not recording")
        self._is_recording = False
        if self._clip is not None:
            return self._clip
        # 100ms of silence
        silence = bytes(self._sample_rate // 10 * 2 * self._channels)
        return encode_wav(silence, self._sample_rate, self._channels)

    def cancel(self) -> None:
        """Stop mock recording without producing a clip."""
        self._is_recording = False

    @property
    def is_recording(self) -> bool:
        """Return True while recording."""
        return self._is_recording

    @property
    def start_count(self) -> int:
        """Get number of successful start calls."""
        return self._start_count


__all__ = ["MockAudioRecorder"]

"""Audio recorder protocol and helpers.

Defines the interface for capturing one finite clip of partner speech.
A recorder is started, then stopped; stopping yields the complete clip
as WAV bytes ready for upload.
"""

import io
import wave
from typing import Protocol


class CaptureError(Exception):
    """Raised when the audio device is unavailable or access is denied."""

    pass


class AudioRecorder(Protocol):
    """Interface for start/stop audio clip capture."""

    def start(self) -> None:
        """Start recording from the input device.

        Raises:
            CaptureError: If the device cannot be opened
        """
        ...

    def stop(self) -> bytes:
        """Stop recording and return the captured clip.

        Returns:
            WAV-encoded audio bytes

        Raises:
            CaptureError: If not recording or nothing was captured
        """
        ...

    def cancel(self) -> None:
        """Stop recording and discard the clip.

        Safe to call even if not currently recording.
        """
        ...

    @property
    def is_recording(self) -> bool:
        """Return True while recording."""
        ...


def encode_wav(
    pcm: bytes,
    sample_rate: int,
    channels: int = 1,
    sample_width: int = 2,
) -> bytes:
    """Wrap raw PCM frames in a WAV container.

    Args:
        pcm: Raw little-endian PCM bytes
        sample_rate: Sample rate in Hz
        channels: Number of channels
        sample_width: Bytes per sample

    Returns:
        WAV file bytes
    """
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buffer.getvalue()


__all__ = ["AudioRecorder", "CaptureError", "encode_wav"]

"""Audio module for AACommu.

Provides clip recording of the conversation partner's speech.

Usage:
    # Get a microphone recorder
    recorder = create_recorder(config.audio)

    # For testing, use the mock implementation
    from aacommu.audio.mock import MockAudioRecorder
"""

from typing import TYPE_CHECKING

from .recorder import AudioRecorder, CaptureError, encode_wav

if TYPE_CHECKING:
    from ..config import AudioConfig


def create_recorder(
    config: "AudioConfig | None" = None,
    use_mock: bool = False,
) -> AudioRecorder:
    """Create an audio recorder.

    Args:
        config: Audio configuration (uses defaults if None)
        use_mock: If True, return mock implementation for testing

    Returns:
        AudioRecorder implementation
    """
    # Default configuration values
    device_name = "default"
    sample_rate = 16000
    channels = 1
    chunk_size = 1024
    max_seconds = 30.0

    if config is not None:
        device_name = config.input_device
        sample_rate = config.sample_rate
        channels = config.channels
        chunk_size = config.chunk_size
        max_seconds = config.max_record_seconds

    if use_mock:
        from .mock import MockAudioRecorder

        return MockAudioRecorder(sample_rate=sample_rate, channels=channels)

    from .pyaudio_backend import PyAudioRecorder

    return PyAudioRecorder(
        device_name=device_name,
        sample_rate=sample_rate,
        channels=channels,
        chunk_size=chunk_size,
        max_seconds=max_seconds,
    )


__all__ = [
    "AudioRecorder",
    "CaptureError",
    "create_recorder",
    "encode_wav",
]
